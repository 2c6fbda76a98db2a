from __future__ import annotations

import math
import re
from collections.abc import Sequence

EPS = 1e-9

_AMERICAN_ODDS_RE = re.compile(r"^([+-]?\d+(?:\.\d+)?)$")


def _ensure_finite(value: float, name: str) -> float:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")
    return value


def _validate_probability(value: float, name: str) -> float:
    value = _ensure_finite(value, name)
    if value < 0.0 or value > 1.0:
        raise ValueError(f"{name} must be between 0 and 1 inclusive")
    return value


def _validate_american(american_odds: float) -> float:
    american_odds = _ensure_finite(float(american_odds), "american_odds")
    if abs(american_odds) < 100:
        raise ValueError("american_odds must be <= -100 or >= 100")
    return american_odds


def parse_american_odds(raw: str | int | float | None) -> float | None:
    """Parse archived odds such as ``"-110"``, ``"+150"`` or ``"EVEN"``.

    Returns ``None`` when the value is missing or is not a usable American
    price.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = raw.strip().upper()
        if text in {"EVEN", "EV"}:
            return 100.0
        match = _AMERICAN_ODDS_RE.match(text)
        if match is None:
            return None
        value = float(match.group(1))
    if not math.isfinite(value) or abs(value) < 100:
        return None
    return value


def american_to_decimal(american_odds: float) -> float:
    american_odds = _validate_american(american_odds)
    if american_odds > 0:
        return 1.0 + (american_odds / 100.0)
    return 1.0 + (100.0 / abs(american_odds))


def american_to_implied_prob(american_odds: float) -> float:
    american_odds = _validate_american(american_odds)
    if american_odds > 0:
        return 100.0 / (american_odds + 100.0)
    return abs(american_odds) / (abs(american_odds) + 100.0)


def payout_multiplier(american_odds: float) -> float:
    american_odds = _validate_american(american_odds)
    if american_odds > 0:
        return american_odds / 100.0
    return 100.0 / abs(american_odds)


def remove_vig(probs: Sequence[float]) -> list[float]:
    if not probs:
        raise ValueError("probs must not be empty")
    validated = [_validate_probability(float(p), "probability") for p in probs]
    total = sum(validated)
    if total <= EPS:
        raise ValueError("sum of probabilities must be greater than zero")
    return [p / total for p in validated]


def weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float | None:
    if len(values) != len(weights):
        raise ValueError("values and weights lengths must match")
    cleaned_weights = [_ensure_finite(float(w), "weight") for w in weights]
    if any(w < 0 for w in cleaned_weights):
        raise ValueError("weights must be non-negative")
    total_weight = sum(cleaned_weights)
    if total_weight <= 0.0:
        return None
    return sum(float(v) * w for v, w in zip(values, cleaned_weights, strict=True)) / total_weight


def population_variance(values: Sequence[float]) -> float:
    if not values:
        raise ValueError("values must not be empty")
    avg = sum(values) / len(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
