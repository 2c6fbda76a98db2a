from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any

from wagerproof.core.errors import InvalidInputError
from wagerproof.domain.enums import Sport


def _check_probability(value: float, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number")
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        raise InvalidInputError(f"{name} must be between 0 and 1 inclusive")


@dataclass(frozen=True, slots=True)
class ModelPrediction:
    unique_id: str
    primary_team: str
    opponent_team: str
    is_home_team: bool
    win_pct: float
    opponent_win_pct: float
    games: int
    features: tuple[str, ...] = ()
    model_name: str | None = None

    def __post_init__(self) -> None:
        _check_probability(self.win_pct, "win_pct")
        _check_probability(self.opponent_win_pct, "opponent_win_pct")
        if isinstance(self.games, bool) or not isinstance(self.games, int):
            raise InvalidInputError("games must be an integer")
        if self.games < 0:
            raise InvalidInputError("games must be non-negative")
        if isinstance(self.features, str):
            raise InvalidInputError("features must be a collection of strings")
        features = tuple(self.features)
        if any(not isinstance(name, str) for name in features):
            raise InvalidInputError("features must be a collection of strings")
        object.__setattr__(self, "features", features)


@dataclass(frozen=True, slots=True)
class GameResult:
    game_id: str
    game_date: str | None
    home_team: str
    away_team: str
    ml_result: str | None = None
    spread_result: str | None = None
    ou_result: str | None = None


@dataclass(frozen=True, slots=True)
class SlateGame:
    game_id: str
    sport: Sport
    home_team: str
    away_team: str
    game_date: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def matchup(self) -> str:
        return f"{self.away_team} @ {self.home_team}"
