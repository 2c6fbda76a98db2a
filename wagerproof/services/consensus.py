from __future__ import annotations

from collections.abc import Iterable, Sequence
import json
import logging

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from wagerproof.config import Settings, get_settings
from wagerproof.core.errors import InvalidInputError
from wagerproof.core.math import (
    american_to_implied_prob,
    clamp,
    parse_american_odds,
    population_variance,
    remove_vig,
    round_half_up,
    weighted_mean,
)
from wagerproof.domain.enums import PredictionTarget
from wagerproof.domain.types import ModelPrediction
from wagerproof.models import GamePrediction

logger = logging.getLogger(__name__)

BASE_MODEL_FEATURES: tuple[str, ...] = (
    "primary_era",
    "opponent_era",
    "primary_win_pct",
    "opponent_win_pct",
    "primary_streak",
    "opponent_streak",
    "primary_whip",
    "opponent_whip",
)


class ConsensusResult(BaseModel):
    primary_team: str
    opponent_team: str
    primary_percentage: float
    opponent_percentage: float
    confidence: int = Field(ge=0, le=100)
    models: int
    team_winner_prediction: str


def feature_key(features: Iterable[str]) -> str:
    # JSON array encoding escapes quotes and delimiters inside feature names,
    # so two different feature sets can never produce the same key.
    return json.dumps(sorted(set(features)), separators=(",", ":"), ensure_ascii=False)


def group_by_features(predictions: Sequence[ModelPrediction]) -> dict[str, list[ModelPrediction]]:
    groups: dict[str, list[ModelPrediction]] = {}
    for prediction in predictions:
        groups.setdefault(feature_key(prediction.features), []).append(prediction)
    return groups


def is_complementary(a: ModelPrediction, b: ModelPrediction, threshold: float) -> bool:
    return abs(a.win_pct + b.win_pct - 1.0) < threshold


def collapse_group(group: Sequence[ModelPrediction], threshold: float) -> list[ModelPrediction]:
    if len(group) == 2 and is_complementary(group[0], group[1], threshold):
        first, second = group
        keep = second if second.games > first.games else first
        logger.debug(
            "complementary pair collapsed: kept %s (games=%d, win_pct=%.4f)",
            keep.model_name or keep.primary_team,
            keep.games,
            keep.win_pct,
        )
        return [keep]
    return list(group)


def contributing_predictions(
    predictions: Sequence[ModelPrediction], threshold: float
) -> list[ModelPrediction]:
    contributing: list[ModelPrediction] = []
    for group in group_by_features(predictions).values():
        contributing.extend(collapse_group(group, threshold))
    return contributing


def blend_win_pct(entries: Sequence[ModelPrediction]) -> float:
    if not entries:
        return 0.5
    blended = weighted_mean([p.win_pct for p in entries], [p.games for p in entries])
    if blended is None:
        logger.debug("all %d contributing predictions carry zero games; using unweighted mean", len(entries))
        return sum(p.win_pct for p in entries) / len(entries)
    return blended


def agreement_confidence(predictions: Sequence[ModelPrediction], variance_scale: float) -> int:
    variance = population_variance([p.win_pct for p in predictions])
    agreement = max(0.0, 1.0 - (variance * variance_scale))
    return int(clamp(round_half_up(agreement * 100.0), 0, 100))


def reduce_consensus(
    predictions: Iterable[ModelPrediction], *, settings: Settings | None = None
) -> ConsensusResult:
    predictions = list(predictions)
    if not predictions:
        raise InvalidInputError("at least one model prediction is required")
    if settings is None:
        settings = get_settings()

    reference = predictions[0]
    contributing = contributing_predictions(predictions, settings.complementary_threshold)
    primary = clamp(blend_win_pct(contributing), 0.0, 1.0)
    opponent = 1.0 - primary
    winner = reference.primary_team if primary >= opponent else reference.opponent_team

    return ConsensusResult(
        primary_team=reference.primary_team,
        opponent_team=reference.opponent_team,
        primary_percentage=primary,
        opponent_percentage=opponent,
        confidence=agreement_confidence(predictions, settings.agreement_variance_scale),
        models=len(predictions),
        team_winner_prediction=winner,
    )


def _stored_probability(game: GamePrediction, target: PredictionTarget) -> float | None:
    if target == PredictionTarget.MONEYLINE:
        value = game.ml_probability
    elif target == PredictionTarget.RUNLINE:
        value = game.run_line_probability
    else:
        value = game.ou_probability
    return float(value) if value is not None else None


def _moneyline_probability(game: GamePrediction) -> float | None:
    home = parse_american_odds(game.home_ml)
    away = parse_american_odds(game.away_ml)
    if home is None or away is None:
        return None
    fair = remove_vig([american_to_implied_prob(home), american_to_implied_prob(away)])
    return fair[0]


def fallback_prediction(
    game: GamePrediction, target: PredictionTarget, *, settings: Settings | None = None
) -> ModelPrediction:
    if settings is None:
        settings = get_settings()

    win_pct = _stored_probability(game, target)
    if win_pct is None and target == PredictionTarget.MONEYLINE:
        win_pct = _moneyline_probability(game)
    if win_pct is None:
        logger.info("no stored %s probability for game %s; defaulting to 0.5", target.value, game.unique_id)
        win_pct = 0.5

    return ModelPrediction(
        unique_id=game.unique_id,
        primary_team=game.home_team,
        opponent_team=game.away_team,
        is_home_team=True,
        win_pct=win_pct,
        opponent_win_pct=1.0 - win_pct,
        games=settings.fallback_games,
        features=BASE_MODEL_FEATURES,
        model_name="Base Model",
    )


def get_game_prediction(session: Session, unique_id: str) -> GamePrediction | None:
    return session.execute(
        select(GamePrediction).where(GamePrediction.unique_id == unique_id)
    ).scalar_one_or_none()


def consensus_for_game(
    session: Session,
    unique_id: str,
    target: PredictionTarget,
    models: Sequence[ModelPrediction] | None = None,
) -> ConsensusResult | None:
    if models:
        return reduce_consensus(models)
    game = get_game_prediction(session, unique_id)
    if game is None:
        return None
    return reduce_consensus([fallback_prediction(game, target)])
