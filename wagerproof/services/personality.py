from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging

from pydantic import ValidationError as PydanticValidationError

from wagerproof.core.errors import FieldError, ValidationError
from wagerproof.domain.enums import Sport
from wagerproof.domain.schemas import PersonalityParams

logger = logging.getLogger(__name__)

ROOT_FIELD = "__root__"

DEFAULT_PERSONALITY_PARAMS: dict[str, object] = {
    "risk_tolerance": 3,
    "underdog_lean": 3,
    "over_under_lean": 3,
    "confidence_threshold": 3,
    "chase_value": False,
    "preferred_bet_type": "any",
    "max_favorite_odds": -200,
    "min_underdog_odds": None,
    "max_picks_per_day": 3,
    "skip_weak_slates": True,
    "trust_model": 4,
    "trust_polymarket": 3,
    "polymarket_divergence_flag": True,
    "home_court_boost": 3,
}


def _field_errors(exc: PydanticValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    seen: set[str] = set()
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else ROOT_FIELD
        if field in seen:
            continue
        seen.add(field)
        errors.append(FieldError(field=field, reason=err.get("msg", "invalid value")))
    return errors


def validate_personality(data: object) -> PersonalityParams:
    if isinstance(data, PersonalityParams):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError([FieldError(field=ROOT_FIELD, reason="personality must be an object")])
    try:
        return PersonalityParams.model_validate(dict(data))
    except PydanticValidationError as exc:
        errors = _field_errors(exc)
        logger.debug("personality rejected: %s", ", ".join(e.field for e in errors))
        raise ValidationError(errors) from exc


def default_personality() -> PersonalityParams:
    return PersonalityParams.model_validate(DEFAULT_PERSONALITY_PARAMS)


def conditional_params(sports: Iterable[Sport | str]) -> dict[str, bool]:
    chosen = {Sport(sport) for sport in sports}
    has_football = bool(chosen & {Sport.NFL, Sport.CFB})
    has_basketball = bool(chosen & {Sport.NBA, Sport.NCAAB})
    return {
        "show_public_betting": has_football,
        "show_weather": has_football,
        "show_team_ratings": has_basketball,
        "show_trends": Sport.NBA in chosen,
        "show_back_to_backs": has_basketball,
        "show_upset_alert": Sport.NCAAB in chosen,
    }
