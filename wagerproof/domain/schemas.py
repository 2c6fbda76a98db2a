from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from wagerproof.domain.enums import BetType, PreferredBetType

Scale1To5 = Annotated[int, Field(strict=True, ge=1, le=5)]
FavoriteOdds = Annotated[float, Field(le=-100)]
UnderdogOdds = Annotated[float, Field(ge=100)]


class PersonalityParams(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    risk_tolerance: Scale1To5
    underdog_lean: Scale1To5
    over_under_lean: Scale1To5
    confidence_threshold: Scale1To5
    chase_value: StrictBool

    preferred_bet_type: PreferredBetType
    max_favorite_odds: FavoriteOdds | None
    min_underdog_odds: UnderdogOdds | None
    max_picks_per_day: Scale1To5
    skip_weak_slates: StrictBool

    trust_model: Scale1To5
    trust_polymarket: Scale1To5
    polymarket_divergence_flag: StrictBool

    fade_public: StrictBool | None = None
    public_threshold: Scale1To5 | None = None
    weather_impacts_totals: StrictBool | None = None
    weather_sensitivity: Scale1To5 | None = None

    trust_team_ratings: Scale1To5 | None = None
    pace_affects_totals: StrictBool | None = None

    weight_recent_form: Scale1To5 | None = None
    ride_hot_streaks: StrictBool | None = None
    fade_cold_streaks: StrictBool | None = None
    trust_ats_trends: StrictBool | None = None
    regress_luck: StrictBool | None = None

    home_court_boost: Scale1To5
    fade_back_to_backs: StrictBool | None = None
    upset_alert: StrictBool | None = None


class CustomInsights(BaseModel):
    model_config = ConfigDict(frozen=True)

    betting_philosophy: Annotated[str, Field(max_length=500)] | None = None
    perceived_edges: Annotated[str, Field(max_length=500)] | None = None
    avoid_situations: Annotated[str, Field(max_length=300)] | None = None
    target_situations: Annotated[str, Field(max_length=300)] | None = None


class UsedMetric(BaseModel):
    metric_key: str
    metric_value: str
    why_it_mattered: str
    personality_trait: str
    weight: float | None = None


class DecisionTrace(BaseModel):
    leaned_metrics: list[UsedMetric] = Field(default_factory=list)
    rationale_summary: str = ""
    personality_alignment: str = ""
    other_metrics_considered: list[str] | None = None


class GeneratedPick(BaseModel):
    """One pick as returned by the generation model, validated on receipt."""

    game_id: str = Field(min_length=1)
    bet_type: BetType
    selection: str = Field(min_length=1)
    odds: str | None = None
    confidence: Scale1To5
    reasoning: str = ""
    key_factors: list[str] = Field(default_factory=list)
    decision_trace: DecisionTrace | None = None
