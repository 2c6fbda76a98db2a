from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
import logging

from sqlalchemy import and_, delete, select
from sqlalchemy.orm import Session

from wagerproof.core.errors import InvalidTransitionError
from wagerproof.domain.enums import GRADED_RESULTS, PickResult
from wagerproof.domain.schemas import GeneratedPick, PersonalityParams
from wagerproof.domain.types import SlateGame
from wagerproof.models import AgentPick
from wagerproof.services.performance import refresh_performance_cache

logger = logging.getLogger(__name__)

UNITS_BY_CONFIDENCE: dict[int, Decimal] = {
    1: Decimal("0.5"),
    2: Decimal("0.75"),
    3: Decimal("1.0"),
    4: Decimal("1.5"),
    5: Decimal("2.0"),
}

# max_picks_per_day slider -> hard cap on picks kept from one generation run.
MAX_PICKS_BY_SETTING: dict[int, int] = {1: 2, 2: 3, 3: 5, 4: 7, 5: 15}


def units_for_confidence(confidence: int) -> Decimal:
    return UNITS_BY_CONFIDENCE.get(confidence, Decimal("1.0"))


def max_picks_for(max_picks_per_day: int) -> int:
    return MAX_PICKS_BY_SETTING.get(max_picks_per_day, 5)


def build_agent_picks(
    avatar_id: str,
    personality: PersonalityParams,
    generated: Sequence[GeneratedPick],
    slate: Sequence[SlateGame],
    *,
    now: datetime | None = None,
) -> list[AgentPick]:
    created_at = now or datetime.now(timezone.utc)
    games = {game.game_id: game for game in slate}
    cap = max_picks_for(personality.max_picks_per_day)
    if len(generated) > cap:
        logger.info("trimming %d generated picks to %d for %s", len(generated), cap, avatar_id)

    archived_personality = personality.model_dump(mode="json")
    seen: set[tuple[str, str]] = set()
    picks: list[AgentPick] = []
    for candidate in generated[:cap]:
        game = games.get(candidate.game_id)
        if game is None:
            logger.warning("dropping pick for %s: game %s not on slate", avatar_id, candidate.game_id)
            continue
        key = (candidate.game_id, candidate.bet_type.value)
        if key in seen:
            logger.warning("dropping duplicate %s pick for game %s", candidate.bet_type.value, candidate.game_id)
            continue
        seen.add(key)

        picks.append(
            AgentPick(
                avatar_id=avatar_id,
                game_id=candidate.game_id,
                sport=game.sport.value,
                matchup=game.matchup,
                game_date=game.game_date,
                bet_type=candidate.bet_type.value,
                pick_selection=candidate.selection,
                odds=candidate.odds,
                units=units_for_confidence(candidate.confidence),
                confidence=candidate.confidence,
                reasoning_text=candidate.reasoning,
                key_factors=list(candidate.key_factors),
                ai_decision_trace=(
                    candidate.decision_trace.model_dump(mode="json")
                    if candidate.decision_trace is not None
                    else None
                ),
                archived_game_data=dict(game.raw),
                archived_personality=dict(archived_personality),
                result=PickResult.PENDING.value,
                created_at=created_at,
            )
        )
    return picks


def save_agent_picks(session: Session, avatar_id: str, picks: Sequence[AgentPick]) -> dict[str, int]:
    summary = {"inserted": 0, "replaced": 0, "skipped_graded": 0}
    if not picks:
        return summary

    game_ids = sorted({pick.game_id for pick in picks})
    existing = (
        session.execute(
            select(AgentPick).where(and_(AgentPick.avatar_id == avatar_id, AgentPick.game_id.in_(game_ids)))
        )
        .scalars()
        .all()
    )
    graded_keys = {(p.game_id, p.bet_type) for p in existing if p.result != PickResult.PENDING.value}
    pending_ids = [p.id for p in existing if p.result == PickResult.PENDING.value]

    if pending_ids:
        session.execute(delete(AgentPick).where(AgentPick.id.in_(pending_ids)))
        summary["replaced"] = len(pending_ids)

    for pick in picks:
        if (pick.game_id, pick.bet_type) in graded_keys:
            summary["skipped_graded"] += 1
            continue
        session.add(pick)
        summary["inserted"] += 1

    session.flush()
    refresh_performance_cache(session, avatar_id)
    session.commit()
    return summary


def grade_pick(
    pick: AgentPick,
    result: PickResult | str,
    actual_result: str | None,
    *,
    graded_at: datetime | None = None,
) -> AgentPick:
    target = PickResult(result)
    if target not in GRADED_RESULTS:
        raise InvalidTransitionError(f"pick {pick.id} cannot be graded to {target.value}")
    if pick.result != PickResult.PENDING.value:
        raise InvalidTransitionError(f"pick {pick.id} is already graded as {pick.result}")

    pick.result = target.value
    pick.actual_result = actual_result
    pick.graded_at = graded_at or datetime.now(timezone.utc)
    return pick
