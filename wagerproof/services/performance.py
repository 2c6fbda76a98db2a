from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
import logging

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from wagerproof.config import Settings, get_settings
from wagerproof.core.errors import InvalidInputError
from wagerproof.core.math import parse_american_odds, payout_multiplier
from wagerproof.domain.enums import PickResult
from wagerproof.models import AgentPerformanceCache, AgentPick

logger = logging.getLogger(__name__)


class BucketStats(BaseModel):
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    total: int = 0


class AgentPerformance(BaseModel):
    total_picks: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    pending: int = 0
    win_rate: float | None = None
    net_units: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    worst_streak: int = 0
    stats_by_sport: dict[str, BucketStats] = Field(default_factory=dict)
    stats_by_bet_type: dict[str, BucketStats] = Field(default_factory=dict)


def _result_of(pick: AgentPick) -> PickResult:
    try:
        return PickResult(pick.result)
    except ValueError as exc:
        raise InvalidInputError(f"pick {pick.id} has unknown result {pick.result!r}") from exc


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def chronological(picks: Iterable[AgentPick]) -> list[AgentPick]:
    picks = list(picks)
    for pick in picks:
        if pick.created_at is None:
            raise InvalidInputError(f"pick {pick.id} has no created_at")
    return sorted(
        picks,
        key=lambda p: (_as_utc(p.created_at), p.id if p.id is not None else 0, p.game_id, p.bet_type),
    )


STANDARD_PICK_ODDS = -110.0


def resolve_default_odds(configured: float | int | str | None) -> float:
    odds = parse_american_odds(configured)
    if odds is None:
        logger.warning("DEFAULT_PICK_ODDS=%r is not a usable American price; using %s", configured, STANDARD_PICK_ODDS)
        return STANDARD_PICK_ODDS
    return odds


def unit_delta(pick: AgentPick, default_odds: float) -> float:
    result = _result_of(pick)
    units = float(pick.units)
    if result == PickResult.WON:
        odds = parse_american_odds(pick.odds)
        return units * payout_multiplier(odds if odds is not None else default_odds)
    if result == PickResult.LOST:
        return -units
    return 0.0


def win_rate(wins: int, losses: int) -> float | None:
    decided = wins + losses
    if decided == 0:
        return None
    return wins / decided


def streaks(results: Iterable[PickResult]) -> tuple[int, int, int]:
    current = best = worst = 0
    for result in results:
        if result == PickResult.PENDING:
            continue
        if result == PickResult.WON:
            current = current + 1 if current > 0 else 1
        elif result == PickResult.LOST:
            current = current - 1 if current < 0 else -1
        else:
            current = 0
        best = max(best, current)
        worst = min(worst, current)
    return current, best, worst


def bucket_stats(picks: Iterable[AgentPick]) -> BucketStats:
    stats = BucketStats()
    for pick in picks:
        result = _result_of(pick)
        stats.total += 1
        if result == PickResult.WON:
            stats.wins += 1
        elif result == PickResult.LOST:
            stats.losses += 1
        elif result == PickResult.PUSH:
            stats.pushes += 1
    return stats


def _partition(picks: Sequence[AgentPick], key: Callable[[AgentPick], str]) -> dict[str, BucketStats]:
    grouped: dict[str, list[AgentPick]] = {}
    for pick in picks:
        grouped.setdefault(key(pick), []).append(pick)
    return {name: bucket_stats(grouped[name]) for name in sorted(grouped)}


def recompute_performance(
    picks: Iterable[AgentPick], *, settings: Settings | None = None
) -> AgentPerformance:
    if settings is None:
        settings = get_settings()

    ordered = chronological(picks)
    results = [_result_of(pick) for pick in ordered]

    wins = results.count(PickResult.WON)
    losses = results.count(PickResult.LOST)
    pushes = results.count(PickResult.PUSH)
    pending = results.count(PickResult.PENDING)

    default_odds = resolve_default_odds(settings.default_pick_odds)
    net_units = 0.0
    for pick, result in zip(ordered, results, strict=True):
        if result != PickResult.PENDING:
            net_units += unit_delta(pick, default_odds)

    current, best, worst = streaks(results)

    return AgentPerformance(
        total_picks=len(ordered),
        wins=wins,
        losses=losses,
        pushes=pushes,
        pending=pending,
        win_rate=win_rate(wins, losses),
        net_units=net_units,
        current_streak=current,
        best_streak=best,
        worst_streak=worst,
        stats_by_sport=_partition(ordered, lambda p: str(p.sport)),
        stats_by_bet_type=_partition(ordered, lambda p: str(p.bet_type)),
    )


def format_record(perf: AgentPerformance | None) -> str:
    if perf is None:
        return "0-0"
    parts = [perf.wins, perf.losses]
    if perf.pushes > 0:
        parts.append(perf.pushes)
    return "-".join(str(part) for part in parts)


def format_net_units(units: float) -> str:
    sign = "+" if units >= 0 else ""
    return f"{sign}{units:.2f}u"


def format_streak(streak: int) -> str:
    if streak == 0:
        return "-"
    if streak > 0:
        return f"W{streak}"
    return f"L{abs(streak)}"


def load_picks(session: Session, avatar_id: str) -> list[AgentPick]:
    return list(
        session.execute(
            select(AgentPick)
            .where(AgentPick.avatar_id == avatar_id)
            .order_by(AgentPick.created_at.asc(), AgentPick.id.asc())
        )
        .scalars()
        .all()
    )


def performance_from_cache(row: AgentPerformanceCache) -> AgentPerformance:
    return AgentPerformance(
        total_picks=row.total_picks,
        wins=row.wins,
        losses=row.losses,
        pushes=row.pushes,
        pending=row.pending,
        win_rate=row.win_rate,
        net_units=row.net_units,
        current_streak=row.current_streak,
        best_streak=row.best_streak,
        worst_streak=row.worst_streak,
        stats_by_sport={k: BucketStats.model_validate(v) for k, v in (row.stats_by_sport or {}).items()},
        stats_by_bet_type={k: BucketStats.model_validate(v) for k, v in (row.stats_by_bet_type or {}).items()},
    )


def refresh_performance_cache(
    session: Session, avatar_id: str, *, now: datetime | None = None
) -> AgentPerformance:
    perf = recompute_performance(load_picks(session, avatar_id))
    row = session.get(AgentPerformanceCache, avatar_id)
    if row is None:
        row = AgentPerformanceCache(avatar_id=avatar_id)
        session.add(row)

    dumped = perf.model_dump(mode="json")
    row.total_picks = perf.total_picks
    row.wins = perf.wins
    row.losses = perf.losses
    row.pushes = perf.pushes
    row.pending = perf.pending
    row.win_rate = perf.win_rate
    row.net_units = perf.net_units
    row.current_streak = perf.current_streak
    row.best_streak = perf.best_streak
    row.worst_streak = perf.worst_streak
    row.stats_by_sport = dumped["stats_by_sport"]
    row.stats_by_bet_type = dumped["stats_by_bet_type"]
    row.last_calculated_at = now or datetime.now(timezone.utc)
    session.flush()

    logger.info(
        "performance cache refreshed for %s: %s, %s, streak %s",
        avatar_id,
        format_record(perf),
        format_net_units(perf.net_units),
        format_streak(perf.current_streak),
    )
    return perf


def get_performance(session: Session, avatar_id: str) -> AgentPerformance:
    row = session.get(AgentPerformanceCache, avatar_id)
    if row is not None:
        return performance_from_cache(row)
    perf = refresh_performance_cache(session, avatar_id)
    session.commit()
    return perf
