from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session

from wagerproof.config import Settings, get_settings
from wagerproof.domain.enums import LeaderboardSortMode, Sport
from wagerproof.models import AgentPerformanceCache, AgentProfile


@dataclass(frozen=True)
class LeaderboardEntry:
    avatar_id: str
    name: str
    avatar_emoji: str
    avatar_color: str
    user_id: str
    preferred_sports: list[str] = field(default_factory=list)
    total_picks: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    win_rate: float | None = None
    net_units: float = 0.0
    current_streak: int = 0
    best_streak: int = 0


def _sort_key(entry: LeaderboardEntry, mode: LeaderboardSortMode) -> tuple[float, ...]:
    rate = entry.win_rate or 0.0
    if mode == LeaderboardSortMode.RECENT_RUN:
        return (-entry.current_streak, -entry.net_units, -rate)
    if mode == LeaderboardSortMode.LONGEST_STREAK:
        return (-entry.best_streak, -entry.current_streak, -entry.net_units, -rate)
    if mode == LeaderboardSortMode.BOTTOM_100:
        return (entry.net_units, rate, entry.current_streak)
    return (-entry.net_units, -rate, -entry.current_streak)


def rank_leaderboard(
    entries: Sequence[LeaderboardEntry],
    *,
    sort_mode: LeaderboardSortMode = LeaderboardSortMode.OVERALL,
    limit: int = 100,
    exclude_under_min_picks: bool = False,
    settings: Settings | None = None,
) -> list[LeaderboardEntry]:
    if settings is None:
        settings = get_settings()
    effective_limit = min(max(limit, 1), settings.leaderboard_max_limit)

    eligible = [entry for entry in entries if entry.wins + entry.losses > 0]
    if exclude_under_min_picks:
        eligible = [entry for entry in eligible if entry.total_picks >= settings.leaderboard_min_picks]
    ranked = sorted(eligible, key=lambda entry: _sort_key(entry, sort_mode))
    return ranked[:effective_limit]


def fetch_leaderboard(
    session: Session,
    *,
    limit: int = 100,
    sport: Sport | None = None,
    sort_mode: LeaderboardSortMode = LeaderboardSortMode.OVERALL,
    exclude_under_min_picks: bool = False,
) -> list[dict[str, object]]:
    rows = session.execute(
        select(AgentProfile, AgentPerformanceCache)
        .outerjoin(AgentPerformanceCache, AgentPerformanceCache.avatar_id == AgentProfile.id)
        .where(AgentProfile.is_public.is_(True))
        .order_by(AgentProfile.id.asc())
    ).all()

    entries: list[LeaderboardEntry] = []
    for agent, perf in rows:
        sports = list(agent.preferred_sports or [])
        if sport is not None and sport.value not in sports:
            continue
        entries.append(
            LeaderboardEntry(
                avatar_id=agent.id,
                name=agent.name,
                avatar_emoji=agent.avatar_emoji,
                avatar_color=agent.avatar_color,
                user_id=agent.user_id,
                preferred_sports=sports,
                total_picks=perf.total_picks if perf else 0,
                wins=perf.wins if perf else 0,
                losses=perf.losses if perf else 0,
                pushes=perf.pushes if perf else 0,
                win_rate=perf.win_rate if perf else None,
                net_units=perf.net_units if perf else 0.0,
                current_streak=perf.current_streak if perf else 0,
                best_streak=perf.best_streak if perf else 0,
            )
        )

    ranked = rank_leaderboard(
        entries,
        sort_mode=sort_mode,
        limit=limit,
        exclude_under_min_picks=exclude_under_min_picks,
    )
    return [asdict(entry) for entry in ranked]
