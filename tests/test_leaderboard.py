from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from wagerproof.config import get_settings
from wagerproof.domain.enums import LeaderboardSortMode, Sport
from wagerproof.models import AgentPerformanceCache, AgentProfile, Base
from wagerproof.services.leaderboard import LeaderboardEntry, fetch_leaderboard, rank_leaderboard
from wagerproof.services.personality import DEFAULT_PERSONALITY_PARAMS


def _entry(avatar_id: str, **stats: object) -> LeaderboardEntry:
    return LeaderboardEntry(
        avatar_id=avatar_id,
        name=avatar_id.title(),
        avatar_emoji="",
        avatar_color="#000000",
        user_id="u1",
        **stats,
    )


ENTRIES = [
    _entry("steady", total_picks=40, wins=22, losses=18, win_rate=0.55, net_units=3.0, current_streak=1, best_streak=4),
    _entry("heater", total_picks=12, wins=8, losses=4, win_rate=0.667, net_units=2.0, current_streak=6, best_streak=6),
    _entry("cold", total_picks=30, wins=10, losses=20, win_rate=0.333, net_units=-9.5, current_streak=-4, best_streak=2),
    _entry("rookie", total_picks=3, wins=2, losses=1, win_rate=0.667, net_units=0.8, current_streak=2, best_streak=2),
    _entry("pending-only", total_picks=5),
]


def _ids(entries: list[LeaderboardEntry]) -> list[str]:
    return [entry.avatar_id for entry in entries]


def test_overall_ranks_by_net_units_and_skips_ungraded() -> None:
    assert _ids(rank_leaderboard(ENTRIES)) == ["steady", "heater", "rookie", "cold"]


def test_sort_modes() -> None:
    assert _ids(rank_leaderboard(ENTRIES, sort_mode=LeaderboardSortMode.RECENT_RUN)) == [
        "heater",
        "rookie",
        "steady",
        "cold",
    ]
    assert _ids(rank_leaderboard(ENTRIES, sort_mode=LeaderboardSortMode.LONGEST_STREAK)) == [
        "heater",
        "steady",
        "rookie",
        "cold",
    ]
    assert _ids(rank_leaderboard(ENTRIES, sort_mode=LeaderboardSortMode.BOTTOM_100))[0] == "cold"


def test_limit_and_minimum_picks() -> None:
    assert _ids(rank_leaderboard(ENTRIES, limit=2)) == ["steady", "heater"]
    assert _ids(rank_leaderboard(ENTRIES, limit=0)) == ["steady"]
    assert _ids(rank_leaderboard(ENTRIES, exclude_under_min_picks=True)) == ["steady", "heater", "cold"]


def test_limit_is_capped_by_settings(monkeypatch) -> None:
    monkeypatch.setenv("LEADERBOARD_MAX_LIMIT", "1")
    get_settings.cache_clear()
    try:
        assert _ids(rank_leaderboard(ENTRIES, limit=50)) == ["steady"]
    finally:
        monkeypatch.delenv("LEADERBOARD_MAX_LIMIT")
        get_settings.cache_clear()


def test_fetch_leaderboard_reads_public_agents_with_cache() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    now = datetime(2025, 11, 3, tzinfo=timezone.utc)

    with Session(engine) as session:
        for agent_id, sports, public in [
            ("nfl-public", ["nfl"], True),
            ("nba-public", ["nba"], True),
            ("private", ["nfl"], False),
            ("no-cache", ["nfl"], True),
        ]:
            session.add(
                AgentProfile(
                    id=agent_id,
                    user_id="u1",
                    name=agent_id,
                    preferred_sports=sports,
                    personality_params=dict(DEFAULT_PERSONALITY_PARAMS),
                    is_public=public,
                )
            )
        session.flush()
        for agent_id, units in [("nfl-public", 4.5), ("nba-public", 1.25), ("private", 20.0)]:
            session.add(
                AgentPerformanceCache(
                    avatar_id=agent_id,
                    total_picks=12,
                    wins=7,
                    losses=5,
                    win_rate=7 / 12,
                    net_units=units,
                    last_calculated_at=now,
                )
            )
        session.commit()

        board = fetch_leaderboard(session)
        assert [row["avatar_id"] for row in board] == ["nfl-public", "nba-public"]
        assert board[0]["net_units"] == 4.5
        assert board[0]["preferred_sports"] == ["nfl"]

        nba_only = fetch_leaderboard(session, sport=Sport.NBA)
        assert [row["avatar_id"] for row in nba_only] == ["nba-public"]
