from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from wagerproof.domain.enums import PickResult
from wagerproof.domain.types import GameResult
from wagerproof.models import AgentPerformanceCache, AgentPick, AgentProfile, Base
from wagerproof.services.grading import (
    find_game_result,
    grade_from_result,
    grade_pending_picks,
    normalize_team_name,
    parse_matchup,
    parse_moneyline_selection,
    parse_spread_selection,
    parse_total_selection,
    resolve_team,
)
from wagerproof.services.personality import DEFAULT_PERSONALITY_PARAMS

GRADED_AT = datetime(2025, 11, 3, 9, 0, tzinfo=timezone.utc)

FINAL = GameResult(
    game_id="nfl-1",
    game_date="2025-11-02",
    home_team="Kansas City Chiefs",
    away_team="Buffalo Bills",
    ml_result="Kansas City Chiefs",
    spread_result="Buffalo Bills",
    ou_result="Over",
)


def _pick(
    selection: str,
    bet_type: str,
    *,
    pick_id: int = 1,
    game_id: str = "nfl-1",
    matchup: str = "Buffalo Bills @ Kansas City Chiefs",
    game_date: str | None = "2025-11-02",
    archived: dict[str, object] | None = None,
) -> AgentPick:
    return AgentPick(
        id=pick_id,
        avatar_id="a1",
        game_id=game_id,
        sport="nfl",
        matchup=matchup,
        game_date=game_date,
        bet_type=bet_type,
        pick_selection=selection,
        odds="-110",
        units=Decimal("1.0"),
        confidence=3,
        reasoning_text="",
        archived_game_data=archived or {},
        archived_personality={},
        result="pending",
        created_at=datetime(2025, 11, 1, 12, pick_id, tzinfo=timezone.utc),
    )


def test_selection_parsers() -> None:
    spread = parse_spread_selection("Kansas City Chiefs -3.5")
    assert spread is not None
    assert (spread.team, spread.spread) == ("Kansas City Chiefs", -3.5)
    assert parse_spread_selection("Bills +7").spread == 7.0
    assert parse_spread_selection("Chiefs") is None

    total = parse_total_selection("Over 44.5")
    assert total is not None
    assert (total.direction, total.line) == ("over", 44.5)
    assert parse_total_selection("UNDER 47").direction == "under"
    assert parse_total_selection("Chiefs -3") is None

    assert parse_moneyline_selection("Chiefs ML") == "Chiefs"
    assert parse_moneyline_selection("Chiefs -150") == "Chiefs"
    assert parse_moneyline_selection("  ") is None


def test_matchup_and_name_normalization() -> None:
    assert parse_matchup("Bills @ Chiefs") == ("Bills", "Chiefs")
    assert parse_matchup("Bills vs Chiefs") == ("Bills", "Chiefs")
    assert parse_matchup("Chiefs") is None
    assert normalize_team_name("St. John's") == "saint john s"
    assert normalize_team_name("Texas A&M") == "texas a and m"
    assert normalize_team_name(None) == ""


def test_resolve_team_prefers_exact_then_one_sided_substring() -> None:
    assert resolve_team("Kansas City Chiefs", FINAL, None, None) == "Kansas City Chiefs"
    assert resolve_team("Chiefs", FINAL, None, None) == "Kansas City Chiefs"
    assert resolve_team("bills", FINAL, None, None) == "Buffalo Bills"
    assert resolve_team("Raiders", FINAL, None, None) is None


def test_resolve_team_falls_back_to_archived_names() -> None:
    game = GameResult("g", "2025-11-02", "KC", "BUF", ml_result="KC")
    archived = {"game_data_complete": {"raw_game_data": {"home_team": "Chiefs", "away_team": "Bills"}}}
    assert resolve_team("Chiefs", game, None, archived) == "KC"
    assert resolve_team("Bills", game, "no separator", archived) == "BUF"


def test_moneyline_grading() -> None:
    won = grade_from_result(_pick("Chiefs ML", "moneyline"), FINAL)
    assert won is not None
    assert won.result == PickResult.WON
    assert won.actual_result == "Buffalo Bills vs Kansas City Chiefs - ML winner: Kansas City Chiefs"

    lost = grade_from_result(_pick("Bills", "moneyline"), FINAL)
    assert lost.result == PickResult.LOST


def test_spread_grading_and_whole_line_push() -> None:
    assert grade_from_result(_pick("Bills +3.5", "spread"), FINAL).result == PickResult.WON
    assert grade_from_result(_pick("Chiefs -3.5", "spread"), FINAL).result == PickResult.LOST

    push_game = GameResult("nfl-1", "2025-11-02", "Kansas City Chiefs", "Buffalo Bills", spread_result="PUSH")
    assert grade_from_result(_pick("Chiefs -3", "spread"), push_game).result == PickResult.PUSH
    assert grade_from_result(_pick("Chiefs -3.5", "spread"), push_game) is None


def test_total_grading_and_push() -> None:
    assert grade_from_result(_pick("Over 44.5", "total"), FINAL).result == PickResult.WON
    assert grade_from_result(_pick("Under 44.5", "total"), FINAL).result == PickResult.LOST

    push_game = GameResult("nfl-1", "2025-11-02", "Kansas City Chiefs", "Buffalo Bills", ou_result="Push")
    assert grade_from_result(_pick("Under 44", "total"), push_game).result == PickResult.PUSH
    assert grade_from_result(_pick("Under 44.5", "total"), push_game) is None


def test_missing_market_result_leaves_pick_ungraded() -> None:
    partial = GameResult("nfl-1", "2025-11-02", "Kansas City Chiefs", "Buffalo Bills", ml_result="Buffalo Bills")
    assert grade_from_result(_pick("Over 44.5", "total"), partial) is None
    assert grade_from_result(_pick("Bills", "moneyline"), partial).result == PickResult.WON


def test_find_game_result_by_id_then_date_and_teams() -> None:
    by_id = {FINAL.game_id: FINAL}
    assert find_game_result(_pick("Chiefs ML", "moneyline"), by_id, [FINAL]) is FINAL

    other_id = _pick("Chiefs ML", "moneyline", game_id="feed-77", matchup="Bills @ Chiefs")
    assert find_game_result(other_id, by_id, [FINAL]) is FINAL

    wrong_day = _pick("Chiefs ML", "moneyline", game_id="feed-77", game_date="2025-11-09")
    assert find_game_result(wrong_day, by_id, [FINAL]) is None


def test_grade_pending_picks_summarizes_and_refreshes_cache() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        session.add(
            AgentProfile(
                id="a1",
                user_id="u1",
                name="Fade Bot",
                preferred_sports=["nfl"],
                personality_params=dict(DEFAULT_PERSONALITY_PARAMS),
            )
        )
        session.add_all(
            [
                _pick("Chiefs ML", "moneyline", pick_id=1),
                _pick("Chiefs -3.5", "spread", pick_id=2),
                _pick("Over 44.5", "total", pick_id=3),
                _pick("Raiders ML", "moneyline", pick_id=4, game_id="nfl-9", matchup="Raiders @ Broncos"),
            ]
        )
        session.commit()

        summary = grade_pending_picks(session, [FINAL], graded_at=GRADED_AT)

        assert summary["total_processed"] == 4
        assert (summary["won"], summary["lost"], summary["push"]) == (2, 1, 0)
        assert summary["skipped"] == 1
        assert summary["skipped_reasons"] == {"no_game_result": 1}

        rows = session.execute(select(AgentPick).order_by(AgentPick.id)).scalars().all()
        assert [r.result for r in rows] == ["won", "lost", "won", "pending"]
        assert rows[0].actual_result.endswith("ML winner: Kansas City Chiefs")

        cache = session.get(AgentPerformanceCache, "a1")
        assert (cache.wins, cache.losses, cache.pending, cache.current_streak) == (2, 1, 1, 1)

        again = grade_pending_picks(session, [FINAL], graded_at=GRADED_AT)
        assert again["total_processed"] == 1
        assert again["skipped"] == 1
