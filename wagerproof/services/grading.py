from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from wagerproof.domain.enums import BetType, PickResult
from wagerproof.domain.types import GameResult
from wagerproof.models import AgentPick
from wagerproof.services.performance import refresh_performance_cache
from wagerproof.services.picks import grade_pick

logger = logging.getLogger(__name__)

_SPREAD_RE = re.compile(r"^(.+?)\s*([+-]?\d+\.?\d*)$")
_TOTAL_RE = re.compile(r"^(over|under)\s+(\d+\.?\d*)$", re.IGNORECASE)
_MATCHUP_SEPARATORS = (" @ ", " vs ", " v ", " at ")


@dataclass(frozen=True)
class SpreadSelection:
    team: str
    spread: float


@dataclass(frozen=True)
class TotalSelection:
    direction: str
    line: float


@dataclass(frozen=True)
class GradeOutcome:
    result: PickResult
    actual_result: str


def normalize_team_name(value: str | None) -> str:
    if not value:
        return ""
    text = str(value).lower().replace("&", " and ")
    text = re.sub(r"\bst\.?(?=\s|$)", "saint", text)
    text = re.sub(r"[^a-z0-9\s]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def parse_matchup(matchup: str | None) -> tuple[str, str] | None:
    if not matchup:
        return None
    raw = str(matchup).strip()
    for sep in _MATCHUP_SEPARATORS:
        parts = raw.split(sep)
        if len(parts) == 2:
            return parts[0].strip(), parts[1].strip()
    return None


def parse_spread_selection(selection: str) -> SpreadSelection | None:
    match = _SPREAD_RE.match(selection.strip())
    if match is None:
        return None
    return SpreadSelection(team=match.group(1).strip(), spread=float(match.group(2)))


def parse_total_selection(selection: str) -> TotalSelection | None:
    match = _TOTAL_RE.match(selection.strip())
    if match is None:
        return None
    return TotalSelection(direction=match.group(1).lower(), line=float(match.group(2)))


def parse_moneyline_selection(selection: str) -> str | None:
    cleaned = re.sub(r"\s*ML$", "", selection.strip(), flags=re.IGNORECASE).strip()
    cleaned = re.sub(r"\s*[+-]\d+$", "", cleaned).strip()
    return cleaned or None


def is_whole_line(value: float) -> bool:
    return float(value).is_integer()


def _archived_teams(archived: Mapping[str, object] | None) -> tuple[str | None, str | None]:
    archived = archived or {}
    complete = archived.get("game_data_complete")
    complete = complete if isinstance(complete, Mapping) else {}
    raw = complete.get("raw_game_data")
    raw = raw if isinstance(raw, Mapping) else {}

    def first(key: str) -> str | None:
        for source in (archived, complete, raw):
            value = source.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return None

    return first("away_team"), first("home_team")


def _one_sided(picked: str, home: str, away: str) -> str | None:
    home_hit = bool(home) and (home in picked or picked in home)
    away_hit = bool(away) and (away in picked or picked in away)
    if home_hit and not away_hit:
        return "home"
    if away_hit and not home_hit:
        return "away"
    return None


def resolve_team(
    picked_team: str,
    game: GameResult,
    matchup: str | None,
    archived_game_data: Mapping[str, object] | None,
) -> str | None:
    picked = normalize_team_name(picked_team)
    if not picked:
        return None
    home = normalize_team_name(game.home_team)
    away = normalize_team_name(game.away_team)
    if picked == home:
        return game.home_team
    if picked == away:
        return game.away_team

    candidates: list[tuple[str, str]] = [(home, away)]
    parsed = parse_matchup(matchup)
    if parsed is not None:
        candidates.append((normalize_team_name(parsed[1]), normalize_team_name(parsed[0])))
    archived_away, archived_home = _archived_teams(archived_game_data)
    candidates.append((normalize_team_name(archived_home), normalize_team_name(archived_away)))

    for cand_home, cand_away in candidates:
        side = _one_sided(picked, cand_home, cand_away)
        if side == "home":
            return game.home_team
        if side == "away":
            return game.away_team
    return None


def grade_from_result(pick: AgentPick, game: GameResult) -> GradeOutcome | None:
    prefix = f"{game.away_team} vs {game.home_team}"
    bet_type = BetType(pick.bet_type)

    if bet_type == BetType.MONEYLINE:
        if not game.ml_result:
            return None
        team = parse_moneyline_selection(pick.pick_selection)
        canonical = resolve_team(team, game, pick.matchup, pick.archived_game_data) if team else None
        if canonical is None:
            return None
        result = PickResult.WON if canonical == game.ml_result else PickResult.LOST
        return GradeOutcome(result, f"{prefix} - ML winner: {game.ml_result}")

    if bet_type == BetType.SPREAD:
        if not game.spread_result:
            return None
        spread = parse_spread_selection(pick.pick_selection)
        canonical = (
            resolve_team(spread.team, game, pick.matchup, pick.archived_game_data) if spread else None
        )
        if spread is None or canonical is None:
            return None
        if game.spread_result.upper() == "PUSH":
            if not is_whole_line(spread.spread):
                return None
            result = PickResult.PUSH
        else:
            result = PickResult.WON if canonical == game.spread_result else PickResult.LOST
        return GradeOutcome(result, f"{prefix} - Spread: {game.spread_result}")

    if not game.ou_result:
        return None
    total = parse_total_selection(pick.pick_selection)
    if total is None:
        return None
    ou_result = game.ou_result.lower()
    if ou_result == "push":
        if not is_whole_line(total.line):
            return None
        result = PickResult.PUSH
    else:
        result = PickResult.WON if ou_result == total.direction else PickResult.LOST
    return GradeOutcome(result, f"{prefix} - Total: {game.ou_result}")


def _date_only(value: str | None) -> str | None:
    if not value:
        return None
    text = str(value).strip()
    return text[:10] if text else None


def find_game_result(
    pick: AgentPick,
    by_id: Mapping[str, GameResult],
    results: Sequence[GameResult],
) -> GameResult | None:
    if pick.game_id in by_id:
        return by_id[pick.game_id]

    pick_date = _date_only(pick.game_date)
    parsed = parse_matchup(pick.matchup)
    archived_away, archived_home = _archived_teams(pick.archived_game_data)
    away = normalize_team_name(parsed[0] if parsed else archived_away)
    home = normalize_team_name(parsed[1] if parsed else archived_home)
    if not (pick_date and away and home):
        return None

    for result in results:
        if _date_only(result.game_date) != pick_date:
            continue
        result_home = normalize_team_name(result.home_team)
        result_away = normalize_team_name(result.away_team)
        if (result_home in home or home in result_home) and (result_away in away or away in result_away):
            return result
    return None


def _base_summary() -> dict[str, int]:
    return {
        "total_processed": 0,
        "won": 0,
        "lost": 0,
        "push": 0,
        "skipped": 0,
    }


def grade_pending_picks(
    session: Session,
    results: Sequence[GameResult],
    *,
    graded_at: datetime | None = None,
) -> dict[str, object]:
    summary = _base_summary()
    skipped_reasons: dict[str, int] = {}
    graded_at = graded_at or datetime.now(timezone.utc)
    by_id = {result.game_id: result for result in results}

    pending = (
        session.execute(
            select(AgentPick)
            .where(AgentPick.result == PickResult.PENDING.value)
            .order_by(AgentPick.created_at.asc(), AgentPick.id.asc())
        )
        .scalars()
        .all()
    )

    touched: set[str] = set()
    for pick in pending:
        summary["total_processed"] += 1
        game = find_game_result(pick, by_id, results)
        outcome = grade_from_result(pick, game) if game is not None else None
        if outcome is None:
            reason = "no_game_result" if game is None else "not_final_or_unresolved"
            summary["skipped"] += 1
            skipped_reasons[reason] = skipped_reasons.get(reason, 0) + 1
            continue

        grade_pick(pick, outcome.result, outcome.actual_result, graded_at=graded_at)
        summary[outcome.result.value] += 1
        touched.add(pick.avatar_id)

    session.flush()
    for avatar_id in sorted(touched):
        refresh_performance_cache(session, avatar_id)
    session.commit()

    logger.info(
        "graded %d of %d pending picks (%d skipped)",
        summary["won"] + summary["lost"] + summary["push"],
        summary["total_processed"],
        summary["skipped"],
    )
    return {**summary, "skipped_reasons": skipped_reasons}
