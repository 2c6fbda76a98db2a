from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from wagerproof.db import get_db
from wagerproof.domain.enums import LeaderboardSortMode, Sport
from wagerproof.domain.schemas import GeneratedPick
from wagerproof.domain.types import SlateGame
from wagerproof.models import AgentProfile
from wagerproof.services.leaderboard import fetch_leaderboard
from wagerproof.services.performance import (
    AgentPerformance,
    format_net_units,
    format_record,
    format_streak,
    get_performance,
    refresh_performance_cache,
)
from wagerproof.services.personality import validate_personality
from wagerproof.services.picks import build_agent_picks, save_agent_picks

router = APIRouter(tags=["agents"])


class SlateGameIn(BaseModel):
    game_id: str
    sport: Sport
    home_team: str
    away_team: str
    game_date: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> SlateGame:
        return SlateGame(
            game_id=self.game_id,
            sport=self.sport,
            home_team=self.home_team,
            away_team=self.away_team,
            game_date=self.game_date,
            raw=dict(self.raw),
        )


class GeneratePicksRequest(BaseModel):
    generated: list[GeneratedPick]
    slate: list[SlateGameIn]


def _performance_payload(avatar_id: str, perf: AgentPerformance) -> dict[str, object]:
    return {
        "avatar_id": avatar_id,
        **perf.model_dump(mode="json"),
        "display": {
            "record": format_record(perf),
            "net_units": format_net_units(perf.net_units),
            "streak": format_streak(perf.current_streak),
        },
    }


def _require_agent(db: Session, avatar_id: str) -> AgentProfile:
    agent = db.get(AgentProfile, avatar_id)
    if agent is None:
        raise HTTPException(status_code=404, detail=f"agent '{avatar_id}' not found")
    return agent


@router.post("/agents/personality/validate")
def validate_personality_params(payload: Any = Body(...)) -> dict[str, object]:
    return validate_personality(payload).model_dump(mode="json")


@router.get("/agents/leaderboard")
def leaderboard(
    limit: int = Query(100),
    sport: Sport | None = Query(None),
    sort_mode: LeaderboardSortMode = Query(LeaderboardSortMode.OVERALL),
    exclude_under_10_picks: bool = Query(False),
    db: Session = Depends(get_db),
) -> list[dict[str, object]]:
    return fetch_leaderboard(
        db,
        limit=limit,
        sport=sport,
        sort_mode=sort_mode,
        exclude_under_min_picks=exclude_under_10_picks,
    )


@router.get("/agents/{avatar_id}/performance")
def agent_performance(avatar_id: str, db: Session = Depends(get_db)) -> dict[str, object]:
    _require_agent(db, avatar_id)
    return _performance_payload(avatar_id, get_performance(db, avatar_id))


@router.post("/agents/{avatar_id}/performance/recompute")
def recompute_agent_performance(avatar_id: str, db: Session = Depends(get_db)) -> dict[str, object]:
    _require_agent(db, avatar_id)
    perf = refresh_performance_cache(db, avatar_id)
    db.commit()
    return _performance_payload(avatar_id, perf)


@router.post("/agents/{avatar_id}/picks")
def create_agent_picks(
    avatar_id: str,
    body: GeneratePicksRequest,
    db: Session = Depends(get_db),
) -> dict[str, object]:
    agent = _require_agent(db, avatar_id)
    personality = validate_personality(agent.personality_params)
    picks = build_agent_picks(
        avatar_id,
        personality,
        body.generated,
        [game.to_domain() for game in body.slate],
    )
    summary = save_agent_picks(db, avatar_id, picks)
    return {**summary, "generated": len(body.generated), "kept": len(picks)}
