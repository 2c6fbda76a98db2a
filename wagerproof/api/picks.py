from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from wagerproof.db import get_db
from wagerproof.domain.types import GameResult
from wagerproof.services.grading import grade_pending_picks

router = APIRouter(tags=["picks"])


class GameResultIn(BaseModel):
    game_id: str
    game_date: str | None = None
    home_team: str
    away_team: str
    ml_result: str | None = None
    spread_result: str | None = None
    ou_result: str | None = None

    def to_domain(self) -> GameResult:
        return GameResult(**self.model_dump())


@router.post("/picks/grade")
def grade_picks(results: list[GameResultIn], db: Session = Depends(get_db)) -> dict[str, object]:
    return grade_pending_picks(db, [result.to_domain() for result in results])
