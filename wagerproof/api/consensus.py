from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from wagerproof.db import get_db
from wagerproof.domain.enums import PredictionTarget
from wagerproof.domain.types import ModelPrediction
from wagerproof.services.consensus import ConsensusResult, consensus_for_game, reduce_consensus

router = APIRouter(tags=["consensus"])


class PredictionIn(BaseModel):
    unique_id: str = ""
    primary_team: str
    opponent_team: str
    is_home_team: bool = True
    win_pct: float
    opponent_win_pct: float | None = None
    games: int = 0
    features: list[str] = Field(default_factory=list)
    model_name: str | None = None

    def to_domain(self) -> ModelPrediction:
        opponent = self.opponent_win_pct if self.opponent_win_pct is not None else 1.0 - self.win_pct
        return ModelPrediction(
            unique_id=self.unique_id,
            primary_team=self.primary_team,
            opponent_team=self.opponent_team,
            is_home_team=self.is_home_team,
            win_pct=self.win_pct,
            opponent_win_pct=min(1.0, max(0.0, opponent)),
            games=self.games,
            features=tuple(self.features),
            model_name=self.model_name,
        )


class GameConsensusRequest(BaseModel):
    target: PredictionTarget
    models: list[PredictionIn] | None = None


@router.post("/consensus/reduce", response_model=ConsensusResult)
def reduce_predictions(predictions: list[PredictionIn]) -> ConsensusResult:
    return reduce_consensus([prediction.to_domain() for prediction in predictions])


@router.post("/consensus/{unique_id}", response_model=ConsensusResult)
def game_consensus(
    unique_id: str,
    body: GameConsensusRequest,
    db: Session = Depends(get_db),
) -> ConsensusResult:
    models = [model.to_domain() for model in body.models] if body.models else None
    result = consensus_for_game(db, unique_id, body.target, models)
    if result is None:
        raise HTTPException(status_code=404, detail=f"game '{unique_id}' not found")
    return result
