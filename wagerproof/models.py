from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class AgentProfile(Base):
    __tablename__ = "avatar_profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    avatar_emoji: Mapped[str] = mapped_column(String(8), nullable=False, default="")
    avatar_color: Mapped[str] = mapped_column(String(32), nullable=False, default="#6366f1")
    preferred_sports: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    archetype: Mapped[str | None] = mapped_column(String(32), nullable=True)
    personality_params: Mapped[dict[str, object]] = mapped_column(JSON, nullable=False)
    custom_insights: Mapped[dict[str, object]] = mapped_column(JSON, nullable=False, default=dict)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_generate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    picks: Mapped[list[AgentPick]] = relationship(back_populates="agent")
    performance: Mapped[AgentPerformanceCache | None] = relationship(back_populates="agent")


class AgentPick(Base):
    __tablename__ = "avatar_picks"
    __table_args__ = (
        UniqueConstraint("avatar_id", "game_id", "bet_type", name="uq_avatar_pick_game_bet_type"),
        Index("ix_avatar_picks_avatar_created", "avatar_id", "created_at"),
        Index("ix_avatar_picks_result", "result"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    avatar_id: Mapped[str] = mapped_column(ForeignKey("avatar_profiles.id"), nullable=False)
    game_id: Mapped[str] = mapped_column(Text, nullable=False)
    sport: Mapped[str] = mapped_column(String(16), nullable=False)
    matchup: Mapped[str] = mapped_column(Text, nullable=False, default="")
    game_date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    bet_type: Mapped[str] = mapped_column(String(16), nullable=False)
    pick_selection: Mapped[str] = mapped_column(Text, nullable=False)
    odds: Mapped[str | None] = mapped_column(String(16), nullable=True)
    units: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False)
    reasoning_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    key_factors: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    ai_decision_trace: Mapped[dict[str, object] | None] = mapped_column(JSON, nullable=True)
    archived_game_data: Mapped[dict[str, object]] = mapped_column(JSON, nullable=False, default=dict)
    archived_personality: Mapped[dict[str, object]] = mapped_column(JSON, nullable=False)
    result: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    actual_result: Mapped[str | None] = mapped_column(Text, nullable=True)
    graded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    agent: Mapped[AgentProfile] = relationship(back_populates="picks")


class AgentPerformanceCache(Base):
    __tablename__ = "avatar_performance_cache"

    avatar_id: Mapped[str] = mapped_column(ForeignKey("avatar_profiles.id"), primary_key=True)
    total_picks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pushes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pending: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    win_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    net_units: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    best_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    worst_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stats_by_sport: Mapped[dict[str, object]] = mapped_column(JSON, nullable=False, default=dict)
    stats_by_bet_type: Mapped[dict[str, object]] = mapped_column(JSON, nullable=False, default=dict)
    last_calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    agent: Mapped[AgentProfile] = relationship(back_populates="performance")


class GamePrediction(Base):
    __tablename__ = "game_predictions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    unique_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    game_date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    home_team: Mapped[str] = mapped_column(Text, nullable=False)
    away_team: Mapped[str] = mapped_column(Text, nullable=False)
    ml_probability: Mapped[Decimal | None] = mapped_column(Numeric(8, 6), nullable=True)
    run_line_probability: Mapped[Decimal | None] = mapped_column(Numeric(8, 6), nullable=True)
    ou_probability: Mapped[Decimal | None] = mapped_column(Numeric(8, 6), nullable=True)
    home_ml: Mapped[int | None] = mapped_column(Integer, nullable=True)
    away_ml: Mapped[int | None] = mapped_column(Integer, nullable=True)
    home_rl: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    away_rl: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    o_u_line: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
