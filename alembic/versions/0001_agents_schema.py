"""agents, picks, performance cache and game predictions

Revision ID: 0001_agents_schema
Revises:
Create Date: 2026-10-18 00:00:00

"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_agents_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "avatar_profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("avatar_emoji", sa.String(8), nullable=False),
        sa.Column("avatar_color", sa.String(32), nullable=False),
        sa.Column("preferred_sports", sa.JSON(), nullable=False),
        sa.Column("archetype", sa.String(32), nullable=True),
        sa.Column("personality_params", sa.JSON(), nullable=False),
        sa.Column("custom_insights", sa.JSON(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("auto_generate", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_avatar_profiles_user_id", "avatar_profiles", ["user_id"])

    op.create_table(
        "avatar_picks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("avatar_id", sa.String(64), sa.ForeignKey("avatar_profiles.id"), nullable=False),
        sa.Column("game_id", sa.Text(), nullable=False),
        sa.Column("sport", sa.String(16), nullable=False),
        sa.Column("matchup", sa.Text(), nullable=False),
        sa.Column("game_date", sa.String(32), nullable=True),
        sa.Column("bet_type", sa.String(16), nullable=False),
        sa.Column("pick_selection", sa.Text(), nullable=False),
        sa.Column("odds", sa.String(16), nullable=True),
        sa.Column("units", sa.Numeric(6, 2), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("reasoning_text", sa.Text(), nullable=False),
        sa.Column("key_factors", sa.JSON(), nullable=True),
        sa.Column("ai_decision_trace", sa.JSON(), nullable=True),
        sa.Column("archived_game_data", sa.JSON(), nullable=False),
        sa.Column("archived_personality", sa.JSON(), nullable=False),
        sa.Column("result", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("actual_result", sa.Text(), nullable=True),
        sa.Column("graded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("avatar_id", "game_id", "bet_type", name="uq_avatar_pick_game_bet_type"),
        sa.CheckConstraint("result IN ('pending', 'won', 'lost', 'push')", name="ck_avatar_picks_result"),
        sa.CheckConstraint("confidence BETWEEN 1 AND 5", name="ck_avatar_picks_confidence"),
    )
    op.create_index("ix_avatar_picks_avatar_created", "avatar_picks", ["avatar_id", "created_at"])
    op.create_index("ix_avatar_picks_result", "avatar_picks", ["result"])

    op.create_table(
        "avatar_performance_cache",
        sa.Column("avatar_id", sa.String(64), sa.ForeignKey("avatar_profiles.id"), primary_key=True),
        sa.Column("total_picks", sa.Integer(), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False),
        sa.Column("losses", sa.Integer(), nullable=False),
        sa.Column("pushes", sa.Integer(), nullable=False),
        sa.Column("pending", sa.Integer(), nullable=False),
        sa.Column("win_rate", sa.Float(), nullable=True),
        sa.Column("net_units", sa.Float(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("best_streak", sa.Integer(), nullable=False),
        sa.Column("worst_streak", sa.Integer(), nullable=False),
        sa.Column("stats_by_sport", sa.JSON(), nullable=False),
        sa.Column("stats_by_bet_type", sa.JSON(), nullable=False),
        sa.Column("last_calculated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "game_predictions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("unique_id", sa.Text(), nullable=False, unique=True),
        sa.Column("game_date", sa.String(32), nullable=True),
        sa.Column("home_team", sa.Text(), nullable=False),
        sa.Column("away_team", sa.Text(), nullable=False),
        sa.Column("ml_probability", sa.Numeric(8, 6), nullable=True),
        sa.Column("run_line_probability", sa.Numeric(8, 6), nullable=True),
        sa.Column("ou_probability", sa.Numeric(8, 6), nullable=True),
        sa.Column("home_ml", sa.Integer(), nullable=True),
        sa.Column("away_ml", sa.Integer(), nullable=True),
        sa.Column("home_rl", sa.Numeric(6, 2), nullable=True),
        sa.Column("away_rl", sa.Numeric(6, 2), nullable=True),
        sa.Column("o_u_line", sa.Numeric(6, 2), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("game_predictions")
    op.drop_table("avatar_performance_cache")
    op.drop_index("ix_avatar_picks_result", table_name="avatar_picks")
    op.drop_index("ix_avatar_picks_avatar_created", table_name="avatar_picks")
    op.drop_table("avatar_picks")
    op.drop_index("ix_avatar_profiles_user_id", table_name="avatar_profiles")
    op.drop_table("avatar_profiles")
