"""initial league schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "competition",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    stat_columns = [
        sa.Column(name, sa.Integer(), nullable=False, server_default="0")
        for name in (
            "played",
            "wins",
            "draws",
            "losses",
            "goals_for",
            "goals_against",
            "goal_difference",
            "points",
            "assists",
            "best_player_votes",
            "worst_player_votes",
        )
    ]
    op.create_table(
        "player",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("nickname", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False, server_default="player"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        *stat_columns,
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_player_name_lower",
        "player",
        [sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "match",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_num", sa.Integer(), nullable=True),
        sa.Column("stage_name", sa.String(), nullable=True),
        sa.Column("match_type", sa.String(), nullable=True),
        sa.Column(
            "competition_id", sa.String(), sa.ForeignKey("competition.id"), nullable=True
        ),
        sa.Column("player1_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("player2_id", sa.String(), sa.ForeignKey("player.id"), nullable=True),
        sa.Column("player2_ids", sa.JSON(), nullable=True),
        sa.Column("result", sa.String(), nullable=True),
        sa.Column(
            "timestamp", sa.DateTime(), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("votes", sa.JSON(), nullable=False),
        sa.Column("best_player_vote_id", sa.String(), nullable=True),
        sa.Column("worst_player_vote_id", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_match_competition_id", "match", ["competition_id"])


def downgrade():
    op.drop_index("ix_match_competition_id", table_name="match")
    op.drop_table("match")
    op.drop_index("uq_player_name_lower", table_name="player")
    op.drop_table("player")
    op.drop_table("competition")
