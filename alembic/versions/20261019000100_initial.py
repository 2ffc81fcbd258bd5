"""initial pool schema

Revision ID: 20261019000100
Revises: 
Create Date: 2026-10-19 00:01:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019000100"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=True,
    )


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("team_a", sa.String(), nullable=False),
        sa.Column("team_b", sa.String(), nullable=False),
        sa.Column("team_a_abbrev", sa.String(), nullable=True),
        sa.Column("team_b_abbrev", sa.String(), nullable=True),
        sa.Column("team_a_conf_id", sa.String(), nullable=True),
        sa.Column("team_b_conf_id", sa.String(), nullable=True),
        sa.Column("team_a_rank", sa.Integer(), nullable=True),
        sa.Column("team_b_rank", sa.Integer(), nullable=True),
        sa.Column("team_a_record", sa.String(), nullable=False, server_default=""),
        sa.Column("team_b_record", sa.String(), nullable=False, server_default=""),
        sa.Column("start_time_utc", sa.DateTime(timezone=True), nullable=True),
        sa.Column("game_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("result_a", sa.Integer(), nullable=True),
        sa.Column("result_b", sa.Integer(), nullable=True),
        sa.Column("spread", sa.String(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_games_id", "games", ["id"], unique=False)
    op.create_index("ix_games_external_id", "games", ["external_id"], unique=True)
    op.create_index("ix_games_game_date", "games", ["game_date"], unique=False)
    op.create_index("ix_games_status", "games", ["status"], unique=False)

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("total_wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekly_wins", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
    )

    op.create_table(
        "picks",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id"), nullable=False),
        sa.Column("selected_team", sa.String(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("user_id", "game_id", name="uq_picks_user_game"),
    )
    op.create_index("ix_picks_id", "picks", ["id"], unique=False)
    op.create_index("ix_picks_user_id", "picks", ["user_id"], unique=False)
    op.create_index("ix_picks_game_id", "picks", ["game_id"], unique=False)

    op.create_table(
        "weekly_winners",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("week_start", sa.Date(), nullable=False, unique=True),
        sa.Column("week_end", sa.Date(), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
    )
    op.create_index("ix_weekly_winners_id", "weekly_winners", ["id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_weekly_winners_id", table_name="weekly_winners")
    op.drop_table("weekly_winners")
    op.drop_index("ix_picks_game_id", table_name="picks")
    op.drop_index("ix_picks_user_id", table_name="picks")
    op.drop_index("ix_picks_id", table_name="picks")
    op.drop_table("picks")
    op.drop_table("profiles")
    op.drop_index("ix_games_status", table_name="games")
    op.drop_index("ix_games_game_date", table_name="games")
    op.drop_index("ix_games_external_id", table_name="games")
    op.drop_index("ix_games_id", table_name="games")
    op.drop_table("games")
