"""Add points_configs, points_history and admin_log tables

Revision ID: 5c2e9a7d41b0
Revises:
Create Date: 2026-10-19 09:12:31.204118

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '5c2e9a7d41b0'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the versioned points config, the points ledger and the audit log."""

    # --- points_configs ---
    op.create_table(
        "points_configs",
        sa.Column("company_id", sa.String(64), primary_key=True),
        sa.Column("base_points", postgresql.JSONB, nullable=False),
        sa.Column("ai_modifier", sa.Float, nullable=False),
        sa.Column("org_overrides", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("level_thresholds", postgresql.JSONB, nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "ai_modifier BETWEEN 0.5 AND 1.0", name="ck_points_configs_ai_modifier"
        ),
        sa.CheckConstraint("version >= 1", name="ck_points_configs_version"),
    )

    # --- points_history ---
    op.create_table(
        "points_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("organization_id", sa.String(64), nullable=False),
        sa.Column("team_member_id", sa.String(64), nullable=False),
        sa.Column("activity_id", sa.String(100), nullable=False),
        sa.Column("activity_kind", sa.String(32), nullable=False),
        sa.Column("is_ai_generated", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("base_points", sa.Float, nullable=False),
        sa.Column("applied_modifier", sa.Float, nullable=False, server_default="1.0"),
        sa.Column("final_points", sa.Integer, nullable=False),
        sa.Column("steps", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("config_version", sa.Integer, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("company_id", "activity_id", name="uq_points_history_activity"),
        sa.CheckConstraint("final_points >= 0", name="ck_points_history_final_points"),
    )
    op.create_index(
        "ix_points_history_member_time", "points_history",
        ["company_id", "team_member_id", "created_at"],
    )

    # --- admin_log ---
    op.create_table(
        "admin_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(64), nullable=True),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_table", sa.String(50), nullable=False),
        sa.Column("target_id", sa.String(100), nullable=True),
        sa.Column("before_snapshot", postgresql.JSONB, nullable=True),
        sa.Column("after_snapshot", postgresql.JSONB, nullable=True),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_admin_log_target", "admin_log",
        ["target_table", "target_id", "timestamp"],
    )


def downgrade() -> None:
    """Drop the points tables and the audit log."""
    op.drop_index("ix_admin_log_target", table_name="admin_log")
    op.drop_table("admin_log")
    op.drop_index("ix_points_history_member_time", table_name="points_history")
    op.drop_table("points_history")
    op.drop_table("points_configs")
