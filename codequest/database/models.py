"""
codequest.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- points_configs  — One versioned points configuration per company
- points_history  — Append-only ledger of awarded points, idempotent per activity
- admin_log       — Append-only audit trail for configuration changes
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all CodeQuest ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class AdminActionType(enum.StrEnum):
    """Categories of admin mutations recorded in admin_log."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"


# ---------------------------------------------------------------------------
# PointsConfigRecord — one row per company
# ---------------------------------------------------------------------------
class PointsConfigRecord(Base):
    """Stored :class:`~codequest.engine.points_config.PointsConfig`.

    Rows are only ever replaced whole.  ``version`` is compared and bumped
    in the same transaction as the replacement (optimistic concurrency).
    """
    __tablename__ = "points_configs"

    company_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    base_points: Mapped[dict] = mapped_column(JSONType, nullable=False)
    ai_modifier: Mapped[float] = mapped_column(Float, nullable=False)
    org_overrides: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    level_thresholds: Mapped[dict] = mapped_column(JSONType, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PointsConfigRecord company={self.company_id!r} v={self.version}>"


# ---------------------------------------------------------------------------
# PointsHistory — append-only ledger
# ---------------------------------------------------------------------------
class PointsHistory(Base):
    __tablename__ = "points_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[str] = mapped_column(String(64), nullable=False)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)
    team_member_id: Mapped[str] = mapped_column(String(64), nullable=False)
    activity_id: Mapped[str] = mapped_column(String(100), nullable=False)
    activity_kind: Mapped[str] = mapped_column(String(32), nullable=False)
    is_ai_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    base_points: Mapped[float] = mapped_column(Float, nullable=False)
    applied_modifier: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    final_points: Mapped[int] = mapped_column(Integer, nullable=False)
    steps: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    config_version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("company_id", "activity_id", name="uq_points_history_activity"),
        Index("ix_points_history_member_time", "company_id", "team_member_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PointsHistory id={self.id} member={self.team_member_id!r} "
            f"kind={self.activity_kind} points={self.final_points}>"
        )


# ---------------------------------------------------------------------------
# AdminLog — append-only audit trail
# ---------------------------------------------------------------------------
class AdminLog(Base):
    __tablename__ = "admin_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_table: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    before_snapshot: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    after_snapshot: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_admin_log_target", "target_table", "target_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<AdminLog id={self.id} actor={self.actor_id} action={self.action_type}>"
