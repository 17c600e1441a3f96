"""SQLAlchemy ORM models for automation run records."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from medhub.db.base import Base, utcnow


class AutomationRun(Base):
    """One record per automation rule execution (observability only)."""

    __tablename__ = "automation_runs"
    __table_args__ = (Index("idx_automation_runs_rule_created", "rule_name", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    rule_name: Mapped[str] = mapped_column(String(50), nullable=False)  # AutomationRule
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # AutomationRunStatus
    affected_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    run_metadata: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
