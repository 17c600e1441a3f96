"""Pydantic schemas for the audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class AuditLogRead(BaseModel):
    id: UUID
    organization_id: UUID
    actor_user_id: UUID | None = None
    action: str
    resource_type: str
    resource_id: UUID
    previous_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditLogListResponse(BaseModel):
    items: list[AuditLogRead]
    total: int
    limit: int
    offset: int
