"""Pydantic schemas for support tickets."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from medhub.db.enums import TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    subject: str
    description: str
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketRead(BaseModel):
    id: UUID
    organization_id: UUID
    subject: str
    description: str
    priority: str
    status: str
    assigned_to_user_id: UUID | None = None
    created_by_user_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TicketStatusChange(BaseModel):
    status: TicketStatus
