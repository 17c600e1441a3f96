"""Pydantic schemas for disputes."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from medhub.db.enums import DisputeResolution, DisputeStatus, DisputeType


class DisputeCreate(BaseModel):
    service_request_id: UUID
    dispute_type: DisputeType
    description: str


class DisputeRead(BaseModel):
    id: UUID
    organization_id: UUID
    service_request_id: UUID
    dispute_type: str
    description: str
    status: str
    resolution_notes: str | None = None
    resolved_at: datetime | None = None
    created_by_user_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DisputeStatusChange(BaseModel):
    status: DisputeStatus


class DisputeEscalate(BaseModel):
    reason: str


class DisputeResolve(BaseModel):
    resolution_notes: str


class DisputeArbitrate(BaseModel):
    """Platform admin ruling on an escalated dispute."""

    resolution: DisputeResolution
    reason: str
    refund_amount: Decimal | None = None


class ProviderReassign(BaseModel):
    provider_id: UUID
    reason: str
