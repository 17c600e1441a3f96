"""Pydantic schemas for service requests and quotes."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from medhub.db.enums import ServiceRequestPriority, ServiceRequestStatus


class ServiceRequestCreate(BaseModel):
    title: str
    description: str | None = None
    priority: ServiceRequestPriority = ServiceRequestPriority.MEDIUM
    equipment_id: UUID | None = None


class ServiceRequestRead(BaseModel):
    id: UUID
    organization_id: UUID
    equipment_id: UUID | None = None
    title: str
    description: str | None = None
    priority: str
    status: str
    assigned_provider_id: UUID | None = None
    cancellation_reason: str | None = None
    created_by_user_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ServiceRequestStatusChange(BaseModel):
    status: ServiceRequestStatus


class ServiceRequestCancel(BaseModel):
    reason: str | None = None


class QuoteCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    currency: str = Field("VND", min_length=3, max_length=3)
    notes: str | None = None
    valid_until: datetime | None = None


class QuoteRead(BaseModel):
    id: UUID
    service_request_id: UUID
    provider_id: UUID
    amount: Decimal
    currency: str
    notes: str | None = None
    rejection_reason: str | None = None
    status: str
    valid_until: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class QuoteReject(BaseModel):
    reason: str
