"""Pydantic schemas for payments."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from medhub.db.enums import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod
    service_request_id: UUID | None = None
    currency: str = Field("VND", min_length=3, max_length=3)
    notes: str | None = None


class PaymentRead(BaseModel):
    id: UUID
    organization_id: UUID
    service_request_id: UUID | None = None
    invoice_number: str
    amount: Decimal
    currency: str
    method: str
    status: str
    notes: str | None = None
    paid_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentStatusChange(BaseModel):
    status: PaymentStatus


class PaymentRefund(BaseModel):
    reason: str
