"""Pydantic schemas for equipment, maintenance and consumables."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from medhub.db.enums import EquipmentStatus, FailureUrgency, MaintenanceType


class EquipmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(None, max_length=100)
    serial_number: str | None = Field(None, max_length=100)
    location: str | None = Field(None, max_length=255)


class EquipmentRead(BaseModel):
    id: UUID
    organization_id: UUID
    name: str
    category: str | None = None
    serial_number: str | None = None
    location: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EquipmentStatusChange(BaseModel):
    status: EquipmentStatus


class FailureReportCreate(BaseModel):
    urgency: FailureUrgency
    description: str


class FailureReportRead(BaseModel):
    id: UUID
    equipment_id: UUID
    urgency: str
    description: str
    status: str
    reported_by_user_id: UUID | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MaintenanceCreate(BaseModel):
    scheduled_at: datetime
    maintenance_type: MaintenanceType = MaintenanceType.PREVENTIVE
    notes: str | None = None


class MaintenanceRead(BaseModel):
    id: UUID
    equipment_id: UUID
    maintenance_type: str
    status: str
    scheduled_at: datetime
    completed_at: datetime | None = None
    notes: str | None = None

    model_config = {"from_attributes": True}


class ConsumableCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    unit: str | None = Field(None, max_length=30)
    current_stock: int = Field(0, ge=0)
    reorder_point: int = Field(0, ge=0)


class ConsumableRead(BaseModel):
    id: UUID
    name: str
    unit: str | None = None
    current_stock: int
    reorder_point: int
    updated_at: datetime

    model_config = {"from_attributes": True}


class StockAdjustment(BaseModel):
    """Positive delta = received, negative = used."""

    delta: int
