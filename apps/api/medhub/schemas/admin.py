"""Pydantic schemas for platform admin endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from medhub.db.enums import OrganizationType


class OrgOnboard(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    slug: str = Field(..., min_length=2, max_length=100)
    org_type: OrganizationType
    owner_email: str = Field(..., min_length=3, max_length=320)
    owner_name: str | None = None


class OrgRead(BaseModel):
    id: UUID
    name: str
    slug: str
    org_type: str
    status: str
    suspended_reason: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReasonRequest(BaseModel):
    """Body for actions that require a written reason (min 10 chars, checked by the service)."""

    reason: str


class ProviderRead(BaseModel):
    id: UUID
    organization_id: UUID
    company_name: str
    contact_email: str | None = None
    status: str
    verification_status: str
    rejection_reason: str | None = None
    suspension_reason: str | None = None
    verified_at: datetime | None = None

    model_config = {"from_attributes": True}


class CertificationCreate(BaseModel):
    name: str
    issuing_body: str | None = None
    issued_at: datetime | None = None
    expires_at: datetime | None = None


class CertificationRead(BaseModel):
    id: UUID
    provider_id: UUID
    name: str
    issuing_body: str | None = None
    status: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None
    verified_at: datetime | None = None

    model_config = {"from_attributes": True}


class AutomationRunRead(BaseModel):
    id: UUID
    rule_name: str
    status: str
    affected_count: int
    error_message: str | None = None
    metadata: dict[str, Any] | None = Field(None, validation_alias="run_metadata")
    created_at: datetime

    model_config = {"from_attributes": True}


class AutomationRuleStatus(BaseModel):
    rule_name: str
    last_run: AutomationRunRead | None = None
