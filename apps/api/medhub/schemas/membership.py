"""Pydantic schemas for organization memberships."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from medhub.db.enums import Role


class MemberAdd(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    role: Role = Role.MEMBER
    display_name: str | None = None


class MemberRead(BaseModel):
    id: UUID
    organization_id: UUID
    user_id: UUID
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MemberRoleChange(BaseModel):
    role: Role
