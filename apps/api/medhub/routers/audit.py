"""Audit router - tenant-side views of the audit trail."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.guards import require_roles
from medhub.core.identity import CallerIdentity
from medhub.db.enums import ROLES_CAN_APPROVE
from medhub.schemas import AuditLogListResponse, AuditLogRead
from medhub.services import audit_service

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("", response_model=AuditLogListResponse)
def list_audit_logs(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    action: str | None = Query(None, description="Filter by action"),
    resource_type: str | None = Query(None, description="Filter by resource type"),
    actor_user_id: UUID | None = Query(None, description="Filter by actor"),
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
) -> AuditLogListResponse:
    """Audit entries of the caller's organization (owner/admin)."""
    require_roles(db, caller, ROLES_CAN_APPROVE)
    entries, total = audit_service.list_entries(
        db,
        organization_id=caller.organization_id,
        action=action,
        resource_type=resource_type,
        actor_user_id=actor_user_id,
        limit=limit,
        offset=offset,
    )
    return AuditLogListResponse(
        items=[AuditLogRead.model_validate(entry) for entry in entries],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{resource_type}/{resource_id}", response_model=list[AuditLogRead])
def resource_history(
    resource_type: str,
    resource_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """History of one resource within the caller's organization."""
    return audit_service.list_for_resource(db, caller.organization_id, resource_type, resource_id)
