"""Disputes router."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.identity import CallerIdentity
from medhub.db.enums import DisputeStatus
from medhub.schemas import (
    DisputeCreate,
    DisputeEscalate,
    DisputeRead,
    DisputeResolve,
    DisputeStatusChange,
)
from medhub.services import dispute_service

router = APIRouter(prefix="/disputes", tags=["Disputes"])


@router.get("", response_model=list[DisputeRead])
def list_disputes(
    status: DisputeStatus | None = None,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return dispute_service.list_disputes(db, caller, status=status)


@router.post("", response_model=DisputeRead, status_code=status.HTTP_201_CREATED)
def create_dispute(
    data: DisputeCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return dispute_service.create_dispute(
        db,
        caller,
        data.service_request_id,
        dispute_type=data.dispute_type,
        description=data.description,
    )


@router.get("/{dispute_id}", response_model=DisputeRead)
def get_dispute(
    dispute_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return dispute_service.get_dispute(db, caller, dispute_id)


@router.patch("/{dispute_id}/status", response_model=DisputeRead)
def update_dispute_status(
    dispute_id: UUID,
    data: DisputeStatusChange,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return dispute_service.update_dispute_status(db, caller, dispute_id, data.status)


@router.post("/{dispute_id}/escalate", response_model=DisputeRead)
def escalate_dispute(
    dispute_id: UUID,
    data: DisputeEscalate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return dispute_service.escalate_dispute(db, caller, dispute_id, data.reason)


@router.post("/{dispute_id}/resolve", response_model=DisputeRead)
def resolve_dispute(
    dispute_id: UUID,
    data: DisputeResolve,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return dispute_service.resolve_dispute(db, caller, dispute_id, data.resolution_notes)
