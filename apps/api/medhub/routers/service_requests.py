"""Service requests router - hospital requests and provider quotes."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.identity import CallerIdentity
from medhub.db.enums import ServiceRequestStatus
from medhub.schemas import (
    QuoteCreate,
    QuoteRead,
    QuoteReject,
    ServiceRequestCancel,
    ServiceRequestCreate,
    ServiceRequestRead,
    ServiceRequestStatusChange,
)
from medhub.services import quote_service, service_request_service

router = APIRouter(prefix="/service-requests", tags=["Service Requests"])


@router.get("", response_model=list[ServiceRequestRead])
def list_service_requests(
    status: ServiceRequestStatus | None = None,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """Requests raised by the caller's organization."""
    return service_request_service.list_service_requests(db, caller, status=status)


@router.get("/assigned", response_model=list[ServiceRequestRead])
def list_assigned_requests(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """Requests assigned to the caller's provider organization."""
    return service_request_service.list_assigned_requests(db, caller)


@router.get("/open", response_model=list[ServiceRequestRead])
def list_open_for_quoting(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return service_request_service.list_open_for_quoting(db, caller)


@router.post("", response_model=ServiceRequestRead, status_code=status.HTTP_201_CREATED)
def create_service_request(
    data: ServiceRequestCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return service_request_service.create_service_request(
        db,
        caller,
        title=data.title,
        description=data.description,
        priority=data.priority,
        equipment_id=data.equipment_id,
    )


@router.get("/{request_id}", response_model=ServiceRequestRead)
def get_service_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return service_request_service.get_service_request(db, caller, request_id)


@router.patch("/{request_id}/status", response_model=ServiceRequestRead)
def update_service_request_status(
    request_id: UUID,
    data: ServiceRequestStatusChange,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """
    Change request status.

    Approval-class moves (pending -> quoted, quoted -> accepted) need an
    owner/admin other than the request's creator.
    """
    return service_request_service.update_service_request_status(
        db, caller, request_id, data.status
    )


@router.post("/{request_id}/cancel", response_model=ServiceRequestRead)
def cancel_service_request(
    request_id: UUID,
    data: ServiceRequestCancel,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return service_request_service.cancel_service_request(
        db, caller, request_id, reason=data.reason
    )


# ============================================================================
# Quotes
# ============================================================================

@router.get("/{request_id}/quotes", response_model=list[QuoteRead])
def list_quotes(
    request_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return quote_service.list_quotes_for_request(db, caller, request_id)


@router.post(
    "/{request_id}/quotes", response_model=QuoteRead, status_code=status.HTTP_201_CREATED
)
def submit_quote(
    request_id: UUID,
    data: QuoteCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return quote_service.submit_quote(
        db,
        caller,
        request_id,
        amount=data.amount,
        currency=data.currency,
        notes=data.notes,
        valid_until=data.valid_until,
    )


@router.post("/quotes/{quote_id}/accept", response_model=QuoteRead)
def accept_quote(
    quote_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return quote_service.accept_quote(db, caller, quote_id)


@router.post("/quotes/{quote_id}/reject", response_model=QuoteRead)
def reject_quote(
    quote_id: UUID,
    data: QuoteReject,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return quote_service.reject_quote(db, caller, quote_id, data.reason)
