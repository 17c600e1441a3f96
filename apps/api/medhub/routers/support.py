"""Support tickets router (tenant side)."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.identity import CallerIdentity
from medhub.db.enums import TicketStatus
from medhub.schemas import TicketCreate, TicketRead, TicketStatusChange
from medhub.services import support_service

router = APIRouter(prefix="/support-tickets", tags=["Support"])


@router.get("", response_model=list[TicketRead])
def list_tickets(
    status: TicketStatus | None = None,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return support_service.list_tickets(db, caller, status=status)


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
def create_ticket(
    data: TicketCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return support_service.create_ticket(
        db, caller, subject=data.subject, description=data.description, priority=data.priority
    )


@router.get("/{ticket_id}", response_model=TicketRead)
def get_ticket(
    ticket_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return support_service.get_ticket(db, caller, ticket_id)


@router.patch("/{ticket_id}/status", response_model=TicketRead)
def update_ticket_status(
    ticket_id: UUID,
    data: TicketStatusChange,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return support_service.update_ticket_status(db, caller, ticket_id, data.status)
