"""Payments router (tenant side)."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.identity import CallerIdentity
from medhub.schemas import PaymentCreate, PaymentRead, PaymentStatusChange
from medhub.services import payment_service

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=list[PaymentRead])
def list_payments(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return payment_service.list_payments(db, caller)


@router.post("", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
def create_payment(
    data: PaymentCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return payment_service.create_payment(
        db,
        caller,
        amount=data.amount,
        method=data.method,
        service_request_id=data.service_request_id,
        currency=data.currency,
        notes=data.notes,
    )


@router.get("/{payment_id}", response_model=PaymentRead)
def get_payment(
    payment_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return payment_service.get_payment(db, caller, payment_id)


@router.patch("/{payment_id}/status", response_model=PaymentRead)
def update_payment_status(
    payment_id: UUID,
    data: PaymentStatusChange,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return payment_service.update_payment_status(db, caller, payment_id, data.status)
