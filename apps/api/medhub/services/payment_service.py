"""Payment service - organization payments and platform admin voids.

Invoice numbers come from a per-day ``InvoiceCounter`` row that is
incremented in the same transaction as the payment insert, so two payments
created the same day can never share a sequence number.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import InvalidInputError, InvalidTransitionError
from medhub.core.guards import (
    get_elevated,
    get_for_read,
    get_for_write,
    require_roles,
    require_writable_org,
    scoped_query,
)
from medhub.core.identity import CallerIdentity
from medhub.core.validation import require_reason
from medhub.db.enums import (
    AuditAction,
    PaymentMethod,
    PaymentStatus,
    ROLES_CAN_APPROVE,
    ResourceKind,
)
from medhub.db.models import InvoiceCounter, Payment, ServiceRequest
from medhub.services import audit_service, transition_service
from medhub.services.audit_service import AuditEntry

logger = logging.getLogger(__name__)

RESOURCE_TYPE = ResourceKind.PAYMENT.value
INVOICE_PREFIX = "INV"


def next_invoice_number(db: Session, on_date: date | None = None) -> str:
    """
    Allocate the next invoice number for a day (INV-YYYYMMDD-NNNN).

    Locks the day's counter row where the backend supports it; the caller's
    commit publishes the increment together with the payment.
    """
    on_date = on_date or datetime.now(timezone.utc).date()
    counter = (
        db.query(InvoiceCounter)
        .filter(InvoiceCounter.counter_date == on_date)
        .with_for_update()
        .first()
    )
    if counter is None:
        counter = InvoiceCounter(counter_date=on_date, last_value=0)
        db.add(counter)
    counter.last_value += 1
    db.flush()
    return f"{INVOICE_PREFIX}-{on_date:%Y%m%d}-{counter.last_value:04d}"


def create_payment(
    db: Session,
    caller: CallerIdentity,
    amount: Decimal,
    method: PaymentMethod,
    service_request_id: UUID | None = None,
    currency: str = "VND",
    notes: str | None = None,
) -> Payment:
    """
    Record a pending payment for the caller's organization (owner/admin).

    Raises:
        ForbiddenError: Member role
        InvalidInputError: Non-positive amount
        NotFoundError: service_request_id not in the caller's organization
    """
    require_writable_org(db, caller)
    require_roles(db, caller, ROLES_CAN_APPROVE)
    amount = Decimal(str(amount))
    if amount <= 0:
        raise InvalidInputError(
            "Số tiền phải lớn hơn 0",
            "Amount must be greater than zero",
            {"field": "amount"},
        )
    if service_request_id:
        get_for_read(db, ServiceRequest, service_request_id, caller)

    payment = Payment(
        organization_id=caller.organization_id,
        service_request_id=service_request_id,
        invoice_number=next_invoice_number(db),
        amount=amount,
        currency=currency.upper(),
        method=PaymentMethod(method).value,
        status=PaymentStatus.PENDING.value,
        notes=notes,
        created_by_user_id=caller.user_id,
    )
    db.add(payment)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=payment.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.PAYMENT_CREATED,
            resource_type=RESOURCE_TYPE,
            resource_id=payment.id,
            new_values={
                "invoice_number": payment.invoice_number,
                "amount": amount,
                "method": payment.method,
                "status": payment.status,
            },
        ),
    )
    db.commit()
    db.refresh(payment)
    return payment


def get_payment(db: Session, caller: CallerIdentity, payment_id: UUID) -> Payment:
    return get_for_read(db, Payment, payment_id, caller)


def list_payments(db: Session, caller: CallerIdentity) -> list[Payment]:
    return scoped_query(db, Payment, caller).order_by(Payment.created_at.desc()).all()


def update_payment_status(
    db: Session, caller: CallerIdentity, payment_id: UUID, new_status: PaymentStatus
) -> Payment:
    """
    Settle a pending payment (completed / failed / refunded).

    Raises:
        ForbiddenError: Member role or cross-tenant
        InvalidTransitionError: Payment already settled
    """
    payment = get_for_write(db, Payment, payment_id, caller)
    require_roles(db, caller, ROLES_CAN_APPROVE)

    target = PaymentStatus(new_status)
    changes = {}
    if target == PaymentStatus.COMPLETED:
        changes["paid_at"] = datetime.now(timezone.utc)

    transition_service.apply_transition(
        db,
        kind=ResourceKind.PAYMENT,
        resource=payment,
        target_status=target.value,
        actor_user_id=caller.user_id,
        action=AuditAction.PAYMENT_STATUS_UPDATED,
        changes=changes,
    )
    db.commit()
    db.refresh(payment)
    return payment


def refund_payment(
    db: Session, caller: CallerIdentity, payment_id: UUID, reason: str
) -> Payment:
    """
    Platform admin void of a completed payment.

    Completed payments are terminal in the payment table; this override is
    the only way out and is audited as payment.refunded.

    Raises:
        ForbiddenError: Caller is not a platform admin
        InvalidInputError: Reason too short
        InvalidTransitionError: Payment is not completed
    """
    reason = require_reason(reason)
    payment = get_elevated(db, Payment, payment_id, caller)
    if payment.status != PaymentStatus.COMPLETED.value:
        raise InvalidTransitionError(
            RESOURCE_TYPE, payment.status, PaymentStatus.REFUNDED.value
        )

    void_note = f"[VOIDED] {reason}"
    before = {"status": payment.status, "notes": payment.notes}
    payment.status = PaymentStatus.REFUNDED.value
    payment.notes = f"{payment.notes}\n{void_note}" if payment.notes else void_note
    db.flush()

    audit_service.record_change(
        db,
        organization_id=payment.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.PAYMENT_REFUNDED,
        resource_type=RESOURCE_TYPE,
        resource_id=payment.id,
        before=before,
        after={"status": payment.status, "notes": payment.notes},
        context={"reason": reason},
    )
    db.commit()
    db.refresh(payment)
    logger.info("Payment %s voided by platform admin", payment.id)
    return payment

