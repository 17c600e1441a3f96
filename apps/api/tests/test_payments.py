"""Tests for payments, invoice numbering and platform admin voids."""

from datetime import date
from decimal import Decimal

import pytest

from medhub.core.errors import ForbiddenError, InvalidInputError, InvalidTransitionError
from medhub.db.enums import AuditAction, PaymentMethod, PaymentStatus
from medhub.db.models import AuditLog
from medhub.services import payment_service


@pytest.fixture
def payment(db, hospital_admin):
    return payment_service.create_payment(
        db, hospital_admin, Decimal("2500000"), PaymentMethod.BANK_TRANSFER
    )


def test_invoice_numbers_are_sequential_per_day(db):
    day = date(2024, 3, 15)

    first = payment_service.next_invoice_number(db, day)
    second = payment_service.next_invoice_number(db, day)
    next_day = payment_service.next_invoice_number(db, date(2024, 3, 16))

    assert first == "INV-20240315-0001"
    assert second == "INV-20240315-0002"
    assert next_day == "INV-20240316-0001"


def test_payments_get_distinct_invoice_numbers(db, hospital_admin, payment):
    other = payment_service.create_payment(db, hospital_admin, Decimal("10"), PaymentMethod.CASH)

    assert payment.invoice_number != other.invoice_number
    assert payment.invoice_number.endswith("-0001")
    assert other.invoice_number.endswith("-0002")
    assert payment.status == PaymentStatus.PENDING.value


def test_member_cannot_create_payment(db, hospital_member):
    with pytest.raises(ForbiddenError):
        payment_service.create_payment(db, hospital_member, Decimal("10"), PaymentMethod.CARD)


def test_amount_must_be_positive(db, hospital_admin):
    with pytest.raises(InvalidInputError):
        payment_service.create_payment(db, hospital_admin, Decimal("-5"), PaymentMethod.CARD)


def test_complete_sets_paid_at(db, hospital_admin, payment):
    completed = payment_service.update_payment_status(
        db, hospital_admin, payment.id, PaymentStatus.COMPLETED
    )

    assert completed.status == PaymentStatus.COMPLETED.value
    assert completed.paid_at is not None

    with pytest.raises(InvalidTransitionError):
        payment_service.update_payment_status(
            db, hospital_admin, payment.id, PaymentStatus.FAILED
        )


def test_refund_override(db, hospital_admin, platform_admin, payment):
    with pytest.raises(InvalidTransitionError):
        payment_service.refund_payment(
            db, platform_admin, payment.id, "Khách hàng yêu cầu hoàn tiền"
        )

    payment_service.update_payment_status(db, hospital_admin, payment.id, PaymentStatus.COMPLETED)
    refunded = payment_service.refund_payment(
        db, platform_admin, payment.id, "Khách hàng yêu cầu hoàn tiền"
    )

    assert refunded.status == PaymentStatus.REFUNDED.value
    assert refunded.notes == "[VOIDED] Khách hàng yêu cầu hoàn tiền"
    entry = db.query(AuditLog).filter(AuditLog.action == AuditAction.PAYMENT_REFUNDED.value).one()
    assert entry.organization_id == payment.organization_id
    assert entry.previous_values["status"] == "completed"
    assert entry.new_values["reason"] == "Khách hàng yêu cầu hoàn tiền"


def test_refund_requires_platform_admin(db, hospital_owner, payment):
    with pytest.raises(ForbiddenError):
        payment_service.refund_payment(db, hospital_owner, payment.id, "Hoàn tiền do nhầm lẫn")


def test_other_tenant_cannot_see_payment(db, other_hospital_owner, payment):
    assert payment_service.list_payments(db, other_hospital_owner) == []
