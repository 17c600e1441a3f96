"""Tests for disputes on executed service requests."""

from decimal import Decimal

import pytest

from medhub.core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidTransitionError,
)
from medhub.core.state_machine import next_statuses
from medhub.db.enums import (
    AuditAction,
    DisputeResolution,
    DisputeStatus,
    DisputeType,
    ResourceKind,
    Role,
    ServiceRequestPriority,
    ServiceRequestStatus,
)
from medhub.db.models import AuditLog, ServiceRequest
from medhub.services import dispute_service

DESCRIPTION = "Kỹ thuật viên không hoàn thành việc thay thế linh kiện"


def _request(db, caller, status):
    service_request = ServiceRequest(
        organization_id=caller.organization_id,
        title="Sửa máy lọc máu",
        priority=ServiceRequestPriority.HIGH.value,
        status=status.value,
        created_by_user_id=caller.user_id,
    )
    db.add(service_request)
    db.commit()
    return service_request


@pytest.fixture
def dispute(db, hospital_member):
    service_request = _request(db, hospital_member, ServiceRequestStatus.COMPLETED)
    return dispute_service.create_dispute(
        db, hospital_member, service_request.id, DisputeType.QUALITY, DESCRIPTION
    )


def test_create_dispute(db, dispute):
    assert dispute.status == DisputeStatus.OPEN.value
    entry = db.query(AuditLog).filter(AuditLog.action == AuditAction.DISPUTE_CREATED.value).one()
    assert entry.new_values["dispute_type"] == "quality"


def test_dispute_does_not_move_the_request(db, dispute):
    service_request = db.get(ServiceRequest, dispute.service_request_id)
    assert service_request.status == ServiceRequestStatus.COMPLETED.value


def test_cannot_dispute_pending_request(db, hospital_member):
    service_request = _request(db, hospital_member, ServiceRequestStatus.PENDING)

    with pytest.raises(InvalidInputError) as exc_info:
        dispute_service.create_dispute(
            db, hospital_member, service_request.id, DisputeType.TIMELINE, DESCRIPTION
        )
    assert exc_info.value.details["current_status"] == "pending"


def test_other_tenant_cannot_dispute(db, hospital_member, other_hospital_owner):
    service_request = _request(db, hospital_member, ServiceRequestStatus.IN_PROGRESS)

    with pytest.raises(ForbiddenError):
        dispute_service.create_dispute(
            db, other_hospital_owner, service_request.id, DisputeType.PRICING, DESCRIPTION
        )


def test_resolve_requires_investigation_and_approver(
    db, make_user, caller_for, hospital_org, hospital_member, hospital_admin, dispute
):
    notes = "Nhà cung cấp đồng ý hoàn tiền một phần"

    with pytest.raises(InvalidTransitionError):
        dispute_service.resolve_dispute(db, hospital_admin, dispute.id, notes)

    dispute_service.update_dispute_status(
        db, hospital_member, dispute.id, DisputeStatus.INVESTIGATING
    )

    with pytest.raises(ForbiddenError) as exc_info:
        dispute_service.resolve_dispute(db, hospital_member, dispute.id, notes)
    assert exc_info.value.reason == ForbiddenError.REASON_SELF_ACTION

    other_member = caller_for(make_user(hospital_org, Role.MEMBER), hospital_org)
    with pytest.raises(ForbiddenError) as exc_info:
        dispute_service.resolve_dispute(db, other_member, dispute.id, notes)
    assert exc_info.value.reason == ForbiddenError.REASON_INSUFFICIENT_ROLE

    resolved = dispute_service.resolve_dispute(db, hospital_admin, dispute.id, notes)
    assert resolved.status == DisputeStatus.RESOLVED.value
    assert resolved.resolution_notes == notes
    assert resolved.resolved_at is not None


def test_status_update_cannot_resolve(db, hospital_admin, dispute):
    with pytest.raises(InvalidInputError):
        dispute_service.update_dispute_status(
            db, hospital_admin, dispute.id, DisputeStatus.RESOLVED
        )


def test_escalate_records_reason(db, hospital_member, dispute):
    escalated = dispute_service.escalate_dispute(
        db, hospital_member, dispute.id, "Nhà cung cấp không phản hồi sau 5 ngày"
    )

    assert escalated.status == DisputeStatus.ESCALATED.value
    entry = (
        db.query(AuditLog).filter(AuditLog.action == AuditAction.DISPUTE_ESCALATED.value).one()
    )
    assert entry.new_values["reason"] == "Nhà cung cấp không phản hồi sau 5 ngày"

    with pytest.raises(InvalidTransitionError):
        dispute_service.escalate_dispute(
            db, hospital_member, dispute.id, "Nhà cung cấp vẫn không phản hồi"
        )


def test_list_disputes_filters_by_status(db, hospital_member, other_hospital_owner, dispute):
    assert len(dispute_service.list_disputes(db, hospital_member, DisputeStatus.OPEN)) == 1
    assert dispute_service.list_disputes(db, hospital_member, DisputeStatus.CLOSED) == []
    assert dispute_service.list_disputes(db, other_hospital_owner) == []


@pytest.fixture
def escalated(db, hospital_member, dispute):
    return dispute_service.escalate_dispute(
        db, hospital_member, dispute.id, "Nhà cung cấp không phản hồi sau 5 ngày"
    )


def test_escalated_dispute_is_closed_to_tenants(db, hospital_admin, escalated):
    assert next_statuses(ResourceKind.DISPUTE, DisputeStatus.ESCALATED) == []

    with pytest.raises(InvalidTransitionError):
        dispute_service.resolve_dispute(
            db, hospital_admin, escalated.id, "Đã thống nhất với nhà cung cấp"
        )


def test_platform_admin_arbitrates_escalated_dispute(db, platform_admin, escalated):
    assert [d.id for d in dispute_service.list_escalated_disputes(db)] == [escalated.id]

    resolved = dispute_service.admin_resolve_dispute(
        db,
        platform_admin,
        escalated.id,
        DisputeResolution.PARTIAL_REFUND,
        "Hoàn 30% chi phí do chậm tiến độ",
        refund_amount=Decimal("1500000"),
    )

    assert resolved.status == DisputeStatus.RESOLVED.value
    assert resolved.resolved_at is not None
    assert resolved.resolution_notes == (
        "[resolution:partial_refund] | Hoàn 30% chi phí do chậm tiến độ"
        " | Refund amount: 1,500,000 VND"
    )
    entry = (
        db.query(AuditLog).filter(AuditLog.action == AuditAction.DISPUTE_ARBITRATED.value).one()
    )
    assert entry.organization_id == escalated.organization_id
    assert entry.actor_user_id == platform_admin.user_id
    assert entry.previous_values == {"status": "escalated"}
    assert entry.new_values["status"] == "resolved"
    assert entry.new_values["resolution"] == "partial_refund"
    assert entry.new_values["refund_amount"] == "1500000"
    assert (
        db.query(AuditLog).filter(AuditLog.action == AuditAction.DISPUTE_RESOLVED.value).count()
        == 0
    )
    assert dispute_service.list_escalated_disputes(db) == []


def test_arbitration_gates(db, platform_admin, hospital_owner, dispute, escalated):
    reason = "Nhà cung cấp đã hoàn thành đúng hợp đồng"

    with pytest.raises(ForbiddenError) as exc_info:
        dispute_service.admin_resolve_dispute(
            db, hospital_owner, escalated.id, DisputeResolution.DISMISS, reason
        )
    assert exc_info.value.reason == "platform_role_required"

    with pytest.raises(InvalidInputError):
        dispute_service.admin_resolve_dispute(
            db, platform_admin, escalated.id, DisputeResolution.DISMISS, "ngắn"
        )
    with pytest.raises(InvalidInputError):
        dispute_service.admin_resolve_dispute(
            db, platform_admin, escalated.id, DisputeResolution.PARTIAL_REFUND, reason
        )

    dismissed = dispute_service.admin_resolve_dispute(
        db, platform_admin, escalated.id, DisputeResolution.DISMISS, reason
    )
    assert dismissed.resolution_notes == f"[resolution:dismiss] | {reason}"

    with pytest.raises(InvalidTransitionError):
        dispute_service.admin_resolve_dispute(
            db, platform_admin, escalated.id, DisputeResolution.DISMISS, reason
        )


def test_arbitration_requires_escalation(db, platform_admin, dispute):
    with pytest.raises(InvalidTransitionError) as exc_info:
        dispute_service.admin_resolve_dispute(
            db,
            platform_admin,
            dispute.id,
            DisputeResolution.REFUND,
            "Hoàn tiền toàn bộ cho bệnh viện",
        )
    assert exc_info.value.details["current_status"] == "open"
