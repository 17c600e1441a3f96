"""Dispute service - hospital disputes against service execution."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import InvalidInputError, InvalidTransitionError
from medhub.core.guards import (
    get_elevated,
    get_for_read,
    get_for_write,
    require_role_for_transition,
    scoped_query,
)
from medhub.core.identity import CallerIdentity
from medhub.core.structured_logging import build_log_context
from medhub.core.validation import require_reason, require_text
from medhub.db.enums import (
    AuditAction,
    DisputeResolution,
    DisputeStatus,
    DisputeType,
    ResourceKind,
    ServiceRequestStatus,
)
from medhub.db.models import Dispute, ServiceRequest
from medhub.services import audit_service, transition_service
from medhub.services.audit_service import AuditEntry

logger = logging.getLogger(__name__)

RESOURCE_TYPE = ResourceKind.DISPUTE.value

DISPUTABLE_REQUEST_STATUSES = {
    ServiceRequestStatus.IN_PROGRESS.value,
    ServiceRequestStatus.COMPLETED.value,
}


def create_dispute(
    db: Session,
    caller: CallerIdentity,
    service_request_id: UUID,
    dispute_type: DisputeType,
    description: str,
) -> Dispute:
    """
    Open a dispute on one of the caller's service requests.

    Raises:
        NotFoundError / ForbiddenError: Request missing or cross-tenant
        InvalidInputError: Request not in progress/completed, description too short
    """
    service_request = get_for_write(db, ServiceRequest, service_request_id, caller)
    if service_request.status not in DISPUTABLE_REQUEST_STATUSES:
        raise InvalidInputError(
            'Chỉ có thể tạo tranh chấp cho yêu cầu "hoàn thành" hoặc "đang thực hiện"',
            'Disputes can only be raised for "completed" or "in_progress" requests',
            {"current_status": service_request.status},
        )

    dispute = Dispute(
        organization_id=service_request.organization_id,
        service_request_id=service_request.id,
        dispute_type=DisputeType(dispute_type).value,
        description=require_text(description, "description", 20),
        status=DisputeStatus.OPEN.value,
        created_by_user_id=caller.user_id,
    )
    db.add(dispute)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=dispute.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.DISPUTE_CREATED,
            resource_type=RESOURCE_TYPE,
            resource_id=dispute.id,
            new_values={
                "service_request_id": service_request.id,
                "dispute_type": dispute.dispute_type,
                "status": dispute.status,
            },
        ),
    )
    db.commit()
    db.refresh(dispute)
    return dispute


def get_dispute(db: Session, caller: CallerIdentity, dispute_id: UUID) -> Dispute:
    return get_for_read(db, Dispute, dispute_id, caller)


def list_disputes(
    db: Session, caller: CallerIdentity, status: DisputeStatus | None = None
) -> list[Dispute]:
    query = scoped_query(db, Dispute, caller)
    if status:
        query = query.filter(Dispute.status == DisputeStatus(status).value)
    return query.order_by(Dispute.created_at.desc()).all()


def update_dispute_status(
    db: Session, caller: CallerIdentity, dispute_id: UUID, new_status: DisputeStatus
) -> Dispute:
    """
    Routine table-checked status change.

    Resolution goes through ``resolve_dispute`` so the notes are captured.
    """
    target = DisputeStatus(new_status)
    if target == DisputeStatus.RESOLVED:
        raise InvalidInputError(
            "Dùng chức năng giải quyết tranh chấp để đóng với kết quả",
            "Use resolve to resolve a dispute",
            {"field": "status"},
        )
    dispute = get_for_write(db, Dispute, dispute_id, caller)
    transition_service.apply_transition(
        db,
        kind=ResourceKind.DISPUTE,
        resource=dispute,
        target_status=target.value,
        actor_user_id=caller.user_id,
        action=AuditAction.DISPUTE_STATUS_UPDATED,
    )
    db.commit()
    db.refresh(dispute)
    return dispute


def escalate_dispute(
    db: Session, caller: CallerIdentity, dispute_id: UUID, reason: str
) -> Dispute:
    """
    Escalate an open or investigating dispute to the platform team.

    Raises:
        InvalidInputError: Reason too short
        InvalidTransitionError: Dispute already closed out
    """
    reason = require_reason(reason)
    dispute = get_for_write(db, Dispute, dispute_id, caller)
    transition_service.apply_transition(
        db,
        kind=ResourceKind.DISPUTE,
        resource=dispute,
        target_status=DisputeStatus.ESCALATED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.DISPUTE_ESCALATED,
        audit_context={"reason": reason},
    )
    db.commit()
    db.refresh(dispute)
    return dispute


def resolve_dispute(
    db: Session, caller: CallerIdentity, dispute_id: UUID, resolution_notes: str
) -> Dispute:
    """
    Resolve a dispute under investigation (approval-class).

    The dispute's creator cannot resolve it; only owners/admins can.

    Raises:
        InvalidInputError: Notes too short
        ForbiddenError: Creator, member role, or cross-tenant
        InvalidTransitionError: Dispute not investigating
    """
    notes = require_reason(resolution_notes)
    dispute = get_for_write(db, Dispute, dispute_id, caller)
    require_role_for_transition(
        db, ResourceKind.DISPUTE, dispute, DisputeStatus.RESOLVED.value, caller
    )
    transition_service.apply_transition(
        db,
        kind=ResourceKind.DISPUTE,
        resource=dispute,
        target_status=DisputeStatus.RESOLVED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.DISPUTE_RESOLVED,
        changes={
            "resolution_notes": notes,
            "resolved_at": datetime.now(timezone.utc),
        },
    )
    db.commit()
    db.refresh(dispute)
    return dispute


# =============================================================================
# Platform arbitration
# =============================================================================

def list_escalated_disputes(db: Session) -> list[Dispute]:
    """Cross-tenant arbitration queue for platform admins."""
    return (
        db.query(Dispute)
        .filter(Dispute.status == DisputeStatus.ESCALATED.value)
        .order_by(Dispute.created_at.asc())
        .all()
    )


def admin_resolve_dispute(
    db: Session,
    caller: CallerIdentity,
    dispute_id: UUID,
    resolution: DisputeResolution,
    reason: str,
    refund_amount: Decimal | None = None,
) -> Dispute:
    """
    Platform admin override: arbitrate an escalated dispute.

    Escalated disputes are terminal in the tenant table; only this override
    moves them to ``resolved``. It writes admin.dispute.arbitrated rather than
    dispute.resolved.

    Raises:
        ForbiddenError: Caller is not a platform admin
        InvalidInputError: Reason too short, bad refund amount
        InvalidTransitionError: Dispute is not escalated
    """
    resolution = DisputeResolution(resolution)
    reason = require_reason(reason)
    if refund_amount is not None:
        refund_amount = Decimal(str(refund_amount))
        if refund_amount <= 0:
            raise InvalidInputError(
                "Số tiền hoàn phải lớn hơn 0",
                "Refund amount must be greater than zero",
                {"field": "refund_amount"},
            )
    if resolution == DisputeResolution.PARTIAL_REFUND and refund_amount is None:
        raise InvalidInputError(
            "Hoàn tiền một phần cần có số tiền hoàn",
            "Partial refunds require a refund amount",
            {"field": "refund_amount"},
        )

    dispute = get_elevated(db, Dispute, dispute_id, caller)
    if dispute.status != DisputeStatus.ESCALATED.value:
        raise InvalidTransitionError(
            RESOURCE_TYPE, dispute.status, DisputeStatus.RESOLVED.value
        )

    notes = [f"[resolution:{resolution.value}]", reason]
    if refund_amount is not None:
        notes.append(f"Refund amount: {refund_amount:,.0f} VND")

    before = {"status": dispute.status}
    dispute.status = DisputeStatus.RESOLVED.value
    dispute.resolution_notes = " | ".join(notes)
    dispute.resolved_at = datetime.now(timezone.utc)
    db.flush()

    audit_service.record_change(
        db,
        organization_id=dispute.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.DISPUTE_ARBITRATED,
        resource_type=RESOURCE_TYPE,
        resource_id=dispute.id,
        before=before,
        after={"status": dispute.status},
        context={
            "override": True,
            "resolution": resolution.value,
            "reason": reason,
            "refund_amount": refund_amount,
        },
    )
    db.commit()
    db.refresh(dispute)
    logger.info(
        "Dispute arbitrated by platform admin",
        extra=build_log_context(
            user_id=caller.user_id,
            org_id=dispute.organization_id,
            resource_type=RESOURCE_TYPE,
            resource_id=dispute.id,
            action=AuditAction.DISPUTE_ARBITRATED.value,
        ),
    )
    return dispute
