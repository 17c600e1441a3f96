"""Service request service - hospital requests for provider work.

Access rules:
- The requesting hospital organization owns the row.
- The organization behind ``assigned_provider_id`` may read it and may set
  execution statuses (in_progress, completed).
- Provider organizations may read requests still open for quoting.
Everyone else gets NOT_FOUND on reads and FORBIDDEN on writes.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from medhub.core.guards import (
    ensure_can_write,
    get_elevated,
    require_role_for_transition,
    require_writable_org,
    scoped_query,
)
from medhub.core.identity import CallerIdentity
from medhub.core.structured_logging import build_log_context
from medhub.core.validation import require_reason, require_text
from medhub.db.enums import (
    AuditAction,
    OrganizationType,
    PROVIDER_SETTABLE_STATUSES,
    ProviderStatus,
    ResourceKind,
    ServiceRequestPriority,
    ServiceRequestStatus,
)
from medhub.db.models import Equipment, Organization, Provider, ServiceRequest
from medhub.services import audit_service, transition_service
from medhub.services.audit_service import AuditEntry

logger = logging.getLogger(__name__)

RESOURCE_TYPE = ResourceKind.SERVICE_REQUEST.value

OPEN_FOR_QUOTING = {ServiceRequestStatus.PENDING.value, ServiceRequestStatus.QUOTED.value}


def get_provider_for_org(db: Session, org_id: UUID | None) -> Provider | None:
    if not org_id:
        return None
    return db.query(Provider).filter(Provider.organization_id == org_id).first()


def assigned_provider_org_id(db: Session, service_request: ServiceRequest) -> UUID | None:
    """Organization id of the assigned provider, if any."""
    if not service_request.assigned_provider_id:
        return None
    provider = db.get(Provider, service_request.assigned_provider_id)
    return provider.organization_id if provider else None


def _is_provider_org(db: Session, org_id: UUID | None) -> bool:
    org = db.get(Organization, org_id) if org_id else None
    return bool(org and org.org_type == OrganizationType.PROVIDER.value)


def create_service_request(
    db: Session,
    caller: CallerIdentity,
    title: str,
    description: str | None = None,
    priority: ServiceRequestPriority = ServiceRequestPriority.MEDIUM,
    equipment_id: UUID | None = None,
) -> ServiceRequest:
    """
    Create a pending service request in the caller's organization.

    Raises:
        InvalidInputError: Title too short
        NotFoundError: equipment_id not in the caller's organization
    """
    require_writable_org(db, caller)
    if equipment_id:
        equipment = db.get(Equipment, equipment_id)
        if equipment is None or equipment.organization_id != caller.organization_id:
            raise NotFoundError(ResourceKind.EQUIPMENT.value, equipment_id)

    service_request = ServiceRequest(
        organization_id=caller.organization_id,
        equipment_id=equipment_id,
        title=require_text(title, "title", 3),
        description=description,
        priority=ServiceRequestPriority(priority).value,
        status=ServiceRequestStatus.PENDING.value,
        created_by_user_id=caller.user_id,
    )
    db.add(service_request)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=service_request.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.SERVICE_REQUEST_CREATED,
            resource_type=RESOURCE_TYPE,
            resource_id=service_request.id,
            new_values={
                "title": service_request.title,
                "priority": service_request.priority,
                "status": service_request.status,
            },
        ),
    )
    db.commit()
    db.refresh(service_request)
    return service_request


def get_service_request(
    db: Session, caller: CallerIdentity, request_id: UUID
) -> ServiceRequest:
    """
    Read a service request.

    Raises:
        NotFoundError: Missing, or not visible to the caller's organization
    """
    service_request = db.get(ServiceRequest, request_id)
    if service_request is None:
        raise NotFoundError(RESOURCE_TYPE, request_id)
    if service_request.organization_id == caller.organization_id:
        return service_request
    if assigned_provider_org_id(db, service_request) == caller.organization_id:
        return service_request
    if service_request.status in OPEN_FOR_QUOTING and _is_provider_org(db, caller.organization_id):
        return service_request
    raise NotFoundError(RESOURCE_TYPE, request_id)


def list_service_requests(
    db: Session, caller: CallerIdentity, status: ServiceRequestStatus | None = None
) -> list[ServiceRequest]:
    """List the caller organization's own requests."""
    query = scoped_query(db, ServiceRequest, caller)
    if status:
        query = query.filter(ServiceRequest.status == ServiceRequestStatus(status).value)
    return query.order_by(ServiceRequest.created_at.desc()).all()


def list_assigned_requests(db: Session, caller: CallerIdentity) -> list[ServiceRequest]:
    """List requests assigned to the caller's provider account."""
    provider = get_provider_for_org(db, caller.organization_id)
    if not provider:
        return []
    return (
        db.query(ServiceRequest)
        .filter(ServiceRequest.assigned_provider_id == provider.id)
        .order_by(ServiceRequest.updated_at.desc())
        .all()
    )


def list_open_for_quoting(db: Session, caller: CallerIdentity) -> list[ServiceRequest]:
    """Requests a provider organization may quote on."""
    if not _is_provider_org(db, caller.organization_id):
        return []
    return (
        db.query(ServiceRequest)
        .filter(ServiceRequest.status.in_(OPEN_FOR_QUOTING))
        .order_by(ServiceRequest.created_at.desc())
        .all()
    )


def _get_for_write(db: Session, caller: CallerIdentity, request_id: UUID):
    service_request = db.get(ServiceRequest, request_id)
    if service_request is None:
        raise NotFoundError(RESOURCE_TYPE, request_id)
    provider_org_id = assigned_provider_org_id(db, service_request)
    ensure_can_write(service_request, caller, [provider_org_id])
    require_writable_org(db, caller)
    return service_request, provider_org_id


def update_service_request_status(
    db: Session,
    caller: CallerIdentity,
    request_id: UUID,
    new_status: ServiceRequestStatus,
) -> ServiceRequest:
    """
    Move a service request along its lifecycle.

    Order of checks: tenant write access, provider status restriction,
    self-action prevention and role gate, then the transition table.

    Raises:
        ForbiddenError: Cross-tenant, self-approval or insufficient role
        InvalidTransitionError: Not allowed by the service request table
    """
    target = ServiceRequestStatus(new_status)
    service_request, provider_org_id = _get_for_write(db, caller, request_id)

    acting_as_provider = (
        caller.organization_id == provider_org_id
        and caller.organization_id != service_request.organization_id
    )
    if acting_as_provider and target not in PROVIDER_SETTABLE_STATUSES:
        raise ForbiddenError(
            "Nhà cung cấp chỉ được cập nhật trạng thái thực hiện",
            "Providers can only update execution statuses",
            reason=ForbiddenError.REASON_INSUFFICIENT_ROLE,
        )

    require_role_for_transition(
        db, ResourceKind.SERVICE_REQUEST, service_request, target.value, caller
    )
    transition_service.apply_transition(
        db,
        kind=ResourceKind.SERVICE_REQUEST,
        resource=service_request,
        target_status=target.value,
        actor_user_id=caller.user_id,
        action=AuditAction.SERVICE_REQUEST_STATUS_UPDATED,
    )
    db.commit()
    db.refresh(service_request)
    return service_request


def cancel_service_request(
    db: Session, caller: CallerIdentity, request_id: UUID, reason: str | None = None
) -> ServiceRequest:
    """
    Cancel a request that has not started execution (hospital only).

    Raises:
        ForbiddenError: Caller is not the requesting hospital
        InvalidTransitionError: Request is past the cancellable states
    """
    service_request, _ = _get_for_write(db, caller, request_id)
    if caller.organization_id != service_request.organization_id:
        raise ForbiddenError(
            "Chỉ bệnh viện yêu cầu mới được hủy",
            "Only the requesting hospital can cancel",
            reason=ForbiddenError.REASON_CROSS_TENANT,
        )
    reason_text = (reason or "").strip() or None
    if reason_text is not None and len(reason_text) > 1000:
        raise InvalidInputError(
            "Lý do quá dài",
            "Reason is too long",
            {"field": "reason", "max_length": 1000},
        )

    transition_service.apply_transition(
        db,
        kind=ResourceKind.SERVICE_REQUEST,
        resource=service_request,
        target_status=ServiceRequestStatus.CANCELLED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.SERVICE_REQUEST_CANCELLED,
        changes={"cancellation_reason": reason_text},
    )
    db.commit()
    db.refresh(service_request)
    return service_request


def reassign_provider(
    db: Session,
    caller: CallerIdentity,
    request_id: UUID,
    new_provider_id: UUID,
    reason: str,
) -> ServiceRequest:
    """
    Platform admin override: hand a service request to a different provider.

    Used after a dispute escalation when the assigned provider cannot finish
    the work. The request status is left unchanged.

    Raises:
        ForbiddenError: Caller is not a platform admin
        NotFoundError: Request or provider missing
        InvalidInputError: Reason too short, provider inactive or already assigned,
            request cancelled
    """
    reason = require_reason(reason)
    service_request = get_elevated(db, ServiceRequest, request_id, caller)
    if service_request.status == ServiceRequestStatus.CANCELLED.value:
        raise InvalidInputError(
            "Không thể phân công lại yêu cầu đã hủy",
            "Cannot reassign a cancelled request",
            {"current_status": service_request.status},
        )

    provider = db.get(Provider, new_provider_id)
    if provider is None:
        raise NotFoundError(ResourceKind.PROVIDER.value, new_provider_id)
    if provider.status != ProviderStatus.ACTIVE.value:
        raise InvalidInputError(
            "Nhà cung cấp mới không ở trạng thái hoạt động",
            "The new provider is not active",
            {"provider_status": provider.status},
        )
    if provider.id == service_request.assigned_provider_id:
        raise InvalidInputError(
            "Nhà cung cấp này đã được phân công",
            "This provider is already assigned",
            {"field": "provider_id"},
        )

    before = {"assigned_provider_id": service_request.assigned_provider_id}
    service_request.assigned_provider_id = provider.id
    db.flush()

    audit_service.record_change(
        db,
        organization_id=service_request.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.PROVIDER_REASSIGNED,
        resource_type=RESOURCE_TYPE,
        resource_id=service_request.id,
        before=before,
        after={"assigned_provider_id": service_request.assigned_provider_id},
        context={"reason": reason},
    )
    db.commit()
    db.refresh(service_request)
    logger.info(
        "Service request %s reassigned to provider %s",
        service_request.id,
        provider.id,
        extra=build_log_context(
            user_id=caller.user_id,
            org_id=service_request.organization_id,
            resource_type=RESOURCE_TYPE,
            resource_id=service_request.id,
            action=AuditAction.PROVIDER_REASSIGNED.value,
        ),
    )
    return service_request
