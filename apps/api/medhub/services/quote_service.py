"""Quote service - provider offers and hospital acceptance.

Accepting a quote is an approval-class action on the parent request: the
user who created the service request may never accept a quote on it, and
only hospital owners/admins may accept.
"""

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from medhub.core.guards import (
    ensure_can_write,
    require_role_for_transition,
    require_roles,
    require_writable_org,
)
from medhub.core.identity import CallerIdentity
from medhub.core.state_machine import assert_transition
from medhub.core.validation import require_reason
from medhub.db.enums import (
    AuditAction,
    ProviderStatus,
    QuoteStatus,
    ROLES_CAN_APPROVE,
    ResourceKind,
    ServiceRequestStatus,
)
from medhub.db.models import Quote, ServiceRequest
from medhub.db.types import ensure_utc
from medhub.services import audit_service, transition_service
from medhub.services.audit_service import AuditEntry
from medhub.services.service_request_service import (
    OPEN_FOR_QUOTING,
    get_provider_for_org,
    get_service_request,
)

logger = logging.getLogger(__name__)

RESOURCE_TYPE = ResourceKind.QUOTE.value


def submit_quote(
    db: Session,
    caller: CallerIdentity,
    request_id: UUID,
    amount: Decimal,
    currency: str = "VND",
    notes: str | None = None,
    valid_until: datetime | None = None,
) -> Quote:
    """
    Submit a quote from the caller's provider account.

    A pending request moves to ``quoted`` as a secondary transition.

    Raises:
        ForbiddenError: Caller has no active provider account
        NotFoundError: Request not visible to the caller
        InvalidInputError: Bad amount, request closed for quoting, duplicate quote
    """
    require_writable_org(db, caller)
    provider = get_provider_for_org(db, caller.organization_id)
    if not provider or provider.status != ProviderStatus.ACTIVE.value:
        raise ForbiddenError(
            "Chỉ nhà cung cấp đang hoạt động mới được báo giá",
            "Only active providers can submit quotes",
            reason=ForbiddenError.REASON_INSUFFICIENT_ROLE,
        )

    service_request = get_service_request(db, caller, request_id)
    if service_request.status not in OPEN_FOR_QUOTING:
        raise InvalidInputError(
            "Yêu cầu không còn nhận báo giá",
            "Service request is no longer open for quotes",
            {"status": service_request.status},
        )

    amount = Decimal(str(amount))
    if amount <= 0:
        raise InvalidInputError(
            "Số tiền phải lớn hơn 0",
            "Amount must be greater than zero",
            {"field": "amount"},
        )

    existing = (
        db.query(Quote)
        .filter(
            Quote.service_request_id == service_request.id,
            Quote.provider_id == provider.id,
            Quote.status == QuoteStatus.PENDING.value,
        )
        .first()
    )
    if existing:
        raise InvalidInputError(
            "Bạn đã có báo giá đang chờ cho yêu cầu này",
            "You already have a pending quote for this request",
            {"quote_id": str(existing.id)},
        )

    quote = Quote(
        service_request_id=service_request.id,
        provider_id=provider.id,
        amount=amount,
        currency=currency.upper(),
        notes=notes,
        valid_until=ensure_utc(valid_until),
        status=QuoteStatus.PENDING.value,
        created_by_user_id=caller.user_id,
    )
    db.add(quote)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=service_request.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.QUOTE_SUBMITTED,
            resource_type=RESOURCE_TYPE,
            resource_id=quote.id,
            new_values={
                "service_request_id": service_request.id,
                "provider_id": provider.id,
                "amount": amount,
                "status": quote.status,
            },
        ),
    )

    transition_service.apply_secondary_transition(
        db,
        kind=ResourceKind.SERVICE_REQUEST,
        resource=service_request,
        target_status=ServiceRequestStatus.QUOTED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.SERVICE_REQUEST_STATUS_UPDATED,
    )

    db.commit()
    db.refresh(quote)
    return quote


def _get_quote_for_hospital(db: Session, caller: CallerIdentity, quote_id: UUID):
    quote = db.get(Quote, quote_id)
    if quote is None:
        raise NotFoundError(RESOURCE_TYPE, quote_id)
    service_request = db.get(ServiceRequest, quote.service_request_id)
    ensure_can_write(service_request, caller)
    require_writable_org(db, caller)
    return quote, service_request


def accept_quote(db: Session, caller: CallerIdentity, quote_id: UUID) -> Quote:
    """
    Accept a quote for the caller's hospital.

    Steps: tenant check, self-action prevention, role gate, then in one
    transaction: quote -> accepted, sibling pending quotes -> rejected,
    request -> accepted with the provider assigned.

    Raises:
        ForbiddenError: Cross-tenant, request creator, or member role
        InvalidTransitionError: Quote not pending or request not quoted
    """
    quote, service_request = _get_quote_for_hospital(db, caller, quote_id)

    require_role_for_transition(
        db,
        ResourceKind.QUOTE,
        quote,
        QuoteStatus.ACCEPTED.value,
        caller,
        organization_id=service_request.organization_id,
        created_by_user_id=service_request.created_by_user_id,
    )
    assert_transition(ResourceKind.QUOTE, quote.status, QuoteStatus.ACCEPTED.value)
    assert_transition(
        ResourceKind.SERVICE_REQUEST,
        service_request.status,
        ServiceRequestStatus.ACCEPTED.value,
    )

    transition_service.apply_transition(
        db,
        kind=ResourceKind.QUOTE,
        resource=quote,
        target_status=QuoteStatus.ACCEPTED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.QUOTE_ACCEPTED,
        audit_organization_id=service_request.organization_id,
    )

    siblings = (
        db.query(Quote)
        .filter(
            Quote.service_request_id == service_request.id,
            Quote.id != quote.id,
            Quote.status == QuoteStatus.PENDING.value,
        )
        .all()
    )
    for sibling in siblings:
        transition_service.apply_transition(
            db,
            kind=ResourceKind.QUOTE,
            resource=sibling,
            target_status=QuoteStatus.REJECTED.value,
            actor_user_id=caller.user_id,
            action=AuditAction.QUOTE_REJECTED,
            audit_organization_id=service_request.organization_id,
        )

    transition_service.apply_transition(
        db,
        kind=ResourceKind.SERVICE_REQUEST,
        resource=service_request,
        target_status=ServiceRequestStatus.ACCEPTED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.SERVICE_REQUEST_STATUS_UPDATED,
        changes={"assigned_provider_id": quote.provider_id},
    )

    db.commit()
    db.refresh(quote)
    logger.info("Quote %s accepted (%d siblings rejected)", quote.id, len(siblings))
    return quote


def reject_quote(db: Session, caller: CallerIdentity, quote_id: UUID, reason: str) -> Quote:
    """
    Reject a single pending quote (hospital owner/admin).

    Raises:
        ForbiddenError: Cross-tenant or member role
        InvalidInputError: Reason too short
        InvalidTransitionError: Quote not pending
    """
    reason = require_reason(reason)
    quote, service_request = _get_quote_for_hospital(db, caller, quote_id)
    require_roles(db, caller, ROLES_CAN_APPROVE)

    transition_service.apply_transition(
        db,
        kind=ResourceKind.QUOTE,
        resource=quote,
        target_status=QuoteStatus.REJECTED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.QUOTE_REJECTED,
        changes={"rejection_reason": reason},
        audit_organization_id=service_request.organization_id,
    )
    db.commit()
    db.refresh(quote)
    return quote


def list_quotes_for_request(
    db: Session, caller: CallerIdentity, request_id: UUID
) -> list[Quote]:
    """
    Quotes visible to the caller on a request.

    The requesting hospital sees every quote; a provider sees only its own.
    """
    service_request = get_service_request(db, caller, request_id)
    query = db.query(Quote).filter(Quote.service_request_id == service_request.id)
    if service_request.organization_id != caller.organization_id:
        provider = get_provider_for_org(db, caller.organization_id)
        if not provider:
            return []
        query = query.filter(Quote.provider_id == provider.id)
    return query.order_by(Quote.created_at.asc()).all()
