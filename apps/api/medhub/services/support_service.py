"""Support ticket service - tenant tickets and the platform admin close override."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import InvalidInputError
from medhub.core.guards import (
    get_elevated,
    get_for_read,
    get_for_write,
    require_writable_org,
    scoped_query,
)
from medhub.core.identity import CallerIdentity
from medhub.core.structured_logging import build_log_context
from medhub.core.validation import require_text
from medhub.db.enums import AuditAction, ResourceKind, TicketPriority, TicketStatus
from medhub.db.models import SupportTicket
from medhub.services import audit_service, transition_service
from medhub.services.audit_service import AuditEntry

logger = logging.getLogger(__name__)

RESOURCE_TYPE = ResourceKind.SUPPORT_TICKET.value


def create_ticket(
    db: Session,
    caller: CallerIdentity,
    subject: str,
    description: str,
    priority: TicketPriority = TicketPriority.MEDIUM,
) -> SupportTicket:
    require_writable_org(db, caller)
    ticket = SupportTicket(
        organization_id=caller.organization_id,
        subject=require_text(subject, "subject", 3),
        description=require_text(description, "description", 10),
        priority=TicketPriority(priority).value,
        status=TicketStatus.OPEN.value,
        created_by_user_id=caller.user_id,
    )
    db.add(ticket)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=ticket.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.SUPPORT_TICKET_CREATED,
            resource_type=RESOURCE_TYPE,
            resource_id=ticket.id,
            new_values={
                "subject": ticket.subject,
                "priority": ticket.priority,
                "status": ticket.status,
            },
        ),
    )
    db.commit()
    db.refresh(ticket)
    return ticket


def get_ticket(db: Session, caller: CallerIdentity, ticket_id: UUID) -> SupportTicket:
    return get_for_read(db, SupportTicket, ticket_id, caller)


def list_tickets(
    db: Session, caller: CallerIdentity, status: TicketStatus | None = None
) -> list[SupportTicket]:
    query = scoped_query(db, SupportTicket, caller)
    if status:
        query = query.filter(SupportTicket.status == TicketStatus(status).value)
    return query.order_by(SupportTicket.created_at.desc()).all()


def list_all_tickets(
    db: Session, status: TicketStatus | None = None, limit: int = 100
) -> list[SupportTicket]:
    """Cross-tenant ticket queue for platform admins."""
    query = db.query(SupportTicket)
    if status:
        query = query.filter(SupportTicket.status == TicketStatus(status).value)
    return query.order_by(SupportTicket.created_at.desc()).limit(limit).all()


def update_ticket_status(
    db: Session, caller: CallerIdentity, ticket_id: UUID, new_status: TicketStatus
) -> SupportTicket:
    """
    Routine table-checked ticket transition.

    Raises:
        NotFoundError / ForbiddenError: Missing or cross-tenant
        InvalidTransitionError: Not allowed by the ticket table
    """
    ticket = get_for_write(db, SupportTicket, ticket_id, caller)
    transition_service.apply_transition(
        db,
        kind=ResourceKind.SUPPORT_TICKET,
        resource=ticket,
        target_status=TicketStatus(new_status).value,
        actor_user_id=caller.user_id,
        action=AuditAction.SUPPORT_TICKET_STATUS_UPDATED,
    )
    db.commit()
    db.refresh(ticket)
    return ticket


def admin_close_ticket(
    db: Session, caller: CallerIdentity, ticket_id: UUID
) -> SupportTicket:
    """
    Platform admin override: close a ticket from any open status.

    Bypasses the ticket transition table on purpose and writes its own audit
    action (supportTicket.closed) so overrides stay distinguishable from
    routine transitions.

    Raises:
        ForbiddenError: Caller is not a platform admin
        InvalidInputError: Ticket already closed
    """
    ticket = get_elevated(db, SupportTicket, ticket_id, caller)
    if ticket.status == TicketStatus.CLOSED.value:
        raise InvalidInputError(
            "Phiếu hỗ trợ đã được đóng",
            "Ticket is already closed",
            {"reason": "ALREADY_CLOSED", "status": ticket.status},
        )

    before = {"status": ticket.status}
    ticket.status = TicketStatus.CLOSED.value
    db.flush()

    audit_service.record_change(
        db,
        organization_id=ticket.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.SUPPORT_TICKET_CLOSED,
        resource_type=RESOURCE_TYPE,
        resource_id=ticket.id,
        before=before,
        after={"status": ticket.status},
        context={"override": True},
    )
    db.commit()
    db.refresh(ticket)
    logger.info(
        "Support ticket closed by platform admin",
        extra=build_log_context(
            user_id=caller.user_id,
            org_id=ticket.organization_id,
            resource_type=RESOURCE_TYPE,
            resource_id=ticket.id,
            action=AuditAction.SUPPORT_TICKET_CLOSED.value,
        ),
    )
    return ticket
