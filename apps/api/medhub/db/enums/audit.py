"""Audit and compliance enums."""

from enum import Enum


class AuditAction(str, Enum):
    """
    Documented action strings written to the audit trail.

    Groups:
    - <resource>.statusUpdated: Routine table-checked transitions
    - <resource>.<verb>: Creation and domain-specific mutations
    - platform_admin.* / admin.*: Elevated-privilege operations
    """

    # Equipment
    EQUIPMENT_CREATED = "equipment.created"
    EQUIPMENT_STATUS_UPDATED = "equipment.statusUpdated"
    EQUIPMENT_FAILURE_REPORTED = "equipment.failureReported"
    MAINTENANCE_SCHEDULED = "maintenance.scheduled"
    CONSUMABLE_CREATED = "consumable.created"
    CONSUMABLE_STOCK_ADJUSTED = "consumable.stockAdjusted"

    # Service requests
    SERVICE_REQUEST_CREATED = "serviceRequest.created"
    SERVICE_REQUEST_STATUS_UPDATED = "serviceRequest.statusUpdated"
    SERVICE_REQUEST_CANCELLED = "serviceRequest.cancelled"

    # Quotes
    QUOTE_SUBMITTED = "quote.submitted"
    QUOTE_ACCEPTED = "quote.accepted"
    QUOTE_REJECTED = "quote.rejected"

    # Disputes
    DISPUTE_CREATED = "dispute.created"
    DISPUTE_STATUS_UPDATED = "dispute.statusUpdated"
    DISPUTE_ESCALATED = "dispute.escalated"
    DISPUTE_RESOLVED = "dispute.resolved"

    # Support tickets
    SUPPORT_TICKET_CREATED = "supportTicket.created"
    SUPPORT_TICKET_STATUS_UPDATED = "supportTicket.statusUpdated"
    SUPPORT_TICKET_CLOSED = "supportTicket.closed"  # Platform admin override

    # Payments
    PAYMENT_CREATED = "payment.created"
    PAYMENT_STATUS_UPDATED = "payment.statusUpdated"
    PAYMENT_REFUNDED = "payment.refunded"  # Platform admin void

    # Memberships
    MEMBERSHIP_ADDED = "membership.added"
    MEMBERSHIP_ROLE_CHANGED = "membership.roleChanged"
    MEMBERSHIP_REMOVED = "membership.removed"

    # Platform administration
    ORGANIZATION_ONBOARDED = "platform_admin.organization_onboarded"
    ORGANIZATION_SUSPENDED = "platform_admin.organization_suspended"
    ORGANIZATION_REACTIVATED = "platform_admin.organization_reactivated"
    PROVIDER_APPROVED = "admin.provider.approved"
    PROVIDER_REJECTED = "admin.provider.rejected"
    PROVIDER_SUSPENDED = "admin.provider.suspended"
    PROVIDER_REACTIVATED = "admin.provider.reactivated"
    CERTIFICATION_VERIFIED = "admin.provider.certification_verified"
    DISPUTE_ARBITRATED = "admin.dispute.arbitrated"
    PROVIDER_REASSIGNED = "admin.serviceRequest.providerReassigned"
