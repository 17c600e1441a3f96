"""Enum definitions for application constants."""

from medhub.db.enums.audit import AuditAction
from medhub.db.enums.auth import (
    PlatformRole,
    ROLES_CAN_APPROVE,
    ROLES_CAN_MANAGE_MEMBERS,
    Role,
)
from medhub.db.enums.automation import AutomationRule, AutomationRunStatus
from medhub.db.enums.disputes import DisputeResolution, DisputeStatus, DisputeType
from medhub.db.enums.equipment import (
    EquipmentStatus,
    FailureReportStatus,
    FailureUrgency,
    MaintenanceStatus,
    MaintenanceType,
    URGENCIES_MARK_DAMAGED,
)
from medhub.db.enums.organizations import OrganizationStatus, OrganizationType
from medhub.db.enums.payments import PaymentMethod, PaymentStatus
from medhub.db.enums.providers import (
    CertificationStatus,
    ProviderStatus,
    VerificationStatus,
)
from medhub.db.enums.resources import ResourceKind
from medhub.db.enums.service_requests import (
    PROVIDER_SETTABLE_STATUSES,
    QuoteStatus,
    STALLED_REQUEST_STATUSES,
    ServiceRequestPriority,
    ServiceRequestStatus,
)
from medhub.db.enums.support import TicketPriority, TicketStatus

__all__ = [
    "AuditAction",
    "AutomationRule",
    "AutomationRunStatus",
    "CertificationStatus",
    "DisputeResolution",
    "DisputeStatus",
    "DisputeType",
    "EquipmentStatus",
    "FailureReportStatus",
    "FailureUrgency",
    "MaintenanceStatus",
    "MaintenanceType",
    "OrganizationStatus",
    "OrganizationType",
    "PROVIDER_SETTABLE_STATUSES",
    "PaymentMethod",
    "PaymentStatus",
    "PlatformRole",
    "ProviderStatus",
    "QuoteStatus",
    "ROLES_CAN_APPROVE",
    "ROLES_CAN_MANAGE_MEMBERS",
    "ResourceKind",
    "Role",
    "STALLED_REQUEST_STATUSES",
    "ServiceRequestPriority",
    "ServiceRequestStatus",
    "TicketPriority",
    "TicketStatus",
    "URGENCIES_MARK_DAMAGED",
    "VerificationStatus",
]
