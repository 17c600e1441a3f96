"""Pydantic schemas for API request/response models."""

from medhub.schemas.admin import (
    AutomationRuleStatus,
    AutomationRunRead,
    CertificationCreate,
    CertificationRead,
    OrgOnboard,
    OrgRead,
    ProviderRead,
    ReasonRequest,
)
from medhub.schemas.audit import AuditLogListResponse, AuditLogRead
from medhub.schemas.dispute import (
    DisputeArbitrate,
    DisputeCreate,
    DisputeEscalate,
    DisputeRead,
    DisputeResolve,
    DisputeStatusChange,
    ProviderReassign,
)
from medhub.schemas.equipment import (
    ConsumableCreate,
    ConsumableRead,
    EquipmentCreate,
    EquipmentRead,
    EquipmentStatusChange,
    FailureReportCreate,
    FailureReportRead,
    MaintenanceCreate,
    MaintenanceRead,
    StockAdjustment,
)
from medhub.schemas.membership import MemberAdd, MemberRead, MemberRoleChange
from medhub.schemas.payment import PaymentCreate, PaymentRead, PaymentRefund, PaymentStatusChange
from medhub.schemas.service_request import (
    QuoteCreate,
    QuoteRead,
    QuoteReject,
    ServiceRequestCancel,
    ServiceRequestCreate,
    ServiceRequestRead,
    ServiceRequestStatusChange,
)
from medhub.schemas.support import TicketCreate, TicketRead, TicketStatusChange

__all__ = [
    # Admin
    "OrgOnboard",
    "OrgRead",
    "ReasonRequest",
    "ProviderRead",
    "CertificationCreate",
    "CertificationRead",
    "AutomationRunRead",
    "AutomationRuleStatus",
    # Audit
    "AuditLogRead",
    "AuditLogListResponse",
    # Disputes
    "DisputeCreate",
    "DisputeRead",
    "DisputeStatusChange",
    "DisputeEscalate",
    "DisputeResolve",
    "DisputeArbitrate",
    "ProviderReassign",
    # Equipment
    "EquipmentCreate",
    "EquipmentRead",
    "EquipmentStatusChange",
    "FailureReportCreate",
    "FailureReportRead",
    "MaintenanceCreate",
    "MaintenanceRead",
    "ConsumableCreate",
    "ConsumableRead",
    "StockAdjustment",
    # Memberships
    "MemberAdd",
    "MemberRead",
    "MemberRoleChange",
    # Payments
    "PaymentCreate",
    "PaymentRead",
    "PaymentStatusChange",
    "PaymentRefund",
    # Service requests
    "ServiceRequestCreate",
    "ServiceRequestRead",
    "ServiceRequestStatusChange",
    "ServiceRequestCancel",
    "QuoteCreate",
    "QuoteRead",
    "QuoteReject",
    # Support
    "TicketCreate",
    "TicketRead",
    "TicketStatusChange",
]
