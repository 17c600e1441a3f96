"""SQLAlchemy ORM models."""

from medhub.db.models.audit import AuditLog
from medhub.db.models.auth import Membership, Organization, User
from medhub.db.models.automation import AutomationRun
from medhub.db.models.disputes import Dispute
from medhub.db.models.equipment import Consumable, Equipment, FailureReport, MaintenanceRecord
from medhub.db.models.payments import InvoiceCounter, Payment
from medhub.db.models.providers import Certification, Provider
from medhub.db.models.service_requests import Quote, ServiceRequest
from medhub.db.models.support import SupportTicket

__all__ = [
    "AuditLog",
    "AutomationRun",
    "Certification",
    "Consumable",
    "Dispute",
    "Equipment",
    "FailureReport",
    "InvoiceCounter",
    "MaintenanceRecord",
    "Membership",
    "Organization",
    "Payment",
    "Provider",
    "Quote",
    "ServiceRequest",
    "SupportTicket",
    "User",
]
