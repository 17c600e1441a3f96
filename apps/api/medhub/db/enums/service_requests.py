"""Service request and quote enums."""

from enum import Enum


class ServiceRequestStatus(str, Enum):
    """
    Hospital service request lifecycle.

    pending -> quoted -> accepted -> in_progress -> completed
    (cancelled from the early states, disputed from execution states)
    """

    PENDING = "pending"
    QUOTED = "quoted"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


# Statuses that are still waiting on someone to act
STALLED_REQUEST_STATUSES = {
    ServiceRequestStatus.PENDING,
    ServiceRequestStatus.QUOTED,
    ServiceRequestStatus.ACCEPTED,
    ServiceRequestStatus.IN_PROGRESS,
}

# Execution statuses an assigned provider organization may set
PROVIDER_SETTABLE_STATUSES = {
    ServiceRequestStatus.IN_PROGRESS,
    ServiceRequestStatus.COMPLETED,
}


class ServiceRequestPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class QuoteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
