"""Equipment, maintenance and consumable enums."""

from enum import Enum


class EquipmentStatus(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"
    DAMAGED = "damaged"
    RETIRED = "retired"


class MaintenanceStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaintenanceType(str, Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    INSPECTION = "inspection"


class FailureUrgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Urgencies that take the equipment out of service immediately
URGENCIES_MARK_DAMAGED = {FailureUrgency.HIGH, FailureUrgency.CRITICAL}


class FailureReportStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"
