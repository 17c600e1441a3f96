"""Automation rule enums."""

from enum import Enum


class AutomationRule(str, Enum):
    CHECK_OVERDUE_REQUESTS = "checkOverdueRequests"
    CHECK_MAINTENANCE_DUE = "checkMaintenanceDue"
    CHECK_STOCK_LEVELS = "checkStockLevels"
    CHECK_CERTIFICATION_EXPIRY = "checkCertificationExpiry"


class AutomationRunStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
