"""Organization enums."""

from enum import Enum


class OrganizationType(str, Enum):
    HOSPITAL = "hospital"
    PROVIDER = "provider"


class OrganizationStatus(str, Enum):
    """Tenant status; changed only by platform admin actions."""

    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"
