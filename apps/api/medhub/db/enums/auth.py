"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    Organization membership roles with increasing privilege levels.

    - MEMBER: Day-to-day staff, can create and work items
    - ADMIN: Approves requests, manages members
    - OWNER: Full control of the organization, including other admins
    """

    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"


class PlatformRole(str, Enum):
    """Privilege levels above organization membership."""

    PLATFORM_ADMIN = "platform_admin"
    PLATFORM_SUPPORT = "platform_support"


# Roles allowed to perform approval-class transitions
ROLES_CAN_APPROVE = {Role.OWNER, Role.ADMIN}

# Roles allowed to invite, remove and re-role members
ROLES_CAN_MANAGE_MEMBERS = {Role.OWNER, Role.ADMIN}
