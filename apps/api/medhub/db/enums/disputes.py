"""Dispute enums."""

from enum import Enum


class DisputeStatus(str, Enum):
    OPEN = "open"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CLOSED = "closed"
    ESCALATED = "escalated"


class DisputeType(str, Enum):
    QUALITY = "quality"
    PRICING = "pricing"
    TIMELINE = "timeline"
    OTHER = "other"


class DisputeResolution(str, Enum):
    """Platform arbitration outcome for an escalated dispute."""

    REFUND = "refund"
    PARTIAL_REFUND = "partial_refund"
    DISMISS = "dismiss"
    RE_ASSIGN = "re_assign"
