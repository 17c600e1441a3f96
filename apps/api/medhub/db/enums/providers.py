"""Provider account enums."""

from enum import Enum


class ProviderStatus(str, Enum):
    PENDING_VERIFICATION = "pending_verification"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    VERIFIED = "verified"
    REJECTED = "rejected"


class CertificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
