"""Provider service - provider accounts, certifications and platform review."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import ForbiddenError, InvalidInputError
from medhub.core.guards import get_elevated, require_writable_org
from medhub.core.identity import CallerIdentity
from medhub.core.validation import require_reason, require_text
from medhub.db.enums import (
    AuditAction,
    CertificationStatus,
    ProviderStatus,
    ResourceKind,
    VerificationStatus,
)
from medhub.db.models import Certification, Provider
from medhub.db.types import ensure_utc
from medhub.services import audit_service, transition_service
from medhub.services.service_request_service import get_provider_for_org

logger = logging.getLogger(__name__)

RESOURCE_TYPE = ResourceKind.PROVIDER.value

REVIEWABLE_VERIFICATION = {VerificationStatus.PENDING.value, VerificationStatus.IN_REVIEW.value}


def list_providers(
    db: Session, status: ProviderStatus | None = None, limit: int = 100
) -> list[Provider]:
    """Cross-tenant provider list for platform admins."""
    query = db.query(Provider)
    if status:
        query = query.filter(Provider.status == ProviderStatus(status).value)
    return query.order_by(Provider.created_at.desc()).limit(limit).all()


def _require_reviewable(provider: Provider) -> None:
    if provider.verification_status not in REVIEWABLE_VERIFICATION:
        raise InvalidInputError(
            "Nhà cung cấp đã được xét duyệt",
            "Provider has already been reviewed",
            {"verification_status": provider.verification_status},
        )


def approve_provider(db: Session, caller: CallerIdentity, provider_id: UUID) -> Provider:
    """
    Approve a provider awaiting verification (platform admin).

    Raises:
        InvalidInputError: Already reviewed
        InvalidTransitionError: Provider not pending_verification
    """
    provider = get_elevated(db, Provider, provider_id, caller)
    _require_reviewable(provider)
    transition_service.apply_transition(
        db,
        kind=ResourceKind.PROVIDER,
        resource=provider,
        target_status=ProviderStatus.ACTIVE.value,
        actor_user_id=caller.user_id,
        action=AuditAction.PROVIDER_APPROVED,
        changes={
            "verification_status": VerificationStatus.VERIFIED.value,
            "verified_at": datetime.now(timezone.utc),
        },
    )
    db.commit()
    db.refresh(provider)
    return provider


def reject_provider(
    db: Session, caller: CallerIdentity, provider_id: UUID, reason: str
) -> Provider:
    """
    Reject a provider's verification (platform admin).

    The account status is unchanged; only the review outcome is recorded.
    """
    reason = require_reason(reason)
    provider = get_elevated(db, Provider, provider_id, caller)
    _require_reviewable(provider)

    before = {
        "verification_status": provider.verification_status,
        "rejection_reason": provider.rejection_reason,
    }
    provider.verification_status = VerificationStatus.REJECTED.value
    provider.rejection_reason = reason
    db.flush()

    audit_service.record_change(
        db,
        organization_id=provider.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.PROVIDER_REJECTED,
        resource_type=RESOURCE_TYPE,
        resource_id=provider.id,
        before=before,
        after={
            "verification_status": provider.verification_status,
            "rejection_reason": reason,
        },
    )
    db.commit()
    db.refresh(provider)
    return provider


def suspend_provider(
    db: Session, caller: CallerIdentity, provider_id: UUID, reason: str
) -> Provider:
    reason = require_reason(reason)
    provider = get_elevated(db, Provider, provider_id, caller)
    transition_service.apply_transition(
        db,
        kind=ResourceKind.PROVIDER,
        resource=provider,
        target_status=ProviderStatus.SUSPENDED.value,
        actor_user_id=caller.user_id,
        action=AuditAction.PROVIDER_SUSPENDED,
        changes={"suspension_reason": reason},
    )
    db.commit()
    db.refresh(provider)
    return provider


def reactivate_provider(db: Session, caller: CallerIdentity, provider_id: UUID) -> Provider:
    provider = get_elevated(db, Provider, provider_id, caller)
    transition_service.apply_transition(
        db,
        kind=ResourceKind.PROVIDER,
        resource=provider,
        target_status=ProviderStatus.ACTIVE.value,
        actor_user_id=caller.user_id,
        action=AuditAction.PROVIDER_REACTIVATED,
        changes={"suspension_reason": None},
    )
    db.commit()
    db.refresh(provider)
    return provider


# =============================================================================
# Certifications
# =============================================================================

def add_certification(
    db: Session,
    caller: CallerIdentity,
    name: str,
    issuing_body: str | None = None,
    issued_at: datetime | None = None,
    expires_at: datetime | None = None,
) -> Certification:
    """Add a certification to the caller's own provider account."""
    require_writable_org(db, caller)
    provider = get_provider_for_org(db, caller.organization_id)
    if not provider:
        raise ForbiddenError(
            "Chỉ nhà cung cấp mới có chứng chỉ",
            "Only provider organizations can add certifications",
            reason=ForbiddenError.REASON_NOT_MEMBER,
        )
    certification = Certification(
        provider_id=provider.id,
        name=require_text(name, "name", 2),
        issuing_body=issuing_body,
        issued_at=ensure_utc(issued_at),
        expires_at=ensure_utc(expires_at),
        status=CertificationStatus.PENDING.value,
    )
    db.add(certification)
    db.commit()
    db.refresh(certification)
    return certification


def verify_certification(
    db: Session, caller: CallerIdentity, certification_id: UUID
) -> Certification:
    """
    Mark a certification verified (platform admin).

    Raises:
        InvalidInputError: Already verified
    """
    certification = get_elevated(db, Certification, certification_id, caller)
    if certification.status == CertificationStatus.VERIFIED.value:
        raise InvalidInputError(
            "Chứng chỉ đã được xác minh",
            "Certification is already verified",
            {"status": certification.status},
        )
    provider = db.get(Provider, certification.provider_id)

    before = {"status": certification.status}
    certification.status = CertificationStatus.VERIFIED.value
    certification.verified_at = datetime.now(timezone.utc)
    db.flush()

    audit_service.record_change(
        db,
        organization_id=provider.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.CERTIFICATION_VERIFIED,
        resource_type="certification",
        resource_id=certification.id,
        before=before,
        after={"status": certification.status},
    )
    db.commit()
    db.refresh(certification)
    return certification
