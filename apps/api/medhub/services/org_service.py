"""Organization service - tenant onboarding and platform admin status changes."""

import logging
import re
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from medhub.core.guards import get_elevated
from medhub.core.identity import CallerIdentity
from medhub.core.validation import require_reason, require_text
from medhub.db.enums import (
    AuditAction,
    OrganizationStatus,
    OrganizationType,
    Role,
)
from medhub.db.models import Membership, Organization, Provider, User
from medhub.services import audit_service
from medhub.services.audit_service import AuditEntry

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")
RESOURCE_TYPE = "organization"


def get_org_by_id(db: Session, org_id: UUID) -> Organization | None:
    """Get organization by ID."""
    return db.query(Organization).filter(Organization.id == org_id).first()


def get_org_by_slug(db: Session, slug: str) -> Organization | None:
    """Get organization by slug."""
    return db.query(Organization).filter(Organization.slug == slug.lower()).first()


def normalize_slug(slug: str) -> str:
    """Lowercase and validate a slug."""
    normalized = (slug or "").strip().lower()
    if not SLUG_PATTERN.match(normalized):
        raise InvalidInputError(
            "Slug chỉ gồm chữ thường, số và dấu gạch",
            "Slug must be lowercase alphanumeric with optional hyphens/underscores",
            {"field": "slug"},
        )
    return normalized


def get_or_create_user(db: Session, email: str, display_name: str | None = None) -> User:
    """Find a user by email (case-insensitive) or create one."""
    normalized = email.strip().lower()
    user = db.query(User).filter(User.email == normalized).first()
    if user:
        return user
    user = User(email=normalized, display_name=display_name or normalized.split("@")[0])
    db.add(user)
    db.flush()
    return user


def onboard_organization(
    db: Session,
    caller: CallerIdentity,
    name: str,
    slug: str,
    org_type: OrganizationType,
    owner_email: str,
    owner_name: str | None = None,
) -> Organization:
    """
    Create a tenant in trial status with its first owner.

    Provider organizations also get a provider account awaiting verification.

    Raises:
        ForbiddenError: Caller is not a platform admin
        InvalidInputError: Bad name/slug or slug already taken
    """
    if not caller.is_platform_admin:
        raise ForbiddenError(reason=ForbiddenError.REASON_PLATFORM_ROLE)
    name = require_text(name, "name", 2)
    slug = normalize_slug(slug)
    if get_org_by_slug(db, slug):
        raise InvalidInputError(
            f"Slug '{slug}' đã được sử dụng",
            f"Slug '{slug}' is already taken",
            {"field": "slug"},
        )

    org = Organization(
        name=name,
        slug=slug,
        org_type=OrganizationType(org_type).value,
        status=OrganizationStatus.TRIAL.value,
    )
    db.add(org)
    db.flush()

    owner = get_or_create_user(db, owner_email, owner_name)
    db.add(Membership(organization_id=org.id, user_id=owner.id, role=Role.OWNER.value))

    if org.org_type == OrganizationType.PROVIDER.value:
        db.add(
            Provider(
                organization_id=org.id,
                company_name=name,
                contact_email=owner.email,
                created_by_user_id=owner.id,
            )
        )
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=org.id,
            actor_user_id=caller.user_id,
            action=AuditAction.ORGANIZATION_ONBOARDED,
            resource_type=RESOURCE_TYPE,
            resource_id=org.id,
            new_values={
                "name": org.name,
                "slug": org.slug,
                "org_type": org.org_type,
                "status": org.status,
                "owner_user_id": owner.id,
            },
        ),
    )
    db.commit()
    db.refresh(org)
    logger.info("Organization onboarded: %s", org.id)
    return org


def suspend_organization(
    db: Session, caller: CallerIdentity, org_id: UUID, reason: str
) -> Organization:
    """
    Suspend a tenant (platform admin).

    Raises:
        InvalidInputError: Reason too short or already suspended
    """
    reason = require_reason(reason)
    org = get_elevated(db, Organization, org_id, caller)
    if org.status == OrganizationStatus.SUSPENDED.value:
        raise InvalidInputError(
            "Tổ chức đã bị tạm ngưng",
            "Organization is already suspended",
            {"status": org.status},
        )

    before = {"status": org.status, "suspended_reason": org.suspended_reason}
    org.status = OrganizationStatus.SUSPENDED.value
    org.suspended_reason = reason
    db.flush()

    audit_service.record_change(
        db,
        organization_id=org.id,
        actor_user_id=caller.user_id,
        action=AuditAction.ORGANIZATION_SUSPENDED,
        resource_type=RESOURCE_TYPE,
        resource_id=org.id,
        before=before,
        after={"status": org.status, "suspended_reason": reason},
    )
    db.commit()
    db.refresh(org)
    return org


def reactivate_organization(db: Session, caller: CallerIdentity, org_id: UUID) -> Organization:
    """
    Reactivate a suspended tenant (platform admin).

    Raises:
        InvalidInputError: Organization is not suspended
    """
    org = get_elevated(db, Organization, org_id, caller)
    if org.status != OrganizationStatus.SUSPENDED.value:
        raise InvalidInputError(
            "Chỉ có thể kích hoạt lại tổ chức đang bị tạm ngưng",
            "Only suspended organizations can be reactivated",
            {"status": org.status},
        )

    before = {"status": org.status, "suspended_reason": org.suspended_reason}
    org.status = OrganizationStatus.ACTIVE.value
    org.suspended_reason = None
    db.flush()

    audit_service.record_change(
        db,
        organization_id=org.id,
        actor_user_id=caller.user_id,
        action=AuditAction.ORGANIZATION_REACTIVATED,
        resource_type=RESOURCE_TYPE,
        resource_id=org.id,
        before=before,
        after={"status": org.status, "suspended_reason": None},
    )
    db.commit()
    db.refresh(org)
    return org


def require_org(db: Session, org_id: UUID) -> Organization:
    org = get_org_by_id(db, org_id)
    if not org:
        raise NotFoundError(RESOURCE_TYPE, org_id)
    return org
