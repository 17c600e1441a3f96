"""Caller identity resolution.

Turns decoded session claims into a ``CallerIdentity``: who is calling, on
behalf of which organization, with which platform role.

Resolution is split in two steps so the branch logic can be tested without a
database:

1. ``resolve_organization`` takes the credential plus an injected membership
   lookup and returns a tagged ``Resolution`` (FROM_CLAIM, FROM_LOOKUP or
   UNRESOLVED).
2. ``resolve`` wires the lookup to the database and converts an UNRESOLVED
   result into ``NoActiveOrganizationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import NoActiveOrganizationError, UnauthenticatedError
from medhub.db.enums import PlatformRole
from medhub.db.models import Membership, User


@dataclass(frozen=True)
class Credential:
    """Opaque caller credential after token verification."""

    subject: str
    organization_id: UUID | None = None
    email: str | None = None
    platform_role: str | None = None

    @classmethod
    def from_claims(cls, claims: Mapping | None) -> "Credential | None":
        """Build a credential from decoded JWT claims (None if no subject or a malformed org_id)."""
        if not claims or not claims.get("sub"):
            return None
        org_id = claims.get("org_id")
        try:
            organization_id = UUID(str(org_id)) if org_id else None
        except ValueError:
            return None
        return cls(
            subject=str(claims["sub"]),
            organization_id=organization_id,
            email=claims.get("email"),
            platform_role=claims.get("platform_role"),
        )


@dataclass(frozen=True)
class CallerIdentity:
    """Resolved caller. Never persisted."""

    user_id: UUID
    organization_id: UUID | None = None
    platform_role: str | None = None

    @property
    def is_platform_admin(self) -> bool:
        return self.platform_role == PlatformRole.PLATFORM_ADMIN.value


class ResolutionSource(str, Enum):
    FROM_CLAIM = "from_claim"
    FROM_LOOKUP = "from_lookup"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    """Tagged result of organization resolution."""

    source: ResolutionSource
    user_id: UUID | None = None
    organization_id: UUID | None = None


# (email) -> (user_id, organization_id) or None
MembershipLookup = Callable[[str], "tuple[UUID, UUID] | None"]


def _subject_uuid(subject: str) -> UUID | None:
    try:
        return UUID(subject)
    except ValueError:
        return None


def resolve_organization(credential: Credential, lookup: MembershipLookup) -> Resolution:
    """
    Resolve the caller's organization from a credential.

    Fast path: an embedded organization id is trusted as-is, no lookup.
    Otherwise the user is found by email and their membership is used.
    """
    if credential.organization_id is not None:
        return Resolution(
            source=ResolutionSource.FROM_CLAIM,
            user_id=_subject_uuid(credential.subject),
            organization_id=credential.organization_id,
        )

    if credential.email:
        found = lookup(credential.email)
        if found is not None:
            user_id, organization_id = found
            return Resolution(
                source=ResolutionSource.FROM_LOOKUP,
                user_id=user_id,
                organization_id=organization_id,
            )

    return Resolution(source=ResolutionSource.UNRESOLVED)


# =============================================================================
# Database-backed lookups
# =============================================================================

def _get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def membership_lookup(db: Session) -> MembershipLookup:
    """Build a lookup callable bound to a session."""

    def lookup(email: str) -> tuple[UUID, UUID] | None:
        user = _get_user_by_email(db, email)
        if not user:
            return None
        membership = (
            db.query(Membership)
            .filter(Membership.user_id == user.id)
            .order_by(Membership.created_at.asc())
            .first()
        )
        if not membership:
            return None
        return user.id, membership.organization_id

    return lookup


def resolve_platform_role(db: Session, credential: Credential) -> str | None:
    """
    Trust the embedded role claim; otherwise use the stored per-user role.

    The stored user is found by email, or by subject id when no email is
    present in the credential.
    """
    if credential.platform_role:
        return credential.platform_role

    user = None
    if credential.email:
        user = _get_user_by_email(db, credential.email)
    else:
        user_id = _subject_uuid(credential.subject)
        if user_id:
            user = db.get(User, user_id)
    return user.platform_role if user else None


def resolve_user_id(db: Session, credential: Credential) -> UUID:
    """Return the caller's user id, falling back to an email lookup."""
    user_id = _subject_uuid(credential.subject)
    if user_id:
        return user_id
    if credential.email:
        user = _get_user_by_email(db, credential.email)
        if user:
            return user.id
    raise UnauthenticatedError()


def resolve(db: Session, credential: Credential | None) -> CallerIdentity:
    """
    Resolve a credential into a caller identity with an organization.

    Raises:
        UnauthenticatedError: No credential at all
        NoActiveOrganizationError: No embedded org and no membership found
    """
    if credential is None:
        raise UnauthenticatedError()

    resolution = resolve_organization(credential, membership_lookup(db))
    if resolution.source == ResolutionSource.UNRESOLVED:
        raise NoActiveOrganizationError()

    user_id = resolution.user_id or resolve_user_id(db, credential)
    return CallerIdentity(
        user_id=user_id,
        organization_id=resolution.organization_id,
        platform_role=resolve_platform_role(db, credential),
    )
