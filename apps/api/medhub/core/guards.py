"""Authorization gate: identity guards, tenant scoping and role checks.

Tenant isolation is asymmetric on purpose:
- reads of another tenant's row behave as if the row does not exist (NOT_FOUND)
- writes to another tenant's row raise FORBIDDEN

Platform admins bypass the tenant filter only through ``get_elevated``,
which logs every access.
"""

import logging
from typing import Iterable, TypeVar
from uuid import UUID

from sqlalchemy.orm import Query, Session

from medhub.core import identity
from medhub.core.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from medhub.core.identity import CallerIdentity, Credential
from medhub.core.policies import get_policy, is_approval_transition
from medhub.core.structured_logging import build_log_context
from medhub.db.enums import OrganizationStatus, PlatformRole, ResourceKind, Role
from medhub.db.models import Membership, Organization

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

# Suspended tenants keep read access but cannot mutate anything
WRITABLE_ORG_STATUSES = frozenset({
    OrganizationStatus.TRIAL.value,
    OrganizationStatus.ACTIVE.value,
})


# =============================================================================
# Identity guards
# =============================================================================

def require_org_auth(db: Session, credential: Credential | None) -> CallerIdentity:
    """
    Require an authenticated caller scoped to an organization.

    Raises:
        UnauthenticatedError: No credential
        NoActiveOrganizationError: No organization could be resolved
    """
    return identity.resolve(db, credential)


def require_platform_admin(db: Session, credential: Credential | None) -> CallerIdentity:
    """
    Require the platform admin role.

    The organization is optional here: platform admins often have no
    membership of their own.

    Raises:
        UnauthenticatedError: No credential
        ForbiddenError: Resolved platform role is not platform_admin
    """
    if credential is None:
        raise UnauthenticatedError()

    platform_role = identity.resolve_platform_role(db, credential)
    if platform_role != PlatformRole.PLATFORM_ADMIN.value:
        raise ForbiddenError(
            "Chỉ quản trị viên nền tảng mới được thực hiện thao tác này",
            "Only platform administrators can perform this action",
            reason=ForbiddenError.REASON_PLATFORM_ROLE,
        )

    resolution = identity.resolve_organization(credential, identity.membership_lookup(db))
    return CallerIdentity(
        user_id=resolution.user_id or identity.resolve_user_id(db, credential),
        organization_id=resolution.organization_id,
        platform_role=platform_role,
    )


def get_membership(db: Session, organization_id: UUID, user_id: UUID) -> Membership | None:
    return (
        db.query(Membership)
        .filter(
            Membership.organization_id == organization_id,
            Membership.user_id == user_id,
        )
        .first()
    )


def require_membership(db: Session, organization_id: UUID, user_id: UUID) -> Membership:
    membership = get_membership(db, organization_id, user_id)
    if not membership:
        raise ForbiddenError(
            "Bạn không phải thành viên của tổ chức này",
            "You are not a member of this organization",
            reason=ForbiddenError.REASON_NOT_MEMBER,
        )
    return membership


def require_roles(
    db: Session, caller: CallerIdentity, allowed_roles: Iterable[Role]
) -> Membership:
    """Require the caller's membership role in their own organization."""
    membership = require_membership(db, caller.organization_id, caller.user_id)
    if membership.role not in {role.value for role in allowed_roles}:
        raise ForbiddenError(
            "Vai trò của bạn không đủ quyền",
            "Your role does not permit this action",
            reason=ForbiddenError.REASON_INSUFFICIENT_ROLE,
            details={"role": membership.role},
        )
    return membership


# =============================================================================
# Approval-class transitions
# =============================================================================

def require_role_for_transition(
    db: Session,
    kind: ResourceKind | str,
    resource,
    target_status: str,
    caller: CallerIdentity,
    *,
    organization_id: UUID | None = None,
    created_by_user_id: UUID | None = None,
) -> None:
    """
    Enforce self-action prevention and the role gate for approval transitions.

    Non-approval transitions pass through. For approval transitions the
    self-action check runs first, so a creator always gets ``self_action``
    regardless of role. ``organization_id`` / ``created_by_user_id`` default
    to the resource's own fields; callers approving on behalf of a parent
    resource (e.g. accepting a quote on a request) pass the parent's values.

    Raises:
        ForbiddenError: reason self_action, not_member or insufficient_role
    """
    if not is_approval_transition(kind, resource.status, target_status):
        return

    owner_org_id = organization_id or resource.organization_id
    creator_id = created_by_user_id or getattr(resource, "created_by_user_id", None)

    if creator_id is not None and creator_id == caller.user_id:
        raise ForbiddenError(
            "Bạn không thể tự phê duyệt yêu cầu của chính mình",
            "You cannot approve your own request",
            reason=ForbiddenError.REASON_SELF_ACTION,
        )

    membership = require_membership(db, owner_org_id, caller.user_id)
    approver_roles = {role.value for role in get_policy(kind).approver_roles}
    if membership.role not in approver_roles:
        raise ForbiddenError(
            "Chỉ chủ sở hữu hoặc quản trị viên mới được phê duyệt",
            "Only owners or admins can approve",
            reason=ForbiddenError.REASON_INSUFFICIENT_ROLE,
            details={"role": membership.role},
        )


# =============================================================================
# Tenant scoping
# =============================================================================

def scoped_query(db: Session, model: type[ModelT], caller: CallerIdentity) -> Query:
    """Query filtered to the caller's organization."""
    return db.query(model).filter(model.organization_id == caller.organization_id)


def get_for_read(
    db: Session, model: type[ModelT], resource_id: UUID, caller: CallerIdentity
) -> ModelT:
    """
    Fetch a tenant-scoped row for reading.

    Rows from another tenant are reported as not found.
    """
    resource = db.get(model, resource_id)
    if resource is None or resource.organization_id != caller.organization_id:
        raise NotFoundError(model.__tablename__, resource_id)
    return resource


def require_writable_org(db: Session, caller: CallerIdentity) -> None:
    """
    Refuse mutations from a tenant that is not in trial or active status.

    Raises:
        ForbiddenError: reason organization_inactive
    """
    if caller.organization_id is None:
        return
    org = db.get(Organization, caller.organization_id)
    if org is not None and org.status not in WRITABLE_ORG_STATUSES:
        logger.warning(
            "Write blocked for inactive organization",
            extra=build_log_context(user_id=caller.user_id, org_id=org.id),
        )
        raise ForbiddenError(
            "Tổ chức của bạn đang bị tạm ngưng, chỉ được xem dữ liệu",
            "Your organization is suspended and has read-only access",
            reason=ForbiddenError.REASON_ORG_INACTIVE,
            details={"organization_status": org.status},
        )


def ensure_can_write(
    resource,
    caller: CallerIdentity,
    also_allowed_org_ids: Iterable[UUID | None] = (),
) -> None:
    """Raise FORBIDDEN unless the caller's organization owns the row."""
    allowed = {resource.organization_id, *[o for o in also_allowed_org_ids if o]}
    if caller.organization_id not in allowed:
        logger.warning(
            "Cross-tenant write blocked",
            extra=build_log_context(
                user_id=caller.user_id,
                org_id=caller.organization_id,
                resource_type=getattr(resource, "__tablename__", None),
                resource_id=resource.id,
            ),
        )
        raise ForbiddenError(
            "Bạn không có quyền chỉnh sửa tài nguyên này",
            "You cannot modify this resource",
            reason=ForbiddenError.REASON_CROSS_TENANT,
        )


def get_for_write(
    db: Session,
    model: type[ModelT],
    resource_id: UUID,
    caller: CallerIdentity,
    also_allowed_org_ids: Iterable[UUID | None] = (),
) -> ModelT:
    """
    Fetch a tenant-scoped row for writing.

    Missing rows raise NOT_FOUND; rows owned by another tenant raise FORBIDDEN,
    as does any write from a suspended organization.
    """
    resource = db.get(model, resource_id)
    if resource is None:
        raise NotFoundError(model.__tablename__, resource_id)
    ensure_can_write(resource, caller, also_allowed_org_ids)
    require_writable_org(db, caller)
    return resource


def get_elevated(
    db: Session, model: type[ModelT], resource_id: UUID, caller: CallerIdentity
) -> ModelT:
    """
    Platform admin access that bypasses the tenant filter.

    Callers must have passed ``require_platform_admin``. Every access is logged.
    """
    if not caller.is_platform_admin:
        raise ForbiddenError(reason=ForbiddenError.REASON_PLATFORM_ROLE)
    resource = db.get(model, resource_id)
    if resource is None:
        raise NotFoundError(model.__tablename__, resource_id)
    logger.info(
        "Elevated access to %s %s",
        model.__tablename__,
        resource_id,
        extra=build_log_context(
            user_id=caller.user_id,
            org_id=getattr(resource, "organization_id", None),
            resource_type=model.__tablename__,
            resource_id=resource_id,
        ),
    )
    return resource
