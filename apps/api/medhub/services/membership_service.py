"""Membership service - organization membership lookups and member management.

Management matrix (owner > admin > member):
- owner: manage anyone except themselves
- admin: manage members only (not other admins or owners)
- member: manage no one
Removing or demoting the last owner is always rejected.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import ForbiddenError, InvalidInputError
from medhub.core.guards import (
    get_for_write,
    require_membership,
    require_roles,
    require_writable_org,
    scoped_query,
)
from medhub.core.identity import CallerIdentity
from medhub.db.enums import AuditAction, ROLES_CAN_MANAGE_MEMBERS, Role
from medhub.db.models import Membership
from medhub.services import audit_service
from medhub.services.audit_service import AuditEntry
from medhub.services.org_service import get_or_create_user

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "membership"


def list_members(db: Session, caller: CallerIdentity) -> list[Membership]:
    """Members of the caller's organization, oldest first."""
    return (
        scoped_query(db, Membership, caller)
        .order_by(Membership.created_at.asc())
        .all()
    )


def get_membership_for_org(db: Session, org_id: UUID, user_id: UUID) -> Membership | None:
    """Get membership scoped to an organization."""
    return (
        db.query(Membership)
        .filter(
            Membership.organization_id == org_id,
            Membership.user_id == user_id,
        )
        .first()
    )


def can_manage_member(
    caller_role: str, target_role: str, caller_id: UUID, target_id: UUID
) -> bool:
    """Check the management matrix for a caller acting on a target member."""
    if caller_id == target_id:
        return False
    if caller_role == Role.OWNER.value:
        return True
    if caller_role == Role.ADMIN.value:
        return target_role == Role.MEMBER.value
    return False


def count_owners(db: Session, org_id: UUID) -> int:
    return (
        db.query(Membership)
        .filter(
            Membership.organization_id == org_id,
            Membership.role == Role.OWNER.value,
        )
        .count()
    )


def _forbid_manage() -> ForbiddenError:
    return ForbiddenError(
        "Bạn không có quyền quản lý thành viên này",
        "You cannot manage this member",
        reason=ForbiddenError.REASON_INSUFFICIENT_ROLE,
    )


def _guard_last_owner(db: Session, target: Membership) -> None:
    if target.role == Role.OWNER.value and count_owners(db, target.organization_id) <= 1:
        raise InvalidInputError(
            "Không thể xóa hoặc hạ quyền chủ sở hữu cuối cùng",
            "Cannot remove or demote the last owner",
            {"membership_id": str(target.id)},
        )


def add_member(
    db: Session,
    caller: CallerIdentity,
    email: str,
    role: Role,
    display_name: str | None = None,
) -> Membership:
    """
    Add a user to the caller's organization.

    Admins may only add plain members; owners may add any role.

    Raises:
        ForbiddenError: Caller cannot grant this role
        InvalidInputError: User is already a member
    """
    role = Role(role)
    actor = require_roles(db, caller, ROLES_CAN_MANAGE_MEMBERS)
    require_writable_org(db, caller)
    if actor.role != Role.OWNER.value and role != Role.MEMBER:
        raise _forbid_manage()

    user = get_or_create_user(db, email, display_name)
    if get_membership_for_org(db, caller.organization_id, user.id):
        raise InvalidInputError(
            "Người dùng đã là thành viên",
            "User is already a member of this organization",
            {"field": "email"},
        )

    membership = Membership(
        organization_id=caller.organization_id,
        user_id=user.id,
        role=role.value,
    )
    db.add(membership)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=caller.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.MEMBERSHIP_ADDED,
            resource_type=RESOURCE_TYPE,
            resource_id=membership.id,
            new_values={"user_id": user.id, "role": role.value},
        ),
    )
    db.commit()
    db.refresh(membership)
    return membership


def change_member_role(
    db: Session, caller: CallerIdentity, membership_id: UUID, new_role: Role
) -> Membership:
    """
    Change a member's role.

    Raises:
        ForbiddenError: Matrix does not allow it (or cross-tenant)
        InvalidInputError: Would demote the last owner
    """
    new_role = Role(new_role)
    target = get_for_write(db, Membership, membership_id, caller)
    actor = require_membership(db, caller.organization_id, caller.user_id)

    if not can_manage_member(actor.role, target.role, caller.user_id, target.user_id):
        raise _forbid_manage()
    if actor.role != Role.OWNER.value and new_role != Role.MEMBER:
        raise _forbid_manage()
    if target.role == new_role.value:
        return target
    _guard_last_owner(db, target)

    before = {"role": target.role}
    target.role = new_role.value
    db.flush()

    audit_service.record_change(
        db,
        organization_id=target.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.MEMBERSHIP_ROLE_CHANGED,
        resource_type=RESOURCE_TYPE,
        resource_id=target.id,
        before=before,
        after={"role": new_role.value},
    )
    db.commit()
    db.refresh(target)
    return target


def remove_member(db: Session, caller: CallerIdentity, membership_id: UUID) -> None:
    """
    Remove a member from the caller's organization.

    Raises:
        ForbiddenError: Matrix does not allow it (or cross-tenant)
        InvalidInputError: Would remove the last owner
    """
    target = get_for_write(db, Membership, membership_id, caller)
    actor = require_membership(db, caller.organization_id, caller.user_id)

    if not can_manage_member(actor.role, target.role, caller.user_id, target.user_id):
        raise _forbid_manage()
    _guard_last_owner(db, target)

    audit_service.record(
        db,
        AuditEntry(
            organization_id=target.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.MEMBERSHIP_REMOVED,
            resource_type=RESOURCE_TYPE,
            resource_id=target.id,
            previous_values={"user_id": target.user_id, "role": target.role},
        ),
    )
    db.delete(target)
    db.commit()
    logger.info("Membership %s removed", membership_id)
