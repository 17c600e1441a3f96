"""Tests for organization onboarding, suspension and member management."""

import uuid

import pytest

from medhub.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from medhub.db.enums import (
    AuditAction,
    EquipmentStatus,
    OrganizationStatus,
    OrganizationType,
    ProviderStatus,
    Role,
    VerificationStatus,
)
from medhub.db.models import AuditLog, Membership, Provider
from medhub.services import (
    equipment_service,
    membership_service,
    org_service,
    support_service,
)


def test_onboard_hospital(db, platform_admin):
    org = org_service.onboard_organization(
        db,
        platform_admin,
        name="Bệnh viện Chợ Rẫy",
        slug="Cho-Ray",
        org_type=OrganizationType.HOSPITAL,
        owner_email="Owner@ChoRay.vn",
    )

    assert org.slug == "cho-ray"
    assert org.status == OrganizationStatus.TRIAL.value
    owner = db.query(Membership).filter(Membership.organization_id == org.id).one()
    assert owner.role == Role.OWNER.value
    assert owner.user.email == "owner@choray.vn"
    assert db.query(Provider).count() == 0

    entry = db.query(AuditLog).filter(AuditLog.organization_id == org.id).one()
    assert entry.action == AuditAction.ORGANIZATION_ONBOARDED.value
    assert entry.actor_user_id == platform_admin.user_id


def test_onboard_provider_creates_pending_account(db, platform_admin):
    org = org_service.onboard_organization(
        db,
        platform_admin,
        name="Công ty Thiết bị Y tế Sài Gòn",
        slug="tbyt-sg",
        org_type=OrganizationType.PROVIDER,
        owner_email="ceo@tbyt.vn",
    )

    provider = db.query(Provider).filter(Provider.organization_id == org.id).one()
    assert provider.status == ProviderStatus.PENDING_VERIFICATION.value
    assert provider.verification_status == VerificationStatus.PENDING.value


def test_onboard_rejects_duplicate_and_bad_slugs(db, platform_admin, hospital_org):
    with pytest.raises(InvalidInputError):
        org_service.onboard_organization(
            db, platform_admin, "Trùng", hospital_org.slug, OrganizationType.HOSPITAL, "a@b.vn"
        )
    with pytest.raises(InvalidInputError):
        org_service.onboard_organization(
            db, platform_admin, "Sai slug", "has space", OrganizationType.HOSPITAL, "a@b.vn"
        )


def test_onboard_requires_platform_admin(db, hospital_owner):
    with pytest.raises(ForbiddenError):
        org_service.onboard_organization(
            db, hospital_owner, "Bệnh viện Mới", "bv-moi", OrganizationType.HOSPITAL, "x@y.vn"
        )


def test_suspend_and_reactivate(db, platform_admin, hospital_org):
    with pytest.raises(InvalidInputError):
        org_service.suspend_organization(db, platform_admin, hospital_org.id, "ngắn")

    suspended = org_service.suspend_organization(
        db, platform_admin, hospital_org.id, "Chưa thanh toán phí 3 tháng"
    )
    assert suspended.status == OrganizationStatus.SUSPENDED.value

    with pytest.raises(InvalidInputError):
        org_service.suspend_organization(
            db, platform_admin, hospital_org.id, "Chưa thanh toán phí 3 tháng"
        )

    reactivated = org_service.reactivate_organization(db, platform_admin, hospital_org.id)
    assert reactivated.status == OrganizationStatus.ACTIVE.value
    assert reactivated.suspended_reason is None

    with pytest.raises(InvalidInputError):
        org_service.reactivate_organization(db, platform_admin, hospital_org.id)


def test_suspended_organization_is_read_only(db, platform_admin, hospital_org, hospital_owner):
    equipment = equipment_service.create_equipment(db, hospital_owner, "Máy siêu âm")
    org_service.suspend_organization(
        db, platform_admin, hospital_org.id, "Chưa thanh toán phí 3 tháng"
    )

    with pytest.raises(ForbiddenError) as exc_info:
        equipment_service.create_equipment(db, hospital_owner, "Máy X-quang")
    assert exc_info.value.reason == "organization_inactive"
    assert exc_info.value.details["organization_status"] == "suspended"

    with pytest.raises(ForbiddenError):
        equipment_service.update_equipment_status(
            db, hospital_owner, equipment.id, EquipmentStatus.IN_USE
        )
    with pytest.raises(ForbiddenError):
        support_service.create_ticket(
            db, hospital_owner, "Mở khóa tài khoản", "Chúng tôi đã thanh toán đủ phí"
        )

    assert equipment_service.get_equipment(db, hospital_owner, equipment.id).status == (
        EquipmentStatus.AVAILABLE.value
    )

    org_service.reactivate_organization(db, platform_admin, hospital_org.id)
    moved = equipment_service.update_equipment_status(
        db, hospital_owner, equipment.id, EquipmentStatus.IN_USE
    )
    assert moved.status == EquipmentStatus.IN_USE.value


def test_require_org_missing(db):
    with pytest.raises(NotFoundError):
        org_service.require_org(db, uuid.uuid4())


# =============================================================================
# Members
# =============================================================================

def test_owner_adds_admin(db, hospital_owner):
    membership = membership_service.add_member(db, hospital_owner, "new.admin@bv.vn", Role.ADMIN)

    assert membership.role == Role.ADMIN.value
    assert len(membership_service.list_members(db, hospital_owner)) == 2


def test_admin_can_only_add_members(db, hospital_admin):
    with pytest.raises(ForbiddenError):
        membership_service.add_member(db, hospital_admin, "x@bv.vn", Role.OWNER)

    membership = membership_service.add_member(db, hospital_admin, "x@bv.vn", Role.MEMBER)
    assert membership.role == Role.MEMBER.value

    with pytest.raises(InvalidInputError):
        membership_service.add_member(db, hospital_admin, "X@bv.vn", Role.MEMBER)


def test_member_cannot_add(db, hospital_member):
    with pytest.raises(ForbiddenError) as exc_info:
        membership_service.add_member(db, hospital_member, "x@bv.vn", Role.MEMBER)
    assert exc_info.value.reason == ForbiddenError.REASON_INSUFFICIENT_ROLE


def test_role_change_matrix(db, hospital_owner, hospital_admin, hospital_member):
    member_row = membership_service.get_membership_for_org(
        db, hospital_member.organization_id, hospital_member.user_id
    )
    admin_row = membership_service.get_membership_for_org(
        db, hospital_admin.organization_id, hospital_admin.user_id
    )

    with pytest.raises(ForbiddenError):
        membership_service.change_member_role(db, hospital_admin, admin_row.id, Role.MEMBER)
    with pytest.raises(ForbiddenError):
        membership_service.change_member_role(db, hospital_admin, member_row.id, Role.ADMIN)

    promoted = membership_service.change_member_role(
        db, hospital_owner, member_row.id, Role.ADMIN
    )
    assert promoted.role == Role.ADMIN.value
    entry = (
        db.query(AuditLog)
        .filter(AuditLog.action == AuditAction.MEMBERSHIP_ROLE_CHANGED.value)
        .one()
    )
    assert entry.previous_values == {"role": "member"}
    assert entry.new_values == {"role": "admin"}


def test_remove_member(db, hospital_owner, hospital_member, other_hospital_owner):
    target = membership_service.get_membership_for_org(
        db, hospital_member.organization_id, hospital_member.user_id
    )

    with pytest.raises(ForbiddenError):
        membership_service.remove_member(db, other_hospital_owner, target.id)

    membership_service.remove_member(db, hospital_owner, target.id)

    assert db.get(Membership, target.id) is None
    entry = (
        db.query(AuditLog).filter(AuditLog.action == AuditAction.MEMBERSHIP_REMOVED.value).one()
    )
    assert entry.previous_values["role"] == "member"


def test_owner_cannot_remove_self(db, hospital_owner):
    own = membership_service.get_membership_for_org(
        db, hospital_owner.organization_id, hospital_owner.user_id
    )

    with pytest.raises(ForbiddenError):
        membership_service.remove_member(db, hospital_owner, own.id)
