"""Tests for the authorization gate: tenant scoping and role checks."""

import uuid

import pytest

from medhub.core import guards
from medhub.core.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from medhub.core.identity import Credential
from medhub.db.enums import PlatformRole, ROLES_CAN_APPROVE, Role
from medhub.db.models import Equipment
from medhub.services import equipment_service


@pytest.fixture
def equipment(db, hospital_owner):
    return equipment_service.create_equipment(db, hospital_owner, "Máy thở A1")


def test_scoped_query_only_returns_own_rows(db, equipment, other_hospital_owner):
    equipment_service.create_equipment(db, other_hospital_owner, "Máy X-quang")

    own = guards.scoped_query(db, Equipment, other_hospital_owner).all()

    assert len(own) == 1
    assert own[0].id != equipment.id


def test_read_across_tenants_is_not_found(db, equipment, other_hospital_owner):
    with pytest.raises(NotFoundError) as exc_info:
        guards.get_for_read(db, Equipment, equipment.id, other_hospital_owner)
    assert exc_info.value.details["resource_type"] == "equipment"


def test_write_across_tenants_is_forbidden(db, equipment, other_hospital_owner):
    with pytest.raises(ForbiddenError) as exc_info:
        guards.get_for_write(db, Equipment, equipment.id, other_hospital_owner)
    assert exc_info.value.reason == ForbiddenError.REASON_CROSS_TENANT


def test_write_to_missing_row_is_not_found(db, hospital_owner):
    with pytest.raises(NotFoundError):
        guards.get_for_write(db, Equipment, uuid.uuid4(), hospital_owner)


def test_require_roles(db, hospital_member, hospital_admin):
    assert guards.require_roles(db, hospital_admin, ROLES_CAN_APPROVE).role == Role.ADMIN.value

    with pytest.raises(ForbiddenError) as exc_info:
        guards.require_roles(db, hospital_member, ROLES_CAN_APPROVE)
    assert exc_info.value.reason == ForbiddenError.REASON_INSUFFICIENT_ROLE
    assert exc_info.value.details["role"] == Role.MEMBER.value


def test_require_membership_rejects_outsiders(db, hospital_org, other_hospital_owner):
    with pytest.raises(ForbiddenError) as exc_info:
        guards.require_membership(db, hospital_org.id, other_hospital_owner.user_id)
    assert exc_info.value.reason == ForbiddenError.REASON_NOT_MEMBER


def test_require_platform_admin(db, make_user, hospital_org):
    admin = make_user(platform_role=PlatformRole.PLATFORM_ADMIN)
    member = make_user(hospital_org, Role.OWNER)

    caller = guards.require_platform_admin(db, Credential(subject=str(admin.id)))
    assert caller.is_platform_admin
    assert caller.organization_id is None

    with pytest.raises(ForbiddenError) as exc_info:
        guards.require_platform_admin(db, Credential(subject=str(member.id)))
    assert exc_info.value.reason == ForbiddenError.REASON_PLATFORM_ROLE

    with pytest.raises(UnauthenticatedError):
        guards.require_platform_admin(db, None)


def test_platform_support_is_not_admin(db, make_user):
    support = make_user(platform_role=PlatformRole.PLATFORM_SUPPORT)

    with pytest.raises(ForbiddenError):
        guards.require_platform_admin(db, Credential(subject=str(support.id)))


def test_elevated_access_bypasses_tenant_and_is_logged(db, equipment, platform_admin, caplog):
    with caplog.at_level("INFO", logger="medhub.core.guards"):
        found = guards.get_elevated(db, Equipment, equipment.id, platform_admin)

    assert found.id == equipment.id
    assert any("Elevated access" in r.getMessage() for r in caplog.records)


def test_elevated_access_requires_platform_admin(db, equipment, other_hospital_owner):
    with pytest.raises(ForbiddenError):
        guards.get_elevated(db, Equipment, equipment.id, other_hospital_owner)
