"""Tests for the automation rules and their run records."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from medhub.db.enums import (
    AutomationRule,
    AutomationRunStatus,
    CertificationStatus,
    MaintenanceStatus,
    MaintenanceType,
    ServiceRequestPriority,
    ServiceRequestStatus,
)
from medhub.db.models import (
    AutomationRun,
    Certification,
    Consumable,
    Equipment,
    MaintenanceRecord,
    ServiceRequest,
)
from medhub.services import automation_service

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


def _request(db, org, user_id, status, updated_at):
    db.add(
        ServiceRequest(
            organization_id=org.id,
            title="Yêu cầu tồn đọng",
            priority=ServiceRequestPriority.MEDIUM.value,
            status=status.value,
            created_by_user_id=user_id,
            created_at=updated_at,
            updated_at=updated_at,
        )
    )


def _maintenance(db, org, scheduled_at, status=MaintenanceStatus.SCHEDULED):
    equipment = Equipment(organization_id=org.id, name="Máy gây mê", status="available")
    db.add(equipment)
    db.flush()
    db.add(
        MaintenanceRecord(
            organization_id=org.id,
            equipment_id=equipment.id,
            maintenance_type=MaintenanceType.PREVENTIVE.value,
            status=status.value,
            scheduled_at=scheduled_at,
        )
    )


def test_overdue_requests(db, hospital_org, hospital_member):
    old = NOW - timedelta(days=10)
    for _ in range(12):
        _request(db, hospital_org, hospital_member.user_id, ServiceRequestStatus.PENDING, old)
    _request(db, hospital_org, hospital_member.user_id, ServiceRequestStatus.COMPLETED, old)
    _request(
        db, hospital_org, hospital_member.user_id, ServiceRequestStatus.IN_PROGRESS,
        NOW - timedelta(days=2),
    )
    db.commit()

    run = automation_service.check_overdue_requests(db, NOW)

    assert run.rule_name == AutomationRule.CHECK_OVERDUE_REQUESTS.value
    assert run.status == AutomationRunStatus.SUCCESS.value
    assert run.affected_count == 12
    assert len(run.run_metadata["requests"]) == 10
    assert run.run_metadata["cutoff"] == (NOW - timedelta(days=7)).isoformat()


def test_overdue_requests_are_not_modified(db, hospital_org, hospital_member):
    _request(
        db, hospital_org, hospital_member.user_id, ServiceRequestStatus.QUOTED,
        NOW - timedelta(days=30),
    )
    db.commit()

    first = automation_service.check_overdue_requests(db, NOW)
    second = automation_service.check_overdue_requests(db, NOW)

    assert first.affected_count == second.affected_count == 1
    assert db.query(ServiceRequest).one().status == ServiceRequestStatus.QUOTED.value
    assert db.query(AutomationRun).count() == 2


def test_maintenance_due_window(db, hospital_org):
    _maintenance(db, hospital_org, NOW + timedelta(days=3))
    _maintenance(db, hospital_org, NOW + timedelta(days=10))
    _maintenance(db, hospital_org, NOW - timedelta(days=1))
    _maintenance(db, hospital_org, NOW + timedelta(days=1), MaintenanceStatus.COMPLETED)
    db.commit()

    run = automation_service.check_maintenance_due(db, NOW)

    assert run.affected_count == 1
    [record] = run.run_metadata["records"]
    assert record["scheduled_at"] == (NOW + timedelta(days=3)).isoformat()


def test_stock_levels_across_organizations(db, hospital_org, other_hospital_org):
    db.add_all(
        [
            Consumable(organization_id=hospital_org.id, name="Kim tiêm", current_stock=5, reorder_point=50),
            Consumable(organization_id=hospital_org.id, name="Cồn y tế", current_stock=80, reorder_point=20),
            Consumable(organization_id=other_hospital_org.id, name="Băng gạc", current_stock=0, reorder_point=10),
            Consumable(organization_id=other_hospital_org.id, name="Khẩu trang", current_stock=10, reorder_point=10),
        ]
    )
    db.commit()

    run = automation_service.check_stock_levels(db, NOW)

    assert run.affected_count == 2
    assert run.run_metadata["organizations"] == 2
    assert {c["current_stock"] for c in run.run_metadata["consumables"]} == {5, 0}


def test_certification_expiry(db, provider):
    for expires_at in (NOW + timedelta(days=10), NOW + timedelta(days=60), None):
        db.add(
            Certification(
                provider_id=provider.id,
                name=f"Chứng chỉ {uuid.uuid4().hex[:4]}",
                status=CertificationStatus.VERIFIED.value,
                expires_at=expires_at,
            )
        )
    db.commit()

    run = automation_service.check_certification_expiry(db, NOW)

    assert run.affected_count == 1
    assert run.run_metadata["certifications"][0]["provider_id"] == str(provider.id)


@pytest.mark.parametrize("rule", list(AutomationRule))
def test_every_rule_records_a_run_with_no_matches(db, rule):
    run = automation_service.run_rule(db, rule, NOW)

    assert run.status == AutomationRunStatus.SUCCESS.value
    assert run.affected_count == 0
    assert run.error_message is None


def test_failure_records_error_run_and_reraises(db, monkeypatch):
    def broken_scan(db, now):
        raise RuntimeError("database went away")

    monkeypatch.setitem(
        automation_service._SCANS, AutomationRule.CHECK_STOCK_LEVELS, broken_scan
    )

    with pytest.raises(RuntimeError):
        automation_service.check_stock_levels(db, NOW)

    run = db.query(AutomationRun).one()
    assert run.status == AutomationRunStatus.ERROR.value
    assert run.error_message == "RuntimeError: database went away"
    assert run.affected_count == 0


def test_rule_status_and_list_runs(db):
    automation_service.check_stock_levels(db, NOW)
    automation_service.check_stock_levels(db, NOW)
    automation_service.check_maintenance_due(db, NOW)

    status = automation_service.rule_status(db)
    assert status[AutomationRule.CHECK_OVERDUE_REQUESTS.value] is None
    assert status[AutomationRule.CHECK_STOCK_LEVELS.value].rule_name == "checkStockLevels"

    assert len(automation_service.list_runs(db)) == 3
    assert len(automation_service.list_runs(db, AutomationRule.CHECK_STOCK_LEVELS)) == 2
    assert len(automation_service.list_runs(db, limit=1)) == 1
