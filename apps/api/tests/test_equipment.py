"""Tests for equipment, failure reports, maintenance and consumables."""

from datetime import datetime, timedelta, timezone

import pytest

from medhub.core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from medhub.db.enums import (
    AuditAction,
    EquipmentStatus,
    FailureUrgency,
    MaintenanceStatus,
)
from medhub.db.models import AuditLog
from medhub.services import consumable_service, equipment_service


@pytest.fixture
def equipment(db, hospital_member):
    return equipment_service.create_equipment(
        db, hospital_member, "Máy thở Hamilton", category="ICU", serial_number="HM-001"
    )


def _status_updates(db, equipment_id):
    return (
        db.query(AuditLog)
        .filter(
            AuditLog.resource_id == equipment_id,
            AuditLog.action == AuditAction.EQUIPMENT_STATUS_UPDATED.value,
        )
        .all()
    )


def test_new_equipment_is_available(equipment):
    assert equipment.status == EquipmentStatus.AVAILABLE.value


def test_status_change_is_audited(db, hospital_member, equipment):
    equipment_service.update_equipment_status(
        db, hospital_member, equipment.id, EquipmentStatus.IN_USE
    )

    [entry] = _status_updates(db, equipment.id)
    assert entry.previous_values == {"status": "available"}
    assert entry.new_values == {"status": "in_use"}


def test_retired_equipment_cannot_move(db, hospital_member, equipment):
    equipment_service.update_equipment_status(
        db, hospital_member, equipment.id, EquipmentStatus.RETIRED
    )

    with pytest.raises(InvalidTransitionError):
        equipment_service.update_equipment_status(
            db, hospital_member, equipment.id, EquipmentStatus.AVAILABLE
        )


def test_other_tenant_read_and_write(db, other_hospital_owner, equipment):
    with pytest.raises(NotFoundError):
        equipment_service.get_equipment(db, other_hospital_owner, equipment.id)
    with pytest.raises(ForbiddenError):
        equipment_service.update_equipment_status(
            db, other_hospital_owner, equipment.id, EquipmentStatus.IN_USE
        )
    assert equipment_service.list_equipment(db, other_hospital_owner) == []


def test_high_urgency_failure_marks_equipment_damaged(db, hospital_member, equipment):
    report = equipment_service.report_failure(
        db, hospital_member, equipment.id, FailureUrgency.CRITICAL, "Máy báo lỗi áp suất liên tục"
    )

    db.refresh(equipment)
    assert report.urgency == FailureUrgency.CRITICAL.value
    assert equipment.status == EquipmentStatus.DAMAGED.value
    assert len(_status_updates(db, equipment.id)) == 1


def test_repeat_failure_on_damaged_equipment_writes_no_status_entry(
    db, hospital_member, equipment
):
    for _ in range(2):
        equipment_service.report_failure(
            db, hospital_member, equipment.id, FailureUrgency.HIGH, "Màn hình không hiển thị"
        )

    reports = (
        db.query(AuditLog)
        .filter(AuditLog.action == AuditAction.EQUIPMENT_FAILURE_REPORTED.value)
        .count()
    )
    assert reports == 2
    assert len(_status_updates(db, equipment.id)) == 1


def test_low_urgency_failure_keeps_status(db, hospital_member, equipment):
    equipment_service.report_failure(
        db, hospital_member, equipment.id, FailureUrgency.LOW, "Vỏ máy bị trầy xước nhẹ"
    )

    db.refresh(equipment)
    assert equipment.status == EquipmentStatus.AVAILABLE.value
    assert _status_updates(db, equipment.id) == []


def test_schedule_maintenance(db, hospital_member, equipment):
    when = datetime.now(timezone.utc) + timedelta(days=3)

    record = equipment_service.schedule_maintenance(db, hospital_member, equipment.id, when)

    assert record.status == MaintenanceStatus.SCHEDULED.value
    assert record.scheduled_at == when


def test_cannot_schedule_maintenance_for_retired(db, hospital_member, equipment):
    equipment_service.update_equipment_status(
        db, hospital_member, equipment.id, EquipmentStatus.RETIRED
    )

    with pytest.raises(InvalidInputError):
        equipment_service.schedule_maintenance(
            db, hospital_member, equipment.id, datetime.now(timezone.utc)
        )


def test_stock_adjustment(db, hospital_member, other_hospital_owner):
    gloves = consumable_service.create_consumable(
        db, hospital_member, "Găng tay y tế", current_stock=50, reorder_point=20, unit="hộp"
    )

    updated = consumable_service.adjust_stock(db, hospital_member, gloves.id, -45)
    assert updated.current_stock == 5

    with pytest.raises(InvalidInputError):
        consumable_service.adjust_stock(db, hospital_member, gloves.id, -6)
    with pytest.raises(InvalidInputError):
        consumable_service.adjust_stock(db, hospital_member, gloves.id, 0)
    with pytest.raises(ForbiddenError):
        consumable_service.adjust_stock(db, other_hospital_owner, gloves.id, 10)

    entry = (
        db.query(AuditLog)
        .filter(AuditLog.action == AuditAction.CONSUMABLE_STOCK_ADJUSTED.value)
        .one()
    )
    assert entry.previous_values == {"current_stock": 50}
    assert entry.new_values == {"current_stock": 5}


def test_negative_initial_stock_is_rejected(db, hospital_member):
    with pytest.raises(InvalidInputError):
        consumable_service.create_consumable(db, hospital_member, "Bông gòn", current_stock=-1)
