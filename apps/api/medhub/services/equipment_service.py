"""Equipment service - inventory, status lifecycle, failures and maintenance."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import InvalidInputError
from medhub.core.guards import get_for_read, get_for_write, require_writable_org, scoped_query
from medhub.core.identity import CallerIdentity
from medhub.core.validation import require_text
from medhub.db.enums import (
    AuditAction,
    EquipmentStatus,
    FailureUrgency,
    MaintenanceStatus,
    MaintenanceType,
    ResourceKind,
    URGENCIES_MARK_DAMAGED,
)
from medhub.db.models import Equipment, FailureReport, MaintenanceRecord
from medhub.db.types import ensure_utc
from medhub.services import audit_service, transition_service
from medhub.services.audit_service import AuditEntry

logger = logging.getLogger(__name__)


def create_equipment(
    db: Session,
    caller: CallerIdentity,
    name: str,
    category: str | None = None,
    serial_number: str | None = None,
    location: str | None = None,
) -> Equipment:
    """Register a piece of equipment in the caller's organization."""
    require_writable_org(db, caller)
    equipment = Equipment(
        organization_id=caller.organization_id,
        name=require_text(name, "name", 2),
        category=category,
        serial_number=serial_number,
        location=location,
        status=EquipmentStatus.AVAILABLE.value,
        created_by_user_id=caller.user_id,
    )
    db.add(equipment)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=equipment.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.EQUIPMENT_CREATED,
            resource_type=ResourceKind.EQUIPMENT.value,
            resource_id=equipment.id,
            new_values={"name": equipment.name, "status": equipment.status},
        ),
    )
    db.commit()
    db.refresh(equipment)
    return equipment


def get_equipment(db: Session, caller: CallerIdentity, equipment_id: UUID) -> Equipment:
    """Get equipment in the caller's organization (NOT_FOUND otherwise)."""
    return get_for_read(db, Equipment, equipment_id, caller)


def list_equipment(
    db: Session, caller: CallerIdentity, status: EquipmentStatus | None = None
) -> list[Equipment]:
    query = scoped_query(db, Equipment, caller)
    if status:
        query = query.filter(Equipment.status == EquipmentStatus(status).value)
    return query.order_by(Equipment.created_at.desc()).all()


def update_equipment_status(
    db: Session,
    caller: CallerIdentity,
    equipment_id: UUID,
    new_status: EquipmentStatus,
) -> Equipment:
    """
    Move equipment along its lifecycle.

    Raises:
        NotFoundError / ForbiddenError: Missing or cross-tenant
        InvalidTransitionError: Not allowed by the equipment table
    """
    equipment = get_for_write(db, Equipment, equipment_id, caller)
    transition_service.apply_transition(
        db,
        kind=ResourceKind.EQUIPMENT,
        resource=equipment,
        target_status=EquipmentStatus(new_status).value,
        actor_user_id=caller.user_id,
        action=AuditAction.EQUIPMENT_STATUS_UPDATED,
    )
    db.commit()
    db.refresh(equipment)
    return equipment


def report_failure(
    db: Session,
    caller: CallerIdentity,
    equipment_id: UUID,
    urgency: FailureUrgency,
    description: str,
) -> FailureReport:
    """
    File a failure report.

    High and critical urgency also move the equipment to ``damaged`` when the
    equipment table allows it; equipment already damaged (or retired) is left
    untouched and gets no status audit entry.
    """
    urgency = FailureUrgency(urgency)
    equipment = get_for_write(db, Equipment, equipment_id, caller)

    report = FailureReport(
        organization_id=equipment.organization_id,
        equipment_id=equipment.id,
        urgency=urgency.value,
        description=require_text(description, "description", 10),
        reported_by_user_id=caller.user_id,
    )
    db.add(report)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=equipment.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.EQUIPMENT_FAILURE_REPORTED,
            resource_type=ResourceKind.EQUIPMENT.value,
            resource_id=equipment.id,
            new_values={"failure_report_id": report.id, "urgency": urgency.value},
        ),
    )

    if urgency in URGENCIES_MARK_DAMAGED:
        transition_service.apply_secondary_transition(
            db,
            kind=ResourceKind.EQUIPMENT,
            resource=equipment,
            target_status=EquipmentStatus.DAMAGED.value,
            actor_user_id=caller.user_id,
            action=AuditAction.EQUIPMENT_STATUS_UPDATED,
        )

    db.commit()
    db.refresh(report)
    return report


def schedule_maintenance(
    db: Session,
    caller: CallerIdentity,
    equipment_id: UUID,
    scheduled_at: datetime,
    maintenance_type: MaintenanceType = MaintenanceType.PREVENTIVE,
    notes: str | None = None,
) -> MaintenanceRecord:
    """
    Schedule maintenance for equipment.

    Raises:
        InvalidInputError: Equipment is retired
    """
    equipment = get_for_write(db, Equipment, equipment_id, caller)
    if equipment.status == EquipmentStatus.RETIRED.value:
        raise InvalidInputError(
            "Không thể lên lịch bảo trì cho thiết bị đã nghỉ hưu",
            "Cannot schedule maintenance for retired equipment",
            {"status": equipment.status},
        )

    record = MaintenanceRecord(
        organization_id=equipment.organization_id,
        equipment_id=equipment.id,
        maintenance_type=MaintenanceType(maintenance_type).value,
        status=MaintenanceStatus.SCHEDULED.value,
        scheduled_at=ensure_utc(scheduled_at),
        notes=notes,
        created_by_user_id=caller.user_id,
    )
    db.add(record)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=equipment.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.MAINTENANCE_SCHEDULED,
            resource_type=ResourceKind.EQUIPMENT.value,
            resource_id=equipment.id,
            new_values={
                "maintenance_id": record.id,
                "scheduled_at": record.scheduled_at,
                "maintenance_type": record.maintenance_type,
            },
        ),
    )
    db.commit()
    db.refresh(record)
    return record
