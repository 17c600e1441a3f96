"""Equipment router - hospital equipment, maintenance and consumables."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.identity import CallerIdentity
from medhub.db.enums import EquipmentStatus
from medhub.schemas import (
    ConsumableCreate,
    ConsumableRead,
    EquipmentCreate,
    EquipmentRead,
    EquipmentStatusChange,
    FailureReportCreate,
    FailureReportRead,
    MaintenanceCreate,
    MaintenanceRead,
    StockAdjustment,
)
from medhub.services import consumable_service, equipment_service

router = APIRouter(tags=["Equipment"])


# ============================================================================
# Equipment
# ============================================================================

@router.get("/equipment", response_model=list[EquipmentRead])
def list_equipment(
    status: EquipmentStatus | None = None,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return equipment_service.list_equipment(db, caller, status=status)


@router.post("/equipment", response_model=EquipmentRead, status_code=status.HTTP_201_CREATED)
def create_equipment(
    data: EquipmentCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return equipment_service.create_equipment(
        db,
        caller,
        name=data.name,
        category=data.category,
        serial_number=data.serial_number,
        location=data.location,
    )


@router.get("/equipment/{equipment_id}", response_model=EquipmentRead)
def get_equipment(
    equipment_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return equipment_service.get_equipment(db, caller, equipment_id)


@router.patch("/equipment/{equipment_id}/status", response_model=EquipmentRead)
def update_equipment_status(
    equipment_id: UUID,
    data: EquipmentStatusChange,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return equipment_service.update_equipment_status(db, caller, equipment_id, data.status)


@router.post(
    "/equipment/{equipment_id}/failures",
    response_model=FailureReportRead,
    status_code=status.HTTP_201_CREATED,
)
def report_failure(
    equipment_id: UUID,
    data: FailureReportCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """File a failure report; high/critical urgency marks the equipment damaged."""
    return equipment_service.report_failure(
        db, caller, equipment_id, urgency=data.urgency, description=data.description
    )


@router.post(
    "/equipment/{equipment_id}/maintenance",
    response_model=MaintenanceRead,
    status_code=status.HTTP_201_CREATED,
)
def schedule_maintenance(
    equipment_id: UUID,
    data: MaintenanceCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return equipment_service.schedule_maintenance(
        db,
        caller,
        equipment_id,
        scheduled_at=data.scheduled_at,
        maintenance_type=data.maintenance_type,
        notes=data.notes,
    )


# ============================================================================
# Consumables
# ============================================================================

@router.get("/consumables", response_model=list[ConsumableRead])
def list_consumables(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return consumable_service.list_consumables(db, caller)


@router.post("/consumables", response_model=ConsumableRead, status_code=status.HTTP_201_CREATED)
def create_consumable(
    data: ConsumableCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return consumable_service.create_consumable(
        db,
        caller,
        name=data.name,
        current_stock=data.current_stock,
        reorder_point=data.reorder_point,
        unit=data.unit,
    )


@router.post("/consumables/{consumable_id}/adjust", response_model=ConsumableRead)
def adjust_stock(
    consumable_id: UUID,
    data: StockAdjustment,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return consumable_service.adjust_stock(db, caller, consumable_id, data.delta)
