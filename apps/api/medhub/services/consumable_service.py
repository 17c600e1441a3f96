"""Consumable service - stock-tracked supplies."""

from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.errors import InvalidInputError
from medhub.core.guards import get_for_write, require_writable_org, scoped_query
from medhub.core.identity import CallerIdentity
from medhub.core.validation import require_text
from medhub.db.enums import AuditAction
from medhub.db.models import Consumable
from medhub.services import audit_service
from medhub.services.audit_service import AuditEntry

RESOURCE_TYPE = "consumable"


def create_consumable(
    db: Session,
    caller: CallerIdentity,
    name: str,
    current_stock: int = 0,
    reorder_point: int = 0,
    unit: str | None = None,
) -> Consumable:
    require_writable_org(db, caller)
    if current_stock < 0 or reorder_point < 0:
        raise InvalidInputError(
            "Số lượng không được âm",
            "Stock values cannot be negative",
            {"field": "current_stock"},
        )
    consumable = Consumable(
        organization_id=caller.organization_id,
        name=require_text(name, "name", 2),
        unit=unit,
        current_stock=current_stock,
        reorder_point=reorder_point,
        created_by_user_id=caller.user_id,
    )
    db.add(consumable)
    db.flush()

    audit_service.record(
        db,
        AuditEntry(
            organization_id=consumable.organization_id,
            actor_user_id=caller.user_id,
            action=AuditAction.CONSUMABLE_CREATED,
            resource_type=RESOURCE_TYPE,
            resource_id=consumable.id,
            new_values={
                "name": consumable.name,
                "current_stock": current_stock,
                "reorder_point": reorder_point,
            },
        ),
    )
    db.commit()
    db.refresh(consumable)
    return consumable


def list_consumables(db: Session, caller: CallerIdentity) -> list[Consumable]:
    return scoped_query(db, Consumable, caller).order_by(Consumable.name.asc()).all()


def adjust_stock(
    db: Session, caller: CallerIdentity, consumable_id: UUID, delta: int
) -> Consumable:
    """
    Apply a stock movement (positive = received, negative = used).

    Raises:
        InvalidInputError: Zero delta, or resulting stock would be negative
    """
    if delta == 0:
        raise InvalidInputError(
            "Số lượng điều chỉnh phải khác 0",
            "Stock adjustment must be non-zero",
            {"field": "delta"},
        )
    consumable = get_for_write(db, Consumable, consumable_id, caller)
    new_stock = consumable.current_stock + delta
    if new_stock < 0:
        raise InvalidInputError(
            "Không đủ tồn kho",
            "Insufficient stock",
            {"current_stock": consumable.current_stock, "delta": delta},
        )

    before = {"current_stock": consumable.current_stock}
    consumable.current_stock = new_stock
    db.flush()

    audit_service.record_change(
        db,
        organization_id=consumable.organization_id,
        actor_user_id=caller.user_id,
        action=AuditAction.CONSUMABLE_STOCK_ADJUSTED,
        resource_type=RESOURCE_TYPE,
        resource_id=consumable.id,
        before=before,
        after={"current_stock": new_stock},
    )
    db.commit()
    db.refresh(consumable)
    return consumable
