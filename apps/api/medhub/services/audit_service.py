"""Audit recorder - append-only trail of state changes and privileged actions.

Entries are written with ``db.add`` + ``db.flush`` inside the caller's
transaction and are never committed here. The caller commits once, so an
entry exists if and only if the mutation it documents was committed.

Guidelines:
- Record only the fields that changed (see ``diff_values``)
- Never put secrets or raw PII in previous/new values; use IDs
- There is no update or delete API
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.db.enums import AuditAction
from medhub.db.models import AuditLog


@dataclass(frozen=True)
class AuditEntry:
    """A pending audit entry."""

    organization_id: UUID
    actor_user_id: UUID | None
    action: AuditAction | str
    resource_type: str
    resource_id: UUID
    previous_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def diff_values(
    before: dict[str, Any], after: dict[str, Any]
) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
    """
    Reduce before/after snapshots to the fields that changed.

    Returns:
        (previous_values, new_values), both None when nothing changed
    """
    previous: dict[str, Any] = {}
    new: dict[str, Any] = {}
    for key in sorted(set(before) | set(after)):
        old_value = _jsonable(before.get(key))
        new_value = _jsonable(after.get(key))
        if old_value != new_value:
            previous[key] = old_value
            new[key] = new_value
    if not new:
        return None, None
    return previous, new


def _clean(values: dict[str, Any] | None) -> dict[str, Any] | None:
    if values is None:
        return None
    return {key: _jsonable(value) for key, value in values.items()}


def record(db: Session, entry: AuditEntry) -> UUID:
    """
    Write an audit entry in the current transaction.

    Args:
        db: Database session (caller owns the commit)
        entry: Entry to write

    Returns:
        The new entry's id
    """
    action = entry.action.value if isinstance(entry.action, AuditAction) else entry.action
    log = AuditLog(
        organization_id=entry.organization_id,
        actor_user_id=entry.actor_user_id,
        action=action,
        resource_type=entry.resource_type,
        resource_id=entry.resource_id,
        previous_values=_clean(entry.previous_values),
        new_values=_clean(entry.new_values),
    )
    db.add(log)
    db.flush()
    return log.id


def record_change(
    db: Session,
    *,
    organization_id: UUID,
    actor_user_id: UUID | None,
    action: AuditAction,
    resource_type: str,
    resource_id: UUID,
    before: dict[str, Any],
    after: dict[str, Any],
    context: dict[str, Any] | None = None,
) -> UUID:
    """
    Record an entry holding only the fields that differ between snapshots.

    ``context`` is appended to new_values as-is (e.g. a reason that is not
    stored on the resource itself).
    """
    previous_values, new_values = diff_values(before, after)
    if context:
        new_values = {**(new_values or {}), **context}
    return record(
        db,
        AuditEntry(
            organization_id=organization_id,
            actor_user_id=actor_user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            previous_values=previous_values,
            new_values=new_values,
        ),
    )


# =============================================================================
# Queries
# =============================================================================

def list_entries(
    db: Session,
    organization_id: UUID | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    actor_user_id: UUID | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[AuditLog], int]:
    """
    List audit entries across tenants (platform admin view), newest first.

    Returns:
        (entries, total_count)
    """
    query = db.query(AuditLog)
    if organization_id:
        query = query.filter(AuditLog.organization_id == organization_id)
    if action:
        query = query.filter(AuditLog.action == action)
    if resource_type:
        query = query.filter(AuditLog.resource_type == resource_type)
    if actor_user_id:
        query = query.filter(AuditLog.actor_user_id == actor_user_id)

    total = query.count()
    entries = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return entries, total


def list_for_resource(
    db: Session, organization_id: UUID, resource_type: str, resource_id: UUID
) -> list[AuditLog]:
    """Tenant-scoped history of a single resource, oldest first."""
    return (
        db.query(AuditLog)
        .filter(
            AuditLog.organization_id == organization_id,
            AuditLog.resource_type == resource_type,
            AuditLog.resource_id == resource_id,
        )
        .order_by(AuditLog.created_at.asc())
        .all()
    )
