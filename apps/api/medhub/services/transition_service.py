"""Apply table-checked lifecycle transitions with their audit entry.

Helpers here mutate and flush but never commit; the calling service commits
once after every write (resource + audit) is in the session.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from medhub.core.state_machine import assert_transition, can_transition
from medhub.core.structured_logging import build_log_context
from medhub.db.enums import AuditAction, ResourceKind
from medhub.services import audit_service

logger = logging.getLogger(__name__)


def _value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


def apply_transition(
    db: Session,
    *,
    kind: ResourceKind,
    resource,
    target_status: str,
    actor_user_id: UUID | None,
    action: AuditAction,
    changes: dict[str, Any] | None = None,
    audit_organization_id: UUID | None = None,
    audit_context: dict[str, Any] | None = None,
) -> UUID:
    """
    Validate and apply a status change plus optional field changes.

    Args:
        kind: Resource kind selecting the transition table
        resource: ORM row with a ``status`` attribute
        target_status: Requested status
        actor_user_id: Caller (None for system)
        action: Audit action string
        changes: Extra fields to set in the same mutation
        audit_organization_id: Tenant for the audit entry when the row has none
        audit_context: Extra values recorded only in the audit entry

    Returns:
        Audit entry id

    Raises:
        InvalidTransitionError: transition not in the table
    """
    target = _value(target_status)
    assert_transition(kind, resource.status, target)

    changes = changes or {}
    before = {"status": resource.status}
    before.update({field: getattr(resource, field) for field in changes})

    resource.status = target
    for field, value in changes.items():
        setattr(resource, field, value)

    after = {"status": target}
    after.update(changes)

    db.flush()
    return audit_service.record_change(
        db,
        organization_id=audit_organization_id or resource.organization_id,
        actor_user_id=actor_user_id,
        action=action,
        resource_type=kind.value,
        resource_id=resource.id,
        before=before,
        after=after,
        context=audit_context,
    )


def apply_secondary_transition(
    db: Session,
    *,
    kind: ResourceKind,
    resource,
    target_status: str,
    actor_user_id: UUID | None,
    action: AuditAction,
) -> bool:
    """
    Move a related resource as a side effect of another mutation.

    Skipped silently when the resource is already in the target status or the
    table does not allow the move, so no no-op audit entry is ever written.

    Returns:
        True if the transition was applied
    """
    target = _value(target_status)
    if resource.status == target or not can_transition(kind, resource.status, target):
        logger.info(
            "Secondary transition skipped: %s -> %s",
            resource.status,
            target,
            extra=build_log_context(
                resource_type=kind.value,
                resource_id=resource.id,
                action=_value(action),
            ),
        )
        return False

    apply_transition(
        db,
        kind=kind,
        resource=resource,
        target_status=target,
        actor_user_id=actor_user_id,
        action=action,
    )
    return True
