"""Service layer modules."""

from medhub.services.audit_service import (
    AuditEntry,
    diff_values,
    list_entries,
    list_for_resource,
    record,
    record_change,
)

__all__ = [
    # Audit
    "AuditEntry",
    "diff_values",
    "list_entries",
    "list_for_resource",
    "record",
    "record_change",
]
