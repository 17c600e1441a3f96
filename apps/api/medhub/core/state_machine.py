"""Generic lifecycle transition validation.

Each resource kind owns a static table mapping a status to the set of
statuses it may move to. Tables are data: one engine validates all of them.
Terminal statuses map to an empty set and self-transitions are never valid.
"""

from medhub.core.errors import InvalidTransitionError
from medhub.db.enums import (
    DisputeStatus,
    EquipmentStatus,
    PaymentStatus,
    ProviderStatus,
    QuoteStatus,
    ResourceKind,
    ServiceRequestStatus,
    TicketStatus,
)

TransitionTable = dict[str, frozenset[str]]


def _table(transitions: dict) -> TransitionTable:
    return {
        source.value: frozenset(target.value for target in targets)
        for source, targets in transitions.items()
    }


EQUIPMENT_TRANSITIONS = _table({
    EquipmentStatus.AVAILABLE: {
        EquipmentStatus.IN_USE,
        EquipmentStatus.MAINTENANCE,
        EquipmentStatus.DAMAGED,
        EquipmentStatus.RETIRED,
    },
    EquipmentStatus.IN_USE: {
        EquipmentStatus.AVAILABLE,
        EquipmentStatus.MAINTENANCE,
        EquipmentStatus.DAMAGED,
    },
    EquipmentStatus.MAINTENANCE: {EquipmentStatus.AVAILABLE, EquipmentStatus.DAMAGED},
    EquipmentStatus.DAMAGED: {EquipmentStatus.AVAILABLE, EquipmentStatus.RETIRED},
    EquipmentStatus.RETIRED: set(),
})

SERVICE_REQUEST_TRANSITIONS = _table({
    ServiceRequestStatus.PENDING: {ServiceRequestStatus.QUOTED, ServiceRequestStatus.CANCELLED},
    ServiceRequestStatus.QUOTED: {ServiceRequestStatus.ACCEPTED, ServiceRequestStatus.CANCELLED},
    ServiceRequestStatus.ACCEPTED: {
        ServiceRequestStatus.IN_PROGRESS,
        ServiceRequestStatus.CANCELLED,
    },
    ServiceRequestStatus.IN_PROGRESS: {
        ServiceRequestStatus.COMPLETED,
        ServiceRequestStatus.DISPUTED,
    },
    ServiceRequestStatus.COMPLETED: {ServiceRequestStatus.DISPUTED},
    ServiceRequestStatus.CANCELLED: set(),
    ServiceRequestStatus.DISPUTED: set(),
})

QUOTE_TRANSITIONS = _table({
    QuoteStatus.PENDING: {QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED},
    QuoteStatus.ACCEPTED: set(),
    QuoteStatus.REJECTED: set(),
    QuoteStatus.EXPIRED: set(),
})

# Escalated disputes leave only through platform arbitration (admin_resolve_dispute)
DISPUTE_TRANSITIONS = _table({
    DisputeStatus.OPEN: {DisputeStatus.INVESTIGATING, DisputeStatus.ESCALATED},
    DisputeStatus.INVESTIGATING: {
        DisputeStatus.RESOLVED,
        DisputeStatus.CLOSED,
        DisputeStatus.ESCALATED,
    },
    DisputeStatus.RESOLVED: set(),
    DisputeStatus.CLOSED: set(),
    DisputeStatus.ESCALATED: set(),
})

# Platform admins close tickets from any status through a separate override
SUPPORT_TICKET_TRANSITIONS = _table({
    TicketStatus.OPEN: {TicketStatus.IN_PROGRESS},
    TicketStatus.IN_PROGRESS: {TicketStatus.RESOLVED},
    TicketStatus.RESOLVED: {TicketStatus.CLOSED},
    TicketStatus.CLOSED: set(),
})

PAYMENT_TRANSITIONS = _table({
    PaymentStatus.PENDING: {
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
        PaymentStatus.REFUNDED,
    },
    PaymentStatus.COMPLETED: set(),
    PaymentStatus.FAILED: set(),
    PaymentStatus.REFUNDED: set(),
})

PROVIDER_TRANSITIONS = _table({
    ProviderStatus.PENDING_VERIFICATION: {ProviderStatus.ACTIVE},
    ProviderStatus.ACTIVE: {ProviderStatus.SUSPENDED},
    ProviderStatus.SUSPENDED: {ProviderStatus.ACTIVE},
    ProviderStatus.INACTIVE: set(),
})

TRANSITION_TABLES: dict[str, TransitionTable] = {
    ResourceKind.EQUIPMENT.value: EQUIPMENT_TRANSITIONS,
    ResourceKind.SERVICE_REQUEST.value: SERVICE_REQUEST_TRANSITIONS,
    ResourceKind.QUOTE.value: QUOTE_TRANSITIONS,
    ResourceKind.DISPUTE.value: DISPUTE_TRANSITIONS,
    ResourceKind.SUPPORT_TICKET.value: SUPPORT_TICKET_TRANSITIONS,
    ResourceKind.PAYMENT.value: PAYMENT_TRANSITIONS,
    ResourceKind.PROVIDER.value: PROVIDER_TRANSITIONS,
}


def _kind_value(kind: ResourceKind | str) -> str:
    return kind.value if isinstance(kind, ResourceKind) else kind


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def get_table(kind: ResourceKind | str) -> TransitionTable:
    """Return the transition table for a resource kind."""
    table = TRANSITION_TABLES.get(_kind_value(kind))
    if table is None:
        raise ValueError(f"Unknown resource kind: {kind}")
    return table


def can_transition(kind: ResourceKind | str, from_status, to_status) -> bool:
    """True iff (from_status, to_status) appears in the kind's table."""
    source = _status_value(from_status)
    target = _status_value(to_status)
    if source == target:
        return False
    return target in get_table(kind).get(source, frozenset())


def next_statuses(kind: ResourceKind | str, from_status) -> list[str]:
    """Valid target statuses from the given status, sorted for display."""
    return sorted(get_table(kind).get(_status_value(from_status), frozenset()))


def is_terminal(kind: ResourceKind | str, status) -> bool:
    return not get_table(kind).get(_status_value(status))


def assert_transition(kind: ResourceKind | str, from_status, to_status) -> None:
    """
    Validate a transition.

    Raises:
        InvalidTransitionError: carries current_status and target_status
    """
    if not can_transition(kind, from_status, to_status):
        raise InvalidTransitionError(
            _kind_value(kind), _status_value(from_status), _status_value(to_status)
        )
