"""Centralized approval-class transition policies."""

from dataclasses import dataclass, field

from medhub.db.enums import (
    DisputeStatus,
    QuoteStatus,
    ResourceKind,
    ROLES_CAN_APPROVE,
    Role,
    ServiceRequestStatus,
)


@dataclass(frozen=True)
class TransitionPolicy:
    """Transitions restricted to elevated roles and subject to self-action prevention."""

    approval_transitions: frozenset[tuple[str, str]] = field(default_factory=frozenset)
    approver_roles: frozenset[Role] = frozenset(ROLES_CAN_APPROVE)


def _pairs(*pairs) -> frozenset[tuple[str, str]]:
    return frozenset((source.value, target.value) for source, target in pairs)


POLICIES: dict[str, TransitionPolicy] = {
    ResourceKind.SERVICE_REQUEST.value: TransitionPolicy(
        approval_transitions=_pairs(
            (ServiceRequestStatus.PENDING, ServiceRequestStatus.QUOTED),
            (ServiceRequestStatus.QUOTED, ServiceRequestStatus.ACCEPTED),
        ),
    ),
    ResourceKind.QUOTE.value: TransitionPolicy(
        approval_transitions=_pairs((QuoteStatus.PENDING, QuoteStatus.ACCEPTED)),
    ),
    ResourceKind.DISPUTE.value: TransitionPolicy(
        approval_transitions=_pairs((DisputeStatus.INVESTIGATING, DisputeStatus.RESOLVED)),
    ),
}


def get_policy(kind: ResourceKind | str) -> TransitionPolicy:
    key = kind.value if isinstance(kind, ResourceKind) else kind
    return POLICIES.get(key, TransitionPolicy())


def is_approval_transition(kind: ResourceKind | str, from_status: str, to_status: str) -> bool:
    """Check whether a transition is approval-class for the resource kind."""
    source = from_status.value if hasattr(from_status, "value") else from_status
    target = to_status.value if hasattr(to_status, "value") else to_status
    return (source, target) in get_policy(kind).approval_transitions
