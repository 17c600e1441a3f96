"""Structured logging helpers (PHI-safe)."""

from typing import Any


def build_log_context(
    *,
    user_id: str | None = None,
    org_id: str | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    action: str | None = None,
    rule_name: str | None = None,
) -> dict[str, Any]:
    """Return a PHI-safe log context dict (IDs and action names only)."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = str(user_id)
    if org_id:
        context["org_id"] = str(org_id)
    if resource_type:
        context["resource_type"] = resource_type
    if resource_id:
        context["resource_id"] = str(resource_id)
    if action:
        context["action"] = action
    if rule_name:
        context["rule_name"] = rule_name
    return context
