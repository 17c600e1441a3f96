"""Automation rule handler registry."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Mapping

from sqlalchemy.orm import Session

from medhub.db.enums import AutomationRule
from medhub.db.models import AutomationRun
from medhub.services import automation_service

RuleHandler = Callable[[Session, datetime | None], AutomationRun]

RULE_HANDLERS: Mapping[str, RuleHandler] = {
    AutomationRule.CHECK_OVERDUE_REQUESTS.value: automation_service.check_overdue_requests,
    AutomationRule.CHECK_MAINTENANCE_DUE.value: automation_service.check_maintenance_due,
    AutomationRule.CHECK_STOCK_LEVELS.value: automation_service.check_stock_levels,
    AutomationRule.CHECK_CERTIFICATION_EXPIRY.value: automation_service.check_certification_expiry,
}


def resolve_rule_handler(rule_name: str) -> RuleHandler:
    handler = RULE_HANDLERS.get(rule_name)
    if not handler:
        raise ValueError(f"Unknown automation rule: {rule_name}")
    return handler
