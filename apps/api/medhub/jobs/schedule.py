"""Cadence for the automation rules (all times UTC)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from medhub.db.enums import AutomationRule
from medhub.db.types import ensure_utc


@dataclass(frozen=True)
class Cadence:
    """
    When a rule fires.

    ``hour`` None means every hour; ``weekday`` None means every day
    (Monday is 0, as in ``datetime.weekday``).
    """

    minute: int
    hour: int | None = None
    weekday: int | None = None

    def last_slot(self, now: datetime) -> datetime:
        """Most recent scheduled time at or before ``now``."""
        now = ensure_utc(now)
        slot = now.replace(minute=self.minute, second=0, microsecond=0)
        if self.hour is None:
            if slot > now:
                slot -= timedelta(hours=1)
            return slot

        slot = slot.replace(hour=self.hour)
        if self.weekday is None:
            if slot > now:
                slot -= timedelta(days=1)
            return slot

        slot -= timedelta(days=(slot.weekday() - self.weekday) % 7)
        if slot > now:
            slot -= timedelta(days=7)
        return slot


SCHEDULE: dict[AutomationRule, Cadence] = {
    AutomationRule.CHECK_OVERDUE_REQUESTS: Cadence(minute=30),
    AutomationRule.CHECK_MAINTENANCE_DUE: Cadence(minute=0, hour=8),
    AutomationRule.CHECK_STOCK_LEVELS: Cadence(minute=0, hour=9),
    AutomationRule.CHECK_CERTIFICATION_EXPIRY: Cadence(minute=0, hour=7, weekday=0),
}


def is_due(rule: AutomationRule, now: datetime, last_run_at: datetime | None) -> bool:
    """True when a scheduled slot has passed since the rule last ran."""
    if last_run_at is None:
        return True
    return ensure_utc(last_run_at) < SCHEDULE[AutomationRule(rule)].last_slot(now)


def due_rules(now: datetime, last_runs: dict[str, datetime | None]) -> list[AutomationRule]:
    return [rule for rule in SCHEDULE if is_due(rule, now, last_runs.get(rule.value))]
