"""Automation rule runner - periodic cross-tenant scans.

Every rule is a read-only pass over one table that ends with exactly one
``AutomationRun`` row. Rules never mutate the rows they inspect, so running a
rule twice against unchanged data yields the same affected count.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.orm import Session

from medhub.core.config import settings
from medhub.core.structured_logging import build_log_context
from medhub.db.enums import (
    AutomationRule,
    AutomationRunStatus,
    MaintenanceStatus,
    STALLED_REQUEST_STATUSES,
)
from medhub.db.models import (
    AutomationRun,
    Certification,
    Consumable,
    MaintenanceRecord,
    ServiceRequest,
)
from medhub.db.types import ensure_utc

logger = logging.getLogger(__name__)


def _now(now: datetime | None) -> datetime:
    return ensure_utc(now) if now else datetime.now(timezone.utc)


def _sample(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return items[: settings.AUTOMATION_METADATA_SAMPLE_SIZE]


# =============================================================================
# Run records
# =============================================================================

def record_run(
    db: Session,
    rule: AutomationRule,
    status: AutomationRunStatus,
    affected_count: int = 0,
    metadata: dict[str, Any] | None = None,
    error_message: str | None = None,
) -> AutomationRun:
    """Persist and commit one run summary."""
    run = AutomationRun(
        rule_name=AutomationRule(rule).value,
        status=AutomationRunStatus(status).value,
        affected_count=affected_count,
        run_metadata=metadata,
        error_message=error_message,
    )
    db.add(run)
    db.commit()
    db.refresh(run)
    return run


def list_runs(
    db: Session, rule_name: AutomationRule | None = None, limit: int = 50
) -> list[AutomationRun]:
    query = db.query(AutomationRun)
    if rule_name:
        query = query.filter(AutomationRun.rule_name == AutomationRule(rule_name).value)
    return query.order_by(AutomationRun.created_at.desc()).limit(limit).all()


def rule_status(db: Session) -> dict[str, AutomationRun | None]:
    """Last run per rule (None for rules that never ran)."""
    return {
        rule.value: (
            db.query(AutomationRun)
            .filter(AutomationRun.rule_name == rule.value)
            .order_by(AutomationRun.created_at.desc())
            .first()
        )
        for rule in AutomationRule
    }


def _finish(
    db: Session, rule: AutomationRule, affected_count: int, metadata: dict[str, Any]
) -> AutomationRun:
    run = record_run(db, rule, AutomationRunStatus.SUCCESS, affected_count, metadata)
    logger.info(
        "Automation rule finished: %s affected=%s",
        rule.value,
        affected_count,
        extra=build_log_context(rule_name=rule.value),
    )
    return run


def _record_failure(db: Session, rule: AutomationRule, exc: Exception) -> None:
    db.rollback()
    record_run(
        db,
        rule,
        AutomationRunStatus.ERROR,
        error_message=f"{type(exc).__name__}: {exc}"[:500],
    )
    logger.exception(
        "Automation rule failed: %s",
        rule.value,
        extra=build_log_context(rule_name=rule.value),
    )


# =============================================================================
# Rules
# =============================================================================

def _scan_overdue_requests(db: Session, now: datetime) -> tuple[int, dict[str, Any]]:
    """
    One query for requests in a stalled status; the updated_at cutoff is
    applied in memory on UTC-normalised values.
    """
    cutoff = now - timedelta(days=settings.AUTOMATION_OVERDUE_DAYS)
    statuses = [status.value for status in STALLED_REQUEST_STATUSES]
    requests = db.query(ServiceRequest).filter(ServiceRequest.status.in_(statuses)).all()
    overdue = [r for r in requests if ensure_utc(r.updated_at) < cutoff]

    items = [
        {
            "service_request_id": str(r.id),
            "organization_id": str(r.organization_id),
            "status": r.status,
            "updated_at": ensure_utc(r.updated_at).isoformat(),
        }
        for r in overdue
    ]
    return len(overdue), {"cutoff": cutoff.isoformat(), "requests": _sample(items)}


def _scan_maintenance_due(db: Session, now: datetime) -> tuple[int, dict[str, Any]]:
    window_end = now + timedelta(days=settings.AUTOMATION_MAINTENANCE_WINDOW_DAYS)
    records = (
        db.query(MaintenanceRecord)
        .filter(
            MaintenanceRecord.status == MaintenanceStatus.SCHEDULED.value,
            MaintenanceRecord.scheduled_at >= now,
            MaintenanceRecord.scheduled_at <= window_end,
        )
        .order_by(MaintenanceRecord.scheduled_at)
        .all()
    )
    items = [
        {
            "maintenance_id": str(m.id),
            "equipment_id": str(m.equipment_id),
            "organization_id": str(m.organization_id),
            "scheduled_at": ensure_utc(m.scheduled_at).isoformat(),
        }
        for m in records
    ]
    return len(records), {"window_end": window_end.isoformat(), "records": _sample(items)}


def _scan_stock_levels(db: Session, now: datetime) -> tuple[int, dict[str, Any]]:
    low_by_org: dict[str, list[Consumable]] = {}
    org_ids = [row[0] for row in db.query(Consumable.organization_id).distinct().all()]
    for org_id in org_ids:
        low = (
            db.query(Consumable)
            .filter(
                Consumable.organization_id == org_id,
                Consumable.current_stock < Consumable.reorder_point,
            )
            .order_by(Consumable.name)
            .all()
        )
        if low:
            low_by_org[str(org_id)] = low

    items = [
        {
            "consumable_id": str(c.id),
            "organization_id": org_id,
            "current_stock": c.current_stock,
            "reorder_point": c.reorder_point,
        }
        for org_id, consumables in low_by_org.items()
        for c in consumables
    ]
    return len(items), {
        "organizations": len(low_by_org),
        "consumables": _sample(items),
    }


def _scan_certification_expiry(db: Session, now: datetime) -> tuple[int, dict[str, Any]]:
    window_end = now + timedelta(days=settings.AUTOMATION_CERTIFICATION_WINDOW_DAYS)
    certifications = (
        db.query(Certification)
        .filter(
            Certification.expires_at.is_not(None),
            Certification.expires_at >= now,
            Certification.expires_at <= window_end,
        )
        .order_by(Certification.expires_at)
        .all()
    )
    items = [
        {
            "certification_id": str(c.id),
            "provider_id": str(c.provider_id),
            "expires_at": ensure_utc(c.expires_at).isoformat(),
        }
        for c in certifications
    ]
    return len(certifications), {
        "window_end": window_end.isoformat(),
        "certifications": _sample(items),
    }


_SCANS = {
    AutomationRule.CHECK_OVERDUE_REQUESTS: _scan_overdue_requests,
    AutomationRule.CHECK_MAINTENANCE_DUE: _scan_maintenance_due,
    AutomationRule.CHECK_STOCK_LEVELS: _scan_stock_levels,
    AutomationRule.CHECK_CERTIFICATION_EXPIRY: _scan_certification_expiry,
}


def run_rule(db: Session, rule: AutomationRule, now: datetime | None = None) -> AutomationRun:
    """
    Run one rule and record its summary.

    On failure an ``error`` run is committed in a fresh transaction and the
    original exception is re-raised.
    """
    rule = AutomationRule(rule)
    scan = _SCANS[rule]
    logger.info(
        "Automation rule started: %s",
        rule.value,
        extra=build_log_context(rule_name=rule.value),
    )
    try:
        affected_count, metadata = scan(db, _now(now))
    except Exception as exc:
        _record_failure(db, rule, exc)
        raise
    return _finish(db, rule, affected_count, metadata)


def check_overdue_requests(db: Session, now: datetime | None = None) -> AutomationRun:
    return run_rule(db, AutomationRule.CHECK_OVERDUE_REQUESTS, now)


def check_maintenance_due(db: Session, now: datetime | None = None) -> AutomationRun:
    return run_rule(db, AutomationRule.CHECK_MAINTENANCE_DUE, now)


def check_stock_levels(db: Session, now: datetime | None = None) -> AutomationRun:
    return run_rule(db, AutomationRule.CHECK_STOCK_LEVELS, now)


def check_certification_expiry(db: Session, now: datetime | None = None) -> AutomationRun:
    return run_rule(db, AutomationRule.CHECK_CERTIFICATION_EXPIRY, now)
