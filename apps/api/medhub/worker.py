"""
Background worker for the scheduled automation rules.

Usage:
    python -m medhub.worker

The worker wakes every WORKER_POLL_INTERVAL seconds, compares each rule's
last recorded run against its cadence and runs the rules that are due.
For production, run this as a separate process (e.g., systemd service, Docker container).
"""

import asyncio
import logging
from datetime import datetime, timezone

from medhub.core.config import settings
from medhub.core.structured_logging import build_log_context
from medhub.db.session import SessionLocal
from medhub.jobs.registry import resolve_rule_handler
from medhub.jobs.schedule import due_rules
from medhub.services import automation_service

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = settings.WORKER_POLL_INTERVAL


def run_due_rules(db, now: datetime | None = None) -> list[str]:
    """Run every rule whose slot has passed; returns the names that ran."""
    now = now or datetime.now(timezone.utc)
    last_runs = {
        rule_name: run.created_at if run else None
        for rule_name, run in automation_service.rule_status(db).items()
    }
    ran = []
    for rule in due_rules(now, last_runs):
        handler = resolve_rule_handler(rule.value)
        try:
            handler(db, now)
        except Exception as e:
            # The error run is already recorded; keep going with the other rules.
            logger.error(
                "Rule %s failed: %s",
                rule.value,
                type(e).__name__,
                extra=build_log_context(rule_name=rule.value),
            )
        ran.append(rule.value)
    return ran


async def worker_loop() -> None:
    """Main worker loop - polls the schedule and runs due rules."""
    logger.info(f"Worker starting (poll interval: {POLL_INTERVAL_SECONDS}s)")

    while True:
        with SessionLocal() as db:
            try:
                ran = run_due_rules(db)
                if ran:
                    logger.info(f"Ran {len(ran)} automation rules: {', '.join(ran)}")
            except Exception as e:
                logger.error(f"Error in worker loop: {e}")

        await asyncio.sleep(POLL_INTERVAL_SECONDS)


def main() -> None:
    """Entry point for the worker."""
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker shutting down")


if __name__ == "__main__":
    main()
