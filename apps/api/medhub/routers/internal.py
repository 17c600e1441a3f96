"""
Internal endpoints for scheduled/cron operations.

Protected by X-Internal-Secret header.
Call from external cron (Cloud Scheduler/GH Actions) when the worker is not running.
"""

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from medhub.core.config import settings
from medhub.core.deps import get_db
from medhub.core.errors import ForbiddenError, NotFoundError
from medhub.jobs.registry import resolve_rule_handler
from medhub.schemas import AutomationRunRead

router = APIRouter(prefix="/internal/scheduled", tags=["internal"])


def verify_internal_secret(x_internal_secret: str = Header(...)):
    """Verify the internal secret header."""
    expected = settings.INTERNAL_SECRET
    if not expected:
        raise HTTPException(status_code=501, detail="INTERNAL_SECRET not configured")
    if x_internal_secret != expected:
        raise ForbiddenError(
            "Mã bí mật nội bộ không hợp lệ",
            "Invalid internal secret",
        )


@router.post(
    "/{rule_name}",
    response_model=AutomationRunRead,
    dependencies=[Depends(verify_internal_secret)],
)
def run_scheduled_rule(rule_name: str, db: Session = Depends(get_db)):
    """Run one automation rule now (checkOverdueRequests, checkStockLevels, ...)."""
    try:
        handler = resolve_rule_handler(rule_name)
    except ValueError:
        raise NotFoundError("automation_rule", rule_name)
    run = handler(db, None)
    return AutomationRunRead.model_validate(run)
