"""Celery tasks for recurring KPI imports: the beat scan and the worker's failure release."""
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from celery import shared_task

from scorecard.core.logging import configure_logging
from scorecard.db.session import SessionLocal
from scorecard.scheduling.executors import (
    RELEASE_RUN_TASK,
    STATUS_QUEUED,
    STATUS_SUCCESS,
    RunClaim,
    get_import_executor,
)
from scorecard.scheduling.service import ScheduledImportService

logger = logging.getLogger(__name__)


@shared_task(name="scorecard.run_scheduled_imports")
def run_scheduled_imports_task() -> List[dict]:
    """Run every due scheduled import. Returns one result dict per scheduled import."""
    configure_logging()
    db = SessionLocal()
    try:
        results = ScheduledImportService(db).run_due_imports(get_import_executor())
    finally:
        db.close()
    logger.info(
        f"🕒 [ScheduledImports] Beat cycle done: "
        f"{sum(1 for r in results if r.status in (STATUS_SUCCESS, STATUS_QUEUED))} executed or queued of {len(results)} scheduled"
    )
    return [r.to_dict() for r in results]


@shared_task(name=RELEASE_RUN_TASK)
def release_scheduled_import_run_task(
    saved_import_id: str, claimed_at: str, previous_last_run_at: Optional[str] = None
) -> bool:
    """Sent by the import worker when a queued import fails, with the claim it received."""
    configure_logging()
    claim = RunClaim(
        saved_import_id=uuid.UUID(saved_import_id),
        claimed_at=datetime.fromisoformat(claimed_at),
        previous_last_run_at=datetime.fromisoformat(previous_last_run_at) if previous_last_run_at else None,
    )
    db = SessionLocal()
    try:
        return ScheduledImportService(db).release_claim(claim)
    finally:
        db.close()
