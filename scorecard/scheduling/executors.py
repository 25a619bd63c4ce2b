"""
How a due saved import is actually run.

Import connectors (files, databases) are separate workers; the scheduler only
hands them the saved import id over Celery, together with the claim it took on
``last_run_at``. A worker whose import fails sends ``RELEASE_RUN_TASK`` with
that claim so the window is retried on the next trigger.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from scorecard.models import SavedImport

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_QUEUED = "queued"
STATUS_FAILURE = "failure"
STATUS_SKIPPED = "skipped"

EXECUTE_IMPORT_TASK = "scorecard.execute_saved_import"
RELEASE_RUN_TASK = "scorecard.release_scheduled_import_run"


@dataclass(frozen=True)
class RunClaim:
    """The window a trigger reserved by moving ``last_run_at`` to ``claimed_at``."""
    saved_import_id: object
    claimed_at: datetime
    previous_last_run_at: Optional[datetime]

    def to_task_kwargs(self) -> dict:
        return {
            "saved_import_id": str(self.saved_import_id),
            "claimed_at": self.claimed_at.isoformat(),
            "previous_last_run_at": self.previous_last_run_at.isoformat() if self.previous_last_run_at else None,
        }


@dataclass(frozen=True)
class ExecutionOutcome:
    status: str
    message: str


# Returning a plain message (or None) means the import completed in-process
ImportExecutor = Callable[[SavedImport, RunClaim], Union[ExecutionOutcome, str, None]]


def enqueue_saved_import(saved_import: SavedImport, claim: RunClaim) -> ExecutionOutcome:
    from scorecard.tasks.celery_app import celery_app

    async_result = celery_app.send_task(
        EXECUTE_IMPORT_TASK,
        args=[str(saved_import.id)],
        kwargs={
            "executed_by_user_id": saved_import.created_by_user_id,
            "claim": claim.to_task_kwargs(),
        },
    )
    logger.info(f"📨 [ScheduledImports] Queued import {saved_import.id} as task {async_result.id}")
    return ExecutionOutcome(STATUS_QUEUED, f"Queued as task {async_result.id}")


def get_import_executor() -> ImportExecutor:
    return enqueue_saved_import
