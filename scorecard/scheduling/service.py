import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.orm import Session

from scorecard.core.metrics import (
    scheduled_import_scans_total,
    scheduled_imports_executed_total,
    scheduled_imports_failed_total,
)
from scorecard.models import SavedImport
from scorecard.schemas.schedule import parse_schedule_config
from scorecard.utils.timezone import to_utc_naive, utcnow
from .executors import (
    STATUS_FAILURE,
    STATUS_SKIPPED,
    STATUS_SUCCESS,
    ExecutionOutcome,
    ImportExecutor,
    RunClaim,
)
from .recurrence import is_due

logger = logging.getLogger(__name__)


@dataclass
class ScheduledImportResult:
    id: str
    name: str
    status: str
    message: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "status": self.status, "message": self.message}


class ScheduledImportService:
    def __init__(self, db: Session):
        self.db = db

    def scheduled_imports(self) -> List[SavedImport]:
        return (
            self.db.query(SavedImport)
            .filter(SavedImport.schedule_config.isnot(None))
            .order_by(SavedImport.name)
            .all()
        )

    def _swap_last_run(self, saved_import_id, expected: Optional[datetime], new_value: Optional[datetime]) -> bool:
        condition = (
            SavedImport.last_run_at.is_(None)
            if expected is None
            else SavedImport.last_run_at == expected
        )
        result = self.db.execute(
            update(SavedImport)
            .where(SavedImport.id == saved_import_id)
            .where(condition)
            .values(last_run_at=new_value, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def claim_run(self, saved_import_id, observed_last_run_at: Optional[datetime], run_at: datetime) -> bool:
        """Record the run before executing, only if nobody recorded one since we looked.

        Two overlapping triggers can both see an import as due; the conditional
        update lets exactly one of them claim the window.
        """
        return self._swap_last_run(saved_import_id, observed_last_run_at, run_at)

    def release_run(self, saved_import_id, claimed_at: datetime, previous_last_run_at: Optional[datetime]) -> bool:
        """Undo a claim after a failed execution so the next trigger retries the window.

        Only succeeds while ``last_run_at`` still holds ``claimed_at``; a later
        run is never rolled back.
        """
        released = self._swap_last_run(saved_import_id, claimed_at, previous_last_run_at)
        if released:
            logger.info(f"↩️  [ScheduledImports] Released run window of {saved_import_id} claimed at {claimed_at.isoformat()}")
        else:
            logger.warning(f"⚠️ [ScheduledImports] Claim of {saved_import_id} at {claimed_at.isoformat()} no longer held")
        return released

    def release_claim(self, claim: RunClaim) -> bool:
        return self.release_run(claim.saved_import_id, claim.claimed_at, claim.previous_last_run_at)

    def run_due_imports(self, executor: ImportExecutor, now: Optional[datetime] = None) -> List[ScheduledImportResult]:
        """Claim and execute every due import.

        An executor that only queues the import returns a ``queued`` outcome; the
        window stays claimed and the worker releases it if the import fails.
        """
        now = to_utc_naive(now) if now else utcnow()
        scheduled_import_scans_total.inc()
        imports = self.scheduled_imports()
        logger.info(f"🕒 [ScheduledImports] Checking {len(imports)} scheduled imports at {now.isoformat()}")

        results: List[ScheduledImportResult] = []
        for saved_import in imports:
            import_id = str(saved_import.id)
            try:
                schedule = parse_schedule_config(saved_import.schedule_config)
            except ValidationError as e:
                logger.warning(
                    f"⚠️ [ScheduledImports] Skipping '{saved_import.name}' ({import_id}): invalid schedule: {e.errors()}"
                )
                results.append(ScheduledImportResult(import_id, saved_import.name, STATUS_SKIPPED, "Invalid schedule configuration"))
                continue

            observed_last_run = saved_import.last_run_at
            if not is_due(schedule, observed_last_run, now):
                logger.info(f"⏭️  [ScheduledImports] '{saved_import.name}' not due yet")
                results.append(ScheduledImportResult(import_id, saved_import.name, STATUS_SKIPPED, "Not due"))
                continue

            if not self.claim_run(saved_import.id, observed_last_run, now):
                logger.warning(f"⚠️ [ScheduledImports] '{saved_import.name}' was claimed by a concurrent trigger")
                results.append(
                    ScheduledImportResult(import_id, saved_import.name, STATUS_SKIPPED, "Already run by a concurrent trigger")
                )
                continue

            claim = RunClaim(saved_import_id=saved_import.id, claimed_at=now, previous_last_run_at=observed_last_run)
            logger.info(f"➡️  [ScheduledImports] Executing due import '{saved_import.name}' ({import_id})")
            try:
                outcome = executor(saved_import, claim)
            except Exception as e:
                self.db.rollback()
                self.release_claim(claim)
                scheduled_imports_failed_total.inc()
                logger.error(f"❌ [ScheduledImports] '{saved_import.name}' failed: {e}")
                results.append(ScheduledImportResult(import_id, saved_import.name, STATUS_FAILURE, str(e)))
                continue

            if not isinstance(outcome, ExecutionOutcome):
                outcome = ExecutionOutcome(STATUS_SUCCESS, outcome or "Import executed")
            scheduled_imports_executed_total.labels(status=outcome.status).inc()
            logger.info(f"✅ [ScheduledImports] '{saved_import.name}' {outcome.status}: {outcome.message}")
            results.append(ScheduledImportResult(import_id, saved_import.name, outcome.status, outcome.message))

        return results
