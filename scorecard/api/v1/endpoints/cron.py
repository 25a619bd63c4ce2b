import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from scorecard.api.deps import get_db, verify_cron_secret
from scorecard.scheduling.executors import ImportExecutor, get_import_executor
from scorecard.scheduling.service import ScheduledImportService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_cron_secret)])


@router.post("/run-scheduled-imports")
def run_scheduled_imports(
    db: Session = Depends(get_db),
    executor: ImportExecutor = Depends(get_import_executor),
):
    logger.info("Starting scheduled KPI imports check")
    try:
        results = ScheduledImportService(db).run_due_imports(executor)
    except Exception as e:
        logger.error(f"Error during scheduled KPI imports cron job: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal error while processing scheduled imports"},
        )
    return {
        "success": True,
        "message": "Scheduled imports processed",
        "results": [r.to_dict() for r in results],
    }
