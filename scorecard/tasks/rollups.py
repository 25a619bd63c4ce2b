"""Recompute every rollup KPI of an organization after child data changed."""
import logging
import uuid
from datetime import date
from typing import Dict, Optional

from celery import shared_task

from scorecard.core.exceptions import ScorecardError
from scorecard.core.logging import configure_logging
from scorecard.db.session import get_db_session
from scorecard.rollup.service import RollupService

logger = logging.getLogger(__name__)


@shared_task(name="scorecard.recompute_rollups")
def recompute_rollups_task(organization_id: str, period_date: str) -> Dict[str, Optional[float]]:
    configure_logging()
    period = date.fromisoformat(period_date)
    computed: Dict[str, Optional[float]] = {}
    with get_db_session() as db:
        service = RollupService(db)
        for kpi in service.rollup_kpis_for_organization(uuid.UUID(organization_id)):
            try:
                computed[str(kpi.id)] = service.compute(kpi.id, period).value
            except ScorecardError as e:
                logger.error(f"❌ [Rollup] KPI {kpi.id} failed for {period_date}: {e}")
    return computed
