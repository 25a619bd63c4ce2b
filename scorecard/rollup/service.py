import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from scorecard.core.exceptions import NotFoundError, ValidationFailed
from scorecard.core.locks import organization_lock
from scorecard.core.metrics import rollups_computed_total
from scorecard.models import AggregationType, Kpi, KpiValue, ScorecardElement
from scorecard.scoring.service import KpiValueService, format_value, parse_numeric
from .aggregator import ValueSample, aggregate
from .hierarchy import get_descendant_organization_ids

logger = logging.getLogger(__name__)


@dataclass
class RollupResult:
    kpi_id: object
    period_date: date
    value: Optional[float]
    descendant_count: int
    contributing_kpis: int
    kpi_value: Optional[KpiValue] = None


class RollupService:
    def __init__(self, db: Session):
        self.db = db
        self.values = KpiValueService(db)

    def _element_for(self, kpi: Kpi) -> ScorecardElement:
        element = self.db.get(ScorecardElement, kpi.scorecard_element_id)
        if not element:
            raise NotFoundError(f"Scorecard element for KPI {kpi.id} not found")
        return element

    def _matching_kpis(self, element_name: str, organization_ids: List) -> List[Kpi]:
        if not organization_ids:
            return []
        return (
            self.db.query(Kpi)
            .join(ScorecardElement, ScorecardElement.id == Kpi.scorecard_element_id)
            .filter(
                ScorecardElement.organization_id.in_(organization_ids),
                ScorecardElement.name == element_name,
            )
            .order_by(ScorecardElement.created_at, Kpi.id)
            .all()
        )

    def _samples(self, aggregation_type: AggregationType, kpis: List[Kpi], period_date: date) -> List[ValueSample]:
        samples = []
        for kpi in kpis:
            query = self.db.query(KpiValue).filter(KpiValue.kpi_id == kpi.id)
            if aggregation_type == AggregationType.LAST_VALUE:
                # Most recent period on or before the one being rolled up
                row = (
                    query.filter(KpiValue.period_date <= period_date)
                    .order_by(KpiValue.period_date.desc(), KpiValue.updated_at.desc())
                    .first()
                )
            else:
                row = query.filter(KpiValue.period_date == period_date).first()
            if row is not None:
                samples.append(ValueSample(period_date=row.period_date, value=parse_numeric(row.actual_value)))
        return samples

    def compute(self, kpi_id, period_date: date) -> RollupResult:
        """Aggregate the same-named KPI across all descendant organizations and store it.

        Nothing is written when no descendant has data for the period.
        """
        kpi = self.values.get_kpi(kpi_id)
        if not kpi.rollup_enabled:
            raise ValidationFailed(f"KPI {kpi_id} does not have rollup enabled")
        element = self._element_for(kpi)

        with organization_lock(element.organization_id):
            try:
                descendants = get_descendant_organization_ids(self.db, element.organization_id)
                matching = self._matching_kpis(element.name, descendants)
                samples = self._samples(kpi.aggregation_type, matching, period_date)
                value = aggregate(kpi.aggregation_type, samples)

                result = RollupResult(
                    kpi_id=kpi.id,
                    period_date=period_date,
                    value=value,
                    descendant_count=len(descendants),
                    contributing_kpis=sum(1 for s in samples if s.value is not None),
                )
                if value is None:
                    logger.info(
                        f"🔄 [Rollup] KPI {kpi_id} '{element.name}' {period_date.isoformat()}: "
                        f"no descendant data across {len(descendants)} organizations"
                    )
                    return result

                result.kpi_value = self.values.record_computed_value(
                    kpi, period_date, format_value(value, kpi.decimal_precision), source="rollup"
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        rollups_computed_total.inc()
        logger.info(
            f"🔄 [Rollup] KPI {kpi_id} '{element.name}' {period_date.isoformat()}: "
            f"{kpi.aggregation_type.value} of {result.contributing_kpis} values = {value}"
        )
        return result

    def set_rollup_enabled(self, kpi_id, enabled: bool) -> Kpi:
        """Switch a KPI's value source to/from rollup; the equation is always cleared."""
        kpi = self.values.get_kpi(kpi_id)
        kpi.rollup_enabled = enabled
        kpi.is_manual_update = not enabled
        kpi.calculation_equation = None
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(kpi)
        logger.info(f"🔄 [Rollup] KPI {kpi_id} rollup_enabled={enabled}")
        return kpi

    def rollup_kpis_for_organization(self, organization_id) -> List[Kpi]:
        """Rollup-enabled KPIs owned by an organization (used by recompute jobs)."""
        return (
            self.db.query(Kpi)
            .join(ScorecardElement, ScorecardElement.id == Kpi.scorecard_element_id)
            .filter(ScorecardElement.organization_id == organization_id, Kpi.rollup_enabled.is_(True))
            .all()
        )
