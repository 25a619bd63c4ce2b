import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from scorecard.core.exceptions import ValidationFailed
from scorecard.models import Kpi, KpiValue, ScorecardElement
from scorecard.scoring.service import KpiValueService, format_value
from .resolver import KpiReference, extract_references, substitute

logger = logging.getLogger(__name__)

Evaluator = Callable[[str], Union[float, int, str, None]]


@dataclass
class ResolvedFormula:
    equation: str
    expression: str
    references: List[KpiReference]
    values: Dict[str, Optional[str]] = field(default_factory=dict)
    unresolved: List[str] = field(default_factory=list)


class FormulaService:
    def __init__(self, db: Session):
        self.db = db
        self.values = KpiValueService(db)

    def _organization_of(self, kpi: Kpi):
        element = self.db.get(ScorecardElement, kpi.scorecard_element_id)
        return element.organization_id if element else None

    def _find_referenced_kpi(self, ref: KpiReference, organization_id) -> Optional[Kpi]:
        if ref.is_id:
            return self.db.get(Kpi, uuid.UUID(ref.identifier))
        # Names resolve within the formula KPI's own organization
        return (
            self.db.query(Kpi)
            .join(ScorecardElement, ScorecardElement.id == Kpi.scorecard_element_id)
            .filter(
                ScorecardElement.organization_id == organization_id,
                ScorecardElement.name == ref.identifier,
            )
            .order_by(ScorecardElement.order_index, ScorecardElement.created_at)
            .first()
        )

    def resolve(self, kpi_id, period_date: date) -> ResolvedFormula:
        kpi = self.values.get_kpi(kpi_id)
        if not kpi.calculation_equation:
            raise ValidationFailed(f"KPI {kpi_id} has no calculation equation")

        organization_id = self._organization_of(kpi)
        references = extract_references(kpi.calculation_equation)
        values: Dict[str, Optional[str]] = {}
        unresolved: List[str] = []

        for ref in references:
            if ref.identifier in values or ref.identifier in unresolved:
                continue
            referenced = self._find_referenced_kpi(ref, organization_id)
            if referenced is None:
                unresolved.append(ref.identifier)
                continue
            row = (
                self.db.query(KpiValue)
                .filter(KpiValue.kpi_id == referenced.id, KpiValue.period_date == period_date)
                .first()
            )
            values[ref.identifier] = row.actual_value if row else None

        if unresolved:
            logger.warning(f"⚠️ [Formula] KPI {kpi_id} references unknown KPIs: {unresolved}")

        return ResolvedFormula(
            equation=kpi.calculation_equation,
            expression=substitute(kpi.calculation_equation, values),
            references=references,
            values=values,
            unresolved=unresolved,
        )

    def compute(self, kpi_id, period_date: date, evaluator: Evaluator) -> KpiValue:
        """Resolve, evaluate with the caller's evaluator, and store the result.

        No arithmetic evaluator ships with this package; the caller decides how the
        substituted expression is evaluated.
        """
        resolved = self.resolve(kpi_id, period_date)
        if resolved.unresolved:
            raise ValidationFailed(
                f"Cannot compute KPI {kpi_id}: unresolved references {', '.join(resolved.unresolved)}"
            )

        kpi = self.values.get_kpi(kpi_id)
        result = evaluator(resolved.expression)
        if isinstance(result, (int, float)) and not isinstance(result, bool):
            actual = format_value(float(result), kpi.decimal_precision)
        else:
            actual = None if result is None else str(result)

        try:
            row = self.values.record_computed_value(kpi, period_date, actual, source="formula")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"🧮 [Formula] KPI {kpi_id} {period_date.isoformat()}: '{resolved.expression}' = {actual}")
        return row
