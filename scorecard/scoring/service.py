import logging
import math
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from scorecard.core.config import settings
from scorecard.core.exceptions import NotFoundError, ValidationFailed
from scorecard.core.metrics import kpi_values_scored_total
from scorecard.models import Kpi, KpiValue, KpiColor, ScoringType, NUMERIC_DATA_TYPES
from .engine import ScoreResult, UNSCORED, calculate_score_and_color

logger = logging.getLogger(__name__)


def parse_numeric(raw: Optional[str]) -> Optional[float]:
    """Blank or non-numeric text maps to None; NaN/inf are rejected too."""
    if raw is None:
        return None
    text = str(raw).strip()
    if text == "":
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def format_value(value: Optional[float], precision: int) -> Optional[str]:
    """Render a computed number as stored text with the KPI's decimal precision."""
    if value is None:
        return None
    precision = max(0, int(precision or 0))
    return f"{value:.{precision}f}"


def _is_blank(raw: Optional[str]) -> bool:
    return raw is None or str(raw).strip() == ""


def score_kpi_value(
    kpi: Kpi,
    actual_value: Optional[str],
    target_value: Optional[str] = None,
    threshold_red: Optional[str] = None,
    threshold_yellow: Optional[str] = None,
) -> ScoreResult:
    """Compute (score, color) for a raw text value according to the KPI's scoring type.

    Raises ``ValidationFailed`` when a numeric KPI receives text that is not a number,
    so the caller can reject the write instead of silently storing an unscored row.
    """
    if kpi.scoring_type == ScoringType.TEXT:
        return UNSCORED

    if kpi.scoring_type == ScoringType.YES_NO:
        if _is_blank(actual_value):
            return UNSCORED
        normalized = str(actual_value).strip().lower()
        if normalized in ("yes", "1"):
            return ScoreResult(score=100, color=KpiColor.GREEN)
        if normalized in ("no", "0"):
            return ScoreResult(score=0, color=KpiColor.RED)
        return UNSCORED

    actual = parse_numeric(actual_value)
    if actual is None and not _is_blank(actual_value) and kpi.data_type in NUMERIC_DATA_TYPES:
        raise ValidationFailed(f"Actual value '{actual_value}' is not a valid {kpi.data_type.value}")

    parsed = {}
    for label, raw in (("target", target_value), ("red threshold", threshold_red), ("yellow threshold", threshold_yellow)):
        value = parse_numeric(raw)
        if value is None and not _is_blank(raw):
            raise ValidationFailed(f"The {label} '{raw}' is not a valid number")
        parsed[label] = value

    return calculate_score_and_color(actual, parsed["target"], parsed["red threshold"], parsed["yellow threshold"])


class KpiValueService:
    """Writes KPI values; every write passes through the scoring engine."""

    def __init__(self, db: Session):
        self.db = db

    def get_kpi(self, kpi_id) -> Kpi:
        kpi = self.db.get(Kpi, kpi_id)
        if not kpi:
            raise NotFoundError(f"KPI {kpi_id} not found")
        return kpi

    def get_value(self, kpi_id, period_date: date) -> Optional[KpiValue]:
        return (
            self.db.query(KpiValue)
            .filter(KpiValue.kpi_id == kpi_id, KpiValue.period_date == period_date)
            .first()
        )

    def record_value(
        self,
        kpi: Kpi,
        period_date: date,
        actual_value: Optional[str],
        target_value: Optional[str] = None,
        threshold_red: Optional[str] = None,
        threshold_yellow: Optional[str] = None,
        note: Optional[str] = None,
        updated_by_user_id: Optional[str] = None,
        is_manual_entry: bool = False,
        require_note: bool = False,
        source: str = "manual",
    ) -> KpiValue:
        """Upsert the (kpi, period) row. Flushes but does not commit.

        ``require_note`` enforces REQUIRE_NOTE_FOR_RED_KPI; only manual entry sets it.
        """
        result = score_kpi_value(kpi, actual_value, target_value, threshold_red, threshold_yellow)

        if require_note and settings.REQUIRE_NOTE_FOR_RED_KPI and result.color == KpiColor.RED and _is_blank(note):
            raise ValidationFailed("A note is required when a KPI value is Red")

        row = self.get_value(kpi.id, period_date)
        if row is None:
            row = KpiValue(kpi_id=kpi.id, period_date=period_date)
            self.db.add(row)

        row.actual_value = actual_value
        row.target_value = target_value
        row.threshold_red = threshold_red
        row.threshold_yellow = threshold_yellow
        row.score = result.score
        row.color = result.color
        row.note = note
        row.updated_by_user_id = updated_by_user_id
        row.is_manual_entry = is_manual_entry
        self.db.flush()

        kpi_values_scored_total.labels(source=source).inc()
        logger.info(
            f"📊 [KpiValue] kpi={kpi.id} period={period_date.isoformat()} "
            f"score={result.score} color={result.color.value if result.color else None} source={source}"
        )
        return row

    def record_computed_value(self, kpi: Kpi, period_date: date, actual_value: Optional[str], source: str) -> KpiValue:
        """Write a formula/rollup result, keeping the period's existing target and thresholds."""
        existing = self.get_value(kpi.id, period_date)
        return self.record_value(
            kpi,
            period_date,
            actual_value,
            target_value=existing.target_value if existing else None,
            threshold_red=existing.threshold_red if existing else None,
            threshold_yellow=existing.threshold_yellow if existing else None,
            note=existing.note if existing else None,
            is_manual_entry=False,
            source=source,
        )

    def record_manual_value(self, kpi_id, period_date: date, **fields) -> KpiValue:
        kpi = self.get_kpi(kpi_id)
        try:
            row = self.record_value(
                kpi, period_date, is_manual_entry=True, require_note=True, source="manual", **fields
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row
