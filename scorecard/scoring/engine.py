import math
from dataclasses import dataclass
from typing import Optional

from scorecard.models.kpi import KpiColor


@dataclass(frozen=True)
class ScoreResult:
    score: Optional[float]
    color: Optional[KpiColor]


UNSCORED = ScoreResult(score=None, color=None)


def _missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def calculate_score_and_color(
    actual: Optional[float],
    target: Optional[float],
    threshold_red: Optional[float],
    threshold_yellow: Optional[float],
) -> ScoreResult:
    """Score a Goal/Red Flag KPI value, assuming higher is better.

    With a target, reaching it is Green (100); otherwise the yellow threshold
    gives Yellow (50) and the red threshold Red (25), anything lower Red (0).
    Without a target the thresholds alone give Yellow (75) / Red (50) / Red (0).
    The 25 vs 50 asymmetry between the two branches is intentional and covered
    by tests.

    Pure and total: missing or NaN ``actual`` and insufficient configuration
    yield ``UNSCORED`` instead of raising.
    """
    if _missing(actual):
        return UNSCORED

    score: Optional[float] = None
    color: Optional[KpiColor] = None

    if target is not None:
        if actual >= target:
            score, color = 100, KpiColor.GREEN
        elif threshold_yellow is not None and actual >= threshold_yellow:
            score, color = 50, KpiColor.YELLOW
        elif threshold_red is not None and actual >= threshold_red:
            score, color = 25, KpiColor.RED
        else:
            score, color = 0, KpiColor.RED
    elif threshold_red is not None or threshold_yellow is not None:
        floor = threshold_red if threshold_red is not None else threshold_yellow
        if threshold_yellow is not None and actual >= threshold_yellow:
            score, color = 75, KpiColor.YELLOW
        elif threshold_red is not None and actual >= threshold_red:
            score, color = 50, KpiColor.RED
        elif actual < floor:
            score, color = 0, KpiColor.RED

    if score is None:
        return UNSCORED
    return ScoreResult(score=max(0, min(100, score)), color=color)
