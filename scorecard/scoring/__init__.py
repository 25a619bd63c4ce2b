"""Scoring engine and the KPI value write path built on it."""

from .engine import ScoreResult, UNSCORED, calculate_score_and_color
from .service import KpiValueService, score_kpi_value, parse_numeric, format_value
