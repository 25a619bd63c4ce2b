from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from scorecard.models.kpi import AggregationType, DataType, KpiColor, ScoringType


class KpiValueCreate(BaseModel):
    period_date: date
    actual_value: Optional[str] = None
    target_value: Optional[str] = None
    threshold_red: Optional[str] = None
    threshold_yellow: Optional[str] = None
    note: Optional[str] = None
    updated_by_user_id: Optional[str] = None


class KpiValueRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    kpi_id: UUID
    period_date: date
    actual_value: Optional[str] = None
    target_value: Optional[str] = None
    threshold_red: Optional[str] = None
    threshold_yellow: Optional[str] = None
    score: Optional[float] = None
    color: Optional[KpiColor] = None
    is_manual_entry: bool
    note: Optional[str] = None


class KpiReferenceRead(BaseModel):
    identifier: str
    is_id: bool
    original_match: str


class ResolvedFormulaRead(BaseModel):
    equation: str
    expression: str
    references: List[KpiReferenceRead]
    values: Dict[str, Optional[str]]
    unresolved: List[str]


class RollupToggle(BaseModel):
    rollup_enabled: bool


class KpiRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    scorecard_element_id: UUID
    scoring_type: ScoringType
    data_type: DataType
    aggregation_type: AggregationType
    decimal_precision: int
    is_manual_update: bool
    calculation_equation: Optional[str] = None
    rollup_enabled: bool


class RollupResultRead(BaseModel):
    kpi_id: UUID
    period_date: date
    value: Optional[float] = None
    descendant_count: int
    contributing_kpis: int
    kpi_value: Optional[KpiValueRead] = None
