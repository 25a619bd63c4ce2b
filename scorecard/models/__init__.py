from .organization import Organization
from .scorecard_element import ScorecardElement, ScorecardElementType
from .kpi import (
    Kpi,
    KpiValue,
    ScoringType,
    CalendarFrequency,
    DataType,
    AggregationType,
    KpiColor,
    NUMERIC_DATA_TYPES,
)
from .saved_import import SavedImport
