import enum
import uuid

from sqlalchemy import (
    Column,
    String,
    Text,
    Date,
    DateTime,
    Boolean,
    Integer,
    Numeric,
    Enum,
    ForeignKey,
    Uuid,
    UniqueConstraint,
)

from scorecard.db.base import Base
from scorecard.models.scorecard_element import _enum_values
from scorecard.utils.timezone import utcnow


class ScoringType(str, enum.Enum):
    GOAL_RED_FLAG = "Goal/Red Flag"
    YES_NO = "Yes/No"
    TEXT = "Text"


class CalendarFrequency(str, enum.Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUALLY = "Annually"


class DataType(str, enum.Enum):
    NUMBER = "Number"
    PERCENTAGE = "Percentage"
    CURRENCY = "Currency"
    TEXT = "Text"


NUMERIC_DATA_TYPES = {DataType.NUMBER, DataType.PERCENTAGE, DataType.CURRENCY}


class AggregationType(str, enum.Enum):
    SUM = "Sum"
    AVERAGE = "Average"
    LAST_VALUE = "Last Value"


class KpiColor(str, enum.Enum):
    RED = "Red"
    YELLOW = "Yellow"
    GREEN = "Green"


class Kpi(Base):
    """KPI configuration, owned 1:1 by a scorecard element of type KPI."""
    __tablename__ = "kpis"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    scorecard_element_id = Column(
        Uuid, ForeignKey("scorecard_elements.id", ondelete="CASCADE"), nullable=False
    )
    scoring_type = Column(Enum(ScoringType, name="kpi_scoring_type", values_callable=_enum_values), nullable=False)
    calendar_frequency = Column(
        Enum(CalendarFrequency, name="kpi_calendar_frequency", values_callable=_enum_values),
        nullable=False,
        default=CalendarFrequency.MONTHLY,
    )
    data_type = Column(Enum(DataType, name="kpi_data_type", values_callable=_enum_values), nullable=False)
    aggregation_type = Column(
        Enum(AggregationType, name="kpi_aggregation_type", values_callable=_enum_values), nullable=False
    )
    decimal_precision = Column(Integer, nullable=False, default=0)
    is_manual_update = Column(Boolean, nullable=False, default=False)
    calculation_equation = Column(Text, nullable=True)
    rollup_enabled = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("scorecard_element_id", name="uq_kpis_scorecard_element_id"),
    )


class KpiValue(Base):
    """One row per (KPI, period). Raw values are text; score/color are derived."""
    __tablename__ = "kpi_values"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    kpi_id = Column(Uuid, ForeignKey("kpis.id", ondelete="CASCADE"), nullable=False, index=True)
    period_date = Column(Date, nullable=False)
    actual_value = Column(Text, nullable=True)
    target_value = Column(Text, nullable=True)
    threshold_red = Column(Text, nullable=True)
    threshold_yellow = Column(Text, nullable=True)
    score = Column(Numeric(6, 2), nullable=True)
    color = Column(Enum(KpiColor, name="kpi_color", values_callable=_enum_values), nullable=True)
    updated_by_user_id = Column(String, nullable=True)
    is_manual_entry = Column(Boolean, nullable=False, default=False)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("kpi_id", "period_date", name="uq_kpi_values_kpi_period"),
    )
