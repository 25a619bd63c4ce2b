"""
Schedule configuration for recurring imports, one variant per frequency.

Stored as JSON (camelCase keys) on ``saved_imports.schedule_config`` and
validated here before the recurrence engine ever sees it.
"""
from typing import Annotated, Any, Dict, Literal, Union

from croniter import croniter
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"


class _ScheduleBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM, UTC")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DailySchedule(_ScheduleBase):
    frequency: Literal["daily"] = "daily"


class WeeklySchedule(_ScheduleBase):
    frequency: Literal["weekly"] = "weekly"
    day_of_week: int = Field(..., alias="dayOfWeek", ge=0, le=6, description="0 = Sunday")


class MonthlySchedule(_ScheduleBase):
    frequency: Literal["monthly"] = "monthly"
    day_of_month: int = Field(..., alias="dayOfMonth", ge=1, le=31)


class QuarterlySchedule(_ScheduleBase):
    frequency: Literal["quarterly"] = "quarterly"
    month_of_year: int = Field(..., alias="monthOfYear", ge=1, le=12)


class AnnualSchedule(_ScheduleBase):
    frequency: Literal["annually"] = "annually"
    month_of_year: int = Field(..., alias="monthOfYear", ge=1, le=12)


class CustomSchedule(_ScheduleBase):
    frequency: Literal["custom"] = "custom"
    custom_cron: str = Field(..., alias="customCron")

    @field_validator("custom_cron")
    @classmethod
    def cron_must_be_valid(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("customCron is required for custom schedules")
        if not croniter.is_valid(v):
            raise ValueError(f"'{v}' is not a valid cron expression")
        return v


ScheduleConfig = Annotated[
    Union[DailySchedule, WeeklySchedule, MonthlySchedule, QuarterlySchedule, AnnualSchedule, CustomSchedule],
    Field(discriminator="frequency"),
]

_schedule_adapter = TypeAdapter(ScheduleConfig)


def parse_schedule_config(data: Any) -> ScheduleConfig:
    """Validate a stored/posted schedule; raises ``pydantic.ValidationError``."""
    if isinstance(data, _ScheduleBase):
        return data
    return _schedule_adapter.validate_python(data)
