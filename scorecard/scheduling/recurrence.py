"""
Due-check for recurring scheduled tasks.

An external trigger (cron endpoint / Celery beat) fires periodically; for each
task we compute the most recent moment the schedule should have fired at or
before "now" and run the task only if its last run predates that moment.
All timestamps are compared as UTC.
"""
import calendar
from datetime import datetime, timedelta
from typing import Optional

from scorecard.utils.timezone import to_utc_naive


def adjust_to_schedule_time(moment: datetime, time_str: str) -> datetime:
    hours, minutes = (int(part) for part in time_str.split(":"))
    return moment.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def _sunday_based_weekday(moment: datetime) -> int:
    # datetime.weekday() is 0 = Monday; schedules use 0 = Sunday
    return (moment.weekday() + 1) % 7


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _monthly_candidate(year: int, month: int, day_of_month: int, base: datetime) -> datetime:
    day = min(day_of_month, _days_in_month(year, month))
    return base.replace(year=year, month=month, day=day)


def previous_scheduled_run(schedule, reference_time: datetime) -> datetime:
    """Latest firing time at or before ``reference_time``.

    ``custom`` (and any frequency this engine does not know) returns
    ``reference_time`` itself: the external trigger's own cadence decides.
    """
    reference_time = to_utc_naive(reference_time)
    frequency = getattr(schedule, "frequency", None)
    time_str = getattr(schedule, "time", None)
    if frequency == "custom" or not time_str:
        return reference_time

    prev_run = adjust_to_schedule_time(reference_time, time_str)

    if frequency == "weekly" and getattr(schedule, "day_of_week", None) is not None:
        days_diff = _sunday_based_weekday(reference_time) - schedule.day_of_week
        if days_diff < 0 or (days_diff == 0 and prev_run > reference_time):
            days_diff += 7
        return prev_run - timedelta(days=days_diff)

    if frequency == "monthly" and getattr(schedule, "day_of_month", None) is not None:
        candidate = _monthly_candidate(prev_run.year, prev_run.month, schedule.day_of_month, prev_run)
        if candidate > reference_time:
            year, month = (prev_run.year - 1, 12) if prev_run.month == 1 else (prev_run.year, prev_run.month - 1)
            candidate = _monthly_candidate(year, month, schedule.day_of_month, prev_run)
        return candidate

    if frequency in ("quarterly", "annually") and getattr(schedule, "month_of_year", None) is not None:
        candidate = prev_run.replace(month=schedule.month_of_year, day=1)
        if candidate > reference_time:
            candidate = candidate.replace(year=candidate.year - 1)
        return candidate

    if frequency in ("daily", "weekly", "monthly", "quarterly", "annually"):
        # daily, or a periodic schedule missing its anchor field
        if prev_run > reference_time:
            prev_run -= timedelta(days=1)
        return prev_run

    return reference_time


def is_due(schedule, last_run_at: Optional[datetime], current_time: datetime) -> bool:
    """True when the task has not run since its latest scheduled firing.

    A task that never ran is always due. Equality with the firing time means the
    window already ran, so it is not due again.
    """
    if last_run_at is None:
        return True
    if schedule is None:
        return False
    return to_utc_naive(last_run_at) < previous_scheduled_run(schedule, current_time)
