from datetime import datetime, timedelta, timezone

import pytest

from scorecard.schemas.schedule import parse_schedule_config
from scorecard.scheduling.recurrence import is_due, previous_scheduled_run

# 2024-05-15 is a Wednesday
WEDNESDAY_10AM = datetime(2024, 5, 15, 10, 0)


def schedule(**data):
    return parse_schedule_config(data)


@pytest.mark.parametrize(
    "config",
    [
        {"frequency": "daily", "time": "09:00"},
        {"frequency": "weekly", "time": "09:00", "dayOfWeek": 1},
        {"frequency": "monthly", "time": "09:00", "dayOfMonth": 31},
        {"frequency": "annually", "time": "09:00", "monthOfYear": 1},
        {"frequency": "custom", "time": "09:00", "customCron": "0 9 * * *"},
    ],
)
def test_never_run_is_always_due(config):
    assert is_due(parse_schedule_config(config), None, WEDNESDAY_10AM) is True


def test_no_schedule_with_previous_run_is_not_due():
    assert is_due(None, WEDNESDAY_10AM, WEDNESDAY_10AM) is False


class TestDaily:
    def test_after_schedule_time_uses_today(self):
        cfg = schedule(frequency="daily", time="09:00")
        assert previous_scheduled_run(cfg, WEDNESDAY_10AM) == datetime(2024, 5, 15, 9, 0)

    def test_before_schedule_time_steps_back_a_day(self):
        cfg = schedule(frequency="daily", time="09:00")
        assert previous_scheduled_run(cfg, datetime(2024, 5, 15, 8, 0)) == datetime(2024, 5, 14, 9, 0)

    def test_equal_to_previous_run_is_not_due(self):
        cfg = schedule(frequency="daily", time="09:00")
        assert is_due(cfg, datetime(2024, 5, 15, 9, 0), WEDNESDAY_10AM) is False
        assert is_due(cfg, datetime(2024, 5, 15, 8, 59), WEDNESDAY_10AM) is True


class TestWeekly:
    def test_wednesday_rolls_back_to_monday(self):
        cfg = schedule(frequency="weekly", time="09:00", dayOfWeek=1)
        assert previous_scheduled_run(cfg, WEDNESDAY_10AM) == datetime(2024, 5, 13, 9, 0)

    def test_same_day_before_time_steps_back_a_week(self):
        cfg = schedule(frequency="weekly", time="09:00", dayOfWeek=3)
        assert previous_scheduled_run(cfg, datetime(2024, 5, 15, 8, 0)) == datetime(2024, 5, 8, 9, 0)

    def test_sunday_is_zero(self):
        cfg = schedule(frequency="weekly", time="09:00", dayOfWeek=0)
        assert previous_scheduled_run(cfg, WEDNESDAY_10AM) == datetime(2024, 5, 12, 9, 0)


class TestMonthly:
    def test_day_31_clamps_in_thirty_day_month(self):
        cfg = schedule(frequency="monthly", time="09:00", dayOfMonth=31)
        assert previous_scheduled_run(cfg, WEDNESDAY_10AM) == datetime(2024, 4, 30, 9, 0)

    def test_day_31_clamps_within_current_month(self):
        cfg = schedule(frequency="monthly", time="09:00", dayOfMonth=31)
        assert previous_scheduled_run(cfg, datetime(2024, 4, 30, 10, 0)) == datetime(2024, 4, 30, 9, 0)

    def test_january_rolls_back_to_december(self):
        cfg = schedule(frequency="monthly", time="09:00", dayOfMonth=15)
        assert previous_scheduled_run(cfg, datetime(2024, 1, 10, 12, 0)) == datetime(2023, 12, 15, 9, 0)

    def test_leap_february(self):
        cfg = schedule(frequency="monthly", time="09:00", dayOfMonth=30)
        assert previous_scheduled_run(cfg, datetime(2024, 3, 10)) == datetime(2024, 2, 29, 9, 0)


class TestAnnual:
    @pytest.mark.parametrize("frequency", ["annually", "quarterly"])
    def test_this_year_when_month_has_passed(self, frequency):
        cfg = schedule(frequency=frequency, time="09:00", monthOfYear=3)
        assert previous_scheduled_run(cfg, WEDNESDAY_10AM) == datetime(2024, 3, 1, 9, 0)

    def test_previous_year_when_month_not_reached(self):
        cfg = schedule(frequency="annually", time="09:00", monthOfYear=3)
        assert previous_scheduled_run(cfg, datetime(2024, 2, 10)) == datetime(2023, 3, 1, 9, 0)


class TestCustom:
    def test_defers_to_trigger(self):
        cfg = schedule(frequency="custom", time="00:00", customCron="*/15 * * * *")
        assert previous_scheduled_run(cfg, WEDNESDAY_10AM) == WEDNESDAY_10AM
        assert is_due(cfg, WEDNESDAY_10AM - timedelta(minutes=15), WEDNESDAY_10AM) is True
        assert is_due(cfg, WEDNESDAY_10AM, WEDNESDAY_10AM) is False


def test_aware_times_are_compared_in_utc():
    cfg = schedule(frequency="daily", time="09:00")
    plus_two = timezone(timedelta(hours=2))
    current = datetime(2024, 5, 15, 12, 0, tzinfo=plus_two)  # 10:00 UTC
    assert previous_scheduled_run(cfg, current) == datetime(2024, 5, 15, 9, 0)
    assert is_due(cfg, datetime(2024, 5, 15, 10, 30, tzinfo=plus_two), current) is True
