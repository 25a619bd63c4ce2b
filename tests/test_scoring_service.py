from datetime import date

import pytest

from scorecard.core.config import settings
from scorecard.core.exceptions import NotFoundError, ValidationFailed
from scorecard.models import DataType, KpiColor, KpiValue, ScoringType
from scorecard.scoring.service import KpiValueService, format_value, parse_numeric, score_kpi_value

PERIOD = date(2024, 5, 31)


@pytest.mark.parametrize(
    "raw, expected",
    [("12.5", 12.5), (" 7 ", 7.0), ("", None), (None, None), ("abc", None), ("nan", None), ("inf", None)],
)
def test_parse_numeric(raw, expected):
    assert parse_numeric(raw) == expected


def test_format_value_uses_precision():
    assert format_value(30.0, 0) == "30"
    assert format_value(15.456, 2) == "15.46"
    assert format_value(None, 2) is None


def test_yes_no_scoring(db, make_org, make_kpi):
    kpi = make_kpi(make_org("HQ"), "Audit passed", scoring_type=ScoringType.YES_NO, data_type=DataType.TEXT)

    assert score_kpi_value(kpi, "Yes").color == KpiColor.GREEN
    assert score_kpi_value(kpi, "1").score == 100
    assert score_kpi_value(kpi, "no").color == KpiColor.RED
    assert score_kpi_value(kpi, "0").score == 0
    assert score_kpi_value(kpi, "maybe").color is None


def test_text_kpis_are_never_scored(db, make_org, make_kpi):
    kpi = make_kpi(make_org("HQ"), "Comments", scoring_type=ScoringType.TEXT, data_type=DataType.TEXT)
    result = score_kpi_value(kpi, "all good", target_value="100")
    assert result.score is None and result.color is None


def test_invalid_numeric_actual_is_rejected(db, make_org, make_kpi):
    kpi = make_kpi(make_org("HQ"), "Revenue")
    with pytest.raises(ValidationFailed):
        score_kpi_value(kpi, "twelve", target_value="100")


def test_invalid_target_is_rejected(db, make_org, make_kpi):
    kpi = make_kpi(make_org("HQ"), "Revenue")
    with pytest.raises(ValidationFailed):
        score_kpi_value(kpi, "12", target_value="lots")


def test_record_manual_value_upserts_one_row_per_period(db, make_org, make_kpi):
    kpi = make_kpi(make_org("HQ"), "Revenue")
    service = KpiValueService(db)

    first = service.record_manual_value(kpi.id, PERIOD, actual_value="120", target_value="100")
    assert first.color == KpiColor.GREEN
    assert first.is_manual_entry is True

    second = service.record_manual_value(
        kpi.id, PERIOD, actual_value="85", target_value="100", threshold_red="60", threshold_yellow="80"
    )
    assert second.id == first.id
    assert float(second.score) == 50
    assert second.color == KpiColor.YELLOW
    assert db.query(KpiValue).filter(KpiValue.kpi_id == kpi.id).count() == 1


def test_unknown_kpi_raises_not_found(db):
    import uuid

    with pytest.raises(NotFoundError):
        KpiValueService(db).record_manual_value(uuid.uuid4(), PERIOD, actual_value="1")


def test_red_value_requires_note_when_configured(db, make_org, make_kpi, monkeypatch):
    monkeypatch.setattr(settings, "REQUIRE_NOTE_FOR_RED_KPI", True)
    kpi = make_kpi(make_org("HQ"), "Revenue")
    service = KpiValueService(db)

    with pytest.raises(ValidationFailed):
        service.record_manual_value(kpi.id, PERIOD, actual_value="10", target_value="100")
    assert service.get_value(kpi.id, PERIOD) is None

    row = service.record_manual_value(kpi.id, PERIOD, actual_value="10", target_value="100", note="Supplier delay")
    assert row.color == KpiColor.RED
    assert row.note == "Supplier delay"


def test_computed_value_keeps_existing_target(db, make_org, make_kpi):
    kpi = make_kpi(make_org("HQ"), "Revenue")
    service = KpiValueService(db)
    service.record_manual_value(kpi.id, PERIOD, actual_value="50", target_value="100", threshold_yellow="40")

    row = service.record_computed_value(kpi, PERIOD, "120", source="formula")
    db.commit()

    assert row.target_value == "100"
    assert row.threshold_yellow == "40"
    assert row.color == KpiColor.GREEN
    assert row.is_manual_entry is False
