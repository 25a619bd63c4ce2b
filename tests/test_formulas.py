import uuid
from datetime import date

import pytest

from scorecard.core.exceptions import ValidationFailed
from scorecard.formulas.resolver import extract_references, substitute
from scorecard.formulas.service import FormulaService
from scorecard.models import KpiValue

PERIOD = date(2024, 5, 31)


def test_extract_references_in_order():
    refs = extract_references("[KPI:a]+[KPI:b]")
    assert [r.identifier for r in refs] == ["a", "b"]
    assert [r.original_match for r in refs] == ["[KPI:a]", "[KPI:b]"]
    assert not any(r.is_id for r in refs)


def test_extract_references_keeps_duplicates_and_detects_ids():
    kpi_id = str(uuid.uuid4())
    refs = extract_references(f"[KPI:{kpi_id}] * 2 + [KPI:Cost] - [KPI:Cost]")
    assert [r.identifier for r in refs] == [kpi_id, "Cost", "Cost"]
    assert refs[0].is_id is True
    assert refs[1].is_id is False


def test_malformed_tokens_are_ignored():
    assert extract_references("[KPI:] + KPI:a] + [KPI:a") == []
    assert extract_references(None) == []


def test_substitute_values():
    assert substitute("[KPI:a]+[KPI:b]", {"a": "5", "b": "3"}) == "5+3"


def test_substitute_leaves_unknown_tokens():
    assert substitute("[KPI:a]+[KPI:b]", {"a": "5"}) == "5+[KPI:b]"


def test_substitute_none_becomes_zero_everywhere():
    assert substitute("[KPI:a]*[KPI:a]", {"a": None}) == "0*0"


def _subtract(expression):
    left, right = expression.split(" - ")
    return float(left) - float(right)


@pytest.fixture
def finance(db, make_org, make_kpi):
    org = make_org("Finance")
    revenue = make_kpi(org, "Revenue")
    cost = make_kpi(org, "Cost")
    profit = make_kpi(org, "Profit", decimal_precision=1, calculation_equation="[KPI:Revenue] - [KPI:Cost]")
    db.add_all([
        KpiValue(kpi_id=revenue.id, period_date=PERIOD, actual_value="120"),
        KpiValue(kpi_id=cost.id, period_date=PERIOD, actual_value="20"),
    ])
    db.commit()
    return org, revenue, cost, profit


def test_resolve_by_name(db, finance):
    _, _, _, profit = finance
    resolved = FormulaService(db).resolve(profit.id, PERIOD)
    assert resolved.expression == "120 - 20"
    assert resolved.values == {"Revenue": "120", "Cost": "20"}
    assert resolved.unresolved == []


def test_resolve_by_id(db, finance):
    _, revenue, _, profit = finance
    profit.calculation_equation = f"[KPI:{revenue.id}] * 2"
    db.commit()
    assert FormulaService(db).resolve(profit.id, PERIOD).expression == "120 * 2"


def test_missing_period_value_counts_as_zero(db, finance):
    _, _, _, profit = finance
    resolved = FormulaService(db).resolve(profit.id, date(2024, 4, 30))
    assert resolved.expression == "0 - 0"


def test_names_do_not_resolve_across_organizations(db, finance, make_org, make_kpi):
    other = make_org("Operations")
    ratio = make_kpi(other, "Ratio", calculation_equation="[KPI:Revenue] - [KPI:Cost]")
    resolved = FormulaService(db).resolve(ratio.id, PERIOD)
    assert resolved.unresolved == ["Revenue", "Cost"]
    assert resolved.expression == "[KPI:Revenue] - [KPI:Cost]"


def test_compute_stores_formatted_result(db, finance):
    _, _, _, profit = finance
    row = FormulaService(db).compute(profit.id, PERIOD, _subtract)
    assert row.actual_value == "100.0"
    assert row.is_manual_entry is False


def test_compute_refuses_unresolved_references(db, finance):
    _, _, _, profit = finance
    profit.calculation_equation = "[KPI:Unknown] + 1"
    db.commit()
    with pytest.raises(ValidationFailed):
        FormulaService(db).compute(profit.id, PERIOD, lambda expression: 1)


def test_resolve_requires_equation(db, finance):
    _, revenue, _, _ = finance
    with pytest.raises(ValidationFailed):
        FormulaService(db).resolve(revenue.id, PERIOD)
