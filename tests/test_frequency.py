import pytest

from app import config
from app.domain.pricing.coercion import parse_amount, parse_count, parse_number, round_money
from app.domain.pricing.frequency import (
    first_month_extra_multiplier,
    is_visit_based,
    monthly_multiplier,
    round_visits,
    visits_in_contract,
    visits_per_year,
)
from app.domain.pricing.overrides import OverrideResolver, has_override


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12", 12.0),
        ("$1,250.50", 1250.5),
        ("", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        (True, 1.0),
        ([1, 2], 0.0),
    ],
)
def test_parse_number_is_lenient(value, expected):
    assert parse_number(value) == expected


def test_amounts_and_counts_never_negative():
    assert parse_amount(-5) == 0.0
    assert parse_count("-2") == 0
    assert parse_count("3.9") == 3


def test_round_money_half_up():
    assert round_money(2.675) == 2.68
    assert round_money(0) == 0.0


def test_frequency_table():
    assert monthly_multiplier("weekly") == 4.33
    assert monthly_multiplier("biweekly") == 2.165
    assert monthly_multiplier("oneTime") == 0
    assert visits_per_year("daily") == 360
    assert first_month_extra_multiplier("weekly") == 3.33
    assert is_visit_based("quarterly")
    assert not is_visit_based("monthly")


def test_frequency_meta_can_come_from_config():
    cfg = {"frequencyMeta": {"weekly": {"monthlyMultiplier": 4.0}}}
    assert monthly_multiplier("weekly", cfg) == 4.0
    assert visits_per_year("weekly", cfg) == 52


def test_visits_in_contract():
    assert visits_in_contract("quarterly", 12) == 4
    assert visits_in_contract("bimonthly", 12) == 6
    assert visits_in_contract("monthly", 24) == 24
    assert visits_in_contract("oneTime", 12) == 1


@pytest.mark.parametrize("policy, expected", [("round", 3), ("floor", 2), ("ceil", 3)])
def test_visit_rounding_policies(policy, expected):
    assert round_visits(2.5, policy) == expected


def test_visit_rounding_defaults_to_config(monkeypatch):
    monkeypatch.setattr(config, "VISIT_ROUNDING", "floor")
    # 10 months of quarterly service is 3.33 cycles
    assert visits_in_contract("quarterly", 10) == 3
    monkeypatch.setattr(config, "VISIT_ROUNDING", "ceil")
    assert visits_in_contract("quarterly", 10) == 4


def test_ceil_does_not_bump_exact_counts():
    assert round_visits(4.0, "ceil") == 4


def test_override_resolver():
    r = OverrideResolver({"perVisit": "75", "monthly": "", "firstMonth": None})
    assert r.get("perVisit", 50) == 75
    assert r.get("monthly", 300) == 300
    assert r.get("firstMonth", 120) == 120
    assert r.applied == ["perVisit"]
    assert r.is_custom("perVisit")
    assert not has_override({"x": "  "}, "x")
