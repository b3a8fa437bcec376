from datetime import date
from decimal import Decimal

import pytest

from app.core.errors import InvalidAmount
from app.utils.budgeting import daily_budget, days_remaining_in_month, debt_progress, progress_percent, rule_label, savings_rate
from app.utils.dates import month_bounds, parse_iso_date, previous_months
from app.utils.money import validate_positive_amount


def test_progress_percent_rounds_half_up() -> None:
    assert progress_percent(Decimal("1"), Decimal("3")) == 33
    assert progress_percent(Decimal("2"), Decimal("3")) == 67
    assert progress_percent(Decimal("5"), Decimal("0")) == 0


def test_debt_progress_is_share_paid() -> None:
    assert debt_progress(Decimal("500"), Decimal("400")) == 20
    assert debt_progress(Decimal("500"), Decimal("0")) == 100


def test_savings_rate_can_go_negative() -> None:
    assert savings_rate(Decimal("100"), Decimal("150")) == -50
    assert savings_rate(Decimal("0"), Decimal("150")) == 0


def test_daily_budget_on_last_day_is_zero() -> None:
    last_day = date(2026, 2, 28)
    assert days_remaining_in_month(last_day) == 0
    assert daily_budget(Decimal("300"), 0) == Decimal("0")
    assert daily_budget(Decimal("100"), 3) == Decimal("33.33")


def test_rule_label_defaults() -> None:
    assert rule_label(None, None, None) == "50/30/20"
    assert rule_label(60, 20, 20) == "60/20/20"


def test_month_helpers() -> None:
    assert month_bounds(date(2028, 2, 10)) == (date(2028, 2, 1), date(2028, 2, 29))
    assert previous_months(date(2026, 2, 10), 3) == [
        (date(2025, 12, 1), date(2025, 12, 31)),
        (date(2026, 1, 1), date(2026, 1, 31)),
        (date(2026, 2, 1), date(2026, 2, 28)),
    ]


def test_parse_iso_date_accepts_timestamps() -> None:
    assert parse_iso_date(" 2026-10-19 ") == date(2026, 10, 19)
    assert parse_iso_date("2026-10-19T08:30:00Z") == date(2026, 10, 19)
    with pytest.raises(ValueError):
        parse_iso_date("19/10/2026")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12.345", Decimal("12.35")),
        (7, Decimal("7.00")),
        (" 0.5 ", Decimal("0.50")),
        (Decimal("3.1"), Decimal("3.10")),
        ("9999999999.99", Decimal("9999999999.99")),
    ],
)
def test_validate_positive_amount(raw, expected) -> None:
    assert validate_positive_amount(raw) == expected


@pytest.mark.parametrize("raw", [True, "", "1e", "-0.01", "0.004", "inf", "1e30", "10000000000", "9999999999.995"])
def test_validate_positive_amount_rejects(raw) -> None:
    with pytest.raises(InvalidAmount):
        validate_positive_amount(raw)
