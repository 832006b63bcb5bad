import pytest

from shopping_assistant.core.context.budget import (
    BudgetBounds,
    bucket_for_amount,
    budget_bounds,
    extract_budget_range,
)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("phone under $100", "under-100"),
        ("phone under 100", "under-100"),
        ("something below $250", "100-300"),
        ("around $300", "100-300"),
        ("about 450 dollars", "300-500"),
        ("my budget is $800", "500-1000"),
        ("maximum of $1,500", "1000-2000"),
        ("$600 or less please", "500-1000"),
        ("budget 350 to 600", "350-600"),
        ("between $200 - $400", "200-400"),
        ("budget of 1,000 - 1,500", "1000-1500"),
        ("$300 to $500 for a tablet", "300-500"),
        ("this one costs $2,500", "over-2000"),
        ("something cheap", "budget-friendly"),
        ("an affordable laptop", "budget-friendly"),
        ("a luxury watch", "premium"),
        ("I need a laptop", None),
        ("", None),
    ],
)
def test_extract_budget_range(message, expected):
    assert extract_budget_range(message) == expected


@pytest.mark.parametrize(
    "amount, bucket",
    [(50, "under-100"), (100, "under-100"), (100.5, "100-300"), (2000, "1000-2000"), (2001, "over-2000")],
)
def test_bucket_boundaries_are_inclusive(amount, bucket):
    assert bucket_for_amount(amount) == bucket


def test_budget_bounds_named_bucket():
    bounds = budget_bounds("300-500")
    assert bounds == BudgetBounds(min=300, max=500)
    assert bounds.target == 400


def test_budget_bounds_explicit_range():
    bounds = budget_bounds("350-600")
    assert bounds.min == 350
    assert bounds.max == 600
    assert bounds.contains(600)
    assert not bounds.contains(601)


def test_budget_bounds_open_ended():
    assert budget_bounds("under-100").target == 100
    assert budget_bounds("over-2000").contains(10_000)
    assert budget_bounds("budget-friendly").max == 300


def test_budget_bounds_unknown():
    assert budget_bounds(None) is None
    assert budget_bounds("whenever") is None


@pytest.mark.parametrize(
    "message",
    [
        "a laptop with 8-10 hours of battery",
        "a phone that lasts 2 to 3 years",
        "iPhone 13 - 14 comparison",
        "ships in 3-5 days",
    ],
)
def test_bare_number_pairs_are_not_budgets(message):
    assert extract_budget_range(message) is None
