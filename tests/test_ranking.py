from itertools import permutations

from shopping_assistant.core.context.budget import BudgetBounds
from shopping_assistant.core.models import ProductCandidate
from shopping_assistant.core.suggestions.ranking import (
    budget_note,
    fit_budget,
    rank_candidates,
    rating_band,
    unique_candidates,
)


def product(id, price, rating=4.0, stock=10):
    return ProductCandidate(
        id=id, title=f"P{id}", price=price, rating=rating, stock=stock, category="c"
    )


def test_in_stock_first():
    ranked = rank_candidates([product(1, 100, rating=4.9, stock=0), product(2, 100, rating=3.0)])
    assert [p.id for p in ranked] == [2, 1]


def test_higher_rating_wins_outside_tie_window():
    ranked = rank_candidates([product(1, 50, rating=4.0), product(2, 500, rating=4.5)])
    assert [p.id for p in ranked] == [2, 1]


def test_rating_tie_prefers_lower_price_without_budget():
    ranked = rank_candidates([product(1, 500, rating=4.5), product(2, 50, rating=4.4)])
    assert [p.id for p in ranked] == [2, 1]


def test_rating_tie_prefers_price_near_budget_target():
    budget = BudgetBounds(min=300, max=500)
    ranked = rank_candidates(
        [product(1, 120, rating=4.5), product(2, 390, rating=4.4)], budget
    )
    assert [p.id for p in ranked] == [2, 1]


def test_ranking_does_not_depend_on_input_order():
    candidates = [product(1, 1, rating=4.0), product(2, 2, rating=4.15), product(3, 3, rating=4.3)]

    orders = {tuple(p.id for p in rank_candidates(list(perm))) for perm in permutations(candidates)}

    assert len(orders) == 1
    ranked = orders.pop()
    # 4.0 is in a lower band than both others
    assert ranked[-1] == 1


def test_rating_bands():
    assert rating_band(4.4) == rating_band(4.5)
    assert rating_band(4.6) > rating_band(4.5)
    assert rating_band(4.0) < rating_band(4.3)


def test_unique_candidates_keeps_first():
    a, b = product(1, 10), product(2, 20)
    assert unique_candidates([a, b, product(1, 99)]) == [a, b]


def test_fit_budget_without_budget():
    candidates = [product(1, 10), product(2, 2000)]
    fit = fit_budget(candidates, None)
    assert fit.mode == "none"
    assert fit.products == candidates


def test_fit_budget_within():
    fit = fit_budget([product(1, 10), product(2, 250)], BudgetBounds(min=100, max=300))
    assert fit.mode == "within"
    assert [p.id for p in fit.products] == [2]


def test_fit_budget_unrestricted_search_has_no_fallback():
    fit = fit_budget([product(1, 900)], BudgetBounds(max=100))
    assert fit.products == []


def test_fit_budget_closest_options_for_restricted_search():
    budget = BudgetBounds(max=100)
    fit = fit_budget(
        [product(1, 900), product(2, 150), product(3, 400)], budget, restricted=True
    )
    assert fit.mode == "closest"
    assert [p.id for p in fit.products] == [2, 3]


def test_budget_note():
    budget = BudgetBounds(min=300, max=500)
    assert budget_note(product(1, 100), budget) == "closest option below budget"
    assert budget_note(product(2, 900), budget) == "closest option above budget"
