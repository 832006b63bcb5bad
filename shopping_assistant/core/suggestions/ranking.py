"""
Candidate ranking and budget fitting.
"""

from dataclasses import dataclass
from typing import Optional

from shopping_assistant.core.context.budget import BudgetBounds
from shopping_assistant.core.models import ProductCandidate

# Ratings in the same RATING_TIE-wide band are treated as equal
RATING_TIE = 0.2
CLOSEST_OPTIONS = 2


def rating_band(rating: float) -> int:
    """Band index of a rating; bands are RATING_TIE wide, counted in tenths."""
    return round(rating * 10) // round(RATING_TIE * 10)


def rank_candidates(
    candidates: list[ProductCandidate],
    budget: Optional[BudgetBounds] = None,
) -> list[ProductCandidate]:
    """
    Order candidates for presentation.

    In-stock first, then rating band descending. Ratings in the same band
    are ties, broken by closeness to the budget target, or by ascending
    price when there is no budget. The order does not depend on the input
    order.
    """
    target = budget.target if budget else None

    def price_key(product: ProductCandidate) -> float:
        if target is not None:
            return abs(product.price - target)
        return product.price

    return sorted(
        candidates,
        key=lambda p: (not p.in_stock, -rating_band(p.rating), price_key(p), -p.rating, p.id),
    )


def unique_candidates(candidates: list[ProductCandidate]) -> list[ProductCandidate]:
    """Drop repeated product ids, keeping the first."""
    seen: set[int] = set()
    unique = []
    for product in candidates:
        if product.id not in seen:
            seen.add(product.id)
            unique.append(product)
    return unique


@dataclass
class BudgetFit:
    """Candidates after budget filtering."""
    products: list[ProductCandidate]
    # "none" (no budget), "within" (in budget) or "closest" (nearest outside budget)
    mode: str = "none"


def fit_budget(
    candidates: list[ProductCandidate],
    budget: Optional[BudgetBounds],
    restricted: bool = False,
) -> BudgetFit:
    """
    Keep the candidates inside the budget.

    For a brand or category restricted search that has nothing inside the
    budget, keep the closest options to the budget target instead.
    """
    if budget is None:
        return BudgetFit(list(candidates))

    within = [p for p in candidates if budget.contains(p.price)]
    if within or not restricted or not candidates:
        return BudgetFit(within, "within")

    target = budget.target
    closest = sorted(candidates, key=lambda p: abs(p.price - target))
    return BudgetFit(closest[:CLOSEST_OPTIONS], "closest")


def budget_note(product: ProductCandidate, budget: BudgetBounds) -> str:
    """Reason suffix for an option outside the budget."""
    if budget.min is not None and product.price < budget.min:
        return "closest option below budget"
    return "closest option above budget"
