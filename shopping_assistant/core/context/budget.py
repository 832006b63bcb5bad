"""
Budget detection and budget bucket bounds.
"""

import re
from dataclasses import dataclass
from typing import Optional


_AMOUNT = r"(\d+(?:,\d{3})*(?:\.\d{1,2})?)"
# A qualified amount directly followed by "to"/"-" and a second amount is a range
_NOT_RANGE = r"(?!\d|[.,]\d)(?!\s*(?:to|-)\s*\$?\d)"

QUALIFIED_BUDGET_PATTERNS = [
    re.compile(rf"\bunder\s*\$?{_AMOUNT}{_NOT_RANGE}", re.IGNORECASE),
    re.compile(rf"\bbelow\s*\$?{_AMOUNT}{_NOT_RANGE}", re.IGNORECASE),
    re.compile(rf"\bmaximum\s*(?:of\s*)?\$?{_AMOUNT}{_NOT_RANGE}", re.IGNORECASE),
    re.compile(rf"\bbudget\s*(?:of|is)?\s*\$?{_AMOUNT}{_NOT_RANGE}", re.IGNORECASE),
    re.compile(rf"\baround\s*\$?{_AMOUNT}{_NOT_RANGE}", re.IGNORECASE),
    re.compile(rf"\babout\s*\$?{_AMOUNT}{_NOT_RANGE}", re.IGNORECASE),
    re.compile(rf"\${_AMOUNT}\s*(?:or\s*less|max|maximum)\b", re.IGNORECASE),
]

_RANGE = rf"{_AMOUNT}\s*(?:to|-)\s*\$?{_AMOUNT}"

# A bare "N to M" is only a budget after a price qualifier ("8-10 hours" is not)
RANGE_PATTERNS = [
    re.compile(rf"\${_RANGE}", re.IGNORECASE),
    re.compile(
        rf"\b(?:budget|between|spend|priced?|under|below|maximum|around|about)"
        rf"\s*(?:of|is|at)?\s*{_RANGE}",
        re.IGNORECASE,
    ),
]

EXPLICIT_AMOUNT_PATTERN = re.compile(rf"\${_AMOUNT}")

# (upper inclusive bound, bucket name), checked in order
BUDGET_BUCKETS = [
    (100, "under-100"),
    (300, "100-300"),
    (500, "300-500"),
    (1000, "500-1000"),
    (2000, "1000-2000"),
]
TOP_BUCKET = "over-2000"

BUDGET_FRIENDLY = "budget-friendly"
PREMIUM = "premium"

BUDGET_FRIENDLY_TERMS = ("cheap", "budget", "affordable")
PREMIUM_TERMS = ("premium", "luxury", "expensive", "high-end")


@dataclass(frozen=True)
class BudgetBounds:
    """Price bounds of a budget; either side may be open."""
    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, price: float) -> bool:
        if self.min is not None and price < self.min:
            return False
        if self.max is not None and price > self.max:
            return False
        return True

    @property
    def target(self) -> Optional[float]:
        """Midpoint of both bounds, or the single known bound."""
        if self.min is not None and self.max is not None:
            return (self.min + self.max) / 2
        if self.min is not None:
            return self.min
        return self.max


NAMED_BOUNDS = {
    "under-100": BudgetBounds(max=100),
    "100-300": BudgetBounds(min=100, max=300),
    "300-500": BudgetBounds(min=300, max=500),
    "500-1000": BudgetBounds(min=500, max=1000),
    "1000-2000": BudgetBounds(min=1000, max=2000),
    "over-2000": BudgetBounds(min=2000),
    BUDGET_FRIENDLY: BudgetBounds(max=300),
    PREMIUM: BudgetBounds(min=800),
}

_EXPLICIT_RANGE = re.compile(r"^(\d+(?:\.\d+)?)-(\d+(?:\.\d+)?)$")


def parse_amount(raw: str) -> float:
    """Parse an amount, stripping thousands separators."""
    return float(raw.replace(",", ""))


def _format_amount(amount: float) -> str:
    if amount == int(amount):
        return str(int(amount))
    return str(amount)


def bucket_for_amount(amount: float) -> str:
    for upper, name in BUDGET_BUCKETS:
        if amount <= upper:
            return name
    return TOP_BUCKET


def extract_budget_range(message: str) -> Optional[str]:
    """
    Detect the user's budget.

    Returns a named bucket for a single amount, "{min}-{max}" for an
    explicit range, a qualitative bucket, or None.
    """
    for pattern in QUALIFIED_BUDGET_PATTERNS:
        match = pattern.search(message)
        if match:
            return bucket_for_amount(parse_amount(match.group(1)))

    for pattern in RANGE_PATTERNS:
        range_match = pattern.search(message)
        if range_match:
            low = parse_amount(range_match.group(1))
            high = parse_amount(range_match.group(2))
            return f"{_format_amount(low)}-{_format_amount(high)}"

    amount_match = EXPLICIT_AMOUNT_PATTERN.search(message)
    if amount_match:
        return bucket_for_amount(parse_amount(amount_match.group(1)))

    lower = message.lower()
    if any(re.search(rf"\b{re.escape(term)}\b", lower) for term in BUDGET_FRIENDLY_TERMS):
        return BUDGET_FRIENDLY
    if any(re.search(rf"\b{re.escape(term)}\b", lower) for term in PREMIUM_TERMS):
        return PREMIUM

    return None


def budget_bounds(budget_range: Optional[str]) -> Optional[BudgetBounds]:
    """Resolve a budget bucket or explicit range to numeric bounds."""
    if not budget_range:
        return None
    if budget_range in NAMED_BOUNDS:
        return NAMED_BOUNDS[budget_range]
    match = _EXPLICIT_RANGE.match(budget_range)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        return BudgetBounds(min=min(low, high), max=max(low, high))
    return None
