"""
Topic change detection across product categories.
"""

from typing import Iterable, Optional

# Checked in order; the first category sharing a keyword wins
TOPIC_TAXONOMY: dict[str, frozenset[str]] = {
    "electronics": frozenset({
        "phone", "smartphone", "mobile", "laptop", "computer", "tablet", "headphones",
        "earbuds", "camera", "tv", "television", "gaming", "console", "electronics",
        "tech", "gadget", "iphone", "android", "samsung", "charger", "monitor",
    }),
    "fashion": frozenset({
        "clothing", "fashion", "shirt", "dress", "shoes", "jeans", "jacket", "bag",
        "handbag", "watch", "sunglasses", "jewellery", "jewelry", "sneakers", "skirt",
    }),
    "beauty": frozenset({
        "beauty", "skincare", "makeup", "fragrance", "cosmetics", "perfume", "lipstick",
        "mascara", "moisturizer", "serum",
    }),
    "home": frozenset({
        "home", "furniture", "kitchen", "bedroom", "decor", "appliance", "sofa", "lamp",
        "table", "chair", "mattress",
    }),
    "sports": frozenset({
        "sports", "exercise", "gym", "outdoor", "football", "basketball", "tennis",
        "yoga", "bike", "running",
    }),
    "books": frozenset({"book", "books", "novel", "textbook", "magazine", "reading"}),
    "health": frozenset({
        "health", "fitness", "vitamin", "vitamins", "supplement", "wellness", "medicine",
    }),
    "toys": frozenset({"toy", "toys", "puzzle", "lego", "doll", "kids"}),
    "automotive": frozenset({
        "car", "auto", "automotive", "motorcycle", "vehicle", "tire", "tires",
    }),
    "food": frozenset({
        "food", "grocery", "groceries", "snack", "organic", "beverage", "coffee", "tea",
    }),
}

HISTORY_WINDOW = 3


def categorize_keywords(keywords: Iterable[str]) -> Optional[str]:
    """First taxonomy category sharing a keyword, or None."""
    keyword_set = set(keywords)
    if not keyword_set:
        return None
    for category, members in TOPIC_TAXONOMY.items():
        if members & keyword_set:
            return category
    return None


def detect_topic_change(
    new_keywords: list[str],
    history_keywords: list[list[str]],
) -> bool:
    """
    Check whether the new message moves to a different product category.

    Args:
        new_keywords: Keywords of the new message
        history_keywords: Keywords of each earlier user turn, oldest first

    Returns:
        True only when both the recent history and the new message map to
        a category and the categories differ
    """
    if not history_keywords:
        return False

    recent: list[str] = []
    for turn_keywords in history_keywords[-HISTORY_WINDOW:]:
        recent.extend(turn_keywords)

    current_category = categorize_keywords(recent)
    if current_category is None:
        return False

    new_category = categorize_keywords(new_keywords)
    return new_category is not None and new_category != current_category
