"""
Context extraction: intent, keywords, budget, stage and topic change.
"""

from shopping_assistant.core.context.budget import (
    BudgetBounds,
    budget_bounds,
    extract_budget_range,
)
from shopping_assistant.core.context.extractor import (
    classify_intent,
    classify_shopping_intent,
    determine_conversation_stage,
    extract_context,
    extract_keywords,
)
from shopping_assistant.core.context.topic import categorize_keywords, detect_topic_change

__all__ = [
    # Budget
    "BudgetBounds",
    "budget_bounds",
    "extract_budget_range",
    # Extraction
    "classify_intent",
    "classify_shopping_intent",
    "determine_conversation_stage",
    "extract_context",
    "extract_keywords",
    # Topic
    "categorize_keywords",
    "detect_topic_change",
]
