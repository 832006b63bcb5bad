"""
Guideline applicability filtering.
"""

import logging
from typing import Iterable

from shopping_assistant.core.models import ConversationContext, Guideline

logger = logging.getLogger(__name__)


def _keywords_overlap(guideline_keywords: Iterable[str], context_keywords: Iterable[str]) -> bool:
    """Case-insensitive substring match in either direction."""
    context_lower = [k.lower() for k in context_keywords]
    for keyword in guideline_keywords:
        needle = keyword.lower()
        for candidate in context_lower:
            if needle in candidate or candidate in needle:
                return True
    return False


def is_applicable(guideline: Guideline, context: ConversationContext) -> bool:
    """
    Check a guideline's conditions against the context.

    Each declared axis must overlap with the context, but only when the
    context supplies a value for it; missing context values never block.
    """
    conditions = guideline.conditions
    if conditions is None:
        return True

    if conditions.intents and context.user_intent is not None:
        if context.user_intent.value not in conditions.intents:
            return False

    if conditions.stages and context.conversation_stage is not None:
        if context.conversation_stage.value not in conditions.stages:
            return False

    if conditions.keywords and context.keywords:
        if not _keywords_overlap(conditions.keywords, context.keywords):
            return False

    return True


def filter_guidelines(
    guidelines: Iterable[Guideline],
    context: ConversationContext,
) -> list[Guideline]:
    """
    Select the active guidelines that apply to the context.

    Returns:
        Applicable guidelines sorted by priority (highest first); equal
        priorities keep their input order
    """
    applicable = [
        g for g in guidelines
        if g.is_active and is_applicable(g, context)
    ]
    applicable.sort(key=lambda g: g.priority, reverse=True)

    logger.debug(f"{len(applicable)} guidelines apply: {[g.name for g in applicable]}")
    return applicable
