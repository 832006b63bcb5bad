"""
Turn state for LangGraph.
Defines what flows between the nodes of one conversation turn.
"""

import operator
from typing import Annotated, Optional, TypedDict

from shopping_assistant.core.models import (
    ChatMessage,
    ConversationContext,
    Guideline,
    Suggestion,
)


class TurnState(TypedDict, total=False):
    """
    State of a single turn.

    Attributes:
        conversation_id: Stored conversation id (None for a new conversation)
        message: The inbound user message
        history: Earlier messages, excluding the inbound one
        context: Context extracted from the message
        guidelines: Applicable guidelines, highest priority first
        suggestions: Merged product suggestions
        purchase_readiness: Score from 0 to 100
        diagnostics: Recovered failures, accumulated by the parallel nodes
    """
    conversation_id: Optional[str]
    message: str
    history: list[ChatMessage]

    context: ConversationContext
    guidelines: list[Guideline]
    suggestions: list[Suggestion]
    purchase_readiness: int

    diagnostics: Annotated[list[str], operator.add]
