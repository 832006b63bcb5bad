"""
Shopping assistant service - runs one conversation turn end to end.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from shopping_assistant.config import settings
from shopping_assistant.core.errors import InputValidationError
from shopping_assistant.core.graph import TurnNodes, compile_turn_graph
from shopping_assistant.core.models import (
    ChatMessage,
    Conversation,
    ConversationContext,
    Guideline,
    Suggestion,
)
from shopping_assistant.core.suggestions import MappingRegistry
from shopping_assistant.db.repositories import ConversationRepository, GuidelineRepository
from shopping_assistant.integrations.catalog import BaseCatalog, get_default_catalog

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Everything the response renderer needs for one turn."""

    conversation_id: str
    context: ConversationContext
    guidelines: list[Guideline]
    suggestions: list[Suggestion]
    purchase_readiness: int
    diagnostics: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "conversation_id": self.conversation_id,
            "context": self.context.to_dict(),
            "guidelines": [g.to_dict() for g in self.guidelines],
            "suggestions": [s.to_dict() for s in self.suggestions],
            "purchase_readiness": self.purchase_readiness,
            "diagnostics": list(self.diagnostics),
        }


def validate_message(message: str, max_length: Optional[int] = None) -> str:
    """Reject non-text, blank and oversized messages."""
    max_length = max_length or settings.max_message_length
    if not isinstance(message, str):
        raise InputValidationError("Message must be a string")
    if not message.strip():
        raise InputValidationError("Message must not be empty")
    if len(message) > max_length:
        raise InputValidationError(
            f"Message is too long ({len(message)} > {max_length} characters)"
        )
    return message


class ShoppingAssistant:
    """
    Turn pipeline: context, guidelines, suggestions and readiness.

    Usage:
        assistant = ShoppingAssistant()
        result = await assistant.process_message("I need a phone for photography under $500")
        print([s.product.title for s in result.suggestions])
    """

    def __init__(
        self,
        catalog: BaseCatalog | None = None,
        guidelines: GuidelineRepository | None = None,
        conversations: ConversationRepository | None = None,
        registry: MappingRegistry | None = None,
    ):
        self.catalog = catalog or get_default_catalog()
        self.guidelines = guidelines or GuidelineRepository()
        self.conversations = conversations or ConversationRepository()
        self.registry = registry or MappingRegistry()

        nodes = TurnNodes(self.catalog, self.registry, self.guidelines.list_active)
        self._graph = compile_turn_graph(nodes)

    async def _load_conversation(self, conversation_id: Optional[str]) -> Optional[Conversation]:
        if not conversation_id:
            return None
        conversation = await self.conversations.get(conversation_id)
        if conversation is None:
            logger.warning(f"Conversation {conversation_id} not found, starting a new one")
        return conversation

    async def process_message(
        self,
        message: str,
        conversation_id: Optional[str] = None,
    ) -> TurnResult:
        """
        Process an inbound user message.

        Args:
            message: User's message text
            conversation_id: Existing conversation; an unknown id starts a new one

        Returns:
            TurnResult for the turn

        Raises:
            InputValidationError: the message was rejected
            UpstreamUnavailable: a guideline or conversation store failed;
                nothing is persisted for the turn
        """
        message = validate_message(message)
        conversation = await self._load_conversation(conversation_id)
        history = list(conversation.messages) if conversation else []

        state = await self._graph.ainvoke({
            "conversation_id": conversation.id if conversation else None,
            "message": message,
            "history": history,
            "diagnostics": [],
        })

        context: ConversationContext = state["context"]
        guidelines: list[Guideline] = state.get("guidelines", [])
        suggestions: list[Suggestion] = state.get("suggestions", [])
        readiness: int = state.get("purchase_readiness", 0)

        stored_context = {
            **(conversation.context if conversation else {}),
            **context.to_dict(),
            "applied_guidelines": [g.id for g in guidelines if g.id],
            "suggested_products": [s.to_dict() for s in suggestions],
            "purchase_readiness": readiness,
        }
        messages = history + [ChatMessage.user(message)]

        if conversation:
            saved = await self.conversations.update(conversation.id, messages, stored_context)
        else:
            saved = await self.conversations.create(messages, stored_context)

        logger.info(
            f"Turn processed for conversation {saved.id}: "
            f"intent={context.user_intent.value}, stage={context.conversation_stage.value}, "
            f"guidelines={len(guidelines)}, suggestions={len(suggestions)}, readiness={readiness}"
        )

        return TurnResult(
            conversation_id=saved.id,
            context=context,
            guidelines=guidelines,
            suggestions=suggestions,
            purchase_readiness=readiness,
            diagnostics=list(state.get("diagnostics", [])),
        )

    async def add_assistant_message(self, conversation_id: str, content: str) -> Conversation:
        """
        Append the rendered assistant reply to a conversation.

        Raises:
            InputValidationError: empty content
            LookupError: unknown conversation
        """
        if not isinstance(content, str) or not content.strip():
            raise InputValidationError("Assistant message must not be empty")
        return await self.conversations.add_message(conversation_id, ChatMessage.assistant(content))

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return await self.conversations.get(conversation_id)

    async def close(self) -> None:
        await self.catalog.close()


# Singleton instance
_assistant: ShoppingAssistant | None = None


def get_assistant() -> ShoppingAssistant:
    """Get shopping assistant singleton."""
    global _assistant
    if _assistant is None:
        _assistant = ShoppingAssistant()
    return _assistant
