"""
Graph nodes for turn processing.
Each node takes the turn state and returns the keys it updates.
"""

import logging
from typing import Awaitable, Callable

from shopping_assistant.core.context import extract_context
from shopping_assistant.core.graph.state import TurnState
from shopping_assistant.core.guidelines import filter_guidelines
from shopping_assistant.core.models import ChatMessage, Guideline
from shopping_assistant.core.readiness import score_purchase_readiness
from shopping_assistant.core.suggestions import MappingRegistry, build_suggestion_report
from shopping_assistant.integrations.catalog.base import BaseCatalog

logger = logging.getLogger(__name__)

GuidelineSource = Callable[[], Awaitable[list[Guideline]]]


class TurnNodes:
    """Node functions bound to the collaborators they need."""

    def __init__(
        self,
        catalog: BaseCatalog,
        registry: MappingRegistry,
        load_guidelines: GuidelineSource,
    ):
        self.catalog = catalog
        self.registry = registry
        self.load_guidelines = load_guidelines

    async def extract_context(self, state: TurnState) -> dict:
        """Classify the inbound message against the conversation so far."""
        context = extract_context(state["message"], state.get("history", []))
        return {"context": context}

    async def select_guidelines(self, state: TurnState) -> dict:
        """
        Pick the guidelines that apply to this turn.
        Store failures propagate and abort the turn.
        """
        guidelines = await self.load_guidelines()
        selected = filter_guidelines(guidelines, state["context"])
        logger.info(f"Selected {len(selected)} of {len(guidelines)} guidelines")
        return {"guidelines": selected}

    async def suggest_products(self, state: TurnState) -> dict:
        """Run the suggestion pipeline; catalog failures end up in diagnostics."""
        report = await build_suggestion_report(
            state["context"],
            self.registry.snapshot,
            self.catalog,
            message=state["message"],
        )
        return {"suggestions": report.suggestions, "diagnostics": report.errors}

    async def score_readiness(self, state: TurnState) -> dict:
        """Score purchase readiness over the whole conversation, inbound message included."""
        history = list(state.get("history", [])) + [ChatMessage.user(state["message"])]
        score = score_purchase_readiness(history, state.get("suggestions", []))
        logger.debug(f"Purchase readiness: {score}")
        return {"purchase_readiness": score}
