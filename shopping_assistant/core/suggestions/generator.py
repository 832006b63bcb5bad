"""
Suggestion pipeline.

Runs the strategies concurrently, falls back to popular products when
nothing matched, then merges: confidence descending, unique products,
at most MAX_SUGGESTIONS.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from shopping_assistant.config import settings
from shopping_assistant.core.context.budget import budget_bounds
from shopping_assistant.core.models import ConversationContext, Suggestion
from shopping_assistant.core.suggestions.mapping import MappingConfiguration
from shopping_assistant.core.suggestions.strategies import (
    LookupSession,
    SuggestionRequest,
    contextual_suggestions,
    intent_suggestions,
    keyword_suggestions,
    popular_suggestions,
    stage_suggestions,
)
from shopping_assistant.integrations.catalog.base import BaseCatalog

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5

Strategy = Callable[[LookupSession, SuggestionRequest], Awaitable[list[Suggestion]]]


@dataclass
class StrategyOutcome:
    """Result of one strategy run."""
    name: str
    suggestions: list[Suggestion] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class SuggestionReport:
    """Merged suggestions plus the lookup errors met on the way."""
    suggestions: list[Suggestion]
    outcomes: list[StrategyOutcome]

    @property
    def errors(self) -> list[str]:
        return [f"{o.name}: {e}" for o in self.outcomes for e in o.errors]

    def to_dict(self) -> dict:
        """Diagnostics summary."""
        return {
            "strategies": {o.name: len(o.suggestions) for o in self.outcomes},
            "errors": self.errors,
        }


async def run_strategy(
    name: str,
    strategy: Strategy,
    catalog: BaseCatalog,
    request: SuggestionRequest,
) -> StrategyOutcome:
    """Run a strategy; any failure yields an empty outcome with the error recorded."""
    session = LookupSession(catalog)
    try:
        suggestions = await strategy(session, request)
    except Exception as e:
        logger.error(f"Suggestion strategy '{name}' failed: {e}", exc_info=True)
        return StrategyOutcome(name, [], session.errors + [f"{type(e).__name__}: {e}"])
    return StrategyOutcome(name, suggestions, session.errors)


def merge_suggestions(suggestions: list[Suggestion], limit: int = MAX_SUGGESTIONS) -> list[Suggestion]:
    """Stable sort by confidence, keep the first suggestion per product."""
    ordered = sorted(suggestions, key=lambda s: s.confidence, reverse=True)
    merged: list[Suggestion] = []
    seen: set[int] = set()
    for suggestion in ordered:
        if suggestion.product.id in seen:
            continue
        seen.add(suggestion.product.id)
        merged.append(suggestion)
        if len(merged) >= limit:
            break
    return merged


async def build_suggestion_report(
    context: ConversationContext,
    config: MappingConfiguration,
    catalog: BaseCatalog,
    message: Optional[str] = None,
) -> SuggestionReport:
    """
    Run the suggestion pipeline.

    Args:
        context: Context of the current message
        config: Mapping tables snapshot
        catalog: Product catalog
        message: Raw message text; the keywords stand in when omitted

    Returns:
        Report with merged suggestions and per-strategy outcomes
    """
    request = SuggestionRequest(
        context=context,
        config=config,
        message=message if message is not None else " ".join(context.keywords),
        budget=budget_bounds(context.budget_range),
        sample_size=settings.catalog_sample_size,
        discount_threshold=settings.discount_threshold,
    )

    strategies: list[tuple[str, Strategy]] = [
        ("contextual", contextual_suggestions),
        ("keyword", keyword_suggestions),
        ("intent", intent_suggestions),
    ]
    # A new topic drops stage framing and the popular fallback
    if not context.is_topic_change:
        strategies.append(("stage", stage_suggestions))

    outcomes = list(await asyncio.gather(
        *(run_strategy(name, strategy, catalog, request) for name, strategy in strategies)
    ))

    collected = [s for outcome in outcomes for s in outcome.suggestions]
    if not collected and not context.is_topic_change:
        fallback = await run_strategy("popular", popular_suggestions, catalog, request)
        outcomes.append(fallback)
        collected = fallback.suggestions

    report = SuggestionReport(merge_suggestions(collected), outcomes)
    if report.errors:
        logger.warning(
            f"Catalog lookups failed during suggestion generation "
            f"({len(report.errors)}): {'; '.join(report.errors)}"
        )
    logger.info(
        f"Generated {len(report.suggestions)} suggestions "
        f"(topic_change={context.is_topic_change}, budget={context.budget_range})"
    )
    return report


async def generate_suggestions(
    context: ConversationContext,
    config: MappingConfiguration,
    catalog: BaseCatalog,
    message: Optional[str] = None,
) -> list[Suggestion]:
    """Up to MAX_SUGGESTIONS suggestions for the given context."""
    report = await build_suggestion_report(context, config, catalog, message)
    return report.suggestions
