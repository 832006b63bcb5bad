"""
Suggestion strategies.

Each strategy turns the conversation context into scored suggestions.
Catalog lookups go through a LookupSession, which records failures and
returns an empty result instead of raising, so one failing lookup never
aborts the pipeline.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Optional

from shopping_assistant.core.context.budget import BudgetBounds
from shopping_assistant.core.models import (
    ConversationContext,
    ProductCandidate,
    Suggestion,
    SuggestionType,
)
from shopping_assistant.core.suggestions.mapping import MappingConfiguration, StageRule
from shopping_assistant.core.suggestions.ranking import (
    BudgetFit,
    budget_note,
    fit_budget,
    rank_candidates,
    unique_candidates,
)
from shopping_assistant.integrations.catalog.base import BaseCatalog

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10
CONTEXTUAL_TOP = 3
KEYWORDS_CONSIDERED = 3
PER_KEYWORD_TOP = 2
INTENT_TOP = 3
POPULAR_TOP = 4
CLOSEST_PENALTY = 0.1

MAPPED_KEYWORD_CONFIDENCE = 0.8
FREE_TEXT_CONFIDENCE = 0.6
POPULAR_CONFIDENCE = 0.5

# Conversational words never sent to the catalog as free-text queries
SEARCH_STOPWORDS = frozenset({
    "need", "want", "looking", "help", "find", "search", "interested", "suggest",
    "advise", "guide", "best", "top", "popular", "under", "below", "about", "around",
    "maximum", "minimum", "range", "price", "cost", "budget", "cheap", "affordable",
    "expensive", "deal", "discount", "sale", "offer", "buy", "purchase", "order",
    "compare", "versus", "difference", "something", "would", "like", "please",
    "there", "what", "which", "with", "that", "this", "have", "does", "some",
})

_NUMBERISH = re.compile(r"^\$?\d[\d,.]*$")


@dataclass(frozen=True)
class ContextualRule:
    """Message pattern rule; the first matching rule is applied."""
    name: str
    message_patterns: tuple[str, ...]
    search_terms: tuple[str, ...]
    reason: str
    confidence: float
    brand_filter: Optional[str] = None
    category_filter: Optional[str] = None

    def matches(self, message: str) -> bool:
        lower = message.lower()
        return any(
            re.search(rf"\b{re.escape(pattern)}", lower)
            for pattern in self.message_patterns
        )


CONTEXTUAL_RULES: list[ContextualRule] = [
    ContextualRule(
        name="iphone",
        message_patterns=("iphone", "apple phone"),
        search_terms=("iphone",),
        reason="iPhone model as requested",
        confidence=0.95,
        brand_filter="Apple",
        category_filter="smartphones",
    ),
    ContextualRule(
        name="samsung",
        message_patterns=("samsung", "galaxy"),
        search_terms=("samsung",),
        reason="Samsung Galaxy model as requested",
        confidence=0.9,
        brand_filter="Samsung",
        category_filter="smartphones",
    ),
    ContextualRule(
        name="photography",
        message_patterns=("photo", "camera", "selfie", "picture"),
        search_terms=("smartphone", "phone"),
        reason="Strong camera for photography",
        confidence=0.9,
        category_filter="smartphones",
    ),
    ContextualRule(
        name="gaming",
        message_patterns=("gaming", "gamer", "games"),
        search_terms=("laptop",),
        reason="Performance suited to gaming",
        confidence=0.85,
        category_filter="laptops",
    ),
    ContextualRule(
        name="work_laptop",
        message_patterns=("for work", "office", "business laptop", "productivity", "programming"),
        search_terms=("laptop",),
        reason="Reliable choice for work and productivity",
        confidence=0.85,
        category_filter="laptops",
    ),
    ContextualRule(
        name="budget_phone",
        message_patterns=("cheap phone", "budget phone", "affordable phone", "cheap smartphone", "budget smartphone"),
        search_terms=("phone", "smartphone"),
        reason="Budget-friendly phone option",
        confidence=0.85,
        category_filter="smartphones",
    ),
    ContextualRule(
        name="skincare",
        message_patterns=("skincare", "skin care", "moisturi", "dry skin"),
        search_terms=("cream", "skin"),
        reason="Well-reviewed skincare pick",
        confidence=0.85,
        category_filter="skin-care",
    ),
    ContextualRule(
        name="fragrance",
        message_patterns=("perfume", "fragrance", "cologne", "scent"),
        search_terms=("perfume",),
        reason="Popular fragrance choice",
        confidence=0.85,
        category_filter="fragrances",
    ),
    ContextualRule(
        name="gift",
        message_patterns=("gift", "present for", "birthday"),
        search_terms=("watch", "perfume"),
        reason="Well-loved gift idea",
        confidence=0.75,
    ),
]


def match_contextual_rule(message: str) -> Optional[ContextualRule]:
    for rule in CONTEXTUAL_RULES:
        if rule.matches(message):
            return rule
    return None


@dataclass
class SuggestionRequest:
    """Inputs shared by all strategies of one generation call."""
    context: ConversationContext
    config: MappingConfiguration
    message: str
    budget: Optional[BudgetBounds]
    sample_size: int = 30
    discount_threshold: float = 10.0


@dataclass
class LookupSession:
    """Catalog access for one strategy; failed lookups yield no products."""
    catalog: BaseCatalog
    errors: list[str] = field(default_factory=list)

    async def search(self, **kwargs) -> list[ProductCandidate]:
        try:
            return await self.catalog.search(**kwargs)
        except Exception as e:
            query = ", ".join(f"{k}={v!r}" for k, v in kwargs.items() if v is not None)
            self.errors.append(f"search({query}): {type(e).__name__}: {e}")
            logger.debug(f"Catalog search failed ({query}): {e}")
            return []

    async def search_many(self, field_name: str, values: tuple[str, ...]) -> list[ProductCandidate]:
        """Search each value in turn and merge unique products."""
        products: list[ProductCandidate] = []
        for value in values:
            products.extend(await self.search(**{field_name: value, "limit": SEARCH_LIMIT}))
        return unique_candidates(products)


def _annotate(reason: str, product: ProductCandidate, fit: BudgetFit, budget: Optional[BudgetBounds]) -> str:
    if fit.mode == "within":
        return f"{reason} within your budget"
    if fit.mode == "closest" and budget is not None:
        return f"{reason} ({budget_note(product, budget)})"
    return reason


def _confidence(base: float, fit: BudgetFit) -> float:
    if fit.mode == "closest":
        return max(0.0, base - CLOSEST_PENALTY)
    return base


def _build(
    products: list[ProductCandidate],
    reason: str,
    confidence: float,
    kind: SuggestionType,
    fit: BudgetFit,
    budget: Optional[BudgetBounds],
) -> list[Suggestion]:
    return [
        Suggestion(
            product=product,
            reason=_annotate(reason, product, fit, budget),
            confidence=_confidence(confidence, fit),
            type=kind,
        )
        for product in products
    ]


async def contextual_suggestions(session: LookupSession, request: SuggestionRequest) -> list[Suggestion]:
    """Apply the first contextual rule whose patterns match the message."""
    rule = match_contextual_rule(request.message)
    if rule is None:
        return []

    candidates = await session.search_many("text", rule.search_terms)
    if rule.category_filter:
        candidates = unique_candidates(
            candidates + await session.search(category=rule.category_filter, limit=SEARCH_LIMIT)
        )
        candidates = [p for p in candidates if p.category == rule.category_filter]
    if rule.brand_filter:
        brand = rule.brand_filter.lower()
        candidates = [p for p in candidates if (p.brand or "").lower() == brand]

    restricted = bool(rule.brand_filter or rule.category_filter)
    fit = fit_budget(candidates, request.budget, restricted=restricted)
    top = rank_candidates(fit.products, request.budget)[:CONTEXTUAL_TOP]

    logger.debug(f"Contextual rule '{rule.name}' produced {len(top)} products")
    return _build(top, rule.reason, rule.confidence, SuggestionType.CONTEXTUAL, fit, request.budget)


def select_keywords(keywords: list[str], config: MappingConfiguration) -> list[str]:
    """
    Pick the keywords to look up.

    Mapped keywords come first, by rule priority; unmapped keywords follow
    in message order. Numbers and conversational words are skipped.
    """
    mapped = [k for k in keywords if k in config.keywords]
    mapped.sort(key=lambda k: config.keywords[k].priority, reverse=True)
    unmapped = [
        k for k in keywords
        if k not in config.keywords
        and k not in SEARCH_STOPWORDS
        and not _NUMBERISH.match(k)
    ]
    return (mapped + unmapped)[:KEYWORDS_CONSIDERED]


async def keyword_suggestions(session: LookupSession, request: SuggestionRequest) -> list[Suggestion]:
    """Look up the keyword table for the most relevant extracted keywords."""
    suggestions: list[Suggestion] = []

    for keyword in select_keywords(request.context.keywords, request.config):
        rule = request.config.keywords.get(keyword)
        candidates: list[ProductCandidate] = []
        restricted = False

        if rule is not None:
            if rule.categories:
                candidates = await session.search_many("category", rule.categories)
                restricted = bool(candidates)
            if not candidates:
                candidates = await session.search_many("text", rule.search_terms)
            confidence = MAPPED_KEYWORD_CONFIDENCE
        else:
            candidates = await session.search(text=keyword.replace("_", " "), limit=SEARCH_LIMIT)
            confidence = FREE_TEXT_CONFIDENCE

        fit = fit_budget(candidates, request.budget, restricted=restricted)
        in_stock = [p for p in fit.products if p.in_stock]
        in_stock.sort(key=lambda p: p.rating, reverse=True)

        suggestions.extend(_build(
            in_stock[:PER_KEYWORD_TOP],
            f'Matches your interest in "{keyword.replace("_", " ")}"',
            confidence,
            SuggestionType.KEYWORD,
            fit,
            request.budget,
        ))

    return suggestions


async def intent_suggestions(session: LookupSession, request: SuggestionRequest) -> list[Suggestion]:
    """Look up the intent table; intents without a rule produce nothing."""
    intent = request.context.user_intent
    if intent is None:
        return []
    rule = request.config.intents.get(intent.value)
    if rule is None:
        return []

    candidates: list[ProductCandidate] = []
    restricted = False
    if rule.priority == "category":
        candidates = await session.search_many("category", rule.categories)
        restricted = bool(candidates)
        if not candidates and rule.search_terms:
            candidates = await session.search_many("text", rule.search_terms)
    else:
        candidates = await session.search_many("text", rule.search_terms)

    fit = fit_budget(candidates, request.budget, restricted=restricted)
    top = rank_candidates(fit.products, request.budget)[:INTENT_TOP]
    reason = f"Recommended for {intent.value.replace('_', ' ')}"
    return _build(top, reason, rule.confidence, SuggestionType.INTENT, fit, request.budget)


def _top_rated(products: list[ProductCandidate]) -> list[ProductCandidate]:
    return sorted(products, key=lambda p: p.rating, reverse=True)


def _discounted(products: list[ProductCandidate], threshold: float) -> list[ProductCandidate]:
    deals = [p for p in products if p.discount_percentage >= threshold]
    return sorted(deals, key=lambda p: p.discount_percentage, reverse=True)


def _take(sources: list[tuple[list[ProductCandidate], int]], limit: int) -> list[ProductCandidate]:
    """Take a quota from each source in turn, skipping repeats."""
    picked: list[ProductCandidate] = []
    seen: set[int] = set()
    for products, quota in sources:
        taken = 0
        for product in products:
            if taken >= quota or len(picked) >= limit:
                break
            if product.id in seen:
                continue
            seen.add(product.id)
            picked.append(product)
            taken += 1
    return picked


async def _stage_products(session: LookupSession, request: SuggestionRequest, rule: StageRule) -> list[ProductCandidate]:
    limit = rule.limit
    if rule.strategy == "top_rated" and rule.category:
        scoped = await session.search(category=rule.category, limit=request.sample_size)
        return _top_rated(scoped)[:limit]

    sample = await session.search(limit=request.sample_size)
    popular = rank_candidates(sample)

    if rule.strategy == "popular":
        return popular[:limit]

    if rule.strategy == "top_rated":
        return _top_rated(sample)[:limit]

    if rule.strategy == "discounted":
        return _discounted(sample, request.discount_threshold)[:limit]

    if rule.strategy == "featured":
        half = math.ceil(limit / 2)
        return _take([(_top_rated(sample), half), (popular, limit - half)], limit)

    # mixed
    third = math.ceil(limit / 3)
    return _take(
        [
            (popular, third),
            (_top_rated(sample), third),
            (_discounted(sample, request.discount_threshold), third),
        ],
        limit,
    )


async def stage_suggestions(session: LookupSession, request: SuggestionRequest) -> list[Suggestion]:
    """
    Suggestions framed by the conversation stage.

    Every item carries the stage rule's reason and confidence, whatever
    sub-strategy selected it.
    """
    stage = request.context.conversation_stage
    if stage is None:
        return []
    rule = request.config.stages.get(stage.value)
    if rule is None:
        return []

    products = await _stage_products(session, request, rule)
    return [
        Suggestion(product=p, reason=rule.reason, confidence=rule.confidence, type=SuggestionType.STAGE)
        for p in products[:rule.limit]
    ]


async def popular_suggestions(session: LookupSession, request: SuggestionRequest) -> list[Suggestion]:
    """Global top-rated sample, used when nothing else matched."""
    sample = await session.search(limit=request.sample_size)
    return [
        Suggestion(product=p, reason="Popular choice", confidence=POPULAR_CONFIDENCE, type=SuggestionType.POPULAR)
        for p in rank_candidates(sample)[:POPULAR_TOP]
    ]
