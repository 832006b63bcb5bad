"""
Rule-based context extraction from a user message.

Every classifier is an ordered list of (predicate, result) rules evaluated
first-match-wins, so each rule can be tested on its own and the precedence
is visible in one place.
"""

import logging
import re
from typing import Callable, Optional

from shopping_assistant.core.context.budget import extract_budget_range
from shopping_assistant.core.context.topic import detect_topic_change
from shopping_assistant.core.errors import InputValidationError
from shopping_assistant.core.models import (
    ChatMessage,
    ConversationContext,
    ConversationStage,
    ShoppingIntent,
    UserIntent,
    user_messages,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]


def _words(*terms: str) -> Predicate:
    """Predicate matching any of the terms as whole words or phrases."""
    pattern = re.compile(
        r"\b(?:" + "|".join(re.escape(t) for t in terms) + r")\b", re.IGNORECASE
    )
    return lambda text: bool(pattern.search(text))


def _prefixes(*stems: str) -> Predicate:
    """Predicate matching words that start with any of the stems."""
    pattern = re.compile(
        r"\b(?:" + "|".join(re.escape(s) for s in stems) + r")", re.IGNORECASE
    )
    return lambda text: bool(pattern.search(text))


def _any(*predicates: Predicate) -> Predicate:
    return lambda text: any(p(text) for p in predicates)


INTENT_RULES: list[tuple[Predicate, UserIntent]] = [
    (
        _words("hello", "hi", "hey", "good morning", "good afternoon", "good evening", "greetings"),
        UserIntent.GREETING,
    ),
    (_any(_words("help"), _prefixes("assist", "support")), UserIntent.HELP_REQUEST),
    (
        _any(
            _words("how much", "budget", "expensive", "cheap", "afford", "affordable"),
            _prefixes("price", "pricing", "cost"),
        ),
        UserIntent.PRICING_INQUIRY,
    ),
    (_any(_prefixes("demo"), _words("trial", "try it out", "walkthrough")), UserIntent.DEMO_REQUEST),
    (
        _any(
            _prefixes("feature", "specification", "capabilit"),
            _words("spec", "specs", "how does", "what can", "what does it do"),
        ),
        UserIntent.FEATURE_INQUIRY,
    ),
    (
        _any(
            _prefixes("compar"),
            _words("vs", "versus", "difference", "differences", "better than", "which is better"),
        ),
        UserIntent.COMPARISON_REQUEST,
    ),
    (
        _any(
            _prefixes("buy", "purchas"),
            _words("order", "checkout", "check out", "add to cart"),
        ),
        UserIntent.PURCHASE_INTENT,
    ),
    (
        _any(
            _prefixes("concern", "worr", "hesita", "doubt"),
            _words("not sure", "too much", "problem with", "skeptical", "risky"),
        ),
        UserIntent.OBJECTION_HANDLING,
    ),
    (_any(_prefixes("review", "rating", "rated"), _words("quality")), UserIntent.REVIEW_INQUIRY),
    (
        _any(_prefixes("availab", "inventory"), _words("in stock", "stock", "sold out")),
        UserIntent.AVAILABILITY_INQUIRY,
    ),
    (
        _any(_prefixes("shipping", "deliver", "return", "warrant", "refund")),
        UserIntent.SERVICE_INQUIRY,
    ),
    (
        _any(
            _prefixes("recommend", "suggest"),
            _words("best", "looking for", "need", "want", "show me"),
        ),
        UserIntent.PRODUCT_RECOMMENDATION,
    ),
]

SHOPPING_INTENT_RULES: list[tuple[Predicate, ShoppingIntent]] = [
    (_any(_prefixes("buy", "purchas", "checkout"), _words("order")), ShoppingIntent.BUYING),
    (
        _any(_prefixes("compar"), _words("vs", "versus", "difference")),
        ShoppingIntent.COMPARING,
    ),
    (
        _any(
            _words("help", "question"),
            _prefixes("support", "return", "shipping", "warrant"),
        ),
        ShoppingIntent.SUPPORT,
    ),
]

# Curated vocabulary: sales terms and product-category terms
KEYWORD_VOCABULARY = frozenset({
    # Price and budget
    "price", "cost", "budget", "expensive", "cheap", "affordable", "deal", "discount",
    "sale", "offer", "under", "below", "maximum", "minimum", "range", "around", "about",
    # Product features
    "feature", "specification", "specs", "quality", "rating", "review", "brand", "model",
    "size", "color", "capacity", "storage", "memory", "battery", "camera", "screen",
    # Shopping actions
    "buy", "purchase", "order", "checkout", "cart", "wishlist", "compare", "vs", "versus",
    "difference", "similar", "alternative", "option", "choice", "recommendation",
    # Product categories
    "phone", "smartphone", "mobile", "laptop", "computer", "tablet", "headphones",
    "tv", "television", "gaming", "console", "electronics", "tech", "gadget",
    "clothing", "fashion", "shirt", "dress", "shoes", "jeans", "jacket", "bag", "watch",
    "beauty", "skincare", "makeup", "fragrance", "cosmetics", "perfume",
    "home", "furniture", "kitchen", "bedroom", "decor", "appliance",
    "book", "novel", "textbook", "magazine", "reading",
    "health", "fitness", "sports", "exercise", "gym", "outdoor",
    "food", "grocery", "snack", "organic", "beverage",
    "toy", "car",
    # Shopping concerns
    "shipping", "delivery", "return", "warranty", "guarantee", "support", "service",
    "availability", "stock", "inventory", "sold", "out", "available",
    "trustworthy", "reliable", "authentic", "genuine", "fake", "counterfeit",
    # Intent words
    "help", "assist", "find", "search", "looking", "need", "want", "interested",
    "suggest", "advise", "guide", "best", "top", "popular",
})

MIN_FREE_KEYWORD_LENGTH = 3

# (pattern, token template) for model names spanning several words
MODEL_PATTERNS = [
    (re.compile(r"\biphone\s+(\d{1,2}|x|xr|xs|se)\b", re.IGNORECASE), "iphone_{}"),
    (re.compile(r"\bgalaxy\s+(s\d{1,2}|note\s*\d{1,2}|a\d{1,2})\b", re.IGNORECASE), "galaxy_{}"),
    (re.compile(r"\bpixel\s+(\d{1,2})\b", re.IGNORECASE), "pixel_{}"),
    (re.compile(r"\boppo\s+([a-z]\d{1,2})\b", re.IGNORECASE), "oppo_{}"),
    (re.compile(r"\bmacbook\s+(air|pro)\b", re.IGNORECASE), "macbook_{}"),
]

_NUMERIC = re.compile(r"^\d+$")
_CURRENCY = re.compile(r"^\$\d+(?:,\d{3})*(?:\.\d+)?$")
_STRIP = "\"'.,!?;:()[]{}<>*"


def classify_intent(message: str) -> UserIntent:
    """Classify what the user is asking for."""
    if not message or not message.strip():
        return UserIntent.UNKNOWN
    for predicate, intent in INTENT_RULES:
        if predicate(message):
            return intent
    return UserIntent.GENERAL_INQUIRY


def classify_shopping_intent(message: str) -> ShoppingIntent:
    """Classify the shopping activity: buying, comparing, support or browsing."""
    for predicate, shopping_intent in SHOPPING_INTENT_RULES:
        if predicate(message):
            return shopping_intent
    return ShoppingIntent.BROWSING


def _is_keyword(token: str) -> bool:
    return (
        token in KEYWORD_VOCABULARY
        or bool(_NUMERIC.match(token))
        or bool(_CURRENCY.match(token))
        or len(token) > MIN_FREE_KEYWORD_LENGTH
    )


def extract_keywords(message: str) -> list[str]:
    """
    Extract shopping keywords from a message.

    Tokens are kept when they are in the curated vocabulary, numeric,
    currency amounts or long enough to be a product or brand name.
    Model names such as "iPhone 13" become single tokens ("iphone_13").
    Order of first occurrence is preserved.
    """
    keywords: list[str] = []
    seen: set[str] = set()

    def add(token: str) -> None:
        if token and token not in seen:
            seen.add(token)
            keywords.append(token)

    for raw in message.lower().split():
        token = raw.strip(_STRIP)
        if token and _is_keyword(token):
            add(token)

    for pattern, template in MODEL_PATTERNS:
        for match in pattern.finditer(message):
            add(template.format(re.sub(r"\s+", "", match.group(1).lower())))

    return keywords


def determine_conversation_stage(user_turns: int) -> ConversationStage:
    """Stage from the number of user turns so far (including the current one)."""
    if user_turns <= 1:
        return ConversationStage.INTRODUCTION
    if user_turns <= 2:
        return ConversationStage.DISCOVERY
    if user_turns <= 4:
        return ConversationStage.RECOMMENDATION
    if user_turns <= 6:
        return ConversationStage.PRESENTATION
    if user_turns <= 8:
        return ConversationStage.OBJECTION_HANDLING
    return ConversationStage.CLOSING


def extract_context(
    message: str,
    history: Optional[list[ChatMessage]] = None,
) -> ConversationContext:
    """
    Build the conversation context for a new message.

    Args:
        message: The new user message
        history: Earlier messages of the conversation, excluding the new one

    Returns:
        ConversationContext with intent, keywords, budget, stage and topic change
    """
    if not isinstance(message, str):
        raise InputValidationError("Message must be a string")

    history = history or []
    previous_turns = user_messages(history)
    keywords = extract_keywords(message)

    context = ConversationContext(
        user_intent=classify_intent(message),
        keywords=keywords,
        shopping_intent=classify_shopping_intent(message),
        budget_range=extract_budget_range(message),
        conversation_stage=determine_conversation_stage(len(previous_turns) + 1),
        is_topic_change=detect_topic_change(
            keywords, [extract_keywords(turn) for turn in previous_turns]
        ),
    )

    logger.debug(
        f"Extracted context: intent={context.user_intent.value}, "
        f"stage={context.conversation_stage.value}, budget={context.budget_range}, "
        f"topic_change={context.is_topic_change}"
    )
    return context
