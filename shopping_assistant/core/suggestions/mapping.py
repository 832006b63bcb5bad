"""
Mapping configuration: keyword, intent and stage rule tables.

Rules are validated when they are built, so a malformed entry fails at
configuration time rather than during suggestion generation. The registry
swaps whole immutable snapshots, so a reader never sees a half-updated table.
"""

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from shopping_assistant.core.errors import ConfigurationError
from shopping_assistant.core.models import ConversationStage, UserIntent

logger = logging.getLogger(__name__)


def _clean_terms(value: tuple[str, ...]) -> tuple[str, ...]:
    cleaned = tuple(term.strip() for term in value)
    if any(not term for term in cleaned):
        raise ValueError("terms must not be blank")
    return cleaned


class KeywordRule(BaseModel):
    """How a user keyword maps to catalog lookups."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    search_terms: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    priority: int = Field(default=5, ge=1, le=10)

    @field_validator("search_terms", "categories")
    @classmethod
    def strip_terms(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _clean_terms(value)

    @model_validator(mode="after")
    def check_lookup(self) -> "KeywordRule":
        if not self.search_terms and not self.categories:
            raise ValueError("keyword rule needs search terms or categories")
        return self


class IntentRule(BaseModel):
    """Catalog lookups for a user intent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    categories: tuple[str, ...] = ()
    search_terms: tuple[str, ...] = ()
    priority: Literal["category", "search"] = "category"
    confidence: float = Field(default=0.7, ge=0.0, le=1.0)

    @field_validator("search_terms", "categories")
    @classmethod
    def strip_terms(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _clean_terms(value)

    @model_validator(mode="after")
    def check_lookup(self) -> "IntentRule":
        if self.priority == "search" and not self.search_terms:
            raise ValueError("search priority needs search terms")
        if self.priority == "category" and not self.categories:
            raise ValueError("category priority needs categories")
        return self


StageStrategy = Literal["popular", "featured", "discounted", "top_rated", "mixed"]


class StageRule(BaseModel):
    """Suggestion strategy for a conversation stage."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: StageStrategy
    reason: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)
    limit: int = Field(default=3, ge=1, le=10)
    category: Optional[str] = None


RuleInput = Union[BaseModel, Mapping[str, Any]]


def _build_rule(model: type[BaseModel], key: str, rule: RuleInput) -> Any:
    if isinstance(rule, model):
        return rule
    if isinstance(rule, BaseModel):
        rule = rule.model_dump()
    try:
        return model.model_validate(rule)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {model.__name__} for {key!r}: {e}") from e


def _normalize_key(key: str) -> str:
    if not isinstance(key, str) or not key.strip():
        raise ConfigurationError("Rule key must be a non-empty string")
    return key.strip().lower()


def _check_enum_key(key: str, enum_type: type) -> str:
    key = _normalize_key(key)
    allowed = {member.value for member in enum_type}
    if key not in allowed:
        raise ConfigurationError(f"Unknown {enum_type.__name__} {key!r}")
    return key


@dataclass(frozen=True)
class MappingConfiguration:
    """Immutable snapshot of the three rule tables."""

    keywords: Mapping[str, KeywordRule] = field(default_factory=lambda: MappingProxyType({}))
    intents: Mapping[str, IntentRule] = field(default_factory=lambda: MappingProxyType({}))
    stages: Mapping[str, StageRule] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(
        cls,
        keywords: Optional[Mapping[str, RuleInput]] = None,
        intents: Optional[Mapping[str, RuleInput]] = None,
        stages: Optional[Mapping[str, RuleInput]] = None,
    ) -> "MappingConfiguration":
        """Validate raw tables and build a snapshot."""
        keyword_table = {
            _normalize_key(k): _build_rule(KeywordRule, k, v)
            for k, v in (keywords or {}).items()
        }
        intent_table = {
            _check_enum_key(k, UserIntent): _build_rule(IntentRule, k, v)
            for k, v in (intents or {}).items()
        }
        stage_table = {
            _check_enum_key(k, ConversationStage): _build_rule(StageRule, k, v)
            for k, v in (stages or {}).items()
        }
        return cls(
            keywords=MappingProxyType(keyword_table),
            intents=MappingProxyType(intent_table),
            stages=MappingProxyType(stage_table),
        )

    def with_keyword(self, key: str, rule: Optional[RuleInput]) -> "MappingConfiguration":
        """Copy with one keyword rule set (or removed when rule is None)."""
        key = _normalize_key(key)
        table = dict(self.keywords)
        if rule is None:
            table.pop(key, None)
        else:
            table[key] = _build_rule(KeywordRule, key, rule)
        return MappingConfiguration(MappingProxyType(table), self.intents, self.stages)

    def with_intent(self, key: str, rule: Optional[RuleInput]) -> "MappingConfiguration":
        """Copy with one intent rule set (or removed when rule is None)."""
        key = _check_enum_key(key, UserIntent)
        table = dict(self.intents)
        if rule is None:
            table.pop(key, None)
        else:
            table[key] = _build_rule(IntentRule, key, rule)
        return MappingConfiguration(self.keywords, MappingProxyType(table), self.stages)

    def with_stage(self, key: str, rule: Optional[RuleInput]) -> "MappingConfiguration":
        """Copy with one stage rule set (or removed when rule is None)."""
        key = _check_enum_key(key, ConversationStage)
        table = dict(self.stages)
        if rule is None:
            table.pop(key, None)
        else:
            table[key] = _build_rule(StageRule, key, rule)
        return MappingConfiguration(self.keywords, self.intents, MappingProxyType(table))

    def to_dict(self) -> dict:
        """Plain dictionary of all tables."""
        return {
            "keywords": {k: v.model_dump() for k, v in self.keywords.items()},
            "intents": {k: v.model_dump() for k, v in self.intents.items()},
            "stages": {k: v.model_dump() for k, v in self.stages.items()},
        }


_PHONE = {"search_terms": ("phone", "smartphone"), "categories": ("smartphones",)}

DEFAULT_KEYWORD_RULES: dict[str, dict] = {
    "phone": {**_PHONE, "priority": 8},
    "smartphone": {**_PHONE, "priority": 9},
    "mobile": {**_PHONE, "priority": 7},
    "cell": {"search_terms": ("phone",), "priority": 5},
    "cellular": {"search_terms": ("phone",), "priority": 5},
    "iphone": {"search_terms": ("iphone",), "categories": ("smartphones",), "priority": 10},
    "android": {"search_terms": ("samsung", "oppo"), "categories": ("smartphones",), "priority": 8},
    "replacement": {"search_terms": ("phone", "smartphone"), "priority": 3},
    "camera": {"search_terms": ("camera", "phone"), "categories": ("smartphones",), "priority": 6},
    "laptop": {"search_terms": ("laptop",), "categories": ("laptops",), "priority": 9},
    "computer": {"search_terms": ("laptop", "computer"), "categories": ("laptops",), "priority": 7},
    "tablet": {"search_terms": ("tablet", "ipad"), "categories": ("tablets",), "priority": 8},
    "headphones": {"search_terms": ("headphones", "earphones"), "categories": ("mobile-accessories",), "priority": 7},
    "watch": {"search_terms": ("watch",), "categories": ("mens-watches", "womens-watches"), "priority": 6},
    "beauty": {"search_terms": ("beauty", "mascara"), "categories": ("beauty",), "priority": 7},
    "makeup": {"search_terms": ("mascara", "lipstick"), "categories": ("beauty",), "priority": 7},
    "skincare": {"search_terms": ("skin care", "cream"), "categories": ("skin-care",), "priority": 7},
    "fragrance": {"search_terms": ("fragrance", "perfume"), "categories": ("fragrances",), "priority": 7},
    "perfume": {"search_terms": ("perfume",), "categories": ("fragrances",), "priority": 7},
    "dress": {"search_terms": ("dress",), "categories": ("womens-dresses",), "priority": 7},
    "shirt": {"search_terms": ("shirt",), "categories": ("mens-shirts",), "priority": 6},
    "shoes": {"search_terms": ("shoes",), "categories": ("mens-shoes", "womens-shoes"), "priority": 6},
    "bag": {"search_terms": ("bag",), "categories": ("womens-bags",), "priority": 5},
    "sunglasses": {"search_terms": ("sunglasses",), "categories": ("sunglasses",), "priority": 6},
    "furniture": {"search_terms": ("sofa", "bed"), "categories": ("furniture",), "priority": 6},
    "kitchen": {"search_terms": ("kitchen",), "categories": ("kitchen-accessories",), "priority": 5},
    "decor": {"search_terms": ("decoration",), "categories": ("home-decoration",), "priority": 5},
    "grocery": {"search_terms": ("food",), "categories": ("groceries",), "priority": 5},
    "food": {"search_terms": ("food",), "categories": ("groceries",), "priority": 4},
    "sports": {"search_terms": ("ball",), "categories": ("sports-accessories",), "priority": 5},
    "car": {"search_terms": ("car",), "categories": ("vehicle",), "priority": 5},
    "motorcycle": {"search_terms": ("motorcycle",), "categories": ("motorcycle",), "priority": 5},
}

DEFAULT_INTENT_RULES: dict[str, dict] = {
    "product_recommendation": {
        "categories": ("smartphones", "laptops"),
        "search_terms": ("phone", "laptop"),
        "priority": "category",
        "confidence": 0.7,
    },
    "pricing_inquiry": {
        "categories": ("smartphones",),
        "search_terms": ("phone", "smartphone"),
        "priority": "search",
        "confidence": 0.65,
    },
    "demo_request": {
        "categories": ("smartphones", "laptops"),
        "search_terms": ("phone", "laptop"),
        "priority": "category",
        "confidence": 0.6,
    },
    "feature_inquiry": {
        "categories": ("smartphones", "laptops"),
        "search_terms": ("phone", "laptop"),
        "priority": "category",
        "confidence": 0.7,
    },
    "comparison_request": {
        "categories": ("smartphones",),
        "search_terms": ("phone", "smartphone"),
        "priority": "search",
        "confidence": 0.7,
    },
    "purchase_intent": {
        "categories": ("smartphones",),
        "search_terms": ("phone", "smartphone"),
        "priority": "category",
        "confidence": 0.75,
    },
    "review_inquiry": {
        "categories": ("smartphones", "laptops"),
        "priority": "category",
        "confidence": 0.6,
    },
}

DEFAULT_STAGE_RULES: dict[str, dict] = {
    "introduction": {
        "strategy": "popular",
        "reason": "Popular choice to get you started",
        "confidence": 0.5,
        "limit": 3,
    },
    "discovery": {
        "strategy": "top_rated",
        "reason": "Top-rated pick customers love",
        "confidence": 0.55,
        "limit": 3,
    },
    "recommendation": {
        "strategy": "featured",
        "reason": "Featured product with great reviews",
        "confidence": 0.6,
        "limit": 4,
    },
    "presentation": {
        "strategy": "top_rated",
        "reason": "Highly rated option worth a closer look",
        "confidence": 0.6,
        "limit": 3,
    },
    "objection_handling": {
        "strategy": "discounted",
        "reason": "Great value with a current discount",
        "confidence": 0.65,
        "limit": 3,
    },
    "closing": {
        "strategy": "mixed",
        "reason": "Best seller - limited time offer",
        "confidence": 0.65,
        "limit": 3,
    },
}


def default_mapping() -> MappingConfiguration:
    """Mapping configuration with the built-in tables."""
    return MappingConfiguration.build(
        keywords=DEFAULT_KEYWORD_RULES,
        intents=DEFAULT_INTENT_RULES,
        stages=DEFAULT_STAGE_RULES,
    )


class MappingRegistry:
    """
    Holds the current mapping configuration for an assistant instance.

    Usage:
        registry = MappingRegistry()
        registry.set_keyword_rule("console", {"search_terms": ["gaming"]})
        config = registry.snapshot
    """

    def __init__(self, initial: Optional[MappingConfiguration] = None):
        self._config = initial or default_mapping()
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> MappingConfiguration:
        """Current configuration; never modified after it is published."""
        return self._config

    def replace(self, config: MappingConfiguration) -> None:
        with self._lock:
            self._config = config
        logger.info("Mapping configuration replaced")

    def set_keyword_rule(self, key: str, rule: RuleInput) -> KeywordRule:
        with self._lock:
            self._config = self._config.with_keyword(key, rule)
            stored = self._config.keywords[_normalize_key(key)]
        logger.info(f"Keyword rule set: {key}")
        return stored

    def set_intent_rule(self, key: str, rule: RuleInput) -> IntentRule:
        with self._lock:
            self._config = self._config.with_intent(key, rule)
            stored = self._config.intents[_normalize_key(key)]
        logger.info(f"Intent rule set: {key}")
        return stored

    def set_stage_rule(self, key: str, rule: RuleInput) -> StageRule:
        with self._lock:
            self._config = self._config.with_stage(key, rule)
            stored = self._config.stages[_normalize_key(key)]
        logger.info(f"Stage rule set: {key}")
        return stored

    def remove_keyword_rule(self, key: str) -> None:
        with self._lock:
            self._config = self._config.with_keyword(key, None)

    def remove_intent_rule(self, key: str) -> None:
        with self._lock:
            self._config = self._config.with_intent(key, None)

    def remove_stage_rule(self, key: str) -> None:
        with self._lock:
            self._config = self._config.with_stage(key, None)
