"""
Domain models for the shopping assistant engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from shopping_assistant.core.errors import InputValidationError


class UserIntent(Enum):
    """What the user is asking for in the current message."""
    GREETING = "greeting"
    HELP_REQUEST = "help_request"
    PRICING_INQUIRY = "pricing_inquiry"
    DEMO_REQUEST = "demo_request"
    FEATURE_INQUIRY = "feature_inquiry"
    COMPARISON_REQUEST = "comparison_request"
    PURCHASE_INTENT = "purchase_intent"
    OBJECTION_HANDLING = "objection_handling"
    REVIEW_INQUIRY = "review_inquiry"
    AVAILABILITY_INQUIRY = "availability_inquiry"
    SERVICE_INQUIRY = "service_inquiry"
    PRODUCT_RECOMMENDATION = "product_recommendation"
    GENERAL_INQUIRY = "general_inquiry"
    UNKNOWN = "unknown"


class ShoppingIntent(Enum):
    """Coarse shopping activity."""
    BROWSING = "browsing"
    COMPARING = "comparing"
    BUYING = "buying"
    SUPPORT = "support"


class ConversationStage(Enum):
    """Conversation phase, in the order it advances."""
    INTRODUCTION = "introduction"
    DISCOVERY = "discovery"
    RECOMMENDATION = "recommendation"
    PRESENTATION = "presentation"
    OBJECTION_HANDLING = "objection_handling"
    CLOSING = "closing"


class SuggestionType(Enum):
    """Strategy that produced a suggestion."""
    KEYWORD = "keyword"
    INTENT = "intent"
    STAGE = "stage"
    CONTEXTUAL = "contextual"
    POPULAR = "popular"
    RELATED = "related"


class MessageRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class ChatMessage:
    """Single message in a conversation."""
    role: MessageRole
    content: str
    timestamp: Optional[str] = None

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.USER, content, datetime.now().isoformat())

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(MessageRole.ASSISTANT, content, datetime.now().isoformat())

    @classmethod
    def from_dict(cls, data: dict) -> "ChatMessage":
        try:
            role = MessageRole(data.get("role"))
        except ValueError:
            raise InputValidationError(f"Unknown message role: {data.get('role')!r}")
        content = data.get("content")
        if not isinstance(content, str):
            raise InputValidationError("Message content must be a string")
        return cls(role=role, content=content, timestamp=data.get("timestamp"))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp,
        }


def user_messages(history: list[ChatMessage]) -> list[str]:
    """Contents of the user turns, oldest first."""
    return [m.content for m in history if m.role == MessageRole.USER]


@dataclass(frozen=True)
class GuidelineConditions:
    """Applicability conditions; an empty axis is not declared."""
    intents: tuple[str, ...] = ()
    stages: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["GuidelineConditions"]:
        """Accepts both the stored column names and the short names."""
        if not data:
            return None
        return cls(
            intents=tuple(data.get("intents") or data.get("user_intent") or ()),
            stages=tuple(data.get("stages") or data.get("conversation_stage") or ()),
            keywords=tuple(data.get("keywords") or data.get("context_keywords") or ()),
        )

    def to_dict(self) -> dict:
        """Convert to the stored representation."""
        result = {}
        if self.intents:
            result["user_intent"] = list(self.intents)
        if self.stages:
            result["conversation_stage"] = list(self.stages)
        if self.keywords:
            result["context_keywords"] = list(self.keywords)
        return result


@dataclass(frozen=True)
class Guideline:
    """Prioritized behavioral rule for the assistant."""
    id: Optional[str]
    name: str
    content: str
    priority: int = 5
    category: str = "general"
    is_active: bool = True
    tags: tuple[str, ...] = ()
    conditions: Optional[GuidelineConditions] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise InputValidationError("Guideline name is required")
        if not self.content or not self.content.strip():
            raise InputValidationError("Guideline content is required")
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise InputValidationError("Guideline priority must be an integer")
        if not 1 <= self.priority <= 10:
            raise InputValidationError(
                f"Guideline priority must be between 1 and 10, got {self.priority}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "Guideline":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            content=data.get("content", ""),
            priority=data.get("priority", 5),
            category=data.get("category") or "general",
            is_active=data.get("is_active", True),
            tags=tuple(data.get("tags") or ()),
            conditions=GuidelineConditions.from_dict(data.get("conditions")),
            description=data.get("description"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "content": self.content,
            "priority": self.priority,
            "category": self.category,
            "is_active": self.is_active,
            "tags": list(self.tags),
            "conditions": self.conditions.to_dict() if self.conditions else None,
        }


@dataclass(frozen=True)
class ProductCandidate:
    """Read-only catalog product."""
    id: int
    title: str
    price: float
    rating: float
    stock: int
    category: str
    brand: Optional[str] = None
    discount_percentage: float = 0.0
    tags: tuple[str, ...] = ()
    description: Optional[str] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @classmethod
    def from_dict(cls, data: dict) -> "ProductCandidate":
        """Build from a catalog payload (DummyJSON field names)."""
        return cls(
            id=int(data["id"]),
            title=data.get("title", ""),
            price=float(data.get("price") or 0.0),
            rating=float(data.get("rating") or 0.0),
            stock=int(data.get("stock") or 0),
            category=data.get("category", ""),
            brand=data.get("brand"),
            discount_percentage=float(data.get("discountPercentage") or 0.0),
            tags=tuple(data.get("tags") or ()),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Suggestion:
    """Product suggested for the current turn."""
    product: ProductCandidate
    reason: str
    confidence: float
    type: SuggestionType

    def to_dict(self) -> dict:
        """Trimmed summary suitable for storing with the conversation."""
        return {
            "product_id": self.product.id,
            "title": self.product.title,
            "price": self.product.price,
            "reason": self.reason,
            "confidence": round(self.confidence, 3),
            "type": self.type.value,
        }


@dataclass
class ConversationContext:
    """Classified context of one inbound message."""
    user_intent: Optional[UserIntent] = None
    keywords: list[str] = field(default_factory=list)
    shopping_intent: ShoppingIntent = ShoppingIntent.BROWSING
    budget_range: Optional[str] = None
    conversation_stage: Optional[ConversationStage] = None
    is_topic_change: bool = False

    def to_dict(self) -> dict:
        """Fields folded into the stored conversation context."""
        return {
            "user_intent": self.user_intent.value if self.user_intent else None,
            "conversation_stage": (
                self.conversation_stage.value if self.conversation_stage else None
            ),
            "keywords": list(self.keywords),
            "shopping_intent": self.shopping_intent.value,
            "budget_range": self.budget_range,
            "is_topic_change": self.is_topic_change,
        }


@dataclass
class Conversation:
    """Stored conversation: message log plus accumulated context."""
    id: str
    messages: list[ChatMessage] = field(default_factory=list)
    context: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def user_turns(self) -> int:
        return len(user_messages(self.messages))
