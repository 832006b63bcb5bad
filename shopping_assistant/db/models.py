"""
SQLAlchemy models for the shopping assistant.
Guidelines and conversations; list and dict fields are stored as JSON.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


# =============================================================================
# GUIDELINES
# =============================================================================


class GuidelineRecord(Base):
    """Behavioral guideline for the assistant."""

    __tablename__ = "guidelines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    priority: Mapped[int] = mapped_column(Integer, default=5)
    category: Mapped[str] = mapped_column(String(100), default="general")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    tags: Mapped[list] = mapped_column(JSON, default=list)
    # {"user_intent": [...], "conversation_stage": [...], "context_keywords": [...]}
    conditions: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("ix_guidelines_active_priority", "is_active", "priority"),
        Index("ix_guidelines_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<GuidelineRecord(id={self.id}, name='{self.name}', priority={self.priority})>"


# =============================================================================
# CONVERSATIONS
# =============================================================================


class ConversationRecord(Base):
    """Conversation with its message log and accumulated context."""

    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # [{"role": ..., "content": ..., "timestamp": ...}, ...]
    messages: Mapped[list] = mapped_column(JSON, default=list)
    context: Mapped[dict] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<ConversationRecord(id={self.id}, messages={len(self.messages or [])})>"
