"""
Guideline and conversation stores.

Both wrap database failures in UpstreamUnavailable so callers can abort
the turn without knowing about SQLAlchemy.
"""

import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shopping_assistant.core.errors import InputValidationError, UpstreamUnavailable
from shopping_assistant.core.models import (
    ChatMessage,
    Conversation,
    Guideline,
    GuidelineConditions,
)
from shopping_assistant.db.models import ConversationRecord, GuidelineRecord, utcnow
from shopping_assistant.db.sqlite import Database, db

logger = logging.getLogger(__name__)

GUIDELINE_FIELDS = {f.name for f in dataclasses.fields(Guideline)} - {"id"}


class _Repository:
    service = "store"

    def __init__(self, database: Optional[Database] = None):
        self.db = database or db

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with self.db.session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"{self.service} {action} failed: {e}", exc_info=True)
            raise UpstreamUnavailable(self.service, f"{action} failed") from e


# =============================================================================
# GUIDELINES
# =============================================================================


def _to_guideline(record: GuidelineRecord) -> Guideline:
    return Guideline(
        id=record.id,
        name=record.name,
        description=record.description,
        content=record.content,
        priority=record.priority,
        category=record.category,
        is_active=record.is_active,
        tags=tuple(record.tags or ()),
        conditions=GuidelineConditions.from_dict(record.conditions),
    )


def _apply(record: GuidelineRecord, guideline: Guideline) -> None:
    record.name = guideline.name
    record.description = guideline.description
    record.content = guideline.content
    record.priority = guideline.priority
    record.category = guideline.category
    record.is_active = guideline.is_active
    record.tags = list(guideline.tags)
    record.conditions = guideline.conditions.to_dict() if guideline.conditions else None


class GuidelineRepository(_Repository):
    """Guideline store backed by the guidelines table."""

    service = "guideline_store"

    async def list_active(self) -> list[Guideline]:
        """Active guidelines, highest priority first."""
        async with self._session("list_active") as session:
            stmt = (
                select(GuidelineRecord)
                .where(GuidelineRecord.is_active.is_(True))
                .order_by(GuidelineRecord.priority.desc(), GuidelineRecord.created_at)
            )
            records = (await session.execute(stmt)).scalars().all()
            return [_to_guideline(r) for r in records]

    async def list(
        self,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> list[Guideline]:
        """
        List guidelines.

        Args:
            category: Only this category
            is_active: Only active (True) or inactive (False) guidelines
            tags: Only guidelines carrying at least one of these tags

        Returns:
            Guidelines, highest priority first
        """
        async with self._session("list") as session:
            stmt = select(GuidelineRecord)
            if category is not None:
                stmt = stmt.where(GuidelineRecord.category == category)
            if is_active is not None:
                stmt = stmt.where(GuidelineRecord.is_active.is_(is_active))
            stmt = stmt.order_by(GuidelineRecord.priority.desc(), GuidelineRecord.created_at)
            records = (await session.execute(stmt)).scalars().all()

        guidelines = [_to_guideline(r) for r in records]
        if tags:
            wanted = set(tags)
            guidelines = [g for g in guidelines if wanted.intersection(g.tags)]
        return guidelines

    async def get(self, guideline_id: str) -> Optional[Guideline]:
        async with self._session("get") as session:
            record = await session.get(GuidelineRecord, guideline_id)
            return _to_guideline(record) if record else None

    async def create(self, guideline: Guideline) -> Guideline:
        """Store a new guideline; the store assigns the id unless one is given."""
        async with self._session("create") as session:
            record = GuidelineRecord(id=guideline.id) if guideline.id else GuidelineRecord()
            _apply(record, guideline)
            session.add(record)
            await session.flush()
            created = _to_guideline(record)

        logger.info(f"Guideline created: {created.name} ({created.id})")
        return created

    async def update(self, guideline_id: str, **changes) -> Optional[Guideline]:
        """
        Update guideline fields.

        Returns:
            The updated guideline, or None when it does not exist

        Raises:
            InputValidationError: unknown field or invalid value
        """
        unknown = set(changes) - GUIDELINE_FIELDS
        if unknown:
            raise InputValidationError(f"Unknown guideline fields: {sorted(unknown)}")
        if isinstance(changes.get("conditions"), dict):
            changes["conditions"] = GuidelineConditions.from_dict(changes["conditions"])
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"] or ())

        async with self._session("update") as session:
            record = await session.get(GuidelineRecord, guideline_id)
            if record is None:
                return None
            updated = dataclasses.replace(_to_guideline(record), **changes)
            _apply(record, updated)
            record.updated_at = utcnow()

        logger.info(f"Guideline updated: {guideline_id} ({sorted(changes)})")
        return updated

    async def delete(self, guideline_id: str) -> bool:
        async with self._session("delete") as session:
            record = await session.get(GuidelineRecord, guideline_id)
            if record is None:
                return False
            await session.delete(record)

        logger.info(f"Guideline deleted: {guideline_id}")
        return True


# =============================================================================
# CONVERSATIONS
# =============================================================================


def _to_conversation(record: ConversationRecord) -> Conversation:
    return Conversation(
        id=record.id,
        messages=[ChatMessage.from_dict(m) for m in record.messages or []],
        context=dict(record.context or {}),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class ConversationRepository(_Repository):
    """Conversation store backed by the conversations table."""

    service = "conversation_store"

    async def get(self, conversation_id: str) -> Optional[Conversation]:
        async with self._session("get") as session:
            record = await session.get(ConversationRecord, conversation_id)
            return _to_conversation(record) if record else None

    async def create(
        self,
        messages: list[ChatMessage],
        context: Optional[dict] = None,
    ) -> Conversation:
        async with self._session("create") as session:
            record = ConversationRecord(
                messages=[m.to_dict() for m in messages],
                context=dict(context or {}),
            )
            session.add(record)
            await session.flush()
            conversation = _to_conversation(record)

        logger.info(f"Conversation created: {conversation.id}")
        return conversation

    async def update(
        self,
        conversation_id: str,
        messages: list[ChatMessage],
        context: Optional[dict] = None,
    ) -> Conversation:
        """
        Replace the message log and context.

        Raises:
            LookupError: the conversation does not exist
        """
        async with self._session("update") as session:
            record = await session.get(ConversationRecord, conversation_id)
            if record is None:
                raise LookupError(f"Conversation not found: {conversation_id}")
            record.messages = [m.to_dict() for m in messages]
            record.context = dict(context or {})
            record.updated_at = utcnow()
            await session.flush()
            return _to_conversation(record)

    async def add_message(self, conversation_id: str, message: ChatMessage) -> Conversation:
        """
        Append one message.

        Raises:
            LookupError: the conversation does not exist
        """
        async with self._session("add_message") as session:
            record = await session.get(ConversationRecord, conversation_id)
            if record is None:
                raise LookupError(f"Conversation not found: {conversation_id}")
            # New list so the JSON column is flagged as changed
            record.messages = list(record.messages or []) + [message.to_dict()]
            record.updated_at = utcnow()
            await session.flush()
            return _to_conversation(record)
