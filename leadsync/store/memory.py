"""
In-memory store implementations.

In production these capabilities would be backed by a database whose unique
constraint on ``(normalized_phone, brand)`` arbitrates first-contact races.
Here a dict index guarded by an ``asyncio.Lock`` plays that role. Records
are copied on the way in and out so callers never share mutable state with
the store.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

from leadsync.errors import StoreFailure
from leadsync.schemas.lead_schema import Channel, ConversationLog, Lead, Message, Session
from leadsync.store.base import Store

logger = logging.getLogger(__name__)


class InMemoryLeadRepository:
    """Lead rows indexed by id and by ``(normalized_phone, brand)``."""

    def __init__(self) -> None:
        self._rows: dict[str, Lead] = {}
        self._by_key: dict[tuple[str, str], str] = {}
        self._lock = asyncio.Lock()

    async def get(self, lead_id: str) -> Optional[Lead]:
        row = self._rows.get(lead_id)
        return row.model_copy(deep=True) if row else None

    async def find_by_normalized_phone(
        self, normalized_phone: str, brand: str
    ) -> Optional[Lead]:
        lead_id = self._by_key.get((normalized_phone, brand))
        if lead_id is None:
            return None
        return self._rows[lead_id].model_copy(deep=True)

    async def insert_if_absent(self, lead: Lead) -> tuple[Lead, bool]:
        key = (lead.normalized_phone, lead.brand)
        async with self._lock:
            existing_id = self._by_key.get(key)
            if existing_id is not None:
                return self._rows[existing_id].model_copy(deep=True), False
            if lead.id in self._rows:
                raise StoreFailure("insert_if_absent", f"duplicate lead id {lead.id}")
            self._rows[lead.id] = lead.model_copy(deep=True)
            self._by_key[key] = lead.id
        logger.debug("Lead inserted: %s", lead.id)
        return lead.model_copy(deep=True), True

    async def touch_last_interaction(
        self, lead_id: str, channel: Channel, at: datetime
    ) -> Lead:
        row = self._rows.get(lead_id)
        if row is None:
            raise StoreFailure("touch_last_interaction", f"lead {lead_id} not found")
        row.last_touchpoint = channel
        row.last_interaction_at = at
        return row.model_copy(deep=True)

    async def update_unified_context(self, lead_id: str, **fields: Any) -> Lead:
        """Merge fields into a lead's unified context (external booking/web flows)."""
        row = self._rows.get(lead_id)
        if row is None:
            raise StoreFailure("update_unified_context", f"lead {lead_id} not found")
        row.unified_context.update(fields)
        return row.model_copy(deep=True)

    def count(self) -> int:
        return len(self._rows)


class InMemorySessionStore:
    def __init__(self) -> None:
        self._sessions: dict[tuple[str, str], Session] = {}

    async def get(self, external_session_id: str, brand: str) -> Optional[Session]:
        session = self._sessions.get((external_session_id, brand))
        return session.model_copy(deep=True) if session else None

    def put(self, session: Session) -> None:
        self._sessions[(session.external_session_id, session.brand)] = session.model_copy(
            deep=True
        )


class InMemoryMessageStore:
    def __init__(self) -> None:
        self._messages: list[Message] = []

    async def append(self, message: Message) -> Message:
        self._messages.append(message.model_copy(deep=True))
        return message

    async def list_recent(
        self, lead_id: str, channel: Channel, limit: int
    ) -> list[Message]:
        matching = [
            m for m in self._messages if m.lead_id == lead_id and m.channel == channel
        ]
        # Stable sort keeps append order for equal timestamps.
        ordered = sorted(
            enumerate(matching), key=lambda pair: (pair[1].created_at, pair[0]), reverse=True
        )
        return [m.model_copy(deep=True) for _, m in ordered[:limit]]


class InMemoryLogSink:
    def __init__(self) -> None:
        self.logs: list[ConversationLog] = []

    async def insert(self, log: ConversationLog) -> ConversationLog:
        self.logs.append(log.model_copy(deep=True))
        return log


class InMemoryKnowledgeBase:
    """Naive case-insensitive term match standing in for full-text search."""

    def __init__(self, entries: Optional[list[dict[str, Any]]] = None) -> None:
        self._entries = list(entries or [])

    def add(self, content: str, **extra: Any) -> None:
        self._entries.append({"content": content, **extra})

    async def search(self, query: str, limit: int) -> list[dict[str, Any]]:
        terms = [t for t in query.lower().split() if len(t) > 2]
        if not terms or limit <= 0:
            return []
        hits = [
            entry for entry in self._entries
            if any(term in entry.get("content", "").lower() for term in terms)
        ]
        return hits[:limit]


def create_memory_store(
    knowledge: Optional[list[dict[str, Any]]] = None,
) -> Store:
    """Build a Store wired entirely to in-memory implementations."""
    return Store(
        leads=InMemoryLeadRepository(),
        sessions=InMemorySessionStore(),
        messages=InMemoryMessageStore(),
        logs=InMemoryLogSink(),
        knowledge=InMemoryKnowledgeBase(knowledge),
    )
