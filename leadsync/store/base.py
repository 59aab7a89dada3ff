"""
Store capabilities consumed by the pipeline.

Each component receives the repositories it needs instead of reaching for a
module-level client. Implementations must be strongly consistent for a
single identity key and enforce uniqueness on ``(normalized_phone, brand)``
inside ``insert_if_absent``. Tolerated absence is returned as ``None``;
any other failure raises ``StoreFailure``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol

from leadsync.schemas.lead_schema import Channel, ConversationLog, Lead, Message, Session


class LeadRepository(Protocol):
    async def get(self, lead_id: str) -> Optional[Lead]: ...

    async def find_by_normalized_phone(
        self, normalized_phone: str, brand: str
    ) -> Optional[Lead]: ...

    async def insert_if_absent(self, lead: Lead) -> tuple[Lead, bool]:
        """Insert ``lead`` unless its key exists; return the stored row and
        whether this call created it."""
        ...

    async def touch_last_interaction(
        self, lead_id: str, channel: Channel, at: datetime
    ) -> Lead: ...


class SessionReader(Protocol):
    async def get(self, external_session_id: str, brand: str) -> Optional[Session]: ...


class MessageStore(Protocol):
    async def append(self, message: Message) -> Message: ...

    async def list_recent(
        self, lead_id: str, channel: Channel, limit: int
    ) -> list[Message]:
        """Most recent messages first."""
        ...


class LogSink(Protocol):
    async def insert(self, log: ConversationLog) -> ConversationLog: ...


class KnowledgeBase(Protocol):
    async def search(self, query: str, limit: int) -> list[dict[str, Any]]: ...


@dataclass
class Store:
    """Bundle of store capabilities injected into the pipeline."""

    leads: LeadRepository
    sessions: SessionReader
    messages: MessageStore
    logs: LogSink
    knowledge: KnowledgeBase
