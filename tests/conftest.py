"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

import pytest

from leadsync.conversation.context_aggregator import ContextAggregator
from leadsync.conversation.response_shaper import ResponseShaper
from leadsync.schemas.context_schema import Booking, Context, Phase
from leadsync.schemas.lead_schema import Channel, Message, Sender, Session
from leadsync.schemas.response_schema import ConversationTurn, GenerationResult
from leadsync.store.memory import create_memory_store
from leadsync.tools.identity import IdentityResolver

BASE_TIME = datetime(2025, 3, 15, 10, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; each call returns the current instant."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 60) -> None:
        self.now += timedelta(seconds=seconds)


class FakeBackend:
    """Generation backend returning a fixed reply and recording calls."""

    def __init__(self, reply: str = "Hi! How can I help you?", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, list[ConversationTurn]]] = []

    async def complete(
        self, system_prompt: str, turns: Sequence[ConversationTurn]
    ) -> GenerationResult:
        self.calls.append((system_prompt, list(turns)))
        if self.error is not None:
            raise self.error
        return GenerationResult(text=self.reply, output_tokens=12, elapsed_ms=5)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return create_memory_store()


@pytest.fixture
def resolver(store, clock):
    return IdentityResolver(store.leads, clock)


@pytest.fixture
def aggregator(store, resolver):
    return ContextAggregator(resolver, store.sessions, store.messages)


@pytest.fixture
def shaper():
    return ResponseShaper()


def make_message(
    lead_id: str,
    content: str,
    sender: Sender = Sender.CUSTOMER,
    minute: int = 0,
    channel: Channel = Channel.WHATSAPP,
) -> Message:
    """Helper to create a Message offset from BASE_TIME."""
    return Message(
        lead_id=lead_id,
        sender=sender,
        content=content,
        channel=channel,
        created_at=BASE_TIME + timedelta(minutes=minute),
    )


def make_session(
    external_session_id: str,
    brand: str = "acme",
    message_count: int = 0,
    summary: Optional[str] = None,
) -> Session:
    return Session(
        id=f"sess-{external_session_id}",
        external_session_id=external_session_id,
        brand=brand,
        message_count=message_count,
        conversation_summary=summary,
        last_message_at=BASE_TIME,
    )


def make_context(
    booking: Optional[Booking] = None,
    phase: Phase = Phase.DISCOVERY,
    **overrides: Any,
) -> Context:
    """Helper to create a Context with sensible defaults."""
    fields: dict[str, Any] = dict(
        lead_id="lead-1",
        name="Asha",
        phone="+91 9876543210",
        normalized_phone="919876543210",
        brand="acme",
        channel=Channel.WHATSAPP,
        first_touchpoint=Channel.WEB,
        last_touchpoint=Channel.WHATSAPP,
        first_contact=BASE_TIME,
        last_contact=BASE_TIME,
        phase=phase,
        booking=booking,
    )
    fields.update(overrides)
    return Context(**fields)
