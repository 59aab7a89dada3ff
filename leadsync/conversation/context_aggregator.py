"""
Context synthesis. Merges a Lead, its channel Session, recent Message
history and the cross-channel unified context into one Context value.

Merge precedence is fixed: cross-channel (web) data always comes before
same-channel data, in both the interest list and the summary text.
``build_for_lead`` only reads; identity mutation belongs to the resolver.
"""

from typing import Any, Optional

from leadsync.config import settings
from leadsync.conversation.interests import InterestExtractor
from leadsync.conversation.phase import PhaseClassifier
from leadsync.logging_context import get_request_logger
from leadsync.schemas.context_schema import Booking, Context, ContextMessage, SessionView
from leadsync.schemas.lead_schema import Channel, Lead, Message, Sender, Session
from leadsync.store.base import MessageStore, SessionReader
from leadsync.tools.identity import IdentityResolver

logger = get_request_logger(__name__)

NEW_CUSTOMER_SUMMARY = "New customer, no previous conversation."

_WEB_SUMMARY_KEYS = ("conversation_summary", "summary", "last_conversation_summary")
_WEB_INPUT_KEYS = ("user_inputs", "inputs", "past_interests", "interests")
_WEB_CONVERSATION_KEYS = ("conversations", "messages", "chat_history")


def _first_present(blob: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = blob.get(key)
        if value:
            return value
    return None


def _mapping(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _string_items(value: Any) -> list[str]:
    """String entries of a list value; anything else reads as empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _booking_field(unified_context: dict[str, Any], web: dict[str, Any], key: str) -> Optional[str]:
    for value in (unified_context.get(key), web.get(key)):
        if isinstance(value, str) and value:
            return value
    return None


def read_booking(unified_context: dict[str, Any]) -> Optional[Booking]:
    """Booking view from top-level fields, falling back to the web sub-blob.

    Returns None unless a date or time is present. Non-string values are ignored.
    """
    web = _mapping(unified_context.get("web"))
    booking = Booking(
        booking_date=_booking_field(unified_context, web, "booking_date"),
        booking_time=_booking_field(unified_context, web, "booking_time"),
        booking_status=_booking_field(unified_context, web, "booking_status"),
    )
    return booking if booking.exists else None


def read_web_context(unified_context: dict[str, Any]) -> tuple[Optional[str], list[str], Any]:
    """Return (summary, user inputs, raw conversations) from the web sub-blob."""
    web = _mapping(unified_context.get("web"))
    summary = _first_present(web, _WEB_SUMMARY_KEYS)
    inputs = _first_present(web, _WEB_INPUT_KEYS)
    conversations = _first_present(web, _WEB_CONVERSATION_KEYS)
    return (
        summary if isinstance(summary, str) else None,
        list(inputs) if isinstance(inputs, list) else [],
        conversations,
    )


def merge_interests(cross_channel: list[Any], same_channel: list[str], limit: int) -> list[str]:
    """Cross-channel first, blanks dropped, exact-string dedup, capped."""
    merged: list[str] = []
    for value in [*cross_channel, *same_channel]:
        if not isinstance(value, str) or not value.strip():
            continue
        if value not in merged:
            merged.append(value)
    return merged[:limit]


def summarize_messages(
    chronological: list[Message], window: int, max_chars: int
) -> str:
    """``sender: content`` pairs over the last ``window`` messages."""
    if not chronological:
        return NEW_CUSTOMER_SUMMARY
    recent = chronological[-window:]
    summary = " | ".join(f"{m.sender.value}: {m.content}" for m in recent)
    return summary[:max_chars] + "..." if len(summary) > max_chars else summary


def merge_summaries(
    web_summary: Optional[str], channel_summary: str, channel: Channel
) -> str:
    if not web_summary:
        return channel_summary
    merged = f"{Channel.WEB.label}: {web_summary}"
    if channel_summary and channel_summary != NEW_CUSTOMER_SUMMARY:
        merged += f"\n{channel.label}: {channel_summary}"
    return merged


class ContextAggregator:
    """Builds the per-request Context from identity, session, and history."""

    def __init__(
        self,
        resolver: IdentityResolver,
        sessions: SessionReader,
        messages: MessageStore,
        extractor: Optional[InterestExtractor] = None,
        classifier: Optional[PhaseClassifier] = None,
    ) -> None:
        self._resolver = resolver
        self._sessions = sessions
        self._messages = messages
        self._extractor = extractor or InterestExtractor()
        self._classifier = classifier or PhaseClassifier()

    async def build(
        self,
        identity_key: str,
        brand: str,
        channel: Channel = Channel.WHATSAPP,
        session_id: Optional[str] = None,
    ) -> Context:
        """Resolve the lead for ``identity_key`` and build its Context."""
        lead = await self._resolver.resolve(identity_key, brand, channel)
        return await self.build_for_lead(lead, channel, session_id or identity_key)

    async def build_for_lead(
        self,
        lead: Lead,
        channel: Channel = Channel.WHATSAPP,
        session_id: Optional[str] = None,
    ) -> Context:
        """Build a Context for an already-resolved lead. Performs reads only."""
        cfg = settings.context
        session = await self._sessions.get(session_id or lead.raw_phone, lead.brand)
        newest_first = await self._messages.list_recent(lead.id, channel, cfg.history_limit)
        chronological = list(reversed(newest_first))

        unified = lead.unified_context or {}
        booking = read_booking(unified)
        web_summary, web_inputs, web_conversations = read_web_context(unified)

        interests = merge_interests(
            web_inputs, self._extractor.extract(chronological), cfg.max_merged_interests
        )
        channel_summary = self._channel_summary(session, chronological)
        count = session.message_count if session is not None else len(chronological)
        phase = self._classifier.classify(count)

        logger.info(
            "Context built for lead %s: phase=%s booking=%s interests=%d web_summary=%s",
            lead.id, phase.value, booking is not None, len(interests), bool(web_summary),
        )

        return Context(
            lead_id=lead.id,
            name=lead.display_name or (session.customer_name if session else None),
            phone=lead.raw_phone,
            normalized_phone=lead.normalized_phone,
            brand=lead.brand,
            channel=channel,
            first_touchpoint=lead.first_touchpoint,
            last_touchpoint=lead.last_touchpoint,
            first_contact=lead.created_at,
            last_contact=lead.last_interaction_at,
            conversation_count=session.message_count if session else 0,
            history_turn_count=sum(1 for m in chronological if m.sender == Sender.ASSISTANT),
            phase=phase,
            previous_interests=interests,
            budget=unified.get("budget"),
            conversation_summary=merge_summaries(web_summary, channel_summary, channel),
            last_messages=self._last_messages(chronological, cfg.last_messages_window),
            tags=_string_items(unified.get("tags")),
            metadata=dict(unified),
            web_conversation_summary=web_summary,
            booking=booking,
            web_user_inputs=[i for i in web_inputs if isinstance(i, str)],
            web_conversations=web_conversations,
            channel_data=_mapping(unified.get("channel_data")),
            session=self._session_view(session),
        )

    @staticmethod
    def _channel_summary(session: Optional[Session], chronological: list[Message]) -> str:
        if session is not None and session.conversation_summary:
            return session.conversation_summary
        cfg = settings.context
        return summarize_messages(chronological, cfg.summary_window, cfg.summary_max_chars)

    @staticmethod
    def _last_messages(chronological: list[Message], window: int) -> list[ContextMessage]:
        return [
            ContextMessage(
                role="user" if m.sender == Sender.CUSTOMER else "assistant",
                content=m.content,
                timestamp=m.created_at,
            )
            for m in chronological[-window:]
        ]

    @staticmethod
    def _session_view(session: Optional[Session]) -> Optional[SessionView]:
        if session is None:
            return None
        return SessionView(
            session_id=session.id,
            conversation_status=session.conversation_status or "active",
            last_message_at=session.last_message_at,
        )
