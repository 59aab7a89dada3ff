"""Conversation log sink. Records each exchange and touches the lead."""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from leadsync.logging_context import get_request_logger
from leadsync.schemas.lead_schema import Channel, ConversationLog
from leadsync.store.base import LeadRepository, LogSink

logger = get_request_logger(__name__)

KEYWORD_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b\d+\s*(?:sqft|sq\.?\s*ft\.?|square\s*feet)", re.IGNORECASE),
    re.compile(r"₹?\s*\b\d[\d,]*\s*(?:lakh|lac|cr|crore|k|thousand)\b", re.IGNORECASE),
    re.compile(r"\b(?:bandra|bkc|worli|mumbai|delhi|bangalore|pune)\b", re.IGNORECASE),
    re.compile(
        r"\b(?:rent|lease|buy|purchase|property|properties|office|commercial|residential)\b",
        re.IGNORECASE,
    ),
]


def extract_keywords(message: str) -> list[str]:
    """Pull sizes, amounts, localities and property terms from a message.

    Lower-cased, whitespace-trimmed, deduplicated in first-seen order.
    """
    found: list[str] = []
    for pattern in KEYWORD_PATTERNS:
        for match in pattern.finditer(message or ""):
            value = match.group(0).strip().lower()
            if value and value not in found:
                found.append(value)
    return found


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationSink:
    """Persists a log line then refreshes the lead's last-contact timestamp."""

    def __init__(
        self,
        logs: LogSink,
        leads: LeadRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._logs = logs
        self._leads = leads
        self._clock = clock

    async def store(
        self,
        lead_id: str,
        customer_message: str,
        ai_response: str,
        channel: Channel = Channel.WHATSAPP,
        response_type: str = "text_only",
        tokens_used: int = 0,
        response_time_ms: int = 0,
        metadata: Optional[dict[str, Any]] = None,
    ) -> ConversationLog:
        now = self._clock()
        log = ConversationLog(
            lead_id=lead_id,
            customer_message=customer_message,
            ai_response=ai_response,
            response_type=response_type,
            tokens_used=tokens_used,
            response_time_ms=response_time_ms,
            created_at=now,
            metadata={**(metadata or {}), "keywords": extract_keywords(customer_message)},
        )
        stored = await self._logs.insert(log)
        await self._leads.touch_last_interaction(lead_id, channel, now)
        logger.info("Conversation log stored for lead %s", lead_id)
        return stored
