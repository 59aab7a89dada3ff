"""Lead, session, and message records as held by the store."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Channel(str, Enum):
    WHATSAPP = "whatsapp"
    WEB = "web"

    @property
    def label(self) -> str:
        """Display label used when prefixing merged summaries."""
        return _CHANNEL_LABELS[self]


_CHANNEL_LABELS = {
    Channel.WHATSAPP: "WhatsApp",
    Channel.WEB: "Web",
}


class Sender(str, Enum):
    CUSTOMER = "customer"
    ASSISTANT = "assistant"


class Lead(BaseModel):
    """Durable identity for one customer within one brand.

    Unique on ``(normalized_phone, brand)``. ``raw_phone`` keeps the
    first-seen formatting for display.
    """

    id: str
    raw_phone: str
    normalized_phone: str
    brand: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    first_touchpoint: Channel
    last_touchpoint: Channel
    created_at: datetime
    last_interaction_at: datetime
    unified_context: dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    """Channel-scoped conversation metadata keyed by an external session id."""

    id: str
    external_session_id: str
    brand: str
    customer_name: Optional[str] = None
    message_count: int = 0
    conversation_status: str = "active"
    conversation_summary: Optional[str] = None
    last_message_at: Optional[datetime] = None


class Message(BaseModel):
    """One append-only turn of conversation history."""

    lead_id: str
    sender: Sender
    content: str
    channel: Channel
    created_at: datetime


class ConversationLog(BaseModel):
    """One exchange as recorded by the conversation sink."""

    lead_id: str
    customer_message: str
    ai_response: str
    response_type: str = "text_only"
    tokens_used: int = 0
    response_time_ms: int = 0
    created_at: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
