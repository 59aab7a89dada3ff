"""Synthesized conversation context handed to generation and response shaping."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from leadsync.schemas.lead_schema import Channel


class Phase(str, Enum):
    DISCOVERY = "discovery"
    EVALUATION = "evaluation"
    CLOSING = "closing"


class Booking(BaseModel):
    """Read-only booking view derived from a lead's unified context."""

    booking_date: Optional[str] = None
    booking_time: Optional[str] = None
    booking_status: Optional[str] = None

    @property
    def exists(self) -> bool:
        return bool(self.booking_date or self.booking_time)


class ContextMessage(BaseModel):
    role: str
    content: str
    timestamp: datetime


class SessionView(BaseModel):
    session_id: str
    conversation_status: str
    last_message_at: Optional[datetime] = None


class Context(BaseModel):
    """
    Transient, per-request merge of Lead, Session, Message history and Booking.

    Never persisted; rebuilt on every request. Building twice from the
    same stored state yields equal Context values.
    """

    lead_id: str
    name: Optional[str] = None
    phone: str
    normalized_phone: str
    brand: str
    channel: Channel
    first_touchpoint: Channel
    last_touchpoint: Channel
    first_contact: datetime
    last_contact: datetime
    conversation_count: int = 0
    history_turn_count: int = 0
    phase: Phase = Phase.DISCOVERY
    previous_interests: list[str] = Field(default_factory=list)
    budget: Optional[Any] = None
    conversation_summary: str = ""
    last_messages: list[ContextMessage] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    web_conversation_summary: Optional[str] = None
    booking: Optional[Booking] = None
    web_user_inputs: list[str] = Field(default_factory=list)
    web_conversations: Optional[Any] = None
    channel_data: dict[str, Any] = Field(default_factory=dict)
    session: Optional[SessionView] = None

    @property
    def has_booking(self) -> bool:
        return self.booking is not None and self.booking.exists
