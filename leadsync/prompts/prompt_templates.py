"""Dynamic prompt construction for context-aware replies."""

import json
from typing import Optional

from leadsync.conversation.context_aggregator import NEW_CUSTOMER_SUMMARY
from leadsync.schemas.context_schema import Context


def _booking_line(context: Context) -> Optional[str]:
    booking = context.booking
    if booking is None or not booking.exists:
        return None
    details = []
    if booking.booking_date:
        details.append(f"Date: {booking.booking_date}")
    if booking.booking_time:
        details.append(f"Time: {booking.booking_time}")
    if booking.booking_status:
        details.append(f"Status: {booking.booking_status}")
    return f"Existing booking: {', '.join(details)}"


def build_greeting_instruction(context: Context) -> str:
    """Pick the greeting stance: booking, then web history, then returning, then new."""
    if context.has_booking:
        date = context.booking.booking_date or "the scheduled date"
        time = context.booking.booking_time or "the scheduled time"
        return (
            "GREETING INSTRUCTION: This is a returning customer with a confirmed booking "
            f"on {date} at {time}. Greet them by name and acknowledge their booking. "
            "Do NOT ask 'What brings you here today?'"
        )
    if context.web_conversation_summary:
        return (
            "GREETING INSTRUCTION: This is a returning customer who previously chatted "
            "on the website. Greet them by name and reference you've chatted before. "
            "Do NOT treat them as new."
        )
    if context.conversation_count > 0:
        return (
            "GREETING INSTRUCTION: This is a returning customer. Greet them warmly by "
            "name if available. Do NOT ask generic questions like 'What brings you here today?'"
        )
    return (
        "GREETING INSTRUCTION: This is a new customer. Welcome them warmly and ask "
        "how you can help."
    )


def build_customer_context_note(context: Optional[Context]) -> str:
    """Render the Context as a compact note for the system prompt."""
    if context is None:
        return ""

    parts: list[str] = []
    if context.name:
        parts.append(f"Customer: {context.name}")
    if context.conversation_count > 0:
        parts.append(f"Previous conversations: {context.conversation_count}")
    parts.append(f"Phase: {context.phase.value}")
    if context.web_conversation_summary:
        parts.append(f"Web conversation summary: {context.web_conversation_summary}")

    booking = _booking_line(context)
    if booking:
        parts.append(booking)

    if context.web_user_inputs:
        parts.append(
            f"Previous interests/questions from web: {', '.join(context.web_user_inputs)}"
        )
    if context.channel_data:
        parts.append(f"Channel data: {json.dumps(context.channel_data, default=str)}")
    if context.previous_interests:
        parts.append(f"All interests: {', '.join(context.previous_interests)}")
    if context.budget:
        parts.append(f"Budget: {context.budget}")
    if context.conversation_summary and context.conversation_summary != NEW_CUSTOMER_SUMMARY:
        parts.append(f"Conversation summary: {context.conversation_summary}")

    parts.append(build_greeting_instruction(context))
    return "\n".join(parts)
