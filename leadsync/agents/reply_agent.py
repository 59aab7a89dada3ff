"""
Reply agent: the end-to-end path for one inbound customer message.

resolve identity -> build context -> record the customer turn -> knowledge
lookup -> generate -> shape -> record the assistant turn -> log.

Every failure propagates to the caller after being logged; nothing here
retries or substitutes a fallback reply.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

from leadsync.config import settings
from leadsync.conversation.context_aggregator import ContextAggregator
from leadsync.conversation.response_shaper import ResponseShaper
from leadsync.errors import LeadSyncError
from leadsync.logging_context import get_request_logger, request_scope
from leadsync.prompts.prompt_templates import build_customer_context_note
from leadsync.prompts.system_prompts import build_system_prompt
from leadsync.schemas.lead_schema import Channel, Message, Sender
from leadsync.schemas.response_schema import ConversationTurn, ReplyResult
from leadsync.store.base import Store
from leadsync.tools.conversation_log import ConversationSink
from leadsync.tools.generation import GenerationBackend
from leadsync.tools.identity import IdentityResolver
from leadsync.tools.knowledge import lookup_knowledge

logger = get_request_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReplyAgent:
    """Wires resolver, aggregator, backend, shaper and sink over one Store."""

    def __init__(
        self,
        store: Store,
        backend: GenerationBackend,
        shaper: Optional[ResponseShaper] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.backend = backend
        self.resolver = IdentityResolver(store.leads, clock)
        self.aggregator = ContextAggregator(self.resolver, store.sessions, store.messages)
        self.shaper = shaper or ResponseShaper()
        self.sink = ConversationSink(store.logs, store.leads, clock)
        self._clock = clock

    async def handle_message(
        self,
        raw_phone: str,
        message: str,
        brand: Optional[str] = None,
        channel: Channel = Channel.WHATSAPP,
        profile_name: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> ReplyResult:
        """Process one inbound message and return the shaped reply."""
        started = time.perf_counter()
        brand = brand or settings.brand.default_brand
        with request_scope():
            logger.info(
                "Processing %s message from %s (brand: %s)", channel.value, raw_phone, brand
            )
            try:
                return await self._handle(
                    raw_phone, message, brand, channel, profile_name, session_id, started
                )
            except LeadSyncError as exc:
                logger.error("Failed to process message from %s: %s", raw_phone, exc)
                raise

    async def _handle(
        self,
        raw_phone: str,
        message: str,
        brand: str,
        channel: Channel,
        profile_name: Optional[str],
        session_id: Optional[str],
        started: float,
    ) -> ReplyResult:
        hints = {"profile_name": profile_name} if profile_name else None
        lead, created = await self.resolver.resolve_with_status(raw_phone, brand, channel, hints)
        context = await self.aggregator.build_for_lead(lead, channel, session_id or raw_phone)

        history = [
            ConversationTurn(role=m.role, content=m.content) for m in context.last_messages
        ]
        await self.store.messages.append(Message(
            lead_id=lead.id,
            sender=Sender.CUSTOMER,
            content=message,
            channel=channel,
            created_at=self._clock(),
        ))

        knowledge_context = await lookup_knowledge(
            self.store.knowledge, message, settings.context.knowledge_results
        )
        system_prompt = build_system_prompt(
            brand, knowledge_context, build_customer_context_note(context)
        )
        generation = await self.backend.complete(
            system_prompt, [*history, ConversationTurn(role="user", content=message)]
        )

        shaped = self.shaper.shape(
            generation.text, message, context, context.history_turn_count, created
        )
        await self.store.messages.append(Message(
            lead_id=lead.id,
            sender=Sender.ASSISTANT,
            content=shaped.text,
            channel=channel,
            created_at=self._clock(),
        ))

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        await self.sink.store(
            lead_id=lead.id,
            customer_message=message,
            ai_response=shaped.text,
            channel=channel,
            response_type=shaped.response_type,
            tokens_used=generation.output_tokens,
            response_time_ms=elapsed_ms,
            metadata={
                "buttons": [b.model_dump() for b in shaped.buttons],
                "urgency": shaped.urgency.value,
                "next_action": shaped.next_action.value,
                "matched_rule": shaped.matched_rule,
            },
        )

        return ReplyResult(
            lead_id=lead.id,
            is_new_user=created,
            context=context,
            response=shaped,
            tokens_used=generation.output_tokens,
            response_time_ms=elapsed_ms,
        )
