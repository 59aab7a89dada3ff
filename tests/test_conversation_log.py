"""Tests for the conversation log sink and knowledge lookup helpers."""

import pytest

from leadsync.errors import StoreFailure
from leadsync.schemas.lead_schema import Channel
from leadsync.store.memory import InMemoryKnowledgeBase, create_memory_store
from leadsync.tools.conversation_log import ConversationSink, extract_keywords
from leadsync.tools.identity import IdentityResolver
from leadsync.tools.knowledge import (
    NO_KNOWLEDGE,
    format_knowledge_context,
    is_simple_greeting,
    lookup_knowledge,
)
from tests.conftest import FakeClock


class TestExtractKeywords:
    def test_sizes_amounts_and_places(self):
        keywords = extract_keywords("Need 1200 sqft office in Bandra around 2 lakh")
        assert "1200 sqft" in keywords
        assert "2 lakh" in keywords
        assert "bandra" in keywords
        assert "office" in keywords

    def test_deduplicated(self):
        assert extract_keywords("rent RENT rent") == ["rent"]

    def test_empty_message(self):
        assert extract_keywords("") == []


class TestConversationSink:
    def setup_method(self):
        self.clock = FakeClock()
        self.store = create_memory_store()
        self.resolver = IdentityResolver(self.store.leads, self.clock)
        self.sink = ConversationSink(self.store.logs, self.store.leads, self.clock)

    @pytest.mark.asyncio
    async def test_log_written_and_lead_touched(self):
        lead = await self.resolver.resolve("919876543210", "acme", Channel.WEB)
        self.clock.advance(120)

        log = await self.sink.store(
            lead.id,
            "looking to rent",
            "Great, what area?",
            channel=Channel.WHATSAPP,
            response_type="text_with_buttons",
            tokens_used=9,
            metadata={"urgency": "normal"},
        )

        assert self.store.logs.logs == [log]
        assert log.metadata == {"urgency": "normal", "keywords": ["rent"]}
        assert log.created_at == self.clock.now

        touched = await self.store.leads.get(lead.id)
        assert touched.last_touchpoint == Channel.WHATSAPP
        assert touched.last_interaction_at == self.clock.now

    @pytest.mark.asyncio
    async def test_unknown_lead_raises_after_logging(self):
        with pytest.raises(StoreFailure):
            await self.sink.store("missing", "hi", "hello")


class TestKnowledgeHelpers:
    @pytest.mark.parametrize("message", ["hi", "Hello!", "good morning", "thanks.", "  hey  "])
    def test_simple_greetings(self, message):
        assert is_simple_greeting(message)

    def test_question_is_not_greeting(self):
        assert not is_simple_greeting("hi, what does it cost?")

    def test_format_empty(self):
        assert format_knowledge_context([]) == NO_KNOWLEDGE
        assert format_knowledge_context(None) == NO_KNOWLEDGE

    def test_format_numbered(self):
        text = format_knowledge_context([{"content": "A"}, {"content": "B"}])
        assert text == "[1] A\n\n[2] B"

    @pytest.mark.asyncio
    async def test_lookup_skips_greetings(self):
        knowledge = InMemoryKnowledgeBase([{"content": "hello world pricing"}])
        assert await lookup_knowledge(knowledge, "hello", 2) == NO_KNOWLEDGE

    @pytest.mark.asyncio
    async def test_lookup_searches_questions(self):
        knowledge = InMemoryKnowledgeBase(
            [{"content": "Plans start at $99/month."}, {"content": "Support is 24/7."}]
        )
        text = await lookup_knowledge(knowledge, "what are your plans", 2)
        assert text == "[1] Plans start at $99/month."

    @pytest.mark.asyncio
    async def test_lookup_respects_limit(self):
        knowledge = InMemoryKnowledgeBase([{"content": f"plan {i}"} for i in range(5)])
        text = await lookup_knowledge(knowledge, "plan details", 2)
        assert text == "[1] plan 0\n\n[2] plan 1"
