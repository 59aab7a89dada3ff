"""
Deterministic response shaping.

Turns a generated reply plus conversation state into clean text, one
action button, an urgency tier, and a next-action tag. Button markers the
generation backend writes inline are always discarded; button selection is
owned entirely by the policy table.
"""

import re
from typing import Optional

from leadsync.conversation.button_policy import ButtonPolicy, PolicyInput
from leadsync.conversation.keyword_sets import DEFAULT_KEYWORDS, KeywordSets
from leadsync.logging_context import get_request_logger
from leadsync.schemas.context_schema import Context
from leadsync.schemas.response_schema import Button, NextAction, ShapedResponse, Urgency

logger = get_request_logger(__name__)

_TRAILING_NEWLINES = re.compile(r"\n+$")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


class ResponseShaper:
    """Applies marker stripping, the button policy, and urgency tagging."""

    def __init__(
        self,
        policy: Optional[ButtonPolicy] = None,
        keywords: Optional[KeywordSets] = None,
    ) -> None:
        self.keywords = keywords or (policy.keywords if policy else DEFAULT_KEYWORDS)
        self.policy = policy or ButtonPolicy(self.keywords)

    def shape(
        self,
        raw_reply: str,
        user_message: str,
        context: Optional[Context],
        history_turn_count: int,
        is_new_user: bool,
    ) -> ShapedResponse:
        text = self.clean_reply(raw_reply)

        decision = self.policy.decide(PolicyInput(
            reply_text=text,
            user_message=user_message or "",
            has_booking=bool(context and context.has_booking),
            history_turn_count=history_turn_count,
            is_new_user=is_new_user,
        ))
        buttons = [
            Button.from_label(label, position)
            for position, label in enumerate(decision.labels, start=1)
        ]
        urgency = self.classify_urgency(text)
        next_action = (
            NextAction.WAIT_FOR_RESPONSE if buttons else NextAction.CONTINUE_CONVERSATION
        )

        logger.info(
            "Shaped reply: rule=%s buttons=%s urgency=%s",
            decision.rule, [b.label for b in buttons], urgency.value,
        )
        return ShapedResponse(
            text=text,
            buttons=buttons,
            urgency=urgency,
            next_action=next_action,
            matched_rule=decision.rule,
        )

    def clean_reply(self, raw_reply: str) -> str:
        """Drop inline button markers and tidy surrounding whitespace."""
        text = self.keywords.strip_button_markers(raw_reply or "")
        text = _EXCESS_BLANK_LINES.sub("\n\n", text.strip())
        return _TRAILING_NEWLINES.sub("", text).strip()

    def classify_urgency(self, text: str) -> Urgency:
        """Urgent tier is checked before high; first tier that matches wins."""
        if self.keywords.has_urgent_token(text):
            return Urgency.URGENT
        if self.keywords.has_high_token(text):
            return Urgency.HIGH
        return Urgency.NORMAL
