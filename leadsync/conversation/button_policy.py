"""
Ordered, first-match-wins button policy.

Each rule maps conversation state to exactly one call-to-action label.
Rules are mutually exclusive by position: the first matching rule wins and
nothing after it is evaluated. This booking-aware single-button table is
the only policy; earlier multi-button variants are not blended in.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from leadsync.conversation.keyword_sets import DEFAULT_KEYWORDS, KeywordSets

logger = logging.getLogger(__name__)

CONFIRM_RESCHEDULE = "Confirm Reschedule"
CONFIRM_CANCEL = "Confirm Cancel"
ASK_A_QUESTION = "Ask a Question"
BOOK_DEMO = "Book Demo"
SEE_DEMO = "See Demo"
LEARN_MORE = "Learn More"

RETURNING_TURN_THRESHOLD = 3


@dataclass(frozen=True)
class PolicyInput:
    """Everything a rule may look at."""

    reply_text: str
    user_message: str
    has_booking: bool
    history_turn_count: int
    is_new_user: bool


@dataclass(frozen=True)
class ButtonRule:
    """A single row of the policy table."""

    name: str
    label: str
    condition: Callable[[PolicyInput, KeywordSets], bool]


@dataclass(frozen=True)
class PolicyDecision:
    rule: str
    labels: list[str]


class ButtonPolicy:
    """Evaluates the rule table top to bottom and stops at the first match."""

    RULES: list[ButtonRule] = [
        ButtonRule(
            "booking_reschedule", CONFIRM_RESCHEDULE,
            lambda p, k: p.has_booking and k.mentions_reschedule(p.user_message),
        ),
        ButtonRule(
            "booking_cancel", CONFIRM_CANCEL,
            lambda p, k: p.has_booking and k.mentions_cancel(p.user_message),
        ),
        ButtonRule(
            "booking_exists", ASK_A_QUESTION,
            lambda p, k: p.has_booking,
        ),
        ButtonRule(
            "price_mentioned", BOOK_DEMO,
            lambda p, k: k.has_price_marker(p.reply_text),
        ),
        ButtonRule(
            "feature_question", SEE_DEMO,
            lambda p, k: k.mentions_feature(p.user_message) or k.mentions_feature(p.reply_text),
        ),
        ButtonRule(
            "closing_phrase", BOOK_DEMO,
            lambda p, k: k.is_closing_phrase(p.user_message),
        ),
        ButtonRule(
            "new_conversation", LEARN_MORE,
            lambda p, k: p.is_new_user or p.history_turn_count == 0,
        ),
        ButtonRule(
            "engaged_conversation", BOOK_DEMO,
            lambda p, k: p.history_turn_count >= RETURNING_TURN_THRESHOLD,
        ),
        ButtonRule(
            "default", LEARN_MORE,
            lambda p, k: True,
        ),
    ]

    def __init__(
        self,
        keywords: Optional[KeywordSets] = None,
        rules: Optional[list[ButtonRule]] = None,
    ) -> None:
        self.keywords = keywords or DEFAULT_KEYWORDS
        self.rules = list(rules) if rules is not None else list(self.RULES)

    def decide(self, policy_input: PolicyInput) -> PolicyDecision:
        for rule in self.rules:
            if rule.condition(policy_input, self.keywords):
                logger.debug("Button rule matched: %s -> %s", rule.name, rule.label)
                return PolicyDecision(rule=rule.name, labels=[rule.label])
        return PolicyDecision(rule="none", labels=[])
