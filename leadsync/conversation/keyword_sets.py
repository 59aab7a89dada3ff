"""
Keyword and pattern sets driving the response policy.

The button policy and urgency classifier stay declarative: every free-text
heuristic they rely on is data here, so rules can be tested in isolation
and tuned without touching policy code.
"""

import re
from dataclasses import dataclass, field

RESCHEDULE_TERMS: tuple[str, ...] = (
    "reschedule", "re-schedule", "change the date", "change the time",
    "change my booking", "move my booking", "move my appointment",
    "different time", "different date", "another time", "another day",
    "postpone",
)

CANCEL_TERMS: tuple[str, ...] = (
    "cancel", "call off", "don't want the booking", "do not want the booking",
)

FEATURE_TERMS: tuple[str, ...] = (
    "how does it work", "how does this work", "how it works", "how do you work",
    "feature", "capabilit", "what can you do", "what can it do",
    "what does it do", "integration", "integrate",
)

CLOSING_PHRASES: tuple[str, ...] = (
    "thanks", "thank you", "thank you so much", "thanks a lot", "thx", "ty",
    "ok", "okay", "ok thanks", "okay thanks", "ok thank you", "cool",
    "great", "got it", "bye", "goodbye", "bye bye", "see you", "see ya",
)

PRICE_PATTERNS: tuple[str, ...] = (
    r"[$₹€£]\s?\d",
    r"\b(?:rs\.?|inr|usd|eur|gbp)\s?\d",
    r"\d[\d,.]*\s?(?:usd|inr|dollars|rupees)\b",
    r"/\s?(?:month|mo)\b",
    r"\bper month\b",
)

URGENT_TOKENS: tuple[str, ...] = ("urgent", "asap", "immediately", "emergency")
HIGH_TOKENS: tuple[str, ...] = ("important", "soon", "today", "quickly")

BUTTON_MARKER_PATTERN = r"(?:→|->)\s*BUTTON:\s*.+"


def _word_pattern(tokens: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(t) for t in tokens) + r")\b", re.IGNORECASE)


def _closing_pattern(phrases: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(p) for p in sorted(phrases, key=len, reverse=True))
    return re.compile(r"^(?:" + alternatives + r")[\s!.,]*$", re.IGNORECASE)


@dataclass(frozen=True)
class KeywordSets:
    """Ordered keyword sets, one per policy concern."""

    reschedule: tuple[str, ...] = RESCHEDULE_TERMS
    cancel: tuple[str, ...] = CANCEL_TERMS
    features: tuple[str, ...] = FEATURE_TERMS
    closing: tuple[str, ...] = CLOSING_PHRASES
    price_patterns: tuple[str, ...] = PRICE_PATTERNS
    urgent: tuple[str, ...] = URGENT_TOKENS
    high: tuple[str, ...] = HIGH_TOKENS
    button_marker: str = BUTTON_MARKER_PATTERN
    _compiled: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._compiled.update(
            price=[re.compile(p, re.IGNORECASE) for p in self.price_patterns],
            closing=_closing_pattern(self.closing),
            urgent=_word_pattern(self.urgent),
            high=_word_pattern(self.high),
            marker=re.compile(self.button_marker, re.IGNORECASE),
        )

    @staticmethod
    def _contains_any(text: str, terms: tuple[str, ...]) -> bool:
        lower = text.lower()
        return any(term in lower for term in terms)

    def mentions_reschedule(self, text: str) -> bool:
        return self._contains_any(text, self.reschedule)

    def mentions_cancel(self, text: str) -> bool:
        return self._contains_any(text, self.cancel)

    def mentions_feature(self, text: str) -> bool:
        return self._contains_any(text, self.features)

    def has_price_marker(self, text: str) -> bool:
        return any(p.search(text) for p in self._compiled["price"])

    def is_closing_phrase(self, text: str) -> bool:
        """True only when the whole trimmed message is a closing phrase."""
        return bool(self._compiled["closing"].match(text.strip()))

    def has_urgent_token(self, text: str) -> bool:
        return bool(self._compiled["urgent"].search(text))

    def has_high_token(self, text: str) -> bool:
        return bool(self._compiled["high"].search(text))

    def strip_button_markers(self, text: str) -> str:
        return self._compiled["marker"].sub("", text)


DEFAULT_KEYWORDS = KeywordSets()
