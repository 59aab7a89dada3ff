"""Lightweight interest signals pulled from message text.

Not NLP: a keyword hit yields the text window around it. False positives
are acceptable; the output is bounded, deterministic, and order-preserving.
"""

from typing import Iterable, Optional

from leadsync.config import settings
from leadsync.schemas.lead_schema import Message


class InterestExtractor:
    """Scans messages for configured keywords and returns context windows."""

    def __init__(
        self,
        keywords: Optional[Iterable[str]] = None,
        window: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> None:
        cfg = settings.context
        self.keywords = tuple(k.lower() for k in (keywords or cfg.interest_keywords))
        self.window = cfg.interest_window_chars if window is None else window
        self.limit = cfg.max_extracted_interests if limit is None else limit

    def extract(self, messages: Iterable[Message]) -> list[str]:
        """Return up to ``limit`` distinct windows, earliest message first."""
        interests: list[str] = []
        for message in messages:
            content = (message.content or "").lower()
            for keyword in self.keywords:
                if keyword not in content:
                    continue
                snippet = self._window_around(content, keyword)
                if snippet and snippet not in interests:
                    interests.append(snippet)
                    if len(interests) >= self.limit:
                        return interests
        return interests

    def _window_around(self, text: str, keyword: str) -> str:
        index = text.index(keyword)
        start = max(0, index - self.window)
        end = min(len(text), index + len(keyword) + self.window)
        return text[start:end].strip()
