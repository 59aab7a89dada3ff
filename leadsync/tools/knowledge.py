"""Knowledge snippet lookup helpers.

The search itself is an external capability; this module decides when to
skip it and how to render its results for the prompt.
"""

import re
from typing import Any, Optional

from leadsync.store.base import KnowledgeBase

NO_KNOWLEDGE = "No relevant information found in knowledge base."

_SIMPLE_GREETING = re.compile(
    r"^(?:hi|hello|hey|hii+|good\s*(?:morning|evening|afternoon)"
    r"|thanks|thank you|ok|okay|bye)[\s!.]*$",
    re.IGNORECASE,
)


def is_simple_greeting(message: str) -> bool:
    """Greetings and sign-offs carry no question worth searching for."""
    return bool(_SIMPLE_GREETING.match((message or "").strip()))


def format_knowledge_context(results: Optional[list[dict[str, Any]]]) -> str:
    if not results:
        return NO_KNOWLEDGE
    return "\n\n".join(
        f"[{index}] {item.get('content', '')}" for index, item in enumerate(results, start=1)
    )


async def lookup_knowledge(knowledge: KnowledgeBase, message: str, limit: int) -> str:
    """Search unless the message is a simple greeting; return prompt-ready text."""
    if is_simple_greeting(message) or limit <= 0:
        return format_knowledge_context([])
    results = await knowledge.search(message, limit)
    return format_knowledge_context(results)
