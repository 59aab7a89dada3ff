"""
System prompt assembly.

The brand voice copy is short; knowledge snippets and the
customer context note are appended below fixed section rules so the
generation backend can tell them apart.
"""

SECTION_RULE = "=" * 81

REPLY_STYLE_RULES = """
REPLY RULES:
- Keep replies to 2-4 short sentences. This is a chat, not an email.
- Use plain text; *bold* and _italic_ are fine, no headers, links or code blocks.
- Ask ONE question at a time.
- Never invent prices, dates or bookings that are not in the context below.
- Do not suggest buttons; the system adds them.
"""


def _brand_intro(brand: str) -> str:
    return (
        f"You are the customer assistant for {brand}. "
        "Every channel (website, WhatsApp) shares one memory of the customer, "
        "so continue the conversation wherever it left off."
    )


def build_system_prompt(brand: str, knowledge_context: str, customer_note: str = "") -> str:
    """Compose the full system prompt for one reply."""
    parts = [_brand_intro(brand), REPLY_STYLE_RULES.strip(), "", knowledge_context]
    if customer_note:
        parts.extend([
            "",
            SECTION_RULE,
            "CUSTOMER CONTEXT",
            SECTION_RULE,
            customer_note,
        ])
    return "\n".join(parts)
