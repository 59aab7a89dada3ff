"""Shared utilities used across the lead pipeline."""

import re
from typing import Any

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_phone(value: Any) -> str:
    """Normalize a phone number to its identity key by stripping every non-ASCII-digit.

    The country code stays part of the digit run, so the bare WhatsApp form
    and the formatted web form of one number produce the same key.
    Empty or non-string input yields ``""``.

    Examples:
        >>> normalize_phone("+91 9876543210")
        '919876543210'
        >>> normalize_phone("+1 (555) 123-4567")
        '15551234567'
    """
    if not value or not isinstance(value, str):
        return ""
    return _NON_DIGITS.sub("", value)


def snake_label(label: str) -> str:
    """Lower-case a display label and join its words with underscores."""
    return re.sub(r"\s+", "_", label.strip().lower())
