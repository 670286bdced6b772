"""Input validation for identifiers arriving over HTTP."""

from __future__ import annotations

import re
import unicodedata
import uuid
from typing import Optional

MAX_ID_LENGTH = 50

_DANGEROUS_PATTERNS = re.compile(
    r"<script|javascript:|data:|onclick|onerror|\.\./|\.\.\\|\x00",
    re.IGNORECASE,
)

_ALLOWED_CONTROL = {"\n", "\r", "\t"}


def sanitize_string(value: Optional[str], max_length: int) -> str:
    """Normalize, strip control characters, reject dangerous content, truncate.

    Raises ValueError if the input contains a dangerous pattern.
    """
    if not value:
        return ""

    normalized = unicodedata.normalize("NFC", value)
    cleaned = "".join(
        ch for ch in normalized
        if ch in _ALLOWED_CONTROL or unicodedata.category(ch) != "Cc"
    )

    if _DANGEROUS_PATTERNS.search(cleaned):
        raise ValueError("Input contains potentially dangerous content.")

    return cleaned[:max_length].strip()


def validate_uuid(value: Optional[str], name: str) -> uuid.UUID:
    """Parse `value` as a non-nil UUID. Raises ValueError otherwise."""
    if not value or not value.strip():
        raise ValueError(f"{name} cannot be empty.")
    try:
        parsed = uuid.UUID(value.strip())
    except ValueError:
        raise ValueError(f"{name} is not a valid GUID.") from None
    if parsed.int == 0:
        raise ValueError(f"{name} cannot be empty.")
    return parsed


def parse_id(value: Optional[str], name: str) -> uuid.UUID:
    """Sanitize then parse an identifier from a request path."""
    return validate_uuid(sanitize_string(value, MAX_ID_LENGTH), name)
