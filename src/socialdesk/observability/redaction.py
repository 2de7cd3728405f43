"""Redaction for log fields. Webhook and operator data reaches logs only through here."""

import re
from typing import Any

_PHONE_PATTERN = re.compile(r"\+?\d[\d\s\-()]{8,}\d")
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_BEARER_PATTERN = re.compile(r"(?i)bearer\s+[A-Za-z0-9\-._~+/]+=*")

_REDACTED = "[REDACTED]"

# Free text typed by end users or operators; only its length is logged.
CONTENT_KEYS = frozenset({"text", "body", "message", "caption"})


def redact_string(value: str) -> str:
    """Mask phone numbers, e-mail addresses and bearer tokens."""
    value = _BEARER_PATTERN.sub(_REDACTED, value)
    value = _PHONE_PATTERN.sub(_REDACTED, value)
    return _EMAIL_PATTERN.sub(_REDACTED, value)


def redact_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        return f"dict(keys={list(value.keys())})"
    if isinstance(value, (list, tuple)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Build an ``extra_fields`` dict with every value redacted.

    Keys in CONTENT_KEYS are reduced to ``len=N``.
    """
    context = {}
    for key, value in kwargs.items():
        if key in CONTENT_KEYS and isinstance(value, str):
            context[key] = f"len={len(value)}"
        else:
            context[key] = redact_value(value)
    return context
