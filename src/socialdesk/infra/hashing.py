"""Hashing helpers for identifiers that must not appear in logs."""

import hashlib


def hash_identifier(value: str) -> str:
    """Create non-reversible hash for logging. Returns first 12 chars of sha256."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


def message_id_prefix(message_id: str) -> str:
    """Shorten a provider message id for log correlation."""
    return message_id[:8] if len(message_id) >= 8 else message_id
