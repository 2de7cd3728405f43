"""Meta webhook adapter - validate envelopes and normalize messages.

Covers the WhatsApp Cloud API message shape plus the generic
entry/changes shape used by Page, Instagram and ad-account webhooks.
"""

import hashlib
import hmac
from typing import Any

from socialdesk.infra.time import from_unix_seconds, utc_now

from .models import InboundMessage, SourcePlatform


class InvalidPayloadError(Exception):
    """Raised when a Meta payload has an invalid shape."""

    pass


class SignatureVerificationError(Exception):
    """Raised when HMAC signature verification fails."""

    pass


SIGNATURE_PREFIX = "sha256="


def compute_signature(payload_bytes: bytes, app_secret: str) -> str:
    """Compute the X-Hub-Signature-256 header value for a body."""
    digest = hmac.new(
        key=app_secret.encode("utf-8"),
        msg=payload_bytes,
        digestmod=hashlib.sha256,
    ).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload_bytes: bytes, signature_header: str, app_secret: str) -> None:
    """Verify Meta webhook signature (HMAC-SHA256 over the raw body).

    Args:
        payload_bytes: Raw request body bytes.
        signature_header: X-Hub-Signature-256 header value (sha256=...).
        app_secret: Meta App Secret for HMAC verification.

    Raises:
        SignatureVerificationError: If signature is invalid or missing.
    """
    if not signature_header:
        raise SignatureVerificationError("missing signature header")

    if not signature_header.startswith(SIGNATURE_PREFIX):
        raise SignatureVerificationError("invalid signature format")

    expected = compute_signature(payload_bytes, app_secret)
    if not hmac.compare_digest(expected.encode("utf-8"), signature_header.encode("utf-8")):
        raise SignatureVerificationError("signature mismatch")


def extract_raw_messages(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the message list at entry[0].changes[0].value.messages.

    Meta payload structure:
    {
      "object": "whatsapp_business_account",
      "entry": [{
        "changes": [{
          "value": {
            "metadata": {"phone_number_id": "..."},
            "messages": [{"from": "PHONE", "id": "MSG_ID", "text": {"body": "..."}}]
          },
          "field": "messages"
        }]
      }]
    }

    Missing or malformed levels yield an empty list (status updates and
    other non-message events look like this).
    """
    try:
        entry = payload.get("entry") or []
        if not entry:
            return []
        changes = entry[0].get("changes") or []
        if not changes:
            return []
        value = changes[0].get("value") or {}
        messages = value.get("messages") or []
    except (AttributeError, IndexError, KeyError, TypeError):
        return []

    if not isinstance(messages, list):
        return []
    return messages


def to_inbound(message: Any) -> InboundMessage:
    """Normalize one raw WhatsApp message.

    received_at comes from the provider "timestamp" field when present.

    Non-text messages get an empty text, which classifies to the
    fallback sector like any other unmatched text.

    Raises:
        InvalidPayloadError: If the message is not an object or has no sender.
    """
    if not isinstance(message, dict):
        raise InvalidPayloadError("message is not an object")

    sender = message.get("from")
    if not sender or not isinstance(sender, str):
        raise InvalidPayloadError("missing sender phone number")

    message_type = str(message.get("type", "text"))

    text = ""
    text_obj = message.get("text")
    if isinstance(text_obj, dict):
        body = text_obj.get("body")
        text = body if isinstance(body, str) else ""

    return InboundMessage(
        message_id=str(message.get("id") or ""),
        sender_id=sender,
        text=text,
        received_at=from_unix_seconds(message.get("timestamp")) or utc_now(),
        kind=message_type,
        source_platform=SourcePlatform.MESSAGING,
    )


def iter_changes(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten every change of every entry, in delivery order."""
    changes: list[dict[str, Any]] = []
    for entry in payload.get("entry") or []:
        if not isinstance(entry, dict):
            continue
        for change in entry.get("changes") or []:
            if isinstance(change, dict):
                changes.append(change)
    return changes


SUBSCRIBE_MODE = "subscribe"


def verify_subscription(mode: str | None, token: str | None, expected_token: str) -> bool:
    """Check a hub.mode / hub.verify_token handshake.

    Fails closed when no expected token is configured.
    """
    if not expected_token or not token:
        return False
    return mode == SUBSCRIBE_MODE and hmac.compare_digest(
        token.encode("utf-8"), expected_token.encode("utf-8")
    )
