"""Shared test helper functions.

These are NOT fixtures - they are regular functions importable by tests.
"""

from __future__ import annotations

import time

import jwt

TEST_JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!"


def create_token(
    sub: str = "operator-123",
    secret: str = TEST_JWT_SECRET,
    exp: int | None = None,
    **claims,
) -> str:
    """Create signed HS256 JWT for testing."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "exp": exp if exp is not None else now + 3600,
        "iat": now,
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(**kwargs) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token(**kwargs)}"}


def whatsapp_message(
    text: str | None = "hello",
    sender: str = "15551234567",
    message_id: str = "wamid.TEST000001",
) -> dict:
    """Build one raw Cloud API message."""
    message: dict = {
        "from": sender,
        "id": message_id,
        "timestamp": "1704067200",
        "type": "text",
    }
    if text is not None:
        message["text"] = {"body": text}
    return message


def whatsapp_payload(*messages: dict, object_type: str = "whatsapp_business_account") -> dict:
    """Build a WhatsApp Business Account webhook envelope."""
    value: dict = {
        "messaging_product": "whatsapp",
        "metadata": {
            "display_phone_number": "15550000000",
            "phone_number_id": "123456789",
        },
    }
    if messages:
        value["messages"] = list(messages)
    return {
        "object": object_type,
        "entry": [
            {
                "id": "WHATSAPP_BUSINESS_ACCOUNT_ID",
                "changes": [{"value": value, "field": "messages"}],
            }
        ],
    }


def change_payload(object_type: str, *changes: tuple[str, dict]) -> dict:
    """Build an entry/changes envelope (page, instagram, ad_account)."""
    return {
        "object": object_type,
        "entry": [
            {
                "id": "ENTRY_ID",
                "time": 1704067200,
                "changes": [{"field": field, "value": value} for field, value in changes],
            }
        ],
    }
