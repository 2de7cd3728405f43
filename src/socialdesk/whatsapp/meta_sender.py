"""Outbound WhatsApp messaging via Meta Cloud API.

Security: NEVER log to_phone or text. Only log hashes and lengths.
"""

import json
import os
import time
import urllib.error
import urllib.request
from typing import Any

from socialdesk.infra.hashing import hash_identifier
from socialdesk.observability.correlation import get_correlation_id
from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context

from .models import OutboundMessage
from .templates import ProviderTemplate, build_components

logger = get_logger(__name__)

# Timeout for HTTP requests (seconds)
HTTP_TIMEOUT = 10

# Retry config
MAX_RETRIES = 1
RETRY_DELAY = 0.2

DEFAULT_GRAPH_API_VERSION = "v18.0"
GRAPH_BASE_URL = "https://graph.facebook.com"


class MetaConfigError(RuntimeError):
    """Raised when Cloud API credentials are not configured."""

    pass


def _get_config() -> dict[str, str]:
    """Get Meta Cloud API config from environment.

    Required env vars:
    - WHATSAPP_PHONE_NUMBER_ID: Meta Phone Number ID
    - WHATSAPP_ACCESS_TOKEN: Meta Access Token

    Optional:
    - META_GRAPH_API_VERSION: Graph API version (default: v18.0)
    """
    phone_number_id = os.environ.get("WHATSAPP_PHONE_NUMBER_ID", "")
    access_token = os.environ.get("WHATSAPP_ACCESS_TOKEN", "")

    if not phone_number_id or not access_token:
        raise MetaConfigError(
            "Missing Meta config: WHATSAPP_PHONE_NUMBER_ID and WHATSAPP_ACCESS_TOKEN required"
        )

    return {
        "phone_number_id": phone_number_id,
        "access_token": access_token,
        "api_version": os.environ.get("META_GRAPH_API_VERSION", DEFAULT_GRAPH_API_VERSION),
    }


def _graph_url(config: dict[str, str], path: str) -> str:
    return f"{GRAPH_BASE_URL}/{config['api_version']}/{path.lstrip('/')}"


def _do_request(
    url: str,
    data: bytes | None,
    headers: dict[str, str],
    method: str = "POST",
) -> dict[str, Any]:
    """Execute HTTP request and decode the JSON body. Raises on error."""
    req = urllib.request.Request(url, data=data, headers=headers, method=method)
    with urllib.request.urlopen(req, timeout=HTTP_TIMEOUT) as resp:
        return json.loads(resp.read().decode())


def _extract_message_id(response: dict[str, Any]) -> str | None:
    messages = response.get("messages") or []
    if messages and isinstance(messages[0], dict):
        return messages[0].get("id")
    return None


def _post_with_retry(
    url: str,
    payload: dict[str, Any],
    access_token: str,
    log_ctx: dict[str, str],
) -> dict[str, Any]:
    """POST payload, retrying once on network errors and 5xx."""
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {access_token}",
    }
    data = json.dumps(payload).encode("utf-8")

    for attempt in range(MAX_RETRIES + 1):
        try:
            response = _do_request(url, data, headers)
            logger.info(
                "outbound message sent via meta",
                extra={"extra_fields": safe_log_context(**log_ctx, attempt=attempt)},
            )
            return response
        except (urllib.error.URLError, TimeoutError) as e:
            # HTTPError is a URLError subclass; only 5xx is worth a retry
            is_5xx = isinstance(e, urllib.error.HTTPError) and 500 <= e.code < 600
            is_network = not isinstance(e, urllib.error.HTTPError)

            if attempt < MAX_RETRIES and (is_5xx or is_network):
                logger.warning(
                    "outbound send via meta failed, retrying",
                    extra={
                        "extra_fields": safe_log_context(
                            **log_ctx, attempt=attempt, error_type=type(e).__name__
                        )
                    },
                )
                time.sleep(RETRY_DELAY)
                continue

            logger.error(
                "outbound send via meta failed",
                extra={
                    "extra_fields": safe_log_context(
                        **log_ctx, attempt=attempt, error_type=type(e).__name__
                    )
                },
            )
            raise

    raise RuntimeError("unreachable")  # pragma: no cover


def send_text_via_meta(
    *,
    to_phone: str,
    text: str,
    sector: str,
    correlation_id: str | None = None,
) -> str | None:
    """Send a text message via Meta Cloud API.

    Args:
        to_phone: Recipient phone number. NEVER logged.
        text: Message text. NEVER logged.
        sector: Sector tag, logged for analytics.
        correlation_id: Optional correlation ID (defaults to current request).

    Returns:
        Provider message id (wamid), or None if the response has none.

    Raises:
        MetaConfigError: If config is missing.
        urllib.error.URLError: On network/HTTP errors after retry.
    """
    config = _get_config()
    url = _graph_url(config, f"{config['phone_number_id']}/messages")

    payload = {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": to_phone,
        "type": "text",
        "text": {"body": text},
    }

    log_ctx = safe_log_context(
        correlationId=correlation_id or get_correlation_id(),
        to_hash=hash_identifier(to_phone),
        text=text,
        sector=str(sector),
        provider="meta",
    )
    logger.info("sending outbound message via meta", extra={"extra_fields": log_ctx})

    response = _post_with_retry(url, payload, config["access_token"], log_ctx)
    return _extract_message_id(response)


def send_template_via_meta(
    *,
    to_phone: str,
    template: ProviderTemplate,
    parameters: dict[str, Any] | None = None,
    correlation_id: str | None = None,
) -> str | None:
    """Send a pre-approved template message via Meta Cloud API.

    Returns:
        Provider message id (wamid), or None if the response has none.
    """
    config = _get_config()
    url = _graph_url(config, f"{config['phone_number_id']}/messages")

    template_obj: dict[str, Any] = {
        "name": template.name,
        "language": {"code": template.language},
    }
    components = build_components(template, parameters or {})
    if components:
        template_obj["components"] = components

    payload = {
        "messaging_product": "whatsapp",
        "to": to_phone,
        "type": "template",
        "template": template_obj,
    }

    log_ctx = safe_log_context(
        correlationId=correlation_id or get_correlation_id(),
        to_hash=hash_identifier(to_phone),
        template=template.name,
        sector=template.sector.value,
        provider="meta",
    )
    logger.info("sending template message via meta", extra={"extra_fields": log_ctx})

    response = _post_with_retry(url, payload, config["access_token"], log_ctx)
    return _extract_message_id(response)


def get_phone_number_status() -> dict[str, Any]:
    """Look up the configured sender phone number on the Graph API.

    Raises:
        MetaConfigError: If config is missing.
        urllib.error.URLError: On network/HTTP errors.
    """
    config = _get_config()
    url = _graph_url(config, config["phone_number_id"])
    headers = {"Authorization": f"Bearer {config['access_token']}"}

    data = _do_request(url, None, headers, method="GET")
    return {
        "phoneNumberId": config["phone_number_id"],
        "status": "active",
        "apiVersion": config["api_version"],
        "data": data,
    }


def send_outbound(outbound: OutboundMessage) -> str | None:
    """Send primitive used by the inbound dispatcher."""
    return send_text_via_meta(
        to_phone=outbound.recipient_id,
        text=outbound.body,
        sector=outbound.sector.value,
    )
