"""Outbound publishing via the Meta Graph API.

- Facebook page posts: POST /{page-id}/feed
- Instagram posts: POST /{ig-user-id}/media, then /{ig-user-id}/media_publish
- Pixel conversion events: POST /{pixel-id}/events

Shares the WhatsApp sender's transport, so timeouts and the single
retry on network errors and 5xx are the same.

Security: post bodies and pixel user data are never logged.
"""

import hashlib
import os
import re
from datetime import datetime
from typing import Any

from socialdesk.domain.publishing import business_type
from socialdesk.domain.sectors import Sector
from socialdesk.observability.correlation import get_correlation_id
from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context
from socialdesk.whatsapp.meta_sender import (
    DEFAULT_GRAPH_API_VERSION,
    GRAPH_BASE_URL,
    MetaConfigError,
    _post_with_retry,
)

logger = get_logger(__name__)

PIXEL_EVENT_NAMES = (
    "PageView",
    "ViewContent",
    "AddToCart",
    "Purchase",
    "Lead",
    "CompleteRegistration",
)

PIXEL_ACTION_SOURCE = "website"

_NON_DIGITS = re.compile(r"\D")


class PublishError(RuntimeError):
    """Raised when the Graph API answers without the ids a publish needs."""


def _require_env(id_var: str, token_var: str) -> tuple[str, str, str]:
    """Return (object id, access token, api version) or raise MetaConfigError."""
    object_id = os.environ.get(id_var, "")
    access_token = os.environ.get(token_var, "")
    if not object_id or not access_token:
        raise MetaConfigError(f"Missing Meta config: {id_var} and {token_var} required")
    api_version = os.environ.get("META_GRAPH_API_VERSION", DEFAULT_GRAPH_API_VERSION)
    return object_id, access_token, api_version


def _url(api_version: str, path: str) -> str:
    return f"{GRAPH_BASE_URL}/{api_version}/{path}"


def _log_ctx(kind: str, sector: Sector, correlation_id: str | None, **fields: Any) -> dict[str, str]:
    return safe_log_context(
        correlationId=correlation_id or get_correlation_id(),
        kind=kind,
        sector=sector.value,
        provider="meta",
        **fields,
    )


def send_page_post_via_meta(
    *,
    message: str,
    sector: Sector,
    link: str | None = None,
    scheduled_time: datetime | None = None,
    correlation_id: str | None = None,
) -> dict[str, Any]:
    """Publish (or schedule) a Facebook page post.

    Args:
        message: Final post body. NEVER logged.
        sector: Sector tag, logged for analytics.
        link: Optional URL attached to the post.
        scheduled_time: Timezone-aware publish time. The post is created
            unpublished and Meta publishes it at that time.

    Returns:
        {"postId", "status": "published"|"scheduled", "scheduledTime"}.

    Raises:
        MetaConfigError: If FACEBOOK_PAGE_ID / FACEBOOK_ACCESS_TOKEN are missing.
        urllib.error.URLError: On network/HTTP errors after retry.
    """
    page_id, token, api_version = _require_env("FACEBOOK_PAGE_ID", "FACEBOOK_ACCESS_TOKEN")

    payload: dict[str, Any] = {"message": message}
    if link:
        payload["link"] = link
    if scheduled_time is not None:
        payload["published"] = False
        payload["scheduled_publish_time"] = int(scheduled_time.timestamp())

    log_ctx = _log_ctx(
        "page_post",
        sector,
        correlation_id,
        message=message,
        scheduled=scheduled_time is not None,
    )
    logger.info("publishing facebook post via meta", extra={"extra_fields": log_ctx})

    response = _post_with_retry(_url(api_version, f"{page_id}/feed"), payload, token, log_ctx)
    return {
        "postId": response.get("id"),
        "status": "scheduled" if scheduled_time is not None else "published",
        "scheduledTime": scheduled_time.isoformat() if scheduled_time is not None else None,
    }


def send_instagram_post_via_meta(
    *,
    caption: str,
    image_url: str,
    sector: Sector,
    correlation_id: str | None = None,
) -> dict[str, Any]:
    """Create an image container and publish it to the Instagram account.

    Raises:
        MetaConfigError: If INSTAGRAM_BUSINESS_ACCOUNT_ID / INSTAGRAM_ACCESS_TOKEN
            are missing.
        PublishError: If the media container comes back without an id.
        urllib.error.URLError: On network/HTTP errors after retry.
    """
    account_id, token, api_version = _require_env(
        "INSTAGRAM_BUSINESS_ACCOUNT_ID", "INSTAGRAM_ACCESS_TOKEN"
    )

    log_ctx = _log_ctx("instagram_post", sector, correlation_id, caption=caption)
    logger.info("publishing instagram post via meta", extra={"extra_fields": log_ctx})

    container = _post_with_retry(
        _url(api_version, f"{account_id}/media"),
        {"image_url": image_url, "caption": caption},
        token,
        log_ctx,
    )
    creation_id = container.get("id")
    if not creation_id:
        raise PublishError("Instagram media container response has no id")

    published = _post_with_retry(
        _url(api_version, f"{account_id}/media_publish"),
        {"creation_id": creation_id},
        token,
        log_ctx,
    )
    return {"id": published.get("id"), "creationId": creation_id, "status": "published"}


def _sha256(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hash_user_data(user_data: dict[str, Any]) -> dict[str, str]:
    """Normalize and sha256 the match keys Meta accepts for conversion events.

    email and names are lower-cased and trimmed; phone keeps digits only.
    Empty values are dropped.
    """
    hashed: dict[str, str] = {}
    email = (user_data.get("email") or "").strip().lower()
    if email:
        hashed["em"] = _sha256(email)
    phone = _NON_DIGITS.sub("", user_data.get("phone") or "")
    if phone:
        hashed["ph"] = _sha256(phone)
    first = (user_data.get("firstName") or "").strip().lower()
    if first:
        hashed["fn"] = _sha256(first)
    last = (user_data.get("lastName") or "").strip().lower()
    if last:
        hashed["ln"] = _sha256(last)
    return hashed


def send_pixel_event_via_meta(
    *,
    event_name: str,
    sector: Sector,
    user_data: dict[str, Any],
    custom_data: dict[str, Any] | None = None,
    value: float | None = None,
    currency: str = "USD",
    event_time: datetime,
    correlation_id: str | None = None,
) -> dict[str, Any]:
    """Send one server-side conversion event for the configured pixel.

    Returns:
        {"eventsReceived", "messages", "fbtraceId"} from the Graph response.

    Raises:
        ValueError: For an event name outside PIXEL_EVENT_NAMES.
        MetaConfigError: If META_PIXEL_ID / META_PIXEL_ACCESS_TOKEN are missing.
        urllib.error.URLError: On network/HTTP errors after retry.
    """
    if event_name not in PIXEL_EVENT_NAMES:
        raise ValueError(f"Unsupported pixel event: {event_name}")

    pixel_id, token, api_version = _require_env("META_PIXEL_ID", "META_PIXEL_ACCESS_TOKEN")

    event_custom: dict[str, Any] = dict(custom_data or {})
    event_custom["sector"] = sector.value
    event_custom["business_type"] = business_type(sector)
    if value is not None:
        event_custom["value"] = value
        event_custom["currency"] = currency.upper()

    payload = {
        "data": [
            {
                "event_name": event_name,
                "event_time": int(event_time.timestamp()),
                "action_source": PIXEL_ACTION_SOURCE,
                "user_data": hash_user_data(user_data),
                "custom_data": event_custom,
            }
        ]
    }

    log_ctx = _log_ctx("pixel_event", sector, correlation_id, event_name=event_name)
    logger.info("sending pixel event via meta", extra={"extra_fields": log_ctx})

    response = _post_with_retry(_url(api_version, f"{pixel_id}/events"), payload, token, log_ctx)
    return {
        "eventsReceived": response.get("events_received"),
        "messages": response.get("messages", []),
        "fbtraceId": response.get("fbtrace_id"),
    }
