"""Operator publishing endpoints.

POST /api/facebook/posts     → publish or schedule a page post
POST /api/instagram/posts    → publish an image post
POST /api/meta-pixel/events  → send a conversion event

Post text is decorated with the sector call to action and hashtags
before it is sent. All endpoints require a bearer JWT.
"""

from __future__ import annotations

import urllib.error
from datetime import datetime, timezone
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

from socialdesk.api.auth import CurrentUser, get_current_user
from socialdesk.domain.publishing import enhance_caption, enhance_post
from socialdesk.domain.sectors import Sector
from socialdesk.infra.time import utc_now
from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context
from socialdesk.publishing.meta_publisher import (
    PublishError,
    send_instagram_post_via_meta,
    send_page_post_via_meta,
    send_pixel_event_via_meta,
)
from socialdesk.whatsapp.meta_sender import MetaConfigError

logger = get_logger(__name__)

facebook_router = APIRouter(prefix="/api/facebook", tags=["facebook"])
instagram_router = APIRouter(prefix="/api/instagram", tags=["instagram"])
pixel_router = APIRouter(prefix="/api/meta-pixel", tags=["meta-pixel"])

MAX_FACEBOOK_MESSAGE = 63206
MAX_INSTAGRAM_CAPTION = 2200
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

PixelEventName = Literal[
    "PageView", "ViewContent", "AddToCart", "Purchase", "Lead", "CompleteRegistration"
]


# ── Schemas ───────────────────────────────────────────────────────────────────


class FacebookPostRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str = Field(min_length=1, max_length=MAX_FACEBOOK_MESSAGE)
    sector: Sector
    imageUrl: AnyHttpUrl | None = None
    scheduledTime: datetime | None = None

    @field_validator("scheduledTime")
    @classmethod
    def _aware_future(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value <= utc_now():
            raise ValueError("scheduledTime must be in the future")
        return value


class InstagramPostRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    caption: str = Field(min_length=1, max_length=MAX_INSTAGRAM_CAPTION)
    sector: Sector
    imageUrl: AnyHttpUrl
    hashtags: list[str] = Field(default_factory=list)
    location: str | None = None


class PixelUserData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = None
    firstName: str | None = None
    lastName: str | None = None


class PixelEventRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    eventName: PixelEventName
    sector: Sector
    userData: PixelUserData
    customData: dict[str, Any] = Field(default_factory=dict)
    value: float | None = Field(default=None, gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)


# ── Helpers ───────────────────────────────────────────────────────────────────


def _publish_failed(e: Exception, platform: str) -> HTTPException:
    if isinstance(e, MetaConfigError):
        return HTTPException(status_code=503, detail=f"{platform} API not configured")
    logger.error(
        "publish via meta failed",
        extra={"extra_fields": safe_log_context(platform=platform, error_type=type(e).__name__)},
    )
    return HTTPException(status_code=502, detail=f"Failed to publish to {platform}")


_PUBLISH_ERRORS = (MetaConfigError, PublishError, urllib.error.URLError, TimeoutError)


def _ok(message: str, data: dict[str, Any]) -> dict:
    return {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": utc_now().isoformat(),
    }


# ── Endpoints ─────────────────────────────────────────────────────────────────


@facebook_router.post("/posts")
def create_facebook_post(
    body: FacebookPostRequest,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Publish a page post, or schedule it when scheduledTime is set."""
    logger.info(
        "operator facebook post",
        extra={
            "extra_fields": safe_log_context(
                user_id=user.id,
                sector=body.sector.value,
                scheduled=body.scheduledTime is not None,
            )
        },
    )
    try:
        result = send_page_post_via_meta(
            message=enhance_post(body.message, body.sector),
            sector=body.sector,
            link=str(body.imageUrl) if body.imageUrl else None,
            scheduled_time=body.scheduledTime,
        )
    except _PUBLISH_ERRORS as e:
        raise _publish_failed(e, "Facebook")

    return _ok("Facebook post created successfully", {**result, "sector": body.sector.value})


@instagram_router.post("/posts")
def create_instagram_post(
    body: InstagramPostRequest,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    logger.info(
        "operator instagram post",
        extra={
            "extra_fields": safe_log_context(
                user_id=user.id, sector=body.sector.value, hashtag_count=len(body.hashtags)
            )
        },
    )
    try:
        result = send_instagram_post_via_meta(
            caption=enhance_caption(body.caption, body.sector, body.hashtags),
            image_url=str(body.imageUrl),
            sector=body.sector,
        )
    except _PUBLISH_ERRORS as e:
        raise _publish_failed(e, "Instagram")

    return _ok(
        "Instagram post created successfully",
        {**result, "sector": body.sector.value, "location": body.location},
    )


@pixel_router.post("/events")
def track_pixel_event(
    body: PixelEventRequest,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Send a conversion event; user data is hashed before it leaves the process."""
    logger.info(
        "operator pixel event",
        extra={
            "extra_fields": safe_log_context(
                user_id=user.id, sector=body.sector.value, event_name=body.eventName
            )
        },
    )
    try:
        result = send_pixel_event_via_meta(
            event_name=body.eventName,
            sector=body.sector,
            user_data=body.userData.model_dump(exclude_none=True),
            custom_data=body.customData,
            value=body.value,
            currency=body.currency,
            event_time=utc_now(),
        )
    except _PUBLISH_ERRORS as e:
        raise _publish_failed(e, "Meta Pixel")

    return _ok("Event tracked successfully", result)
