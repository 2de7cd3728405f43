"""Operator WhatsApp endpoints.

POST /api/whatsapp/send-message   → send free-text message
POST /api/whatsapp/send-template  → send provider template
GET  /api/whatsapp/templates      → list templates (optional ?sector=)
GET  /api/whatsapp/messages       → interaction history
GET  /api/whatsapp/status         → Cloud API phone number status

All endpoints require a bearer JWT.
"""

from __future__ import annotations

import urllib.error
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from socialdesk.api.auth import CurrentUser, get_current_user
from socialdesk.domain.sectors import Sector
from socialdesk.infra.hashing import hash_identifier
from socialdesk.infra.interactions import InteractionStore
from socialdesk.infra.time import utc_now
from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context
from socialdesk.whatsapp.meta_sender import (
    MetaConfigError,
    get_phone_number_status,
    send_template_via_meta,
)
from socialdesk.whatsapp.models import Direction, InteractionRecord, OutboundMessage
from socialdesk.whatsapp.templates import (
    TemplateNotFoundError,
    TemplateParameterError,
    get_template,
    list_templates,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/whatsapp", tags=["whatsapp"])

PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"
MAX_MESSAGE_LENGTH = 4096


# ── Schemas ───────────────────────────────────────────────────────────────────


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    phoneNumber: str = Field(pattern=PHONE_PATTERN)
    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    sector: Sector


class SendTemplateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    phoneNumber: str = Field(pattern=PHONE_PATTERN)
    templateName: str = Field(min_length=1)
    sector: Sector
    parameters: dict[str, Any] = Field(default_factory=dict)


# ── Helpers ───────────────────────────────────────────────────────────────────


def _store(request: Request) -> InteractionStore:
    return request.app.state.interaction_store


def _record_outbound(
    store: InteractionStore,
    *,
    phone: str,
    sector: Sector,
    body: str,
    message_id: str | None,
    template_name: str | None = None,
) -> None:
    # History is best effort; a failed write never fails the send
    try:
        store.record(
            InteractionRecord(
                sender_id=phone,
                sector=sector,
                direction=Direction.OUTBOUND,
                body=body,
                timestamp=utc_now(),
                message_id=message_id,
                template_name=template_name,
            )
        )
    except Exception:
        logger.exception(
            "failed to store interaction",
            extra={"extra_fields": safe_log_context(sector=sector.value)},
        )


def _send_failed(e: Exception) -> HTTPException:
    if isinstance(e, MetaConfigError):
        return HTTPException(status_code=503, detail="WhatsApp API not configured")
    return HTTPException(status_code=502, detail="Failed to send WhatsApp message")


def _record_to_dict(record: InteractionRecord) -> dict[str, Any]:
    return {
        "phoneNumber": record.sender_id,
        "message": record.body,
        "sector": record.sector.value,
        "direction": record.direction.value,
        "messageId": record.message_id,
        "templateName": record.template_name,
        "timestamp": record.timestamp.isoformat(),
    }


# ── Endpoints ─────────────────────────────────────────────────────────────────


@router.post("/send-message")
def send_message(
    body: SendMessageRequest,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Send a free-text message and record it as outbound."""
    logger.info(
        "operator send message",
        extra={
            "extra_fields": safe_log_context(
                user_id=user.id,
                to_hash=hash_identifier(body.phoneNumber),
                sector=body.sector.value,
            )
        },
    )

    send = request.app.state.sender
    try:
        message_id = send(
            OutboundMessage(
                recipient_id=body.phoneNumber, sector=body.sector, body=body.message
            )
        )
    except (MetaConfigError, urllib.error.URLError, TimeoutError) as e:
        raise _send_failed(e)

    _record_outbound(
        _store(request),
        phone=body.phoneNumber,
        sector=body.sector,
        body=body.message,
        message_id=message_id,
    )

    return {
        "success": True,
        "message": "Message sent successfully",
        "data": {"messageId": message_id},
        "timestamp": utc_now().isoformat(),
    }


@router.post("/send-template")
def send_template(
    body: SendTemplateRequest,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Send a provider template message."""
    try:
        template = get_template(body.templateName, body.sector)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logger.info(
        "operator send template",
        extra={
            "extra_fields": safe_log_context(
                user_id=user.id,
                to_hash=hash_identifier(body.phoneNumber),
                template=template.name,
                sector=body.sector.value,
            )
        },
    )

    try:
        message_id = send_template_via_meta(
            to_phone=body.phoneNumber,
            template=template,
            parameters=body.parameters,
        )
    except TemplateParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (MetaConfigError, urllib.error.URLError, TimeoutError) as e:
        raise _send_failed(e)

    _record_outbound(
        _store(request),
        phone=body.phoneNumber,
        sector=body.sector,
        body=f"Template: {template.name}",
        message_id=message_id,
        template_name=template.name,
    )

    return {
        "success": True,
        "message": "Template message sent successfully",
        "data": {"messageId": message_id},
        "timestamp": utc_now().isoformat(),
    }


@router.get("/templates")
def get_templates(
    sector: Sector | None = Query(None),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """List provider templates, optionally for one sector."""
    templates = [t.to_dict() for t in list_templates(sector)]
    return {"success": True, "data": templates, "count": len(templates)}


@router.get("/messages")
def get_message_history(
    request: Request,
    phoneNumber: str | None = Query(None),
    sector: Sector | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Interaction history, newest first.

    With the default logging store nothing is retained and the list is
    always empty; run with INTERACTION_STORE=memory to keep history.
    """
    store = _store(request)
    records = store.history(
        sender_id=phoneNumber, sector=sector, limit=limit, offset=offset
    )
    total = store.count(sender_id=phoneNumber, sector=sector)
    return {
        "success": True,
        "data": [_record_to_dict(r) for r in records],
        "pagination": {"limit": limit, "offset": offset, "total": total},
    }


@router.get("/status")
def get_status(user: CurrentUser = Depends(get_current_user)) -> dict:
    """Cloud API phone number status."""
    try:
        status = get_phone_number_status()
    except MetaConfigError:
        raise HTTPException(status_code=503, detail="WhatsApp API not configured")
    except (urllib.error.URLError, TimeoutError):
        logger.exception("whatsapp status lookup failed")
        raise HTTPException(status_code=502, detail="Failed to get API status")

    return {
        "success": True,
        "data": {**status, "lastChecked": utc_now().isoformat()},
        "timestamp": utc_now().isoformat(),
    }
