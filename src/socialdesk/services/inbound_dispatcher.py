"""Inbound WhatsApp dispatcher - auto-reply flow.

Envelope -> messages -> classify -> render -> send -> record.

Each message is processed independently: a failure in one never affects
the others or the acknowledgement returned to Meta.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from socialdesk.domain.replies import render as render_reply
from socialdesk.domain.sectors import Sector, classify as classify_sector
from socialdesk.infra.hashing import hash_identifier, message_id_prefix
from socialdesk.infra.interactions import InteractionStore
from socialdesk.infra.time import utc_now
from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context
from socialdesk.whatsapp.meta_adapter import (
    InvalidPayloadError,
    extract_raw_messages,
    to_inbound,
)
from socialdesk.whatsapp.models import (
    Direction,
    InboundMessage,
    InteractionRecord,
    OutboundMessage,
)

logger = get_logger(__name__)

WHATSAPP_OBJECT = "whatsapp_business_account"

Sender = Callable[[OutboundMessage], str | None]
Scheduler = Callable[..., None]


@dataclass(frozen=True)
class AckResult:
    """Response returned to the provider."""

    status_code: int
    body: str
    accepted: int = 0


ACK_OK = "OK"
ACK_NOT_FOUND = "Not Found"


def ack_ok(accepted: int = 0) -> AckResult:
    return AckResult(status_code=200, body=ACK_OK, accepted=accepted)


def ack_not_found() -> AckResult:
    return AckResult(status_code=404, body=ACK_NOT_FOUND)


class WhatsAppDispatcher:
    """Auto-reply dispatcher for WhatsApp Business Account webhooks.

    Args:
        send: Outbound send primitive; returns the provider message id.
        store: Interaction store for the audit trail.
        classify: Text -> Sector function.
        render: (Sector, text) -> reply body function.
        clock: Returns the current timestamp.
    """

    expected_object = WHATSAPP_OBJECT

    def __init__(
        self,
        send: Sender,
        store: InteractionStore,
        classify: Callable[[str], Sector] = classify_sector,
        render: Callable[[Sector, str], str] = render_reply,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._send = send
        self._store = store
        self._classify = classify
        self._render = render
        self._clock = clock

    def handle(self, payload: Any, schedule: Scheduler | None = None) -> AckResult:
        """Validate the envelope and dispatch its messages.

        Args:
            payload: Parsed JSON body.
            schedule: Optional scheduler (e.g. BackgroundTasks.add_task).
                When given, per-message work runs after the acknowledgement;
                otherwise it runs inline before returning.

        Returns:
            404 ack for a foreign discriminator, 200 "OK" otherwise.
        """
        object_type = payload.get("object") if isinstance(payload, dict) else None
        if object_type != self.expected_object:
            logger.info(
                "unexpected webhook object",
                extra={
                    "extra_fields": safe_log_context(
                        provider="whatsapp", object_type=object_type or "missing"
                    )
                },
            )
            return ack_not_found()

        messages = extract_raw_messages(payload)
        logger.info(
            "whatsapp webhook received",
            extra={"extra_fields": safe_log_context(message_count=len(messages))},
        )

        for raw in messages:
            if schedule is not None:
                schedule(self.process_message, raw)
            else:
                self.process_message(raw)

        return ack_ok(accepted=len(messages))

    def process_message(self, raw: Any) -> OutboundMessage | None:
        """Process one raw message. Never raises.

        Returns:
            The outbound reply that was attempted, or None.
        """
        try:
            return self._process(raw)
        except Exception:
            logger.exception(
                "error processing incoming message",
                extra={"extra_fields": safe_log_context(provider="whatsapp")},
            )
            return None

    def _process(self, raw: Any) -> OutboundMessage | None:
        try:
            inbound = to_inbound(raw)
        except InvalidPayloadError as e:
            logger.warning(
                "skipping malformed message",
                extra={"extra_fields": safe_log_context(error=str(e))},
            )
            return None

        sector = self._classify(inbound.text)
        reply = self._render(sector, inbound.text)

        log_ctx = safe_log_context(
            message_id_prefix=message_id_prefix(inbound.message_id),
            sender_hash=hash_identifier(inbound.sender_id),
            kind=inbound.kind,
            sector=sector.value,
        )
        logger.info("processing incoming message", extra={"extra_fields": log_ctx})

        outbound = None
        if reply:
            outbound = OutboundMessage(
                recipient_id=inbound.sender_id, sector=sector, body=reply
            )
            self._deliver(outbound, log_ctx)

        self._record_inbound(inbound, sector)
        return outbound

    def _deliver(self, outbound: OutboundMessage, log_ctx: dict[str, str]) -> None:
        try:
            provider_message_id = self._send(outbound)
        except Exception:
            logger.exception(
                "automated response failed", extra={"extra_fields": log_ctx}
            )
            return

        logger.info("automated response sent", extra={"extra_fields": log_ctx})
        self._safe_record(
            InteractionRecord(
                sender_id=outbound.recipient_id,
                sector=outbound.sector,
                direction=Direction.OUTBOUND,
                body=outbound.body,
                timestamp=self._clock(),
                message_id=provider_message_id,
            )
        )

    def _record_inbound(self, inbound: InboundMessage, sector: Sector) -> None:
        self._safe_record(
            InteractionRecord(
                sender_id=inbound.sender_id,
                sector=sector,
                direction=Direction.INBOUND,
                body=inbound.text,
                timestamp=inbound.received_at,
                message_id=inbound.message_id or None,
            )
        )

    def _safe_record(self, interaction: InteractionRecord) -> None:
        try:
            self._store.record(interaction)
        except Exception:
            logger.exception(
                "failed to store interaction",
                extra={
                    "extra_fields": safe_log_context(
                        direction=interaction.direction.value,
                        sector=interaction.sector.value,
                    )
                },
            )
