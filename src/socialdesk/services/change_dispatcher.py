"""Dispatch for entry/changes webhooks (Page, Instagram, ad account).

Every change of every entry is routed by its `field` to a handler.
Handlers only log a redacted summary; unhandled fields are skipped.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context
from socialdesk.whatsapp.meta_adapter import iter_changes

from .inbound_dispatcher import AckResult, Scheduler, ack_not_found, ack_ok

logger = get_logger(__name__)

ChangeHandler = Callable[[Any], None]


def log_change(provider: str, field: str) -> ChangeHandler:
    """Build a handler that logs the shape of a change value."""

    def _handler(value: Any) -> None:
        logger.info(
            "processing webhook change",
            extra={
                "extra_fields": safe_log_context(
                    provider=provider, field=field, value=value
                )
            },
        )

    return _handler


class ChangeDispatcher:
    """Route webhook changes to per-field handlers."""

    def __init__(
        self,
        provider: str,
        expected_object: str,
        handlers: Mapping[str, ChangeHandler],
    ) -> None:
        self.provider = provider
        self.expected_object = expected_object
        self._handlers = dict(handlers)

    @property
    def fields(self) -> list[str]:
        return list(self._handlers)

    def handle(self, payload: Any, schedule: Scheduler | None = None) -> AckResult:
        object_type = payload.get("object") if isinstance(payload, dict) else None
        if object_type != self.expected_object:
            logger.info(
                "unexpected webhook object",
                extra={
                    "extra_fields": safe_log_context(
                        provider=self.provider, object_type=object_type or "missing"
                    )
                },
            )
            return ack_not_found()

        changes = iter_changes(payload)
        for change in changes:
            if schedule is not None:
                schedule(self.process_change, change)
            else:
                self.process_change(change)

        return ack_ok(accepted=len(changes))

    def process_change(self, change: dict[str, Any]) -> bool:
        """Run the handler for one change. Never raises.

        Returns:
            True if a handler ran successfully.
        """
        field = change.get("field")
        handler = self._handlers.get(field) if isinstance(field, str) else None
        if handler is None:
            logger.info(
                "unhandled webhook field",
                extra={
                    "extra_fields": safe_log_context(
                        provider=self.provider, field=field or "missing"
                    )
                },
            )
            return False

        try:
            handler(change.get("value"))
        except Exception:
            logger.exception(
                "error processing webhook change",
                extra={
                    "extra_fields": safe_log_context(provider=self.provider, field=field)
                },
            )
            return False
        return True


def facebook_dispatcher() -> ChangeDispatcher:
    fields = ("messages", "messaging_postbacks", "leadgen")
    return ChangeDispatcher(
        "facebook", "page", {f: log_change("facebook", f) for f in fields}
    )


def instagram_dispatcher() -> ChangeDispatcher:
    fields = ("mentions", "story_mentions", "comments")
    return ChangeDispatcher(
        "instagram", "instagram", {f: log_change("instagram", f) for f in fields}
    )


def meta_pixel_dispatcher() -> ChangeDispatcher:
    fields = ("ad_account", "campaign", "adset")
    return ChangeDispatcher(
        "meta-pixel", "ad_account", {f: log_change("meta-pixel", f) for f in fields}
    )
