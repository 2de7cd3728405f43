"""Interaction store - audit trail of inbound and outbound messages.

Two implementations:
- LoggingInteractionStore: default; emits a redacted log line, keeps nothing.
- InMemoryInteractionStore: list-backed, for tests and local runs
  (INTERACTION_STORE=memory).
"""

from __future__ import annotations

import os
import threading
from typing import Protocol

from socialdesk.domain.sectors import Sector
from socialdesk.infra.hashing import hash_identifier
from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context
from socialdesk.whatsapp.models import InteractionRecord

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class InteractionStore(Protocol):
    def record(self, interaction: InteractionRecord) -> None: ...

    def history(
        self,
        sender_id: str | None = None,
        sector: Sector | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> list[InteractionRecord]: ...

    def count(self, sender_id: str | None = None, sector: Sector | None = None) -> int: ...


def _log_record(interaction: InteractionRecord) -> None:
    logger.info(
        "interaction recorded",
        extra={
            "extra_fields": safe_log_context(
                platform=interaction.platform,
                sender_hash=hash_identifier(interaction.sender_id),
                sector=interaction.sector.value,
                direction=interaction.direction.value,
                body=interaction.body,
            )
        },
    )


class LoggingInteractionStore:
    """Write-only store: logs each record and returns."""

    def record(self, interaction: InteractionRecord) -> None:
        _log_record(interaction)

    def history(
        self,
        sender_id: str | None = None,
        sector: Sector | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> list[InteractionRecord]:
        return []

    def count(self, sender_id: str | None = None, sector: Sector | None = None) -> int:
        return 0


class InMemoryInteractionStore:
    """Thread-safe list-backed store. History is newest first."""

    def __init__(self) -> None:
        self._records: list[InteractionRecord] = []
        self._lock = threading.Lock()

    def record(self, interaction: InteractionRecord) -> None:
        with self._lock:
            self._records.append(interaction)
        _log_record(interaction)

    def _matching(
        self, sender_id: str | None, sector: Sector | None
    ) -> list[InteractionRecord]:
        with self._lock:
            records = list(self._records)
        if sender_id is not None:
            records = [r for r in records if r.sender_id == sender_id]
        if sector is not None:
            records = [r for r in records if r.sector == sector]
        return records

    def history(
        self,
        sender_id: str | None = None,
        sector: Sector | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> list[InteractionRecord]:
        records = self._matching(sender_id, sector)
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records[offset : offset + limit]

    def count(self, sender_id: str | None = None, sector: Sector | None = None) -> int:
        return len(self._matching(sender_id, sector))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def store_from_env() -> InteractionStore:
    """Pick the store named by INTERACTION_STORE ("logging" or "memory").

    Only "memory" keeps history, and only for the life of the process.
    """
    kind = os.environ.get("INTERACTION_STORE", "logging").strip().lower()
    if kind == "memory":
        return InMemoryInteractionStore()
    if kind != "logging":
        raise ValueError(f"Unknown INTERACTION_STORE: {kind!r}")
    return LoggingInteractionStore()
