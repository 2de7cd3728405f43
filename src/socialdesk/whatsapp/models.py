"""Message value objects for the auto-reply flow.

All objects are request-scoped and immutable.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from socialdesk.domain.sectors import Sector


class SourcePlatform(str, Enum):
    """Platform an inbound message arrived on."""

    MESSAGING = "messaging"
    SOCIAL = "social"
    MEDIA = "media"


class Direction(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


@dataclass(frozen=True)
class InboundMessage:
    """One user message extracted from a provider envelope.

    sender_id and text are PII: never log them directly.
    """

    message_id: str
    sender_id: str
    text: str
    received_at: datetime
    kind: str = "text"  # e.g., "text", "image", "audio", etc.
    source_platform: SourcePlatform = SourcePlatform.MESSAGING


@dataclass(frozen=True)
class OutboundMessage:
    """Rendered reply handed to the send primitive."""

    recipient_id: str
    sector: Sector
    body: str


@dataclass(frozen=True)
class InteractionRecord:
    """Audit entry written after each inbound or outbound message."""

    sender_id: str
    sector: Sector
    direction: Direction
    body: str
    timestamp: datetime
    platform: str = "whatsapp"
    message_id: str | None = None
    template_name: str | None = None
