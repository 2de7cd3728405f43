"""Correlation ID handling for tracing a webhook delivery across log lines."""

import re
import uuid
from contextvars import ContextVar, Token

# Per-request value; copied into background tasks spawned by the request
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"

_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9._\-]{1,128}$")


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def correlation_id_from_header(value: str | None) -> str:
    """Reuse a caller-supplied id if it is short and log-safe, else mint one."""
    if value and _ACCEPTED_ID.match(value):
        return value
    return generate_correlation_id()


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    correlation_id_var.reset(token)
