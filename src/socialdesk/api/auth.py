"""JWT authentication for the operator API.

Provides:
- verify_token(): Validates an HS256 JWT and returns its claims
- get_current_user(): FastAPI dependency for authenticated operator context
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Depends, HTTPException, Request

JWT_ALGORITHM = "HS256"


@dataclass
class CurrentUser:
    """Authenticated operator context."""

    id: str
    email: str | None
    role: str | None


def _get_secret() -> str | None:
    return os.environ.get("JWT_SECRET") or None


def verify_token(token: str) -> dict[str, Any]:
    """Verify JWT and return its claims.

    Args:
        token: JWT token string.

    Returns:
        Decoded claims; `sub` is guaranteed present.

    Raises:
        HTTPException: 401 if token is invalid, expired, or auth is not configured.
    """
    secret = _get_secret()
    if not secret:
        raise HTTPException(status_code=401, detail="Auth not configured")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")

    return payload


def _extract_bearer_token(request: Request) -> str:
    """Extract Bearer token from Authorization header.

    Raises:
        HTTPException: 401 if header missing or malformed.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Access token required")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    return parts[1]


def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: get authenticated operator from the bearer token."""
    token = _extract_bearer_token(request)
    claims = verify_token(token)
    return CurrentUser(
        id=str(claims["sub"]),
        email=claims.get("email"),
        role=claims.get("role"),
    )


# Dependency alias for cleaner imports
CurrentUserDep = Depends(get_current_user)
