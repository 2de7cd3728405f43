"""Unauthenticated service routes."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health(request: Request) -> dict:
    """Liveness check; also lists the webhook providers this process accepts."""
    return {"status": "ok", "providers": sorted(request.app.state.dispatchers)}
