"""FastAPI application factory."""

import os

from fastapi import FastAPI, Request, Response

from socialdesk.infra.interactions import InteractionStore, store_from_env
from socialdesk.observability.correlation import (
    CORRELATION_ID_HEADER,
    correlation_id_from_header,
    reset_correlation_id,
    set_correlation_id,
)
from socialdesk.services.change_dispatcher import (
    facebook_dispatcher,
    instagram_dispatcher,
    meta_pixel_dispatcher,
)
from socialdesk.services.inbound_dispatcher import Sender, WhatsAppDispatcher
from socialdesk.whatsapp.meta_sender import send_outbound

from .routers import public
from .routes import publishing, webhooks, whatsapp


def _async_dispatch_enabled() -> bool:
    return os.environ.get("WEBHOOK_ASYNC_DISPATCH", "true").lower() not in ("0", "false", "no")


def create_app(
    *,
    store: InteractionStore | None = None,
    sender: Sender | None = None,
) -> FastAPI:
    """Create the FastAPI app with its collaborators wired in.

    Args:
        store: Interaction store. Defaults to the one named by INTERACTION_STORE.
        sender: Outbound send primitive. Defaults to Meta Cloud API.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Socialdesk",
        docs_url=None,
        redoc_url=None,
    )

    interaction_store = store if store is not None else store_from_env()
    send = sender if sender is not None else send_outbound

    app.state.interaction_store = interaction_store
    app.state.sender = send
    app.state.async_dispatch = _async_dispatch_enabled()
    app.state.dispatchers = {
        "whatsapp": WhatsAppDispatcher(send=send, store=interaction_store),
        "facebook": facebook_dispatcher(),
        "instagram": instagram_dispatcher(),
        "meta-pixel": meta_pixel_dispatcher(),
    }

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = correlation_id_from_header(request.headers.get(CORRELATION_ID_HEADER))
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    app.include_router(public.router)
    app.include_router(webhooks.router)
    app.include_router(whatsapp.router)
    app.include_router(publishing.facebook_router)
    app.include_router(publishing.instagram_router)
    app.include_router(publishing.pixel_router)

    return app
