"""Tests for app factory and collaborator wiring."""

from fastapi.testclient import TestClient

from socialdesk.api.factory import create_app
from socialdesk.infra.interactions import InMemoryInteractionStore, LoggingInteractionStore
from socialdesk.services.inbound_dispatcher import WhatsAppDispatcher
from socialdesk.whatsapp.meta_sender import send_outbound


class TestDefaults:
    def test_default_collaborators(self):
        app = create_app()
        assert isinstance(app.state.interaction_store, LoggingInteractionStore)
        assert app.state.sender is send_outbound
        assert app.state.async_dispatch is True

    def test_providers_registered(self):
        app = create_app()
        assert set(app.state.dispatchers) == {"whatsapp", "facebook", "instagram", "meta-pixel"}
        assert isinstance(app.state.dispatchers["whatsapp"], WhatsAppDispatcher)

    def test_docs_disabled(self):
        client = TestClient(create_app())
        assert client.get("/docs").status_code == 404


class TestInjection:
    def test_injected_store_and_sender(self, sender):
        store = InMemoryInteractionStore()
        app = create_app(store=store, sender=sender)
        assert app.state.interaction_store is store
        assert app.state.sender is sender

    def test_memory_store_env_switch(self, monkeypatch):
        monkeypatch.setenv("INTERACTION_STORE", "memory")
        assert isinstance(create_app().state.interaction_store, InMemoryInteractionStore)

    def test_async_dispatch_env_flag(self, monkeypatch):
        monkeypatch.setenv("WEBHOOK_ASYNC_DISPATCH", "0")
        assert create_app().state.async_dispatch is False


class TestRoutesMounted:
    def test_health(self):
        client = TestClient(create_app())
        assert client.get("/health").status_code == 200

    def test_operator_routes_mounted(self):
        client = TestClient(create_app())
        # Mounted but unauthenticated
        assert client.get("/api/whatsapp/templates").status_code == 401

    def test_publishing_routes_mounted(self):
        client = TestClient(create_app())
        body = {"message": "hello", "sector": "education"}
        assert client.post("/api/facebook/posts", json=body).status_code == 401
