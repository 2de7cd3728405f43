"""Tests for X-Hub-Signature-256 gating on POST /webhooks/{provider}.

When META_APP_SECRET is set every provider requires a valid signature;
when it is unset the check is skipped.
"""

from __future__ import annotations

import json

import pytest

from socialdesk.whatsapp.meta_adapter import compute_signature

from helpers import change_payload, whatsapp_message, whatsapp_payload

_TEST_APP_SECRET = "test-meta-secret"


def _signed_post(client, path, payload, secret=_TEST_APP_SECRET):
    payload_bytes = json.dumps(payload).encode()
    headers = {
        "Content-Type": "application/json",
        "X-Hub-Signature-256": compute_signature(payload_bytes, secret),
    }
    return client.post(path, content=payload_bytes, headers=headers)


@pytest.fixture
def app_secret(monkeypatch):
    monkeypatch.setenv("META_APP_SECRET", _TEST_APP_SECRET)


class TestSignatureGate:
    def test_valid_signature_accepted(self, client, app_secret, sender):
        response = _signed_post(
            client, "/webhooks/whatsapp", whatsapp_payload(whatsapp_message("menu"))
        )
        assert response.status_code == 200
        sender.assert_called_once()

    def test_missing_signature_rejected(self, client, app_secret, sender):
        response = client.post(
            "/webhooks/whatsapp", json=whatsapp_payload(whatsapp_message("menu"))
        )
        assert response.status_code == 401
        sender.assert_not_called()

    def test_wrong_secret_rejected(self, client, app_secret, sender):
        response = _signed_post(
            client,
            "/webhooks/whatsapp",
            whatsapp_payload(whatsapp_message("menu")),
            secret="other-secret",
        )
        assert response.status_code == 401
        sender.assert_not_called()

    def test_non_ascii_signature_rejected(self, client, app_secret, sender):
        response = client.post(
            "/webhooks/whatsapp",
            content=json.dumps(whatsapp_payload(whatsapp_message("menu"))).encode(),
            headers={"X-Hub-Signature-256": "sha256=é".encode("utf-8")},
        )
        assert response.status_code == 401
        sender.assert_not_called()

    @pytest.mark.parametrize(
        "provider,obj", [("facebook", "page"), ("instagram", "instagram"), ("meta-pixel", "ad_account")]
    )
    def test_change_providers_require_signature(self, client, app_secret, provider, obj):
        payload = change_payload(obj, ("comments", {}))

        unsigned = client.post(f"/webhooks/{provider}", json=payload)
        signed = _signed_post(client, f"/webhooks/{provider}", payload)

        assert unsigned.status_code == 401
        assert signed.status_code == 200

    def test_signature_checked_before_json_parsing(self, client, app_secret):
        response = client.post(
            "/webhooks/whatsapp",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 401

    def test_no_secret_skips_check(self, client, sender):
        response = client.post(
            "/webhooks/whatsapp", json=whatsapp_payload(whatsapp_message("menu"))
        )
        assert response.status_code == 200
        sender.assert_called_once()
