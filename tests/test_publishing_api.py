"""Tests for the operator publishing endpoints."""

import urllib.error
from unittest.mock import patch

import pytest

from socialdesk.domain.publishing import FACEBOOK_HASHTAGS, INSTAGRAM_HASHTAGS
from socialdesk.domain.sectors import Sector
from socialdesk.publishing.meta_publisher import PublishError
from socialdesk.whatsapp.meta_sender import MetaConfigError

from helpers import auth_headers

ROUTES = "socialdesk.api.routes.publishing"

FACEBOOK_POST = {"message": "Weekly menu is live", "sector": "education"}
INSTAGRAM_POST = {
    "caption": "Weekend pastries",
    "sector": "hospitality",
    "imageUrl": "https://cdn.example.com/pastry.jpg",
    "hashtags": ["#Croissant"],
}
PIXEL_EVENT = {
    "eventName": "Lead",
    "sector": "investment",
    "userData": {"email": "investor@example.com"},
}


@pytest.fixture
def headers(jwt_secret):
    return auth_headers()


class TestAuth:
    @pytest.mark.parametrize(
        "path,body",
        [
            ("/api/facebook/posts", FACEBOOK_POST),
            ("/api/instagram/posts", INSTAGRAM_POST),
            ("/api/meta-pixel/events", PIXEL_EVENT),
        ],
    )
    def test_requires_token(self, client, jwt_secret, path, body):
        assert client.post(path, json=body).status_code == 401


class TestFacebookPosts:
    def test_publishes_enhanced_message(self, client, headers):
        result = {"postId": "PAGE1_1", "status": "published", "scheduledTime": None}
        with patch(f"{ROUTES}.send_page_post_via_meta", return_value=result) as mock_send:
            response = client.post("/api/facebook/posts", json=FACEBOOK_POST, headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["postId"] == "PAGE1_1"
        assert body["data"]["sector"] == "education"

        kwargs = mock_send.call_args.kwargs
        assert kwargs["sector"] == Sector.EDUCATION
        assert kwargs["message"].startswith("Weekly menu is live\n\n")
        assert kwargs["message"].endswith(FACEBOOK_HASHTAGS[Sector.EDUCATION])
        assert kwargs["link"] is None
        assert kwargs["scheduled_time"] is None

    def test_scheduled_post(self, client, headers):
        payload = {**FACEBOOK_POST, "scheduledTime": "2099-01-01T09:00:00Z"}
        result = {"postId": "P", "status": "scheduled", "scheduledTime": "2099-01-01T09:00:00+00:00"}
        with patch(f"{ROUTES}.send_page_post_via_meta", return_value=result) as mock_send:
            response = client.post("/api/facebook/posts", json=payload, headers=headers)

        assert response.status_code == 200
        scheduled = mock_send.call_args.kwargs["scheduled_time"]
        assert scheduled.year == 2099
        assert scheduled.tzinfo is not None

    def test_naive_schedule_is_treated_as_utc(self, client, headers):
        payload = {**FACEBOOK_POST, "scheduledTime": "2099-06-01T10:00:00"}
        with patch(f"{ROUTES}.send_page_post_via_meta", return_value={}) as mock_send:
            client.post("/api/facebook/posts", json=payload, headers=headers)
        assert mock_send.call_args.kwargs["scheduled_time"].utcoffset().total_seconds() == 0

    def test_past_schedule_rejected(self, client, headers):
        payload = {**FACEBOOK_POST, "scheduledTime": "2001-01-01T00:00:00Z"}
        with patch(f"{ROUTES}.send_page_post_via_meta") as mock_send:
            response = client.post("/api/facebook/posts", json=payload, headers=headers)
        assert response.status_code == 422
        mock_send.assert_not_called()

    def test_image_url_sent_as_link(self, client, headers):
        payload = {**FACEBOOK_POST, "imageUrl": "https://cdn.example.com/menu.jpg"}
        with patch(f"{ROUTES}.send_page_post_via_meta", return_value={}) as mock_send:
            client.post("/api/facebook/posts", json=payload, headers=headers)
        assert mock_send.call_args.kwargs["link"] == "https://cdn.example.com/menu.jpg"

    @pytest.mark.parametrize(
        "payload",
        [
            {"message": "", "sector": "education"},
            {"message": "hi", "sector": "retail"},
            {"message": "hi", "sector": "education", "imageUrl": "not a url"},
            {"message": "hi", "sector": "education", "extra": 1},
        ],
    )
    def test_validation(self, client, headers, payload):
        assert client.post("/api/facebook/posts", json=payload, headers=headers).status_code == 422

    def test_not_configured_returns_503(self, client, headers):
        with patch(f"{ROUTES}.send_page_post_via_meta", side_effect=MetaConfigError("missing")):
            response = client.post("/api/facebook/posts", json=FACEBOOK_POST, headers=headers)
        assert response.status_code == 503

    def test_provider_error_returns_502(self, client, headers):
        error = urllib.error.URLError("down")
        with patch(f"{ROUTES}.send_page_post_via_meta", side_effect=error):
            response = client.post("/api/facebook/posts", json=FACEBOOK_POST, headers=headers)
        assert response.status_code == 502


class TestInstagramPosts:
    def test_publishes_enhanced_caption(self, client, headers):
        result = {"id": "MEDIA1", "creationId": "C1", "status": "published"}
        with patch(f"{ROUTES}.send_instagram_post_via_meta", return_value=result) as mock_send:
            response = client.post("/api/instagram/posts", json=INSTAGRAM_POST, headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == "MEDIA1"

        kwargs = mock_send.call_args.kwargs
        assert kwargs["image_url"] == "https://cdn.example.com/pastry.jpg"
        assert kwargs["sector"] == Sector.HOSPITALITY
        assert "\n\n#Croissant\n\n" in kwargs["caption"]
        assert kwargs["caption"].endswith(INSTAGRAM_HASHTAGS[Sector.HOSPITALITY])

    def test_image_url_required(self, client, headers):
        payload = {k: v for k, v in INSTAGRAM_POST.items() if k != "imageUrl"}
        assert client.post("/api/instagram/posts", json=payload, headers=headers).status_code == 422

    def test_caption_length_limit(self, client, headers):
        payload = {**INSTAGRAM_POST, "caption": "x" * 2201}
        assert client.post("/api/instagram/posts", json=payload, headers=headers).status_code == 422

    def test_missing_container_id_returns_502(self, client, headers):
        with patch(f"{ROUTES}.send_instagram_post_via_meta", side_effect=PublishError("no id")):
            response = client.post("/api/instagram/posts", json=INSTAGRAM_POST, headers=headers)
        assert response.status_code == 502


class TestPixelEvents:
    def test_tracks_event(self, client, headers):
        result = {"eventsReceived": 1, "messages": [], "fbtraceId": "T1"}
        with patch(f"{ROUTES}.send_pixel_event_via_meta", return_value=result) as mock_send:
            response = client.post(
                "/api/meta-pixel/events",
                json={**PIXEL_EVENT, "value": 250, "currency": "GBP"},
                headers=headers,
            )

        assert response.status_code == 200
        assert response.json()["data"] == result

        kwargs = mock_send.call_args.kwargs
        assert kwargs["event_name"] == "Lead"
        assert kwargs["sector"] == Sector.INVESTMENT
        assert kwargs["user_data"] == {"email": "investor@example.com"}
        assert kwargs["value"] == 250
        assert kwargs["currency"] == "GBP"
        assert kwargs["event_time"].tzinfo is not None

    @pytest.mark.parametrize(
        "payload",
        [
            {**PIXEL_EVENT, "eventName": "Refund"},
            {**PIXEL_EVENT, "userData": {"email": "not-an-email"}},
            {**PIXEL_EVENT, "value": -1},
            {**PIXEL_EVENT, "currency": "EURO"},
            {"eventName": "Lead", "sector": "investment"},
        ],
    )
    def test_validation(self, client, headers, payload):
        assert client.post("/api/meta-pixel/events", json=payload, headers=headers).status_code == 422

    def test_not_configured_returns_503(self, client, headers):
        with patch(f"{ROUTES}.send_pixel_event_via_meta", side_effect=MetaConfigError("missing")):
            response = client.post("/api/meta-pixel/events", json=PIXEL_EVENT, headers=headers)
        assert response.status_code == 503
