"""
Unit tests for public newsletter API endpoints.

Subscribe, confirm, manage preferences and unsubscribe over HTTP, backed by
a temporary SQLite database and the dev email adapter.
"""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from src.adapters.newsletter_email import (
    SUBJECT_CONFIRM,
    SUBJECT_GOODBYE,
    SUBJECT_MANAGE,
    SUBJECT_UNSUBSCRIBE_LINK,
)
from src.adapters.orm import SQLSubscriberRepo
from src.api.deps import get_rate_limiter
from src.api.main import app
from src.app_shell.rate_limit import RateLimiter
from src.components.newsletter import MSG_LINK_SENT, SubscriberStatus
from src.rules.models import RateLimitRules, RateLimitWindow

APP_URL = "http://test.local"
EMAIL = "jane@example.com"


def subscribe(client: TestClient, email: str = EMAIL, **overrides):
    body = {"email": email, "name": "Jane", "frequency": "weekly", "categories": ["tech"]}
    body.update(overrides)
    return client.post("/api/subscribe", json=body)


def redirect_params(response) -> dict[str, str]:
    location = urlparse(response.headers["location"])
    assert f"{location.scheme}://{location.netloc}{location.path}" == f"{APP_URL}/confirmation"
    return {k: v[0] for k, v in parse_qs(location.query).items()}


@pytest.fixture
def repo(session_factory) -> SQLSubscriberRepo:
    return SQLSubscriberRepo(session_factory)


@pytest.fixture
def confirmed(client, repo, live_token, email_adapter):
    """A confirmed subscriber with an empty outbox."""
    subscribe(client)
    client.get(f"/confirm?token={live_token(EMAIL)}", follow_redirects=False)
    email_adapter.clear()
    return repo.get_by_email(EMAIL)


# --- Subscribe ---


class TestSubscribe:
    def test_new_subscriber_is_pending_and_emailed(self, client, repo, email_adapter):
        response = subscribe(client, email="  Jane@Example.COM ")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["email"] == EMAIL
        assert data["is_update"] is False

        subscriber = repo.get_by_email(EMAIL)
        assert subscriber.status == SubscriberStatus.PENDING
        last = email_adapter.get_last_email()
        assert last.recipient == EMAIL
        assert last.subject == SUBJECT_CONFIRM
        assert f"{APP_URL}/confirm?token=" in last.body_html

    def test_invalid_email_rejected(self, client, email_adapter):
        response = subscribe(client, email="not-an-email")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Invalid email address",
            "code": "INVALID_EMAIL",
        }
        assert email_adapter.email_count == 0

    def test_unknown_category_rejected(self, client, repo):
        response = subscribe(client, categories=["astrology"])

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert repo.get_by_email(EMAIL) is None

    def test_missing_frequency_rejected(self, client):
        response = subscribe(client, frequency=None)

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FREQUENCY"

    def test_confirmed_subscriber_updates_in_place(self, client, confirmed, repo, email_adapter):
        response = subscribe(client, frequency="monthly", categories=["finance", "design"])

        assert response.status_code == 200
        assert response.json()["is_update"] is True
        assert email_adapter.email_count == 0

        subscriber = repo.get_by_email(EMAIL)
        assert subscriber.status == SubscriberStatus.CONFIRMED
        assert repo.get_preference(subscriber.id).categories == ["finance", "design"]

    def test_rate_limited_per_ip(self, client):
        tight = RateLimiter(
            RateLimitRules(
                login=RateLimitWindow(window_seconds=60, max_attempts=5),
                subscribe=RateLimitWindow(window_seconds=60, max_requests=1),
            )
        )
        app.dependency_overrides[get_rate_limiter] = lambda: tight

        assert subscribe(client).status_code == 200
        response = subscribe(client, email="other@example.com")

        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMIT"


# --- Confirm ---


class TestConfirm:
    def test_confirm_redirects_and_welcomes(self, client, repo, live_token, email_adapter):
        subscribe(client)
        token = live_token(EMAIL)

        response = client.get(f"/confirm?token={token}", follow_redirects=False)

        assert response.status_code == 307
        assert redirect_params(response) == {"confirmed": "true", "email": EMAIL, "name": "Jane"}
        assert repo.get_by_email(EMAIL).status == SubscriberStatus.CONFIRMED
        assert email_adapter.get_last_email().subject.startswith("Welcome to")

    def test_api_alias(self, client, live_token):
        subscribe(client)

        response = client.get(
            f"/api/confirm-subscription?token={live_token(EMAIL)}", follow_redirects=False
        )

        assert redirect_params(response)["confirmed"] == "true"

    def test_missing_token(self, client):
        response = client.get("/confirm", follow_redirects=False)

        assert response.status_code == 307
        assert redirect_params(response) == {"error": "missing-token"}

    def test_link_is_single_use(self, client, live_token):
        subscribe(client)
        token = live_token(EMAIL)
        client.get(f"/confirm?token={token}", follow_redirects=False)

        response = client.get(f"/confirm?token={token}", follow_redirects=False)

        assert "confirmed" not in redirect_params(response)
        assert redirect_params(response)["error"] == "Invalid or expired confirmation link"


# --- Manage preferences ---


class TestPreferences:
    def test_manage_link_emailed(self, client, confirmed, email_adapter):
        response = client.post("/api/preferences/manage-link", json={"email": EMAIL})

        assert response.json() == {"success": True, "message": MSG_LINK_SENT}
        last = email_adapter.get_last_email()
        assert last.subject == SUBJECT_MANAGE
        assert f"{APP_URL}/manage-preferences?" in last.body_html

    def test_unknown_email_gets_same_answer(self, client, email_adapter):
        response = client.post("/api/preferences/manage-link", json={"email": "ghost@example.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": MSG_LINK_SENT}
        assert email_adapter.email_count == 0

    def test_invalid_email_is_still_an_error(self, client):
        response = client.post("/api/preferences/manage-link", json={"email": "nope"})

        assert response.status_code == 400

    def test_read_does_not_consume_token(self, client, confirmed, live_token):
        client.post("/api/preferences/manage-link", json={"email": EMAIL})
        token = live_token(EMAIL)

        first = client.get("/api/preferences", params={"email": EMAIL, "token": token})
        second = client.get("/api/preferences", params={"email": EMAIL, "token": token})

        assert first.status_code == 200
        assert second.status_code == 200
        data = second.json()
        assert data["frequency"] == "WEEKLY"
        assert data["categories"] == ["tech"]
        assert data["status"] == "CONFIRMED"

    def test_read_with_bad_token(self, client, confirmed):
        response = client.get("/api/preferences", params={"email": EMAIL, "token": "bogus"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_update_consumes_token(self, client, confirmed, repo, live_token):
        client.post("/api/preferences/manage-link", json={"email": EMAIL})
        token = live_token(EMAIL)
        body = {"email": EMAIL, "token": token, "frequency": "daily", "categories": ["business"]}

        first = client.put("/api/preferences", json=body)
        second = client.put("/api/preferences", json=body)

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert second.status_code == 400
        assert second.json()["code"] == "INVALID_TOKEN"

        subscriber = repo.get_by_email(EMAIL)
        assert repo.get_preference(subscriber.id).categories == ["business"]

    def test_rejected_update_keeps_token(self, client, confirmed, live_token):
        client.post("/api/preferences/manage-link", json={"email": EMAIL})
        token = live_token(EMAIL)

        bad = client.put(
            "/api/preferences", json={"email": EMAIL, "token": token, "frequency": "hourly"}
        )
        good = client.put(
            "/api/preferences", json={"email": EMAIL, "token": token, "frequency": "daily"}
        )

        assert bad.json()["code"] == "INVALID_FREQUENCY"
        assert good.json()["success"] is True


# --- Unsubscribe ---


class TestUnsubscribe:
    def test_unsubscribe_flow(self, client, confirmed, repo, live_token, email_adapter):
        link = client.post("/api/unsubscribe/link", json={"email": EMAIL})
        assert link.json()["message"] == MSG_LINK_SENT
        assert email_adapter.get_last_email().subject == SUBJECT_UNSUBSCRIBE_LINK

        response = client.post(
            "/api/unsubscribe",
            json={"email": EMAIL, "token": live_token(EMAIL), "reason": "Too many emails"},
        )

        assert response.status_code == 200
        assert response.json()["already_unsubscribed"] is False
        assert repo.get_by_email(EMAIL).status == SubscriberStatus.UNSUBSCRIBED
        assert repo.list_unsubscribe_logs(EMAIL)[0].reason == "Too many emails"
        assert email_adapter.get_last_email().subject == SUBJECT_GOODBYE

    def test_token_required(self, client, confirmed):
        response = client.post("/api/unsubscribe", json={"email": EMAIL, "token": "bogus"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_already_unsubscribed(self, client, confirmed, repo, live_token):
        client.post("/api/unsubscribe/link", json={"email": EMAIL})
        client.post("/api/unsubscribe", json={"email": EMAIL, "token": live_token(EMAIL)})
        client.post("/api/unsubscribe/link", json={"email": EMAIL})

        response = client.post(
            "/api/unsubscribe", json={"email": EMAIL, "token": live_token(EMAIL)}
        )

        assert response.json()["already_unsubscribed"] is True
        assert len(repo.list_unsubscribe_logs(EMAIL)) == 1

    def test_resubscribe_starts_over(self, client, confirmed, repo, live_token):
        client.post("/api/unsubscribe/link", json={"email": EMAIL})
        client.post("/api/unsubscribe", json={"email": EMAIL, "token": live_token(EMAIL)})

        response = subscribe(client)

        assert response.json()["is_update"] is False
        assert repo.get_by_email(EMAIL).status == SubscriberStatus.PENDING
