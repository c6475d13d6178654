"""
Unit tests for the admin API: subscribers, stats, newsletters, templates,
diagnostics and login.
"""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from src.adapters.orm import SQLSubscriberRepo
from src.components.newsletter import Subscriber, SubscriberPreference, SubscriberStatus

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def repo(session_factory) -> SQLSubscriberRepo:
    return SQLSubscriberRepo(session_factory)


@pytest.fixture
def sample_subscribers(repo: SQLSubscriberRepo) -> list[Subscriber]:
    now = datetime.now(UTC)
    subscribers = [
        Subscriber(email="pending@example.com", name="Pat Pending"),
        Subscriber(
            email="ada@example.com",
            name="Ada Lovelace",
            status=SubscriberStatus.CONFIRMED,
            confirmed_at=now,
        ),
        Subscriber(
            email="grace@example.com",
            name="Grace Hopper",
            status=SubscriberStatus.CONFIRMED,
            confirmed_at=now,
        ),
        Subscriber(
            email="gone@example.com",
            status=SubscriberStatus.UNSUBSCRIBED,
            unsubscribed_at=now,
        ),
    ]
    for subscriber in subscribers:
        repo.save(subscriber, SubscriberPreference(subscriber_id=subscriber.id))
    return subscribers


# --- Access ---


class TestAccess:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/admin/subscribers"),
            ("get", "/api/admin/stats"),
            ("get", "/api/admin/newsletters"),
            ("get", "/api/admin/templates"),
            ("get", "/api/admin/diagnostic/email-config"),
        ],
    )
    def test_requires_admin(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401


# --- Subscribers ---


class TestSubscribers:
    def test_list_all(self, admin_client, sample_subscribers):
        response = admin_client.get("/api/admin/subscribers")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert {s["email"] for s in data["subscribers"]} == {
            s.email for s in sample_subscribers
        }

    def test_filter_by_status(self, admin_client, sample_subscribers):
        response = admin_client.get("/api/admin/subscribers", params={"status": "CONFIRMED"})

        data = response.json()
        assert data["total"] == 2
        assert all(s["status"] == "CONFIRMED" for s in data["subscribers"])

    def test_search_matches_name_or_email(self, admin_client, sample_subscribers):
        by_name = admin_client.get("/api/admin/subscribers", params={"search": "hopper"})
        by_email = admin_client.get("/api/admin/subscribers", params={"search": "ADA@"})

        assert [s["email"] for s in by_name.json()["subscribers"]] == ["grace@example.com"]
        assert [s["email"] for s in by_email.json()["subscribers"]] == ["ada@example.com"]

    def test_get_subscriber(self, admin_client, sample_subscribers):
        target = sample_subscribers[1]

        response = admin_client.get(f"/api/admin/subscribers/{target.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["subscriber"]["email"] == target.email
        assert data["preferences"]["frequency"] == "WEEKLY"

    def test_get_unknown_subscriber(self, admin_client):
        response = admin_client.get(f"/api/admin/subscribers/{uuid4()}")

        assert response.status_code == 404

    def test_add_subscriber_is_pending_without_email(self, admin_client, repo, email_adapter):
        response = admin_client.post(
            "/api/admin/subscribers", json={"email": "New@Example.com", "name": "Newbie"}
        )

        assert response.status_code == 200
        assert response.json()["email"] == "new@example.com"
        assert repo.get_by_email("new@example.com").status == SubscriberStatus.PENDING
        assert email_adapter.email_count == 0

    def test_add_confirmed_subscriber_conflicts(self, admin_client, sample_subscribers):
        response = admin_client.post("/api/admin/subscribers", json={"email": "ada@example.com"})

        assert response.status_code == 409
        assert response.json()["code"] == "ALREADY_SUBSCRIBED"

    def test_add_invalid_email(self, admin_client):
        response = admin_client.post("/api/admin/subscribers", json={"email": "bad"})

        assert response.status_code == 400

    def test_bulk_delete(self, admin_client, repo, sample_subscribers):
        ids = [str(s.id) for s in sample_subscribers[:2]]

        response = admin_client.post("/api/admin/subscribers/delete", json={"ids": ids})

        assert response.json()["deleted"] == 2
        assert repo.count() == 2
        assert repo.get_by_email("pending@example.com") is None

    def test_bulk_delete_requires_ids(self, admin_client):
        response = admin_client.post("/api/admin/subscribers/delete", json={"ids": []})

        assert response.status_code == 400

    def test_export_csv(self, admin_client, sample_subscribers):
        response = admin_client.get(
            "/api/admin/subscribers/export/csv", params={"status": "CONFIRMED"}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0] == "email,name,status,created_at,confirmed_at,unsubscribed_at"
        assert len(lines) == 3
        assert "token" not in response.text


# --- Stats ---


class TestStats:
    def test_counts(self, admin_client, sample_subscribers):
        response = admin_client.get("/api/admin/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["subscriberCount"] == 4
        assert data["activeSubscribers"] == 2
        assert data["openRate"] == 0
        assert [w["name"] for w in data["weeklyStats"]] == [
            "Week 1",
            "Week 2",
            "Week 3",
            "Week 4",
        ]


# --- Newsletters ---


class TestNewsletters:
    def test_send_to_confirmed(self, admin_client, sample_subscribers, email_adapter, admin_user):
        response = admin_client.post(
            "/api/admin/newsletters/send",
            json={"subject": "Hello", "content": "<p>Hi {{first_name}}</p>", "audience": "all"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sent"] == 2
        assert data["failed"] == 0
        assert data["total"] == 2
        assert {e.recipient for e in email_adapter.sent_emails} == {
            "ada@example.com",
            "grace@example.com",
        }
        assert "Hi Ada" in email_adapter.get_emails_to("ada@example.com")[0].body_html

        detail = admin_client.get(f"/api/admin/newsletters/{data['newsletterId']}").json()
        assert detail["newsletter"]["status"] == "SENT"
        assert detail["newsletter"]["sent_count"] == 2
        assert detail["newsletter"]["author_id"] == str(admin_user.id)

    def test_no_recipients(self, admin_client):
        response = admin_client.post(
            "/api/admin/newsletters/send", json={"subject": "Hello", "content": "Hi"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "NO_RECIPIENTS"

    def test_invalid_audience(self, admin_client, sample_subscribers):
        response = admin_client.post(
            "/api/admin/newsletters/send",
            json={"subject": "Hello", "content": "Hi", "audience": "vip"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_missing_content(self, admin_client, sample_subscribers):
        response = admin_client.post("/api/admin/newsletters/send", json={"subject": "Hello"})

        assert response.status_code == 400

    def test_list_newsletters(self, admin_client, sample_subscribers):
        admin_client.post(
            "/api/admin/newsletters/send", json={"subject": "One", "content": "Body"}
        )

        response = admin_client.get("/api/admin/newsletters")

        assert [n["subject"] for n in response.json()["newsletters"]] == ["One"]

    def test_unknown_newsletter(self, admin_client):
        response = admin_client.get(f"/api/admin/newsletters/{uuid4()}")

        assert response.status_code == 404


# --- Templates ---


def create_template(client, name="Weekly", **overrides):
    body = {"name": name, "subject": "This week", "content": "<p>{{user_name}}</p>"}
    body.update(overrides)
    return client.post("/api/admin/templates", json=body)


class TestTemplates:
    def test_create_and_get(self, admin_client, admin_user):
        created = create_template(admin_client)

        assert created.status_code == 200
        template = created.json()["template"]
        assert template["category"] == "general"
        assert template["author_id"] == str(admin_user.id)

        fetched = admin_client.get(f"/api/admin/templates/{template['id']}")
        assert fetched.json()["template"]["name"] == "Weekly"

    def test_duplicate_name_conflicts(self, admin_client):
        create_template(admin_client)

        response = create_template(admin_client)

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_NAME"

    def test_missing_fields(self, admin_client):
        response = create_template(admin_client, content="  ")

        assert response.status_code == 400

    def test_list_by_category(self, admin_client):
        create_template(admin_client, name="A", category="promo")
        create_template(admin_client, name="B")

        response = admin_client.get("/api/admin/templates", params={"category": "promo"})

        assert [t["name"] for t in response.json()["templates"]] == ["A"]

    def test_partial_update(self, admin_client):
        template_id = create_template(admin_client).json()["template"]["id"]

        response = admin_client.put(
            f"/api/admin/templates/{template_id}", json={"subject": "New subject"}
        )

        template = response.json()["template"]
        assert template["subject"] == "New subject"
        assert template["name"] == "Weekly"

    def test_update_unknown(self, admin_client):
        response = admin_client.put(f"/api/admin/templates/{uuid4()}", json={"name": "X"})

        assert response.status_code == 404

    def test_delete(self, admin_client):
        template_id = create_template(admin_client).json()["template"]["id"]

        response = admin_client.delete(f"/api/admin/templates/{template_id}")

        assert response.status_code == 200
        assert admin_client.get(f"/api/admin/templates/{template_id}").status_code == 404

    def test_template_in_use_cannot_be_deleted(self, admin_client, sample_subscribers):
        template_id = create_template(admin_client).json()["template"]["id"]
        sent = admin_client.post(
            "/api/admin/newsletters/send", json={"template_id": template_id}
        )
        assert sent.json()["success"] is True

        single = admin_client.delete(f"/api/admin/templates/{template_id}")
        bulk = admin_client.post("/api/admin/templates/delete", json={"ids": [template_id]})

        assert single.status_code == 409
        assert bulk.status_code == 409
        assert bulk.json()["code"] == "IN_USE"

    def test_bulk_delete(self, admin_client):
        ids = [
            create_template(admin_client, name=name).json()["template"]["id"]
            for name in ("A", "B")
        ]

        response = admin_client.post("/api/admin/templates/delete", json={"ids": ids})

        assert response.json()["deleted"] == 2
        assert admin_client.get("/api/admin/templates").json()["templates"] == []


# --- Diagnostics ---


class TestDiagnostics:
    def test_email_config_hides_secrets(self, admin_client):
        response = admin_client.get("/api/admin/diagnostic/email-config")

        assert response.status_code == 200
        data = response.json()
        assert data["backend"] == "dev"
        assert "password" not in data
        assert "password_configured" in data


# --- Auth ---


def login(client, password=ADMIN_PASSWORD):
    return client.post(
        "/api/auth/login", data={"username": ADMIN_EMAIL, "password": password}
    )


class TestAuth:
    def test_login_sets_cookie_and_token(self, client, admin_user):
        response = login(client)

        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"
        assert "access_token" in response.cookies

        me = client.get(
            "/api/auth/me",
            headers={"Authorization": f"Bearer {response.json()['access_token']}"},
        )
        assert me.json()["email"] == ADMIN_EMAIL

    def test_wrong_password(self, client, admin_user):
        response = login(client, password="wrong-password")

        assert response.status_code == 401

    def test_login_rate_limited(self, client, admin_user):
        for _ in range(5):
            login(client, password="wrong-password")

        response = login(client)

        assert response.status_code == 429

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_me_rejects_garbage_token(self, client, admin_user):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_logout(self, client):
        response = client.post("/api/auth/logout")

        assert response.json() == {"status": "success"}
