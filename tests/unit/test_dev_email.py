"""
Unit tests for DevEmailAdapter.

Tests cover:
1. send_email returns SKIPPED, never SENT
2. Email storage for test assertions
3. Simulated failures
4. Logging of recipient and body preview
"""

import logging

from src.adapters.dev_email import DevEmailAdapter, SentEmail
from src.core.ports.email import EmailStatus


class TestDevEmailAdapterSendEmail:
    """Tests for send_email."""

    def test_send_email_returns_skipped_status(self) -> None:
        adapter = DevEmailAdapter()

        result = adapter.send_email(
            recipient="user@example.com",
            subject="Test Subject",
            body_html="<p>Test body</p>",
        )

        assert result.status == EmailStatus.SKIPPED
        assert result.status.delivered is True

    def test_send_email_includes_message_id(self) -> None:
        adapter = DevEmailAdapter()

        result = adapter.send_email("user@example.com", "Test", "<p>Test</p>")

        assert result.message_id is not None
        assert result.message_id.startswith("dev-")
        assert result.recipient == "user@example.com"
        assert "Dev mode" in (result.error or "")

    def test_fail_with_returns_failed(self) -> None:
        adapter = DevEmailAdapter(fail_with="SMTP down")

        result = adapter.send_email("user@example.com", "Test", "<p>Test</p>")

        assert result.status == EmailStatus.FAILED
        assert result.status.delivered is False
        assert result.error == "SMTP down"
        assert adapter.email_count == 0


class TestDevEmailAdapterStorage:
    """Tests for in-memory storage and helpers."""

    def test_stores_sent_email(self) -> None:
        adapter = DevEmailAdapter()

        adapter.send_email("a@example.com", "Hello", "<p>Hi</p>", "Hi")

        last = adapter.get_last_email()
        assert isinstance(last, SentEmail)
        assert last.recipient == "a@example.com"
        assert last.subject == "Hello"
        assert last.body_text == "Hi"

    def test_missing_text_body_stored_as_empty(self) -> None:
        adapter = DevEmailAdapter()

        adapter.send_email("a@example.com", "Hello", "<p>Hi</p>")

        assert adapter.get_last_email().body_text == ""

    def test_filters(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email("a@example.com", "Confirm your subscription", "<p>1</p>")
        adapter.send_email("b@example.com", "Welcome", "<p>2</p>")
        adapter.send_email("a@example.com", "Welcome", "<p>3</p>")

        assert len(adapter.get_emails_to("a@example.com")) == 2
        assert len(adapter.get_emails_with_subject("Welcome")) == 2
        assert adapter.email_count == 3

    def test_clear(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email("a@example.com", "Hello", "<p>Hi</p>")

        adapter.clear()

        assert adapter.email_count == 0
        assert adapter.get_last_email() is None


class TestDevEmailAdapterLogging:
    def test_logs_recipient_and_preview(self, caplog) -> None:
        adapter = DevEmailAdapter(body_preview_length=5)

        with caplog.at_level(logging.INFO, logger="src.adapters.dev_email"):
            adapter.send_email("user@example.com", "Subject", "<p>long body</p>")

        assert "To=user@example.com" in caplog.text
        assert "Body=<p>lo..." in caplog.text

    def test_log_body_disabled(self, caplog) -> None:
        adapter = DevEmailAdapter(log_body=False)

        with caplog.at_level(logging.INFO, logger="src.adapters.dev_email"):
            adapter.send_email("user@example.com", "Subject", "<p>secret</p>")

        assert "secret" not in caplog.text
