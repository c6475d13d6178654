"""
Newsletter Email Sender.

Renders the transactional subscription emails (confirmation, welcome,
manage link, unsubscribe link, goodbye) and hands them to an EmailPort.
All interpolated values are HTML-escaped.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Sequence

from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)

SUBJECT_CONFIRM = "Confirm Your Newsletter Subscription"
SUBJECT_MANAGE = "Manage Your Newsletter Preferences"
SUBJECT_UNSUBSCRIBE_LINK = "Your Unsubscribe Link"
SUBJECT_GOODBYE = "Unsubscribe Confirmation - We'll Miss You"


def _layout(site_name: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><body style=\"font-family: Arial, sans-serif; "
        'color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">'
        f'<h1 style="color: #2563eb;">{html.escape(site_name)}</h1>'
        f"{body}"
        '<p style="color: #888; font-size: 12px;">'
        f"You are receiving this email because of a subscription to {html.escape(site_name)}."
        "</p></body></html>"
    )


def _button(url: str, label: str) -> str:
    return (
        f'<p><a href="{html.escape(url, quote=True)}" style="background: #2563eb; '
        'color: #fff; padding: 12px 24px; border-radius: 6px; text-decoration: none;">'
        f"{html.escape(label)}</a></p>"
        f'<p style="font-size: 12px;">Or copy this link: {html.escape(url)}</p>'
    )


class NewsletterEmailSender:
    """NewsletterEmailSenderPort implementation over any EmailPort."""

    def __init__(self, email: EmailPort) -> None:
        self.email = email

    def _send(self, recipient: str, subject: str, body_html: str, body_text: str) -> bool:
        result = self.email.send_email(recipient, subject, body_html, body_text)
        if not result.status.delivered:
            logger.warning("Newsletter email '%s' to %s failed: %s", subject, recipient, result.error)
            return False
        return True

    def send_confirmation_email(
        self,
        recipient_email: str,
        name: str,
        confirmation_url: str,
        frequency: str,
        categories: Sequence[str],
        site_name: str,
    ) -> bool:
        items = "".join(f"<li>{html.escape(c)}</li>" for c in categories)
        body = (
            f"<p>Hi {html.escape(name)},</p>"
            "<p>Thanks for subscribing! Please confirm your email address to start "
            "receiving our newsletter.</p>"
            f"<p><strong>Frequency:</strong> {html.escape(frequency)}</p>"
            f"<p><strong>Topics:</strong></p><ul>{items}</ul>"
            + _button(confirmation_url, "Confirm Subscription")
            + "<p>This link expires in 24 hours. If you did not subscribe, ignore this email.</p>"
        )
        text = (
            f"Hi {name},\n\nConfirm your subscription to {site_name}:\n{confirmation_url}\n\n"
            f"Frequency: {frequency}\nTopics: {', '.join(categories)}\n"
        )
        return self._send(recipient_email, SUBJECT_CONFIRM, _layout(site_name, body), text)

    def send_welcome_email(self, recipient_email: str, name: str, site_name: str) -> bool:
        body = (
            f"<p>Hi {html.escape(name)},</p>"
            f"<p>Your subscription to {html.escape(site_name)} is confirmed. "
            "Welcome aboard!</p>"
        )
        text = f"Hi {name},\n\nYour subscription to {site_name} is confirmed. Welcome aboard!\n"
        return self._send(
            recipient_email, f"Welcome to {site_name}!", _layout(site_name, body), text
        )

    def send_manage_link_email(
        self,
        recipient_email: str,
        name: str,
        manage_url: str,
        site_name: str,
    ) -> bool:
        body = (
            f"<p>Hi {html.escape(name)},</p>"
            "<p>Use the link below to update your newsletter preferences.</p>"
            + _button(manage_url, "Manage Preferences")
            + "<p>This link expires in 1 hour.</p>"
        )
        text = f"Hi {name},\n\nManage your preferences:\n{manage_url}\n\nThe link expires in 1 hour.\n"
        return self._send(recipient_email, SUBJECT_MANAGE, _layout(site_name, body), text)

    def send_unsubscribe_link_email(
        self,
        recipient_email: str,
        name: str,
        unsubscribe_url: str,
        site_name: str,
    ) -> bool:
        body = (
            f"<p>Hi {html.escape(name)},</p>"
            "<p>We received a request to unsubscribe this address. "
            "Click below to confirm.</p>"
            + _button(unsubscribe_url, "Unsubscribe")
            + "<p>This link expires in 1 hour. If you did not ask for this, ignore this email.</p>"
        )
        text = f"Hi {name},\n\nUnsubscribe from {site_name}:\n{unsubscribe_url}\n"
        return self._send(
            recipient_email, SUBJECT_UNSUBSCRIBE_LINK, _layout(site_name, body), text
        )

    def send_unsubscribe_confirmation_email(
        self,
        recipient_email: str,
        name: str,
        site_name: str,
    ) -> bool:
        body = (
            f"<p>Hi {html.escape(name)},</p>"
            f"<p>You have been unsubscribed from {html.escape(site_name)}. "
            "You will not receive any more newsletters from us.</p>"
            "<p>Changed your mind? You can subscribe again at any time.</p>"
        )
        text = f"Hi {name},\n\nYou have been unsubscribed from {site_name}.\n"
        return self._send(recipient_email, SUBJECT_GOODBYE, _layout(site_name, body), text)
