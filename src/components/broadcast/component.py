"""
Broadcast component.

Send a newsletter to an audience segment in fixed-size concurrent batches.

Key behaviors:
- Audiences: all / active / new / engaged, always CONFIRMED only, and never
  subscribers who opted out of all email
- Per-recipient personalization of subject and content
- Each batch waits for all of its sends (bounded by a per-send timeout)
  before the next batch starts
- No retries; one failed send never stops the broadcast
- Email log rows are written from the calling thread only
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode
from uuid import UUID

from src.components.broadcast.models import (
    Audience,
    AudienceCriteria,
    AudienceWindows,
    BroadcastConfig,
    DeliveryOutcome,
    EmailLog,
    EmailLogStatus,
    Newsletter,
    NewsletterStatus,
    SendNewsletterInput,
    SendNewsletterOutput,
)
from src.components.broadcast.ports import (
    EmailLogRepoPort,
    NewsletterRepoPort,
    RecipientQueryPort,
)
from src.components.newsletter.models import Subscriber
from src.components.templates.ports import TemplateRepoPort
from src.core.ports.email import EmailPort, EmailStatus

logger = logging.getLogger(__name__)

MSG_MISSING_FIELDS = "Missing required fields: subject, content"
MSG_NO_SUBSCRIBERS = "No subscribers to send to"


# --- Pure Functions (Functional Core) ---


def parse_audience(value: str | None) -> Audience | None:
    if not value:
        return Audience.ALL
    try:
        return Audience(value.strip().lower())
    except ValueError:
        return None


def build_audience_criteria(
    audience: Audience,
    now: datetime,
    windows: AudienceWindows | None = None,
) -> AudienceCriteria:
    """
    Map an audience name to its recipient predicate.

    Args:
        audience: Named segment
        now: Reference time for the windows
        windows: Window sizes (defaults: 30 days, 7 days, 5 opens)
    """
    w = windows or AudienceWindows()

    if audience == Audience.ACTIVE:
        return AudienceCriteria(last_opened_since=now - timedelta(days=w.active_days))
    if audience == Audience.NEW:
        return AudienceCriteria(created_since=now - timedelta(days=w.new_days))
    if audience == Audience.ENGAGED:
        return AudienceCriteria(min_open_count=w.engaged_min_opens)
    return AudienceCriteria()


def broadcast_unsubscribe_url(base_url: str, email: str, path: str = "/unsubscribe") -> str:
    """Unsubscribe page link for broadcast footers; the page requests a token."""
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'email': email})}"


def personalize(text: str, subscriber: Subscriber, unsubscribe_url: str) -> str:
    """
    Fill per-recipient placeholders.

    {{user_name}}: name, else the email local part
    {{first_name}}: first word of the name, else the email local part
    {{email}}, {{unsubscribe_url}}
    """
    local_part = subscriber.email.split("@")[0]
    name = (subscriber.name or "").strip()
    first_name = name.split()[0] if name else local_part

    return (
        text.replace("{{user_name}}", name or local_part)
        .replace("{{email}}", subscriber.email)
        .replace("{{first_name}}", first_name)
        .replace("{{unsubscribe_url}}", unsubscribe_url)
    )


def batched(items: Sequence[Subscriber], size: int) -> list[Sequence[Subscriber]]:
    if size < 1:
        raise ValueError("batch size must be positive")
    return [items[i : i + size] for i in range(0, len(items), size)]


def dispatch_batch(
    batch: Sequence[Subscriber],
    send_one: Callable[[Subscriber], DeliveryOutcome],
    timeout_seconds: float,
) -> list[DeliveryOutcome]:
    """
    Run one batch of sends concurrently and wait for all of them.

    A send still running after `timeout_seconds` is reported as failed and
    abandoned; its thread is not joined.
    """
    executor = ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix="broadcast")
    try:
        futures = {executor.submit(send_one, subscriber): subscriber for subscriber in batch}
        done, _ = wait(futures, timeout=timeout_seconds)

        outcomes: list[DeliveryOutcome] = []
        for future, subscriber in futures.items():
            if future not in done:
                outcomes.append(
                    DeliveryOutcome(
                        subscriber=subscriber,
                        delivered=False,
                        error=f"timed out after {timeout_seconds:g}s",
                    )
                )
                continue
            exc = future.exception()
            if exc is not None:
                outcomes.append(
                    DeliveryOutcome(subscriber=subscriber, delivered=False, error=str(exc))
                )
            else:
                outcomes.append(future.result())
        return outcomes
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def _send_via(
    email: EmailPort,
    subject: str,
    content: str,
    config: BroadcastConfig,
) -> Callable[[Subscriber], DeliveryOutcome]:
    def send_one(subscriber: Subscriber) -> DeliveryOutcome:
        unsubscribe_url = broadcast_unsubscribe_url(
            config.base_url, subscriber.email, config.unsubscribe_page
        )
        result = email.send_email(
            subscriber.email,
            personalize(subject, subscriber, unsubscribe_url),
            personalize(content, subscriber, unsubscribe_url),
        )
        if result.status in (EmailStatus.SENT, EmailStatus.QUEUED, EmailStatus.SKIPPED):
            return DeliveryOutcome(
                subscriber=subscriber, delivered=True, message_id=result.message_id
            )
        return DeliveryOutcome(
            subscriber=subscriber, delivered=False, error=result.error or "send failed"
        )

    return send_one


# --- Run Handlers ---


def run_send_newsletter(
    inp: SendNewsletterInput,
    *,
    recipients: RecipientQueryPort,
    newsletters: NewsletterRepoPort,
    email_logs: EmailLogRepoPort,
    email: EmailPort,
    templates: TemplateRepoPort | None = None,
    config: BroadcastConfig | None = None,
    now: datetime | None = None,
) -> SendNewsletterOutput:
    """
    Send a newsletter to an audience.

    The newsletter row is created as SENDING before the first batch and
    marked SENT with final counts afterward.
    """
    cfg = config or BroadcastConfig()
    if now is None:
        now = datetime.now(UTC)

    audience = parse_audience(inp.audience)
    if audience is None:
        return SendNewsletterOutput(
            success=False,
            error=f"Invalid audience: {inp.audience}",
            error_code="VALIDATION_ERROR",
        )

    subject = (inp.subject or "").strip()
    content = inp.content or ""

    try:
        if inp.template_id is not None:
            template = templates.get_by_id(inp.template_id) if templates else None
            if template is None:
                return SendNewsletterOutput(
                    success=False, error="Template not found", error_code="NOT_FOUND"
                )
            subject = subject or template.subject
            content = content if content.strip() else template.content

        if not subject or not content.strip():
            return SendNewsletterOutput(
                success=False, error=MSG_MISSING_FIELDS, error_code="VALIDATION_ERROR"
            )

        targets = recipients.find_recipients(
            build_audience_criteria(audience, now, cfg.windows)
        )
        if not targets:
            return SendNewsletterOutput(
                success=False, error=MSG_NO_SUBSCRIBERS, error_code="NO_RECIPIENTS"
            )

        newsletter = newsletters.save(
            Newsletter(
                title=(inp.title or "").strip() or subject,
                subject=subject,
                content=content,
                author_id=inp.author_id,
                template_id=inp.template_id,
                audience=audience,
                status=NewsletterStatus.SENDING,
                recipient_count=len(targets),
                created_at=now,
            )
        )
        logger.info(
            "Broadcast %s to %d %s subscriber(s)", newsletter.id, len(targets), audience.value
        )

        send_one = _send_via(email, subject, content, cfg)
        sent = 0
        failures: list[str] = []
        for batch in batched(targets, cfg.batch_size):
            for outcome in dispatch_batch(batch, send_one, cfg.send_timeout_seconds):
                if outcome.delivered:
                    sent += 1
                    email_logs.add(
                        EmailLog(
                            recipient_email=outcome.subscriber.email,
                            newsletter_id=newsletter.id,
                            subscriber_id=outcome.subscriber.id,
                            message_id=outcome.message_id,
                            status=EmailLogStatus.SENT,
                        )
                    )
                else:
                    failures.append(f"{outcome.subscriber.email}: {outcome.error}")
                    logger.warning(
                        "Broadcast %s failed for %s: %s",
                        newsletter.id,
                        outcome.subscriber.email,
                        outcome.error,
                    )

        finished_at = datetime.now(UTC)
        newsletter.status = NewsletterStatus.SENT
        newsletter.sent_count = sent
        newsletter.failed_count = len(failures)
        newsletter.sent_at = finished_at
        newsletters.save(newsletter)
    except Exception:
        logger.exception("Broadcast failed")
        return SendNewsletterOutput(
            success=False, error="Failed to send newsletter", error_code="INTERNAL"
        )

    return SendNewsletterOutput(
        success=True,
        newsletter_id=newsletter.id,
        sent=sent,
        failed=len(failures),
        total=len(targets),
        failures=failures,
        timestamp=finished_at,
    )


def list_newsletters(
    newsletters: NewsletterRepoPort, limit: int = 50, offset: int = 0
) -> list[Newsletter]:
    return newsletters.list_recent(limit=limit, offset=offset)


def get_newsletter(newsletters: NewsletterRepoPort, newsletter_id: UUID) -> Newsletter | None:
    return newsletters.get_by_id(newsletter_id)


def cleanup_orphaned_newsletters(
    newsletters: NewsletterRepoPort, author_ids: Collection[UUID]
) -> int:
    """Delete newsletters whose author account no longer exists."""
    deleted = newsletters.delete_orphaned(author_ids)
    logger.info("Deleted %d orphaned newsletter(s)", deleted)
    return deleted
