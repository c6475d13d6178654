"""
Newsletter component.

Functional core for subscriber self-service: subscribe, confirm, manage
preferences and unsubscribe, all authorized by single-use emailed tokens.

Key behaviors:
- Double opt-in (PENDING → CONFIRMED via a 24h confirm token)
- Confirmed subscribers re-submitting the form get an in-place preference update
- Manage tokens (1h) authorize one preference update or one unsubscribe
- Every token is consumed with one atomic delete; a reused link fails
- Email delivery is best effort; a failed send never rolls back a write
- Nothing raises past a run_* handler; unexpected errors become results
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

from src.components.newsletter.models import (
    DEFAULT_UNSUBSCRIBE_REASON,
    FREQUENCY_LABELS,
    AddSubscriberInput,
    AddSubscriberOutput,
    ConfirmInput,
    ConfirmOutput,
    Frequency,
    GetPreferencesInput,
    LinkOutput,
    ManageLinkInput,
    NewsletterConfig,
    PreferencesOutput,
    SubscribeInput,
    SubscribeOutput,
    Subscriber,
    SubscriberPreference,
    SubscriberStatus,
    UnsubscribeInput,
    UnsubscribeLinkInput,
    UnsubscribeLog,
    UnsubscribeOutput,
    UpdatePreferencesInput,
    UpdatePreferencesOutput,
    ValidateEmailOutput,
    ValidationError,
    can_transition,
)
from src.components.newsletter.ports import NewsletterEmailSenderPort, SubscriberRepoPort
from src.components.tokens import (
    TokenPurpose,
    TokenStorePort,
    consume_token,
    consume_token_by_value,
    is_token_live,
    issue_token,
)

logger = logging.getLogger(__name__)

# --- Email Validation Regex (RFC 5322 simplified) ---

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MSG_CONFIRM_SENT = "Please check your email to confirm your subscription!"
MSG_CONFIRM_NOT_SENT = (
    "Subscription created, but confirmation email failed to send. Please contact support."
)
MSG_PREFERENCES_UPDATED = "Your preferences have been updated successfully!"
MSG_LINK_SENT = "If a subscription exists for this email, a link has been sent."
MSG_UNSUBSCRIBED = "Successfully unsubscribed. Check your email for confirmation."
WARNING_DELIVERY = "Email delivery issue"


# --- Pure Functions (Functional Core) ---


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email address."""
    return email.strip().lower() if email else ""


def validate_email(email: str | None) -> ValidateEmailOutput:
    """
    Validate email address format.

    Args:
        email: Email address to validate

    Returns:
        ValidateEmailOutput with the normalized address when valid
    """
    normalized = normalize_email(email)

    if not normalized:
        return ValidateEmailOutput(
            is_valid=False,
            normalized_email=None,
            errors=[ValidationError("MISSING_EMAIL", "Missing email", "email")],
        )

    if len(normalized) > 254 or not EMAIL_REGEX.match(normalized):
        return ValidateEmailOutput(
            is_valid=False,
            normalized_email=None,
            errors=[ValidationError("INVALID_EMAIL", "Invalid email address", "email")],
        )

    return ValidateEmailOutput(is_valid=True, normalized_email=normalized)


def parse_frequency(value: str | None) -> Frequency | None:
    """Parse a frequency name case-insensitively; None when unknown."""
    if not value:
        return None
    try:
        return Frequency(value.strip().upper())
    except ValueError:
        return None


def validate_frequency(value: str | None) -> list[ValidationError]:
    if not value:
        return [ValidationError("MISSING_FREQUENCY", "Missing frequency preference", "frequency")]
    if parse_frequency(value) is None:
        return [ValidationError("INVALID_FREQUENCY", f"Invalid frequency: {value}", "frequency")]
    return []


def validate_categories(
    categories: Sequence[str] | None,
    allowed: Sequence[str],
    *,
    allow_empty: bool = False,
) -> list[ValidationError]:
    """Categories must come from the configured vocabulary."""
    if not categories:
        if allow_empty:
            return []
        return [
            ValidationError(
                "MISSING_CATEGORIES", "Please select at least one category", "categories"
            )
        ]

    unknown = [c for c in categories if c not in allowed]
    if unknown:
        return [
            ValidationError(
                "INVALID_CATEGORY",
                f"Unknown category: {', '.join(unknown)}",
                "categories",
            )
        ]
    return []


def dedupe(values: Sequence[str]) -> list[str]:
    """Drop duplicates, keep first-seen order."""
    return list(dict.fromkeys(values))


def category_labels(categories: Sequence[str], config: NewsletterConfig) -> list[str]:
    return [config.category_labels.get(c, c) for c in categories]


def default_name(email: str) -> str:
    """Local part of the email address."""
    return email.split("@")[0]


def build_confirmation_url(base_url: str, token: str, path: str = "/confirm") -> str:
    """
    Build the confirmation URL for email.

    Args:
        base_url: Site base URL
        token: Confirmation token
        path: URL path for confirmation endpoint

    Returns:
        Full confirmation URL
    """
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'token': token})}"


def build_manage_url(
    base_url: str,
    email: str,
    token: str,
    path: str = "/manage-preferences",
) -> str:
    """Build the manage-preferences URL (email and token both required there)."""
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'email': email, 'token': token})}"


def build_unsubscribe_url(
    base_url: str,
    email: str,
    token: str,
    path: str = "/unsubscribe",
) -> str:
    """Build the unsubscribe page URL."""
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'email': email, 'token': token})}"


def confirm_subscriber(subscriber: Subscriber, now: datetime) -> Subscriber:
    """Transition PENDING → CONFIRMED in place."""
    subscriber.status = SubscriberStatus.CONFIRMED
    subscriber.confirmed_at = now
    subscriber.subscribed_at = now
    return subscriber


def unsubscribe_subscriber(subscriber: Subscriber, now: datetime) -> Subscriber:
    """Transition to UNSUBSCRIBED in place."""
    subscriber.status = SubscriberStatus.UNSUBSCRIBED
    subscriber.unsubscribed_at = now
    return subscriber


def apply_preferences(
    subscriber: Subscriber,
    preference: SubscriberPreference,
    now: datetime,
    *,
    frequency: Frequency | None = None,
    categories: Sequence[str] | None = None,
    no_emails: bool | None = None,
) -> SubscriberPreference:
    """Apply the provided fields only; categories are mirrored into tags."""
    if frequency is not None:
        preference.frequency = frequency
    if categories is not None:
        preference.categories = dedupe(categories)
        subscriber.tags = list(preference.categories)
    if no_emails is not None:
        preference.no_emails = no_emails
    preference.updated_at = now
    return preference


def _internal_error(code: str, message: str) -> list[ValidationError]:
    return [ValidationError(code, message, None)]


# --- Run Handlers (Functional Core) ---


def run_subscribe(
    inp: SubscribeInput,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    email_sender: NewsletterEmailSenderPort | None = None,
    config: NewsletterConfig | None = None,
    now: datetime | None = None,
) -> SubscribeOutput:
    """
    Subscribe with preferences, or update them for a confirmed subscriber.

    All validation happens before any write.
    """
    cfg = config or NewsletterConfig()
    if now is None:
        now = datetime.now(UTC)

    validation = validate_email(inp.email)
    if not validation.is_valid or validation.normalized_email is None:
        return SubscribeOutput(success=False, errors=validation.errors)

    errors = validate_frequency(inp.frequency)
    errors += validate_categories(inp.categories, list(cfg.category_labels))
    if errors:
        return SubscribeOutput(success=False, errors=errors)

    email = validation.normalized_email
    frequency = parse_frequency(inp.frequency) or cfg.default_frequency
    categories = dedupe(inp.categories)
    name = inp.name.strip() if inp.name and inp.name.strip() else None

    try:
        existing = repo.get_by_email(email)

        if existing is not None and existing.status == SubscriberStatus.CONFIRMED:
            preference = repo.get_preference(existing.id) or SubscriberPreference(
                subscriber_id=existing.id
            )
            apply_preferences(
                existing,
                preference,
                now,
                frequency=frequency,
                categories=categories,
                no_emails=False,
            )
            if name:
                existing.name = name
            repo.save(existing, preference)

            # In-place update: no token, no email
            return SubscribeOutput(
                success=True,
                message=MSG_PREFERENCES_UPDATED,
                email=email,
                is_update=True,
            )

        if existing is None:
            subscriber = Subscriber(email=email, name=name or default_name(email), created_at=now)
            preference = SubscriberPreference(subscriber_id=subscriber.id)
        else:
            # PENDING resubmits, or UNSUBSCRIBED / BOUNCED starting over
            if not can_transition(existing.status, SubscriberStatus.PENDING):
                return SubscribeOutput(
                    success=False,
                    errors=_internal_error(
                        "INVALID_STATE", "Cannot subscribe in current state"
                    ),
                )
            subscriber = existing
            subscriber.status = SubscriberStatus.PENDING
            if name:
                subscriber.name = name
            preference = repo.get_preference(subscriber.id) or SubscriberPreference(
                subscriber_id=subscriber.id
            )

        apply_preferences(
            subscriber,
            preference,
            now,
            frequency=frequency,
            categories=categories,
            no_emails=False,
        )
        repo.save(subscriber, preference)

        token = issue_token(
            tokens,
            email,
            TokenPurpose.CONFIRM,
            timedelta(hours=cfg.confirm_ttl_hours),
            now,
        )
    except Exception:
        logger.exception("Subscription failed for %s", email)
        return SubscribeOutput(
            success=False,
            errors=_internal_error(
                "INTERNAL", "Failed to complete subscription. Please try again."
            ),
        )

    delivered = False
    if email_sender is not None:
        delivered = email_sender.send_confirmation_email(
            email,
            subscriber.display_name,
            build_confirmation_url(cfg.base_url, token.token, cfg.confirm_path),
            FREQUENCY_LABELS[frequency],
            category_labels(categories, cfg),
            cfg.site_name,
        )

    if not delivered:
        logger.warning("Confirmation email to %s was not delivered", email)
        return SubscribeOutput(
            success=True,
            message=MSG_CONFIRM_NOT_SENT,
            email=email,
            warning=WARNING_DELIVERY,
        )

    return SubscribeOutput(success=True, message=MSG_CONFIRM_SENT, email=email)


def run_confirm(
    inp: ConfirmInput,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    email_sender: NewsletterEmailSenderPort | None = None,
    config: NewsletterConfig | None = None,
    now: datetime | None = None,
) -> ConfirmOutput:
    """
    Confirm a subscription from the emailed link (token only).
    """
    cfg = config or NewsletterConfig()
    if now is None:
        now = datetime.now(UTC)

    if not inp.token:
        return ConfirmOutput(
            success=False,
            errors=[ValidationError("MISSING_TOKEN", "Confirmation token is required", "token")],
        )

    try:
        consumed = consume_token_by_value(tokens, inp.token, TokenPurpose.CONFIRM, now)
        if not consumed.valid or consumed.identifier is None:
            return ConfirmOutput(
                success=False,
                errors=[
                    ValidationError(
                        "INVALID_TOKEN", "Invalid or expired confirmation link", "token"
                    )
                ],
            )

        subscriber = repo.get_by_email(consumed.identifier)
        if subscriber is None:
            return ConfirmOutput(
                success=False,
                errors=[ValidationError("NOT_FOUND", "Subscriber not found", None)],
            )

        if not can_transition(subscriber.status, SubscriberStatus.CONFIRMED):
            return ConfirmOutput(
                success=False,
                errors=_internal_error("INVALID_STATE", "Cannot confirm in current state"),
            )

        confirm_subscriber(subscriber, now)
        repo.save(subscriber)
    except Exception:
        logger.exception("Confirmation failed")
        return ConfirmOutput(
            success=False,
            errors=_internal_error("INTERNAL", "Failed to confirm subscription"),
        )

    if email_sender is not None and not email_sender.send_welcome_email(
        subscriber.email, subscriber.display_name, cfg.site_name
    ):
        logger.warning("Welcome email to %s was not delivered", subscriber.email)

    return ConfirmOutput(success=True, email=subscriber.email, name=subscriber.name)


def _run_link_request(
    email_value: str,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    kind: str,
    email_sender: NewsletterEmailSenderPort | None,
    config: NewsletterConfig,
    now: datetime,
) -> LinkOutput:
    validation = validate_email(email_value)
    if not validation.is_valid or validation.normalized_email is None:
        return LinkOutput(success=False, errors=validation.errors)
    email = validation.normalized_email

    try:
        subscriber = repo.get_by_email(email)
        if subscriber is None:
            return LinkOutput(
                success=False,
                errors=[
                    ValidationError("NOT_FOUND", "No subscription found with this email", "email")
                ],
            )

        token = issue_token(
            tokens,
            email,
            TokenPurpose.MANAGE,
            timedelta(minutes=config.manage_ttl_minutes),
            now,
        )
    except Exception:
        logger.exception("Failed to issue %s link for %s", kind, email)
        return LinkOutput(
            success=False, errors=_internal_error("INTERNAL", "Failed to generate token")
        )

    delivered = False
    if email_sender is not None:
        if kind == "manage":
            url = build_manage_url(config.base_url, email, token.token, config.manage_page)
            delivered = email_sender.send_manage_link_email(
                email, subscriber.display_name, url, config.site_name
            )
        else:
            url = build_unsubscribe_url(
                config.base_url, email, token.token, config.unsubscribe_page
            )
            delivered = email_sender.send_unsubscribe_link_email(
                email, subscriber.display_name, url, config.site_name
            )

    if not delivered:
        logger.warning("%s link email to %s was not delivered", kind.capitalize(), email)

    return LinkOutput(success=True, message=MSG_LINK_SENT, email_sent=delivered)


def run_request_manage_link(
    inp: ManageLinkInput,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    email_sender: NewsletterEmailSenderPort | None = None,
    config: NewsletterConfig | None = None,
    now: datetime | None = None,
) -> LinkOutput:
    """
    Issue a manage token and email the manage-preferences link.

    Any earlier token for the address stops working.
    """
    return _run_link_request(
        inp.email,
        repo,
        tokens,
        kind="manage",
        email_sender=email_sender,
        config=config or NewsletterConfig(),
        now=now or datetime.now(UTC),
    )


def run_request_unsubscribe_link(
    inp: UnsubscribeLinkInput,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    email_sender: NewsletterEmailSenderPort | None = None,
    config: NewsletterConfig | None = None,
    now: datetime | None = None,
) -> LinkOutput:
    """Issue a manage token and email the unsubscribe page link."""
    return _run_link_request(
        inp.email,
        repo,
        tokens,
        kind="unsubscribe",
        email_sender=email_sender,
        config=config or NewsletterConfig(),
        now=now or datetime.now(UTC),
    )


def run_get_preferences(
    inp: GetPreferencesInput,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    now: datetime | None = None,
) -> PreferencesOutput:
    """
    Read current preferences for the manage page.

    The token is checked but not consumed.
    """
    email = normalize_email(inp.email)

    try:
        if not is_token_live(tokens, email, inp.token, TokenPurpose.MANAGE, now):
            return PreferencesOutput(
                success=False,
                errors=[ValidationError("INVALID_TOKEN", "Invalid or expired token", "token")],
            )

        subscriber = repo.get_by_email(email)
        if subscriber is None:
            return PreferencesOutput(
                success=False,
                errors=[ValidationError("NOT_FOUND", "Subscriber not found", "email")],
            )
        preference = repo.get_preference(subscriber.id)
    except Exception:
        logger.exception("Failed to fetch preferences for %s", email)
        return PreferencesOutput(
            success=False, errors=_internal_error("INTERNAL", "Failed to fetch preferences")
        )

    return PreferencesOutput(
        success=True,
        email=subscriber.email,
        name=subscriber.name,
        frequency=preference.frequency if preference else Frequency.WEEKLY,
        categories=list(preference.categories) if preference else [],
        no_emails=preference.no_emails if preference else False,
        status=subscriber.status,
    )


def run_update_preferences(
    inp: UpdatePreferencesInput,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    config: NewsletterConfig | None = None,
    now: datetime | None = None,
) -> UpdatePreferencesOutput:
    """
    Apply a partial preference update authorized by a manage token.

    Input is validated before the token is consumed, so a rejected update
    leaves the link usable.
    """
    cfg = config or NewsletterConfig()
    if now is None:
        now = datetime.now(UTC)
    email = normalize_email(inp.email)

    errors: list[ValidationError] = []
    if inp.frequency is not None:
        errors += validate_frequency(inp.frequency)
    if inp.categories is not None:
        errors += validate_categories(
            inp.categories, list(cfg.category_labels), allow_empty=True
        )
    if errors:
        return UpdatePreferencesOutput(success=False, errors=errors)

    try:
        subscriber = repo.get_by_email(email)
        preference: SubscriberPreference | None = None
        if subscriber is not None:
            preference = repo.get_preference(subscriber.id) or SubscriberPreference(
                subscriber_id=subscriber.id
            )
            apply_preferences(
                subscriber,
                preference,
                now,
                frequency=parse_frequency(inp.frequency),
                categories=inp.categories,
                no_emails=inp.no_emails,
            )
            if not preference.categories and not preference.no_emails:
                return UpdatePreferencesOutput(
                    success=False,
                    errors=[
                        ValidationError(
                            "MISSING_CATEGORIES",
                            "Please select at least one category",
                            "categories",
                        )
                    ],
                )

        consumed = consume_token(tokens, email, inp.token, TokenPurpose.MANAGE, now)
        if not consumed.valid:
            return UpdatePreferencesOutput(
                success=False,
                errors=[ValidationError("INVALID_TOKEN", "Invalid or expired token", "token")],
            )
        if subscriber is None or preference is None:
            return UpdatePreferencesOutput(
                success=False,
                errors=[ValidationError("NOT_FOUND", "Subscriber not found", "email")],
            )

        repo.save(subscriber, preference)
    except Exception:
        logger.exception("Failed to update preferences for %s", email)
        return UpdatePreferencesOutput(
            success=False, errors=_internal_error("INTERNAL", "Failed to update preferences")
        )

    return UpdatePreferencesOutput(success=True, message="Preferences updated successfully")


def run_unsubscribe(
    inp: UnsubscribeInput,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    *,
    email_sender: NewsletterEmailSenderPort | None = None,
    config: NewsletterConfig | None = None,
    now: datetime | None = None,
) -> UnsubscribeOutput:
    """
    Unsubscribe with a manage token and record the reason.

    The consumption deletes the token; nothing else touches it.
    """
    cfg = config or NewsletterConfig()
    if now is None:
        now = datetime.now(UTC)
    email = normalize_email(inp.email)

    try:
        consumed = consume_token(tokens, email, inp.token, TokenPurpose.MANAGE, now)
        if not consumed.valid:
            return UnsubscribeOutput(
                success=False,
                errors=[
                    ValidationError(
                        "INVALID_TOKEN", "Invalid or expired unsubscribe link", "token"
                    )
                ],
            )

        subscriber = repo.get_by_email(email)
        if subscriber is None:
            return UnsubscribeOutput(
                success=False,
                errors=[ValidationError("NOT_FOUND", "Subscriber not found", "email")],
            )

        if subscriber.status == SubscriberStatus.UNSUBSCRIBED:
            return UnsubscribeOutput(
                success=True, message=MSG_UNSUBSCRIBED, already_unsubscribed=True
            )

        if not can_transition(subscriber.status, SubscriberStatus.UNSUBSCRIBED):
            return UnsubscribeOutput(
                success=False,
                errors=_internal_error("INVALID_STATE", "Cannot unsubscribe in current state"),
            )

        reason = inp.reason.strip() if inp.reason and inp.reason.strip() else None
        unsubscribe_subscriber(subscriber, now)
        repo.record_unsubscribe(
            subscriber,
            UnsubscribeLog(
                email=subscriber.email,
                reason=reason or DEFAULT_UNSUBSCRIBE_REASON,
                subscriber_id=subscriber.id,
                unsubscribed_at=now,
            ),
        )
    except Exception:
        logger.exception("Failed to unsubscribe %s", email)
        return UnsubscribeOutput(
            success=False, errors=_internal_error("INTERNAL", "Failed to unsubscribe")
        )

    warning = None
    if email_sender is not None and not email_sender.send_unsubscribe_confirmation_email(
        subscriber.email, subscriber.display_name, cfg.site_name
    ):
        logger.warning("Unsubscribe confirmation to %s was not delivered", subscriber.email)
        warning = WARNING_DELIVERY

    return UnsubscribeOutput(success=True, message=MSG_UNSUBSCRIBED, warning=warning)


def run_add_subscriber(
    inp: AddSubscriberInput,
    repo: SubscriberRepoPort,
    *,
    now: datetime | None = None,
) -> AddSubscriberOutput:
    """
    Admin add: record a PENDING subscriber without issuing a token.
    """
    if now is None:
        now = datetime.now(UTC)

    validation = validate_email(inp.email)
    if not validation.is_valid or validation.normalized_email is None:
        return AddSubscriberOutput(
            success=False,
            errors=[ValidationError("INVALID_EMAIL", "Invalid email address", "email")],
        )
    email = validation.normalized_email
    name = inp.name.strip() if inp.name and inp.name.strip() else None

    try:
        existing = repo.get_by_email(email)
        if existing is not None and existing.status == SubscriberStatus.CONFIRMED:
            return AddSubscriberOutput(
                success=False,
                errors=[ValidationError("ALREADY_SUBSCRIBED", "Already subscribed", "email")],
            )

        if existing is None:
            subscriber = Subscriber(email=email, name=name or default_name(email), created_at=now)
        else:
            subscriber = existing
            subscriber.status = SubscriberStatus.PENDING
            if name:
                subscriber.name = name
        repo.save(subscriber)
    except Exception:
        logger.exception("Admin add failed for %s", email)
        return AddSubscriberOutput(
            success=False, errors=_internal_error("INTERNAL", "Failed to subscribe")
        )

    return AddSubscriberOutput(success=True, message="Successfully subscribed!", email=email)


NewsletterInput = (
    SubscribeInput
    | ConfirmInput
    | ManageLinkInput
    | UnsubscribeLinkInput
    | GetPreferencesInput
    | UpdatePreferencesInput
    | UnsubscribeInput
    | AddSubscriberInput
)


def run(
    inp: NewsletterInput,
    *,
    repo: SubscriberRepoPort,
    tokens: TokenStorePort,
    email_sender: NewsletterEmailSenderPort | None = None,
    config: NewsletterConfig | None = None,
    now: datetime | None = None,
) -> (
    SubscribeOutput
    | ConfirmOutput
    | LinkOutput
    | PreferencesOutput
    | UpdatePreferencesOutput
    | UnsubscribeOutput
    | AddSubscriberOutput
):
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        repo: Subscriber repository port (Required)
        tokens: Verification token store (Required)
        email_sender: Email sender port (Optional)
        config: Configuration (Optional)
        now: Current time (for testing)

    Returns:
        Operation result
    """
    if isinstance(inp, SubscribeInput):
        return run_subscribe(
            inp, repo, tokens, email_sender=email_sender, config=config, now=now
        )
    elif isinstance(inp, ConfirmInput):
        return run_confirm(inp, repo, tokens, email_sender=email_sender, config=config, now=now)
    elif isinstance(inp, ManageLinkInput):
        return run_request_manage_link(
            inp, repo, tokens, email_sender=email_sender, config=config, now=now
        )
    elif isinstance(inp, UnsubscribeLinkInput):
        return run_request_unsubscribe_link(
            inp, repo, tokens, email_sender=email_sender, config=config, now=now
        )
    elif isinstance(inp, GetPreferencesInput):
        return run_get_preferences(inp, repo, tokens, now=now)
    elif isinstance(inp, UpdatePreferencesInput):
        return run_update_preferences(inp, repo, tokens, config=config, now=now)
    elif isinstance(inp, UnsubscribeInput):
        return run_unsubscribe(
            inp, repo, tokens, email_sender=email_sender, config=config, now=now
        )
    elif isinstance(inp, AddSubscriberInput):
        return run_add_subscriber(inp, repo, now=now)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
