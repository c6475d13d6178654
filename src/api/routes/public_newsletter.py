"""
Public newsletter endpoints for subscription management.

Endpoints:
- POST /api/subscribe - Subscribe (or update a confirmed subscription)
- GET /confirm, GET /api/confirm-subscription - Confirm (redirect)
- POST /api/preferences/manage-link - Email a manage-preferences link
- GET /api/preferences - Read preferences with a manage token
- PUT /api/preferences - Update preferences (consumes the token)
- POST /api/unsubscribe/link - Email an unsubscribe link
- POST /api/unsubscribe - Unsubscribe (consumes the token)
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from src.adapters.newsletter_email import NewsletterEmailSender
from src.adapters.orm import SQLSubscriberRepo, SQLTokenStore
from src.api.deps import (
    get_client_ip,
    get_newsletter_config,
    get_newsletter_email_sender,
    get_rate_limiter,
    get_subscriber_repo,
    get_token_store,
)
from src.api.schemas import (
    EmailRequest,
    SubscribeRequest,
    UnsubscribeRequest,
    UpdatePreferencesRequest,
    error_response,
)
from src.app_shell.rate_limit import RateLimiter
from src.components.newsletter import (
    MSG_LINK_SENT,
    ConfirmInput,
    GetPreferencesInput,
    ManageLinkInput,
    NewsletterConfig,
    SubscribeInput,
    UnsubscribeInput,
    UnsubscribeLinkInput,
    UpdatePreferencesInput,
    run_confirm,
    run_get_preferences,
    run_request_manage_link,
    run_request_unsubscribe_link,
    run_subscribe,
    run_unsubscribe,
    run_update_preferences,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Subscribe ---


@router.post("/api/subscribe", summary="Subscribe to newsletter", response_model=None)
def subscribe(
    body: SubscribeRequest,
    request: Request,
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
    tokens: SQLTokenStore = Depends(get_token_store),
    email_sender: NewsletterEmailSender = Depends(get_newsletter_email_sender),
    config: NewsletterConfig = Depends(get_newsletter_config),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> dict[str, Any] | JSONResponse:
    """
    Double opt-in subscribe.

    A confirmed subscriber's preferences are updated in place (no new
    confirmation); anyone else is (re)set to pending and emailed a link.
    """
    if not rate_limiter.check_subscribe(get_client_ip(request)):
        return error_response("Too many subscription attempts. Try again later.", "RATE_LIMIT")

    result = run_subscribe(
        SubscribeInput(
            email=body.email,
            name=body.name,
            frequency=body.frequency or "",
            categories=tuple(body.categories),
        ),
        repo,
        tokens,
        email_sender=email_sender,
        config=config,
    )
    if not result.success:
        return error_response(result.error, result.error_code)

    response: dict[str, Any] = {
        "success": True,
        "message": result.message,
        "email": result.email,
        "is_update": result.is_update,
    }
    if result.warning:
        response["warning"] = result.warning
    return response


# --- Confirm ---


def _confirmation_redirect(config: NewsletterConfig, params: dict[str, str]) -> RedirectResponse:
    url = f"{config.base_url.rstrip('/')}{config.confirmation_page}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=307)


@router.get("/confirm", summary="Confirm subscription (emailed link)")
@router.get("/api/confirm-subscription", summary="Confirm subscription (emailed link)")
def confirm_subscription(
    token: str | None = None,
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
    tokens: SQLTokenStore = Depends(get_token_store),
    email_sender: NewsletterEmailSender = Depends(get_newsletter_email_sender),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> RedirectResponse:
    """Consume the confirmation token and redirect to the confirmation page."""
    if not token:
        return _confirmation_redirect(config, {"error": "missing-token"})

    result = run_confirm(
        ConfirmInput(token=token), repo, tokens, email_sender=email_sender, config=config
    )
    if not result.success:
        return _confirmation_redirect(config, {"error": result.error or "confirmation-failed"})

    params = {"confirmed": "true"}
    if result.email:
        params["email"] = result.email
    if result.name:
        params["name"] = result.name
    return _confirmation_redirect(config, params)


# --- Manage preferences ---


def _link_response(result: Any) -> dict[str, Any] | JSONResponse:
    # Unknown addresses get the same answer as known ones.
    if result.success or result.error_code == "NOT_FOUND":
        return {"success": True, "message": MSG_LINK_SENT}
    return error_response(result.error, result.error_code)


@router.post("/api/preferences/manage-link", response_model=None)
def request_manage_link(
    body: EmailRequest,
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
    tokens: SQLTokenStore = Depends(get_token_store),
    email_sender: NewsletterEmailSender = Depends(get_newsletter_email_sender),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> dict[str, Any] | JSONResponse:
    result = run_request_manage_link(
        ManageLinkInput(email=body.email), repo, tokens, email_sender=email_sender, config=config
    )
    return _link_response(result)


@router.get("/api/preferences", response_model=None)
def get_preferences(
    email: str = "",
    token: str = "",
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
    tokens: SQLTokenStore = Depends(get_token_store),
) -> dict[str, Any] | JSONResponse:
    """Show preferences for a live manage token without consuming it."""
    result = run_get_preferences(GetPreferencesInput(email=email, token=token), repo, tokens)
    if not result.success:
        return error_response(result.error, result.error_code)

    return {
        "success": True,
        "email": result.email,
        "name": result.name,
        "frequency": result.frequency.value if result.frequency else None,
        "categories": result.categories,
        "no_emails": result.no_emails,
        "status": result.status.value if result.status else None,
    }


@router.put("/api/preferences", response_model=None)
def update_preferences(
    body: UpdatePreferencesRequest,
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
    tokens: SQLTokenStore = Depends(get_token_store),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> dict[str, Any] | JSONResponse:
    result = run_update_preferences(
        UpdatePreferencesInput(
            email=body.email,
            token=body.token,
            frequency=body.frequency,
            categories=tuple(body.categories) if body.categories is not None else None,
            no_emails=body.no_emails,
        ),
        repo,
        tokens,
        config=config,
    )
    if not result.success:
        return error_response(result.error, result.error_code)
    return {"success": True, "message": result.message}


# --- Unsubscribe ---


@router.post("/api/unsubscribe/link", response_model=None)
def request_unsubscribe_link(
    body: EmailRequest,
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
    tokens: SQLTokenStore = Depends(get_token_store),
    email_sender: NewsletterEmailSender = Depends(get_newsletter_email_sender),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> dict[str, Any] | JSONResponse:
    result = run_request_unsubscribe_link(
        UnsubscribeLinkInput(email=body.email),
        repo,
        tokens,
        email_sender=email_sender,
        config=config,
    )
    return _link_response(result)


@router.post("/api/unsubscribe", response_model=None)
def unsubscribe(
    body: UnsubscribeRequest,
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
    tokens: SQLTokenStore = Depends(get_token_store),
    email_sender: NewsletterEmailSender = Depends(get_newsletter_email_sender),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> dict[str, Any] | JSONResponse:
    result = run_unsubscribe(
        UnsubscribeInput(email=body.email, token=body.token, reason=body.reason),
        repo,
        tokens,
        email_sender=email_sender,
        config=config,
    )
    if not result.success:
        return error_response(result.error, result.error_code)

    response: dict[str, Any] = {
        "success": True,
        "message": result.message,
        "already_unsubscribed": result.already_unsubscribed,
    }
    if result.warning:
        response["warning"] = result.warning
    return response
