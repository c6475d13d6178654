"""
Admin newsletter API endpoints.

Endpoints:
- GET /api/admin/subscribers - List subscribers (search, status filter)
- POST /api/admin/subscribers - Add a subscriber
- POST /api/admin/subscribers/delete - Bulk delete subscribers
- GET /api/admin/subscribers/export/csv - Export CSV
- GET /api/admin/subscribers/{id} - Subscriber details
- GET /api/admin/stats - Dashboard statistics
- POST /api/admin/newsletters/send - Broadcast a newsletter
- GET /api/admin/newsletters - List newsletters
- GET /api/admin/newsletters/{id} - Newsletter details
- GET /api/admin/diagnostic/email-config - Email settings (no secrets)
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, StreamingResponse

from src.adapters.orm import (
    SQLEmailLogRepo,
    SQLNewsletterRepo,
    SQLSubscriberRepo,
    SQLTemplateRepo,
)
from src.adapters.smtp_email import SMTPConfig
from src.api.deps import (
    Settings,
    get_broadcast_config,
    get_current_admin,
    get_email_adapter,
    get_email_log_repo,
    get_newsletter_repo,
    get_settings,
    get_smtp_config,
    get_subscriber_repo,
    get_template_repo,
)
from src.api.schemas import (
    AddSubscriberRequest,
    DeleteIdsRequest,
    NewsletterModel,
    SendNewsletterRequest,
    SubscriberModel,
    error_response,
)
from src.components.admin import AdminUser
from src.components.broadcast import (
    BroadcastConfig,
    SendNewsletterInput,
    get_newsletter,
    list_newsletters,
    run_send_newsletter,
)
from src.components.dashboard import run_dashboard_stats
from src.components.newsletter import AddSubscriberInput, SubscriberStatus, run_add_subscriber
from src.core.ports.email import EmailPort

logger = logging.getLogger(__name__)

router = APIRouter()

StatusFilter = Literal["PENDING", "CONFIRMED", "UNSUBSCRIBED", "BOUNCED"]

EXPORT_LIMIT = 100_000


# --- Subscribers ---


@router.get("/subscribers", summary="List subscribers")
def list_subscribers(
    search: str | None = Query(None, description="Match email or name"),
    status_filter: StatusFilter | None = Query(None, alias="status"),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
) -> dict[str, Any]:
    status_enum = SubscriberStatus(status_filter) if status_filter else None
    subscribers = repo.list_subscribers(
        search=search, status=status_enum, limit=limit, offset=offset
    )
    return {
        "success": True,
        "subscribers": [
            SubscriberModel.from_entity(s).model_dump(mode="json") for s in subscribers
        ],
        "total": repo.count(status_enum),
        "offset": offset,
        "limit": limit,
    }


@router.post("/subscribers", summary="Add a subscriber", response_model=None)
def add_subscriber(
    body: AddSubscriberRequest,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
) -> dict[str, Any] | JSONResponse:
    """Record a pending subscriber; no confirmation email is sent."""
    result = run_add_subscriber(AddSubscriberInput(email=body.email, name=body.name), repo)
    if not result.success:
        return error_response(result.error, result.error_code)
    logger.info("Admin %s added subscriber %s", admin.email, result.email)
    return {"success": True, "message": result.message, "email": result.email}


@router.post("/subscribers/delete", summary="Delete subscribers", response_model=None)
def delete_subscribers(
    body: DeleteIdsRequest,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
) -> dict[str, Any] | JSONResponse:
    if not body.ids:
        return error_response("Invalid subscriber IDs", "VALIDATION_ERROR")

    deleted = repo.delete_many(body.ids)
    logger.info("Admin %s deleted %d subscriber(s)", admin.email, deleted)
    return {"success": True, "deleted": deleted, "message": f"Deleted {deleted} subscriber(s)"}


@router.get("/subscribers/export/csv", summary="Export subscribers to CSV")
def export_subscribers_csv(
    status_filter: StatusFilter | None = Query(None, alias="status"),
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
) -> StreamingResponse:
    """Email, name, status and timestamps. Tokens are never exported."""
    status_enum = SubscriberStatus(status_filter) if status_filter else None
    subscribers = repo.list_subscribers(status=status_enum, limit=EXPORT_LIMIT)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(
        ["email", "name", "status", "created_at", "confirmed_at", "unsubscribed_at"]
    )
    for subscriber in subscribers:
        writer.writerow([
            subscriber.email,
            subscriber.name or "",
            subscriber.status.value,
            subscriber.created_at.isoformat(),
            subscriber.confirmed_at.isoformat() if subscriber.confirmed_at else "",
            subscriber.unsubscribed_at.isoformat() if subscriber.unsubscribed_at else "",
        ])

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=newsletter_subscribers.csv"},
    )


@router.get("/subscribers/{subscriber_id}", summary="Get subscriber details")
def get_subscriber(
    subscriber_id: UUID,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLSubscriberRepo = Depends(get_subscriber_repo),
) -> dict[str, Any]:
    subscriber = repo.get_by_id(subscriber_id)
    if not subscriber:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscriber not found",
        )

    preference = repo.get_preference(subscriber.id)
    return {
        "success": True,
        "subscriber": SubscriberModel.from_entity(subscriber).model_dump(mode="json"),
        "preferences": {
            "frequency": preference.frequency.value,
            "categories": preference.categories,
            "no_emails": preference.no_emails,
        }
        if preference
        else None,
    }


# --- Stats ---


@router.get("/stats", summary="Dashboard statistics", response_model=None)
def get_stats(
    admin: AdminUser = Depends(get_current_admin),
    subscribers: SQLSubscriberRepo = Depends(get_subscriber_repo),
    email_logs: SQLEmailLogRepo = Depends(get_email_log_repo),
    newsletters: SQLNewsletterRepo = Depends(get_newsletter_repo),
) -> dict[str, Any] | JSONResponse:
    stats = run_dashboard_stats(subscribers, email_logs, newsletters)
    if not stats.success:
        return error_response(stats.error, "INTERNAL")

    return {
        "success": True,
        "subscriberCount": stats.subscriber_count,
        "activeSubscribers": stats.active_subscribers,
        "openRate": stats.open_rate,
        "clickRate": stats.click_rate,
        "weeklyStats": [
            {"name": w.name, "subscribers": w.subscribers, "opens": w.opens, "clicks": w.clicks}
            for w in stats.weekly_stats
        ],
    }


# --- Newsletters ---


@router.post("/newsletters/send", summary="Send a newsletter", response_model=None)
def send_newsletter(
    body: SendNewsletterRequest,
    admin: AdminUser = Depends(get_current_admin),
    subscribers: SQLSubscriberRepo = Depends(get_subscriber_repo),
    newsletters: SQLNewsletterRepo = Depends(get_newsletter_repo),
    email_logs: SQLEmailLogRepo = Depends(get_email_log_repo),
    templates: SQLTemplateRepo = Depends(get_template_repo),
    email: EmailPort = Depends(get_email_adapter),
    config: BroadcastConfig = Depends(get_broadcast_config),
) -> dict[str, Any] | JSONResponse:
    """Send to the chosen audience; per-recipient failures are reported, not raised."""
    result = run_send_newsletter(
        SendNewsletterInput(
            subject=body.subject,
            content=body.content,
            audience=body.audience,
            author_id=admin.id,
            template_id=body.template_id,
            title=body.title,
        ),
        recipients=subscribers,
        newsletters=newsletters,
        email_logs=email_logs,
        email=email,
        templates=templates,
        config=config,
    )
    if not result.success:
        return error_response(result.error, result.error_code)

    return {
        "success": True,
        "newsletterId": str(result.newsletter_id),
        "sent": result.sent,
        "failed": result.failed,
        "total": result.total,
        "errors": result.failures,
        "timestamp": result.timestamp.isoformat() if result.timestamp else None,
    }


@router.get("/newsletters", summary="List newsletters")
def get_newsletters(
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin: AdminUser = Depends(get_current_admin),
    newsletters: SQLNewsletterRepo = Depends(get_newsletter_repo),
) -> dict[str, Any]:
    items = list_newsletters(newsletters, limit=limit, offset=offset)
    return {
        "success": True,
        "newsletters": [NewsletterModel.from_entity(n).model_dump(mode="json") for n in items],
    }


@router.get("/newsletters/{newsletter_id}", summary="Get newsletter details")
def get_newsletter_detail(
    newsletter_id: UUID,
    admin: AdminUser = Depends(get_current_admin),
    newsletters: SQLNewsletterRepo = Depends(get_newsletter_repo),
) -> dict[str, Any]:
    newsletter = get_newsletter(newsletters, newsletter_id)
    if not newsletter:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Newsletter not found",
        )
    return {
        "success": True,
        "newsletter": NewsletterModel.from_entity(newsletter).model_dump(mode="json"),
    }


# --- Diagnostics ---


@router.get("/diagnostic/email-config", summary="Email configuration summary")
def email_config(
    admin: AdminUser = Depends(get_current_admin),
    settings: Settings = Depends(get_settings),
    smtp: SMTPConfig = Depends(get_smtp_config),
) -> dict[str, Any]:
    """Which backend is active and how SMTP is configured. Passwords are never shown."""
    return {"success": True, "backend": settings.email_backend, **smtp.describe()}
