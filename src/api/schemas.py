from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.components.broadcast import Newsletter
from src.components.newsletter import Subscriber
from src.components.templates import EmailTemplate

# --- Errors ---

STATUS_BY_CODE = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE_NAME": status.HTTP_409_CONFLICT,
    "IN_USE": status.HTTP_409_CONFLICT,
    "ALREADY_SUBSCRIBED": status.HTTP_409_CONFLICT,
    "RATE_LIMIT": status.HTTP_429_TOO_MANY_REQUESTS,
    "INTERNAL": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: str | None, code: str | None, **extra: Any) -> JSONResponse:
    """`{success: false, error, code}` with the status mapped from the error code."""
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(code or "", status.HTTP_400_BAD_REQUEST),
        content={"success": False, "error": error, "code": code, **extra},
    )


# --- Public requests ---


class SubscribeRequest(BaseModel):
    email: str = ""
    name: str | None = None
    frequency: str | None = None
    categories: list[str] = Field(default_factory=list)


class EmailRequest(BaseModel):
    email: str = ""


class UpdatePreferencesRequest(BaseModel):
    email: str = ""
    token: str = ""
    frequency: str | None = None
    categories: list[str] | None = None
    no_emails: bool | None = None


class UnsubscribeRequest(BaseModel):
    email: str = ""
    token: str = ""
    reason: str | None = None


# --- Admin requests ---


class AddSubscriberRequest(BaseModel):
    email: str = ""
    name: str | None = None


class DeleteIdsRequest(BaseModel):
    ids: list[UUID] = Field(default_factory=list)


class SendNewsletterRequest(BaseModel):
    subject: str | None = None
    content: str | None = None
    audience: str = "all"
    template_id: UUID | None = None
    title: str | None = None


class TemplateCreateRequest(BaseModel):
    name: str = ""
    subject: str = ""
    content: str = ""
    preview: str | None = None
    category: str | None = None


class TemplateUpdateRequest(BaseModel):
    name: str | None = None
    subject: str | None = None
    content: str | None = None
    preview: str | None = None
    category: str | None = None


# --- Admin views ---


class SubscriberModel(BaseModel):
    id: UUID
    email: str
    name: str | None
    status: str
    tags: list[str]
    open_count: int
    click_count: int
    created_at: datetime
    confirmed_at: datetime | None
    unsubscribed_at: datetime | None

    @classmethod
    def from_entity(cls, s: Subscriber) -> "SubscriberModel":
        return cls(
            id=s.id,
            email=s.email,
            name=s.name,
            status=s.status.value,
            tags=list(s.tags),
            open_count=s.open_count,
            click_count=s.click_count,
            created_at=s.created_at,
            confirmed_at=s.confirmed_at,
            unsubscribed_at=s.unsubscribed_at,
        )


class NewsletterModel(BaseModel):
    id: UUID
    title: str
    subject: str
    content: str
    audience: str
    status: str
    recipient_count: int
    sent_count: int
    failed_count: int
    open_count: int
    click_count: int
    template_id: UUID | None
    author_id: UUID | None
    created_at: datetime
    sent_at: datetime | None

    @classmethod
    def from_entity(cls, n: Newsletter) -> "NewsletterModel":
        return cls(
            id=n.id,
            title=n.title,
            subject=n.subject,
            content=n.content,
            audience=n.audience.value,
            status=n.status.value,
            recipient_count=n.recipient_count,
            sent_count=n.sent_count,
            failed_count=n.failed_count,
            open_count=n.open_count,
            click_count=n.click_count,
            template_id=n.template_id,
            author_id=n.author_id,
            created_at=n.created_at,
            sent_at=n.sent_at,
        )


class TemplateModel(BaseModel):
    id: UUID
    name: str
    subject: str
    content: str
    preview: str | None
    category: str
    author_id: UUID | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, t: EmailTemplate) -> "TemplateModel":
        return cls(
            id=t.id,
            name=t.name,
            subject=t.subject,
            content=t.content,
            preview=t.preview,
            category=t.category,
            author_id=t.author_id,
            created_at=t.created_at,
            updated_at=t.updated_at,
        )
