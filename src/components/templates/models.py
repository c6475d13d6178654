"""
Templates component models.

Reusable email templates for newsletter broadcasts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

DEFAULT_CATEGORY = "general"


@dataclass
class EmailTemplate:
    """Named email template. Names are unique."""

    name: str
    subject: str
    content: str
    author_id: UUID | None = None
    preview: str | None = None
    category: str = DEFAULT_CATEGORY
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


# --- Input Models ---


@dataclass(frozen=True)
class CreateTemplateInput:
    name: str
    subject: str
    content: str
    author_id: UUID | None = None
    preview: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class UpdateTemplateInput:
    """Partial update; None means unchanged."""

    template_id: UUID
    name: str | None = None
    subject: str | None = None
    content: str | None = None
    preview: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class DeleteTemplateInput:
    template_id: UUID


@dataclass(frozen=True)
class DeleteTemplatesInput:
    template_ids: tuple[UUID, ...]


# --- Output Models ---


@dataclass(frozen=True)
class TemplateOutput:
    """Result of a single-template operation."""

    success: bool
    template: EmailTemplate | None = None
    message: str | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class DeleteTemplatesOutput:
    success: bool
    deleted: int = 0
    message: str | None = None
    error: str | None = None
    error_code: str | None = None


# --- Error Types ---


class TemplateError(Exception):
    """Base template error."""

    pass
