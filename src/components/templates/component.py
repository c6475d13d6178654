"""
Templates component.

CRUD for reusable email templates.

Key behaviors:
- Template names are unique (create and rename both check)
- Category defaults to "general"
- A template referenced by any newsletter cannot be deleted
- Bulk delete is all-or-nothing on the in-use check
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from src.components.templates.models import (
    DEFAULT_CATEGORY,
    CreateTemplateInput,
    DeleteTemplateInput,
    DeleteTemplatesInput,
    DeleteTemplatesOutput,
    EmailTemplate,
    TemplateOutput,
    UpdateTemplateInput,
)
from src.components.templates.ports import TemplateRepoPort, TemplateUsagePort

logger = logging.getLogger(__name__)

MSG_MISSING_FIELDS = "Missing required fields: name, subject, content"
MSG_DUPLICATE_NAME = "A template with this name already exists"
MSG_NOT_FOUND = "Template not found"


@dataclass(frozen=True)
class DefaultTemplate:
    name: str
    subject: str
    category: str
    preview: str
    content: str


DEFAULT_TEMPLATES: tuple[DefaultTemplate, ...] = (
    DefaultTemplate(
        name="Modern Newsletter",
        subject="Weekly Update",
        category="newsletter",
        preview="Clean weekly digest with a headline story and quick links",
        content=(
            "<h1>Hi {{first_name}},</h1>"
            "<p>Here is what happened this week.</p>"
            "<h2>Top story</h2><p>Write your headline story here.</p>"
            "<h2>Quick links</h2><ul><li>Link one</li><li>Link two</li></ul>"
            '<p><a href="{{unsubscribe_url}}">Unsubscribe</a></p>'
        ),
    ),
    DefaultTemplate(
        name="Monthly Summary",
        subject="Your Monthly Summary",
        category="newsletter",
        preview="Data-driven monthly performance summary with metrics",
        content=(
            "<h1>Your month in review, {{user_name}}</h1>"
            "<p>Highlights and numbers from the past month.</p>"
            "<table><tr><td>Metric</td><td>Value</td></tr></table>"
            '<p><a href="{{unsubscribe_url}}">Unsubscribe</a></p>'
        ),
    ),
    DefaultTemplate(
        name="Promotion Campaign",
        subject="Exclusive Offer Just for You",
        category="marketing",
        preview="Promotional email with a single call to action",
        content=(
            "<h1>{{first_name}}, this one is for you</h1>"
            "<p>Describe the offer here.</p>"
            '<p><a href="#">Claim offer</a></p>'
            '<p><a href="{{unsubscribe_url}}">Unsubscribe</a></p>'
        ),
    ),
    DefaultTemplate(
        name="Welcome Series",
        subject="Welcome! Let's get started",
        category="welcome",
        preview="Warm, friendly onboarding email for new subscribers",
        content=(
            "<h1>Welcome aboard, {{first_name}}!</h1>"
            "<p>Thanks for joining. Here is what to expect.</p>"
            '<p><a href="{{unsubscribe_url}}">Unsubscribe</a></p>'
        ),
    ),
)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


# --- Run Handlers ---


def run_create_template(
    inp: CreateTemplateInput,
    repo: TemplateRepoPort,
    *,
    now: datetime | None = None,
) -> TemplateOutput:
    """Create a template with a unique name."""
    if now is None:
        now = datetime.now(UTC)

    name = _clean(inp.name)
    if not name or not _clean(inp.subject) or not (inp.content or "").strip():
        return TemplateOutput(
            success=False, error=MSG_MISSING_FIELDS, error_code="VALIDATION_ERROR"
        )

    try:
        if repo.get_by_name(name) is not None:
            return TemplateOutput(
                success=False, error=MSG_DUPLICATE_NAME, error_code="DUPLICATE_NAME"
            )

        template = EmailTemplate(
            name=name,
            subject=inp.subject.strip(),
            content=inp.content,
            preview=_clean(inp.preview),
            category=_clean(inp.category) or DEFAULT_CATEGORY,
            author_id=inp.author_id,
            created_at=now,
            updated_at=now,
        )
        saved = repo.save(template)
    except Exception:
        logger.exception("Failed to create template %r", name)
        return TemplateOutput(
            success=False, error="Failed to create template", error_code="INTERNAL"
        )

    return TemplateOutput(success=True, template=saved)


def run_update_template(
    inp: UpdateTemplateInput,
    repo: TemplateRepoPort,
    *,
    now: datetime | None = None,
) -> TemplateOutput:
    """Partially update a template; renaming onto an existing name is rejected."""
    if now is None:
        now = datetime.now(UTC)

    try:
        template = repo.get_by_id(inp.template_id)
        if template is None:
            return TemplateOutput(success=False, error=MSG_NOT_FOUND, error_code="NOT_FOUND")

        name = _clean(inp.name)
        if name and name != template.name:
            clash = repo.get_by_name(name)
            if clash is not None and clash.id != template.id:
                return TemplateOutput(
                    success=False, error=MSG_DUPLICATE_NAME, error_code="DUPLICATE_NAME"
                )
            template.name = name

        subject = _clean(inp.subject)
        if subject:
            template.subject = subject
        if inp.content is not None and inp.content.strip():
            template.content = inp.content
        if inp.preview is not None:
            template.preview = _clean(inp.preview)
        category = _clean(inp.category)
        if category:
            template.category = category
        template.updated_at = now

        saved = repo.save(template)
    except Exception:
        logger.exception("Failed to update template %s", inp.template_id)
        return TemplateOutput(
            success=False, error="Failed to update template", error_code="INTERNAL"
        )

    return TemplateOutput(success=True, template=saved)


def run_delete_template(
    inp: DeleteTemplateInput,
    repo: TemplateRepoPort,
    usage: TemplateUsagePort,
) -> TemplateOutput:
    """Delete a template unless a newsletter references it."""
    try:
        template = repo.get_by_id(inp.template_id)
        if template is None:
            return TemplateOutput(success=False, error=MSG_NOT_FOUND, error_code="NOT_FOUND")

        in_use = usage.count_by_template(template.id)
        if in_use:
            return TemplateOutput(
                success=False,
                error=(
                    f"Cannot delete template. It is being used by {in_use} newsletter(s)"
                ),
                error_code="IN_USE",
            )

        repo.delete_many([template.id])
    except Exception:
        logger.exception("Failed to delete template %s", inp.template_id)
        return TemplateOutput(
            success=False, error="Failed to delete template", error_code="INTERNAL"
        )

    return TemplateOutput(success=True, message="Template deleted successfully")


def run_delete_templates(
    inp: DeleteTemplatesInput,
    repo: TemplateRepoPort,
    usage: TemplateUsagePort,
) -> DeleteTemplatesOutput:
    """Bulk delete; nothing is deleted if any template is in use."""
    ids = list(dict.fromkeys(inp.template_ids))
    if not ids:
        return DeleteTemplatesOutput(
            success=False, error="Invalid template IDs", error_code="VALIDATION_ERROR"
        )

    try:
        in_use = [tid for tid in ids if usage.count_by_template(tid) > 0]
        if in_use:
            return DeleteTemplatesOutput(
                success=False,
                error=(
                    f"Cannot delete {len(in_use)} template(s) that are being used by newsletters"
                ),
                error_code="IN_USE",
            )

        deleted = repo.delete_many(ids)
    except Exception:
        logger.exception("Failed to delete templates")
        return DeleteTemplatesOutput(
            success=False, error="Failed to delete templates", error_code="INTERNAL"
        )

    return DeleteTemplatesOutput(
        success=True, deleted=deleted, message=f"Deleted {deleted} template(s)"
    )


def list_templates(repo: TemplateRepoPort, category: str | None = None) -> list[EmailTemplate]:
    return repo.list_all(category=category)


def get_template(repo: TemplateRepoPort, template_id: UUID) -> EmailTemplate | None:
    return repo.get_by_id(template_id)


def seed_default_templates(
    repo: TemplateRepoPort,
    author_id: UUID | None = None,
    *,
    now: datetime | None = None,
) -> int:
    """
    Insert the built-in templates that are not present yet (matched by name).

    Returns:
        Number of templates created
    """
    created = 0
    for default in DEFAULT_TEMPLATES:
        if repo.get_by_name(default.name) is not None:
            continue
        result = run_create_template(
            CreateTemplateInput(
                name=default.name,
                subject=default.subject,
                content=default.content,
                preview=default.preview,
                category=default.category,
                author_id=author_id,
            ),
            repo,
            now=now,
        )
        if result.success:
            created += 1
            logger.info("Seeded template %r", default.name)
    return created
