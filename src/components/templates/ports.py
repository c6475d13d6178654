"""
Templates component ports.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from src.components.templates.models import EmailTemplate


class TemplateRepoPort(Protocol):
    """Email template repository interface."""

    def get_by_id(self, template_id: UUID) -> EmailTemplate | None:
        ...

    def get_by_name(self, name: str) -> EmailTemplate | None:
        ...

    def list_all(self, category: str | None = None) -> list[EmailTemplate]:
        """List templates, newest first."""
        ...

    def save(self, template: EmailTemplate) -> EmailTemplate:
        """Insert or update."""
        ...

    def delete_many(self, template_ids: Sequence[UUID]) -> int:
        """Delete templates. Returns count deleted."""
        ...


class TemplateUsagePort(Protocol):
    """Answers which newsletters reference a template."""

    def count_by_template(self, template_id: UUID) -> int:
        """Number of newsletters created from the template."""
        ...
