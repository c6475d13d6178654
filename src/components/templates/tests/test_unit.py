"""
Templates component unit tests.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from src.adapters.memory import InMemoryNewsletterRepo, InMemoryTemplateRepo
from src.components.broadcast import Newsletter
from src.components.templates import (
    DEFAULT_TEMPLATES,
    CreateTemplateInput,
    DeleteTemplateInput,
    DeleteTemplatesInput,
    UpdateTemplateInput,
    list_templates,
    run_create_template,
    run_delete_template,
    run_delete_templates,
    run_update_template,
    seed_default_templates,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def repo() -> InMemoryTemplateRepo:
    return InMemoryTemplateRepo()


@pytest.fixture
def usage() -> InMemoryNewsletterRepo:
    return InMemoryNewsletterRepo()


def create(repo, name: str = "Weekly", **kwargs):
    return run_create_template(
        CreateTemplateInput(
            name=name,
            subject=kwargs.get("subject", "Hello {{first_name}}"),
            content=kwargs.get("content", "<p>Body</p>"),
            category=kwargs.get("category"),
        ),
        repo,
        now=NOW,
    )


class TestCreateTemplate:
    def test_create_defaults_category(self, repo) -> None:
        result = create(repo)

        assert result.success is True
        assert result.template.category == "general"
        assert repo.get_by_name("Weekly") is not None

    def test_missing_fields(self, repo) -> None:
        result = create(repo, subject="  ")

        assert result.success is False
        assert result.error == "Missing required fields: name, subject, content"

    def test_duplicate_name(self, repo) -> None:
        create(repo)

        result = create(repo)

        assert result.success is False
        assert result.error == "A template with this name already exists"
        assert len(list_templates(repo)) == 1


class TestUpdateTemplate:
    def test_partial_update(self, repo) -> None:
        template = create(repo).template

        result = run_update_template(
            UpdateTemplateInput(template.id, subject="New subject"), repo, now=NOW
        )

        assert result.success is True
        stored = repo.get_by_id(template.id)
        assert stored.subject == "New subject"
        assert stored.content == "<p>Body</p>"

    def test_unknown_template(self, repo) -> None:
        result = run_update_template(UpdateTemplateInput(uuid4(), name="x"), repo)

        assert result.error == "Template not found"

    def test_rename_onto_existing_name(self, repo) -> None:
        create(repo, name="A")
        b = create(repo, name="B").template

        result = run_update_template(UpdateTemplateInput(b.id, name="A"), repo)

        assert result.error_code == "DUPLICATE_NAME"
        assert repo.get_by_id(b.id).name == "B"


class TestDeleteTemplate:
    def test_delete_unused(self, repo, usage) -> None:
        template = create(repo).template

        result = run_delete_template(DeleteTemplateInput(template.id), repo, usage)

        assert result.success is True
        assert repo.get_by_id(template.id) is None

    def test_in_use_is_protected(self, repo, usage) -> None:
        template = create(repo).template
        usage.save(Newsletter(title="t", subject="s", content="c", template_id=template.id))
        usage.save(Newsletter(title="t", subject="s", content="c", template_id=template.id))

        result = run_delete_template(DeleteTemplateInput(template.id), repo, usage)

        assert result.success is False
        assert result.error == "Cannot delete template. It is being used by 2 newsletter(s)"
        assert repo.get_by_id(template.id) is not None

    def test_bulk_delete(self, repo, usage) -> None:
        ids = tuple(create(repo, name=n).template.id for n in ("A", "B", "C"))

        result = run_delete_templates(DeleteTemplatesInput(ids[:2]), repo, usage)

        assert result.success is True
        assert result.deleted == 2
        assert result.message == "Deleted 2 template(s)"
        assert [t.name for t in list_templates(repo)] == ["C"]

    def test_bulk_delete_blocked_by_one_in_use(self, repo, usage) -> None:
        a = create(repo, name="A").template
        b = create(repo, name="B").template
        usage.save(Newsletter(title="t", subject="s", content="c", template_id=b.id))

        result = run_delete_templates(DeleteTemplatesInput((a.id, b.id)), repo, usage)

        assert result.success is False
        assert result.error_code == "IN_USE"
        assert len(list_templates(repo)) == 2

    def test_bulk_delete_empty(self, repo, usage) -> None:
        result = run_delete_templates(DeleteTemplatesInput(()), repo, usage)

        assert result.error == "Invalid template IDs"


class TestSeed:
    def test_seed_is_idempotent(self, repo) -> None:
        assert seed_default_templates(repo, now=NOW) == len(DEFAULT_TEMPLATES)
        assert seed_default_templates(repo, now=NOW) == 0
        assert len(list_templates(repo)) == len(DEFAULT_TEMPLATES)

    def test_list_by_category(self, repo) -> None:
        seed_default_templates(repo, now=NOW)

        marketing = list_templates(repo, category="marketing")

        assert [t.name for t in marketing] == ["Promotion Campaign"]
