"""
Admin bootstrap wiring: rules adapter, clock and hashing around the admin component.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.adapters.auth.crypto import PasslibPasswordHasher
from src.adapters.memory import InMemoryAdminRepo
from src.app_shell.bootstrap import BootstrapRulesAdapter, bootstrap_admin
from src.components.admin import AdminUser
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def rules() -> Rules:
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def admin_repo() -> InMemoryAdminRepo:
    return InMemoryAdminRepo()


@pytest.fixture
def hasher() -> PasslibPasswordHasher:
    return PasslibPasswordHasher()


class TestBootstrapAdmin:
    def test_rules_adapter_exposes_bootstrap_section(self, rules: Rules) -> None:
        config = BootstrapRulesAdapter(rules).get_bootstrap_config()

        assert config.enabled_if_no_admins is True
        assert config.required_env_when_enabled == ["ADMIN_EMAIL", "ADMIN_PASSWORD"]

    def test_creates_hashed_admin(self, rules, admin_repo, hasher) -> None:
        result = bootstrap_admin(
            rules, admin_repo, hasher, "Owner@Example.com", "a-long-password"
        )

        assert result.created is True
        stored = admin_repo.get_by_email("owner@example.com")
        assert stored is not None
        assert stored.password_hash != "a-long-password"
        assert hasher.verify_password("a-long-password", stored.password_hash)

    def test_skips_when_admin_exists(self, rules, admin_repo, hasher) -> None:
        admin_repo.save(AdminUser(email="first@example.com", password_hash="x"))

        result = bootstrap_admin(rules, admin_repo, hasher, "second@example.com", "password123")

        assert result.created is False
        assert result.skipped_reason == "An admin account already exists"
        assert admin_repo.count() == 1

    def test_skips_without_credentials(self, rules, admin_repo, hasher) -> None:
        result = bootstrap_admin(rules, admin_repo, hasher, None, None)

        assert result.success is True
        assert result.created is False
        assert admin_repo.count() == 0

    def test_weak_password_fails(self, rules, admin_repo, hasher) -> None:
        result = bootstrap_admin(rules, admin_repo, hasher, "owner@example.com", "short")

        assert result.success is False
        assert [e.code for e in result.errors] == ["WEAK_PASSWORD"]

    def test_disabled_in_rules(self, rules, admin_repo, hasher) -> None:
        disabled = rules.model_copy(deep=True)
        disabled.ops.bootstrap_admin.enabled_if_no_admins = False

        result = bootstrap_admin(disabled, admin_repo, hasher, "owner@example.com", "password123")

        assert result.skipped_reason == "Bootstrap is not enabled in rules"
