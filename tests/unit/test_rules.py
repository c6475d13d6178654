"""
Rules loader and operational config validation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest
import yaml

from src.app_shell.config import missing_env, validate_ops_rules
from src.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def rules_data() -> dict[str, Any]:
    with open(PROJECT_ROOT / "rules.yaml") as f:
        return yaml.safe_load(f)


def write_rules(tmp_path: Path, data: dict[str, Any]) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestLoadRules:
    def test_load_project_rules(self) -> None:
        rules = load_rules(PROJECT_ROOT / "rules.yaml")

        assert rules.project.slug == "newsletter-service"
        assert rules.tokens.confirm_ttl_hours == 24
        assert rules.tokens.manage_ttl_minutes == 60
        assert "tech" in [c.id for c in rules.subscriptions.categories]
        assert rules.rate_limits.login.max_attempts == 5

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(Path("/nonexistent/rules.yaml"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("invalid: yaml: content: [")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_missing_section(self, tmp_path: Path, rules_data: dict[str, Any]) -> None:
        del rules_data["rate_limits"]

        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(write_rules(tmp_path, rules_data))

    def test_duplicate_category_ids(self, tmp_path: Path, rules_data: dict[str, Any]) -> None:
        rules_data["subscriptions"]["categories"].append({"id": "tech", "label": "Again"})

        with pytest.raises(ValueError, match="unique"):
            load_rules(write_rules(tmp_path, rules_data))

    def test_token_ttl_must_be_positive(self, tmp_path: Path, rules_data: dict[str, Any]) -> None:
        rules_data["tokens"]["manage_ttl_minutes"] = 0

        with pytest.raises(ValueError):
            load_rules(write_rules(tmp_path, rules_data))

    def test_yaml_block_in_markdown(self, tmp_path: Path, rules_data: dict[str, Any]) -> None:
        path = tmp_path / "rules.md"
        path.write_text(f"# Rules\n\n```yaml\n{yaml.safe_dump(rules_data)}```\n")

        assert load_rules(path).project.site_name == "Newsletter Service"


class TestOpsValidation:
    def test_passes_with_nothing_required(self, monkeypatch, rules_data, tmp_path) -> None:
        monkeypatch.setenv("ADMIN_EMAIL", "admin@example.com")
        monkeypatch.setenv("ADMIN_PASSWORD", "secret-password")

        validate_ops_rules(load_rules(write_rules(tmp_path, rules_data)))

    def test_missing_required_env_exits(self, monkeypatch, rules_data, tmp_path) -> None:
        monkeypatch.delenv("NEWSLETTER_SECRET_KEY", raising=False)
        rules_data["ops"]["required_env"] = ["NEWSLETTER_SECRET_KEY"]
        rules = load_rules(write_rules(tmp_path, rules_data))

        assert missing_env(rules) == ["NEWSLETTER_SECRET_KEY"]
        with pytest.raises(SystemExit):
            validate_ops_rules(rules)

    def test_bootstrap_vars_only_warn(self, monkeypatch, rules_data, tmp_path, caplog) -> None:
        monkeypatch.delenv("ADMIN_EMAIL", raising=False)
        monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
        rules = load_rules(write_rules(tmp_path, rules_data))

        with caplog.at_level(logging.WARNING, logger="src.app_shell.config"):
            assert missing_env(rules) == []

        assert "ADMIN_EMAIL is not set" in caplog.text
