"""Admin component port definitions.

Protocol interfaces for external dependencies.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

if TYPE_CHECKING:
    from src.components.admin.models import AdminUser
    from src.rules.models import AdminBootstrapRules


class AdminRepoPort(Protocol):
    """Repository for admin accounts."""

    def get_by_email(self, email: str) -> AdminUser | None:
        """Case-insensitive lookup."""
        ...

    def get_by_id(self, admin_id: UUID) -> AdminUser | None: ...

    def count(self) -> int:
        """Number of admin accounts."""
        ...

    def list_ids(self) -> list[UUID]: ...

    def save(self, user: AdminUser) -> None:
        """Persist an admin account."""
        ...


class PasswordHasherPort(Protocol):
    """Password hashing operations."""

    def hash_password(self, password: str) -> str:
        """Hash a plaintext password for storage."""
        ...

    def verify_password(self, plain: str, hashed: str) -> bool: ...


class RulesPort(Protocol):
    """Access to application rules/configuration."""

    def get_bootstrap_config(self) -> AdminBootstrapRules:
        """Get bootstrap configuration from rules."""
        ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
