"""Admin component data models.

Admin accounts plus frozen dataclasses for bootstrap and login.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass
class AdminUser:
    """Administrator account. Only the argon2 hash of the password is kept."""

    email: str
    password_hash: str
    name: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class BootstrapInput:
    """Input parameters for bootstrap operation."""

    bootstrap_email: str | None
    bootstrap_password: str | None


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class AdminValidationError:
    """Validation error details."""

    code: str
    message: str
    field: str


@dataclass(frozen=True)
class BootstrapOutput:
    """Result of bootstrap operation."""

    user: AdminUser | None
    created: bool
    skipped_reason: str | None
    errors: tuple[AdminValidationError, ...]
    success: bool

    @classmethod
    def skipped(cls, reason: str) -> BootstrapOutput:
        """Create a skipped result."""
        return cls(user=None, created=False, skipped_reason=reason, errors=(), success=True)

    @classmethod
    def created_user(cls, user: AdminUser) -> BootstrapOutput:
        """Create a success result with user."""
        return cls(user=user, created=True, skipped_reason=None, errors=(), success=True)

    @classmethod
    def failed(cls, errors: tuple[AdminValidationError, ...]) -> BootstrapOutput:
        """Create a failure result."""
        return cls(user=None, created=False, skipped_reason=None, errors=errors, success=False)


@dataclass(frozen=True)
class LoginOutput:
    success: bool
    user: AdminUser | None = None
    error: str | None = None
