"""
Tokens component models.

Single-use, time-limited verification tokens keyed by (identifier, token).
The identifier is the normalized subscriber email.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TokenPurpose(Enum):
    """
    What a token authorizes.

    - confirm: confirm a pending subscription (link carries the token only)
    - manage: update preferences or unsubscribe (link carries email and token)
    """

    CONFIRM = "confirm"
    MANAGE = "manage"


class TokenFailure(Enum):
    """Why a token could not be consumed."""

    NOT_FOUND = "not-found"
    EXPIRED = "expired"


@dataclass(frozen=True)
class VerificationToken:
    """Verification token row."""

    identifier: str
    token: str
    purpose: TokenPurpose
    expires: datetime

    def is_expired(self, now: datetime) -> bool:
        """A token is dead from its expiry instant onward."""
        return now >= self.expires


@dataclass(frozen=True)
class ConsumeResult:
    """Outcome of a consume attempt. Callers mutate state only when valid."""

    valid: bool
    identifier: str | None = None
    reason: TokenFailure | None = None

    @classmethod
    def ok(cls, identifier: str) -> ConsumeResult:
        return cls(valid=True, identifier=identifier)

    @classmethod
    def not_found(cls) -> ConsumeResult:
        return cls(valid=False, reason=TokenFailure.NOT_FOUND)

    @classmethod
    def expired(cls, identifier: str) -> ConsumeResult:
        return cls(valid=False, identifier=identifier, reason=TokenFailure.EXPIRED)


class TokenError(Exception):
    """Raised for misuse of the token API (not for invalid tokens)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Token error: {reason}")
