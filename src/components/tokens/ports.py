"""
Tokens component ports.

Protocol interface for the verification token store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.components.tokens.models import TokenPurpose, VerificationToken


class TokenStorePort(Protocol):
    """
    Verification token store.

    `delete_live` is the only consumption primitive and must be a single
    atomic conditional delete: of two concurrent callers presenting the same
    live token, exactly one gets True.
    """

    def insert(self, token: VerificationToken) -> None:
        """Insert a new token row."""
        ...

    def replace_for_identifier(self, token: VerificationToken) -> None:
        """Delete every token for the identifier and insert this one, atomically."""
        ...

    def delete_live(
        self,
        identifier: str,
        token: str,
        purpose: TokenPurpose,
        now: datetime,
    ) -> bool:
        """Delete the matching row if it has not expired. True if a row was deleted."""
        ...

    def get(self, identifier: str, token: str) -> VerificationToken | None:
        """Get a row by its composite key regardless of expiry."""
        ...

    def find_by_token(self, token: str) -> VerificationToken | None:
        """Get a row by token value alone regardless of expiry."""
        ...

    def delete_expired(self, now: datetime) -> int:
        """Delete all expired rows. Returns count deleted."""
        ...
