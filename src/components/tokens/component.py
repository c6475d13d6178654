"""
Tokens component.

Issue, validate and consume single-use verification tokens.

Key behaviors:
- 32 random bytes, hex encoded
- Issuing deletes every outstanding token for the identifier first
- Consumption is one atomic delete-if-live; the store decides the winner
- Two lookup modes: by (identifier, token) and by token value alone
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta

from src.components.tokens.models import (
    ConsumeResult,
    TokenError,
    TokenPurpose,
    VerificationToken,
)
from src.components.tokens.ports import TokenStorePort

TOKEN_BYTES = 32


def generate_token(length: int = TOKEN_BYTES) -> str:
    """Generate a cryptographically secure hex token."""
    return secrets.token_hex(length)


def issue_token(
    store: TokenStorePort,
    identifier: str,
    purpose: TokenPurpose,
    ttl: timedelta,
    now: datetime | None = None,
) -> VerificationToken:
    """
    Issue a new token for an identifier.

    Previously issued tokens for the identifier are deleted first, whatever
    their purpose, so exactly one live token remains afterward.
    """
    if not identifier:
        raise TokenError("identifier is required")
    if ttl <= timedelta(0):
        raise TokenError("ttl must be positive")

    if now is None:
        now = datetime.now(UTC)

    token = VerificationToken(
        identifier=identifier,
        token=generate_token(),
        purpose=purpose,
        expires=now + ttl,
    )
    store.replace_for_identifier(token)
    return token


def consume_token(
    store: TokenStorePort,
    identifier: str,
    token: str,
    purpose: TokenPurpose,
    now: datetime | None = None,
) -> ConsumeResult:
    """
    Consume a token by (identifier, token).

    Returns a valid result at most once per issued token.
    """
    if not identifier or not token:
        return ConsumeResult.not_found()

    if now is None:
        now = datetime.now(UTC)

    if store.delete_live(identifier, token, purpose, now):
        return ConsumeResult.ok(identifier)

    # Lost the delete: either gone, wrong purpose, or expired.
    existing = store.get(identifier, token)
    if existing is not None and existing.purpose == purpose and existing.is_expired(now):
        return ConsumeResult.expired(identifier)
    return ConsumeResult.not_found()


def consume_token_by_value(
    store: TokenStorePort,
    token: str,
    purpose: TokenPurpose,
    now: datetime | None = None,
) -> ConsumeResult:
    """
    Consume a token when only its value is known (confirmation links).

    The row supplies the identifier; the delete itself still goes through
    the dual-key atomic path.
    """
    if not token:
        return ConsumeResult.not_found()

    if now is None:
        now = datetime.now(UTC)

    row = store.find_by_token(token)
    if row is None or row.purpose != purpose:
        return ConsumeResult.not_found()
    if row.is_expired(now):
        return ConsumeResult.expired(row.identifier)

    return consume_token(store, row.identifier, token, purpose, now)


def is_token_live(
    store: TokenStorePort,
    identifier: str,
    token: str,
    purpose: TokenPurpose,
    now: datetime | None = None,
) -> bool:
    """Read-only check; does not consume."""
    if not identifier or not token:
        return False

    if now is None:
        now = datetime.now(UTC)

    row = store.get(identifier, token)
    return row is not None and row.purpose == purpose and not row.is_expired(now)


def purge_expired(store: TokenStorePort, now: datetime | None = None) -> int:
    """Delete expired tokens. Returns count deleted."""
    if now is None:
        now = datetime.now(UTC)
    return store.delete_expired(now)
