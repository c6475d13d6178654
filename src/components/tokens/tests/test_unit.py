"""
Tokens component unit tests.

Covers issuance, single-use consumption, expiry, purpose isolation,
token-only lookup and concurrent consumption.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.memory import InMemoryTokenStore
from src.components.tokens import (
    ConsumeResult,
    TokenError,
    TokenFailure,
    TokenPurpose,
    VerificationToken,
    consume_token,
    consume_token_by_value,
    generate_token,
    is_token_live,
    issue_token,
    purge_expired,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
EMAIL = "a@x.com"


@pytest.fixture
def store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


class TestGenerateToken:
    def test_token_is_64_hex_chars(self) -> None:
        token = generate_token()
        assert len(token) == 64
        int(token, 16)

    def test_tokens_are_unique(self) -> None:
        tokens = {generate_token() for _ in range(200)}
        assert len(tokens) == 200


class TestIssueToken:
    def test_issue_sets_expiry_from_ttl(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(hours=24), NOW)

        assert token.identifier == EMAIL
        assert token.expires == NOW + timedelta(hours=24)
        assert store.get(EMAIL, token.token) == token

    def test_issue_invalidates_previous_tokens(self, store: InMemoryTokenStore) -> None:
        first = issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(hours=24), NOW)
        second = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)

        assert store.get(EMAIL, first.token) is None
        assert store.get(EMAIL, second.token) is not None
        assert store.count_for(EMAIL) == 1

    def test_issue_leaves_other_identifiers_alone(self, store: InMemoryTokenStore) -> None:
        other = issue_token(store, "b@x.com", TokenPurpose.CONFIRM, timedelta(hours=1), NOW)
        issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(hours=1), NOW)

        assert store.get("b@x.com", other.token) is not None

    def test_issue_rejects_bad_arguments(self, store: InMemoryTokenStore) -> None:
        with pytest.raises(TokenError):
            issue_token(store, "", TokenPurpose.CONFIRM, timedelta(hours=1), NOW)
        with pytest.raises(TokenError):
            issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(0), NOW)


class TestConsumeToken:
    def test_consume_succeeds_exactly_once(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)

        first = consume_token(store, EMAIL, token.token, TokenPurpose.MANAGE, NOW)
        second = consume_token(store, EMAIL, token.token, TokenPurpose.MANAGE, NOW)

        assert first == ConsumeResult.ok(EMAIL)
        assert second.valid is False
        assert second.reason == TokenFailure.NOT_FOUND

    def test_consume_at_expiry_instant_is_expired(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)

        result = consume_token(
            store, EMAIL, token.token, TokenPurpose.MANAGE, NOW + timedelta(hours=1)
        )

        assert result.valid is False
        assert result.reason == TokenFailure.EXPIRED

    def test_consume_just_before_expiry(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)

        result = consume_token(
            store,
            EMAIL,
            token.token,
            TokenPurpose.MANAGE,
            NOW + timedelta(minutes=59, seconds=59),
        )

        assert result.valid is True

    def test_wrong_identifier_fails(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)

        result = consume_token(store, "b@x.com", token.token, TokenPurpose.MANAGE, NOW)

        assert result.reason == TokenFailure.NOT_FOUND
        # Original row untouched
        assert store.get(EMAIL, token.token) is not None

    def test_wrong_purpose_fails(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(hours=1), NOW)

        result = consume_token(store, EMAIL, token.token, TokenPurpose.MANAGE, NOW)

        assert result.reason == TokenFailure.NOT_FOUND
        assert store.get(EMAIL, token.token) is not None

    def test_empty_inputs_fail(self, store: InMemoryTokenStore) -> None:
        assert consume_token(store, "", "abc", TokenPurpose.MANAGE, NOW).valid is False
        assert consume_token(store, EMAIL, "", TokenPurpose.MANAGE, NOW).valid is False

    def test_concurrent_consumers_get_one_success(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)
        results: list[ConsumeResult] = []
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            results.append(consume_token(store, EMAIL, token.token, TokenPurpose.MANAGE, NOW))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r.valid) == 1
        assert all(r.reason == TokenFailure.NOT_FOUND for r in results if not r.valid)


class TestConsumeByValue:
    def test_token_only_lookup_supplies_identifier(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(hours=24), NOW)

        result = consume_token_by_value(store, token.token, TokenPurpose.CONFIRM, NOW)

        assert result.valid is True
        assert result.identifier == EMAIL
        assert store.count_for(EMAIL) == 0

    def test_second_use_fails(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(hours=24), NOW)
        consume_token_by_value(store, token.token, TokenPurpose.CONFIRM, NOW)

        result = consume_token_by_value(store, token.token, TokenPurpose.CONFIRM, NOW)

        assert result.reason == TokenFailure.NOT_FOUND

    def test_expired(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.CONFIRM, timedelta(hours=24), NOW)

        result = consume_token_by_value(
            store, token.token, TokenPurpose.CONFIRM, NOW + timedelta(hours=25)
        )

        assert result.reason == TokenFailure.EXPIRED

    def test_manage_token_cannot_confirm(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)

        result = consume_token_by_value(store, token.token, TokenPurpose.CONFIRM, NOW)

        assert result.valid is False


class TestLivenessAndPurge:
    def test_is_token_live_does_not_consume(self, store: InMemoryTokenStore) -> None:
        token = issue_token(store, EMAIL, TokenPurpose.MANAGE, timedelta(hours=1), NOW)

        assert is_token_live(store, EMAIL, token.token, TokenPurpose.MANAGE, NOW) is True
        assert is_token_live(store, EMAIL, token.token, TokenPurpose.MANAGE, NOW) is True
        assert is_token_live(store, EMAIL, token.token, TokenPurpose.CONFIRM, NOW) is False

    def test_purge_expired(self, store: InMemoryTokenStore) -> None:
        store.insert(VerificationToken(EMAIL, "old", TokenPurpose.MANAGE, NOW - timedelta(1)))
        store.insert(VerificationToken("b@x.com", "new", TokenPurpose.MANAGE, NOW + timedelta(1)))

        assert purge_expired(store, NOW) == 1
        assert store.get(EMAIL, "old") is None
        assert store.get("b@x.com", "new") is not None
