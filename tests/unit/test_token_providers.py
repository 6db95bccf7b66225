"""Tests for trust_cards.providers: const, callback and caching providers."""
from __future__ import annotations

import datetime
import threading
import time
from unittest.mock import MagicMock

import pytest

from trust_cards.audit import TrustAuditLogger
from trust_cards.errors import MalformedTokenError
from trust_cards.jwt import AccessTokenSigner, Jwt, JwtGenerator
from trust_cards.providers import (
    CachingJwtProvider,
    CallbackJwtProvider,
    ConstAccessTokenProvider,
    TokenContext,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def generator() -> JwtGenerator:
    signer = AccessTokenSigner()
    keys = signer.crypto.generate_keys()
    return JwtGenerator("app-1", keys.private_key, "key-1", 20, signer)


@pytest.fixture()
def context() -> TokenContext:
    return TokenContext(operation="get", identity="alice")


@pytest.fixture()
def obtain(generator: JwtGenerator) -> MagicMock:
    return MagicMock(side_effect=lambda ctx: str(generator.generate_token(ctx.identity)))


# ---------------------------------------------------------------------------
# TokenContext
# ---------------------------------------------------------------------------


class TestTokenContext:
    def test_defaults(self) -> None:
        context = TokenContext("get", "alice")
        assert context.service is None
        assert context.force_reload is False

    def test_frozen(self, context: TokenContext) -> None:
        with pytest.raises(AttributeError):
            context.identity = "bob"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# ConstAccessTokenProvider
# ---------------------------------------------------------------------------


class TestConstProvider:
    def test_always_same_token(self, generator: JwtGenerator) -> None:
        token = generator.generate_token("alice")
        provider = ConstAccessTokenProvider(token)
        first = provider.get_token(TokenContext("get", "alice"))
        second = provider.get_token(TokenContext("put", "bob", force_reload=True))
        assert first is token
        assert second is token

    def test_string_stable_across_elapsed_time(self, generator: JwtGenerator) -> None:
        token = Jwt.from_string(str(generator.generate_token("alice")))
        provider = ConstAccessTokenProvider(token)
        before = str(provider.get_token(TokenContext("get", "alice")))
        time.sleep(1.1)
        after = provider.get_token(TokenContext("get", "alice"))
        assert str(after) == before
        past_expiry = token.expires_at + datetime.timedelta(hours=1)
        assert after.is_expired(now=past_expiry)
        assert str(provider.get_token(TokenContext("get", "alice"))) == before


# ---------------------------------------------------------------------------
# CallbackJwtProvider
# ---------------------------------------------------------------------------


class TestCallbackProvider:
    def test_invokes_function_every_call(self, obtain: MagicMock, context: TokenContext) -> None:
        provider = CallbackJwtProvider(obtain)
        provider.get_token(context)
        provider.get_token(context)
        assert obtain.call_count == 2
        obtain.assert_called_with(context)

    def test_result_is_parsed(self, obtain: MagicMock, context: TokenContext) -> None:
        token = CallbackJwtProvider(obtain).get_token(context)
        assert isinstance(token, Jwt)
        assert token.identity == "alice"

    def test_requires_callable(self) -> None:
        with pytest.raises(TypeError):
            CallbackJwtProvider("not callable")  # type: ignore[arg-type]

    def test_malformed_result(self, context: TokenContext) -> None:
        provider = CallbackJwtProvider(lambda ctx: "a.b")
        with pytest.raises(MalformedTokenError):
            provider.get_token(context)


# ---------------------------------------------------------------------------
# CachingJwtProvider
# ---------------------------------------------------------------------------


class TestCachingProvider:
    def test_first_call_fetches_then_caches(
        self, obtain: MagicMock, context: TokenContext
    ) -> None:
        provider = CachingJwtProvider(obtain)
        first = provider.get_token(context)
        second = provider.get_token(context)
        assert obtain.call_count == 1
        assert first is second

    def test_force_reload_fetches_again(self, obtain: MagicMock, context: TokenContext) -> None:
        provider = CachingJwtProvider(obtain)
        provider.get_token(context)
        provider.get_token(TokenContext("get", "alice", force_reload=True))
        assert obtain.call_count == 2

    def test_expiring_token_is_refreshed(self, obtain: MagicMock, context: TokenContext) -> None:
        # Tokens live 20 minutes; a 30 minute skew makes every cached token stale.
        provider = CachingJwtProvider(obtain, refresh_skew_seconds=30 * 60)
        provider.get_token(context)
        provider.get_token(context)
        assert obtain.call_count == 2

    def test_initial_token_used(
        self, generator: JwtGenerator, obtain: MagicMock, context: TokenContext
    ) -> None:
        initial = generator.generate_token("alice")
        provider = CachingJwtProvider(obtain, initial_jwt=initial)
        assert provider.get_token(context) is initial
        obtain.assert_not_called()

    def test_failed_refresh_keeps_cached_token(
        self, obtain: MagicMock, context: TokenContext
    ) -> None:
        provider = CachingJwtProvider(obtain)
        cached = provider.get_token(context)
        obtain.side_effect = lambda ctx: "broken"
        with pytest.raises(MalformedTokenError):
            provider.get_token(TokenContext("get", "alice", force_reload=True))
        assert provider.cached_token is cached

    def test_single_flight(self, generator: JwtGenerator) -> None:
        callers = 8
        calls: list[int] = []
        barrier = threading.Barrier(callers)

        def slow_obtain(ctx: TokenContext) -> str:
            calls.append(1)
            time.sleep(0.05)
            return str(generator.generate_token(ctx.identity))

        provider = CachingJwtProvider(slow_obtain)
        results: list[Jwt] = []
        results_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            token = provider.get_token(TokenContext("get", "alice"))
            with results_lock:
                results.append(token)

        threads = [threading.Thread(target=worker) for _ in range(callers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(calls) == 1
        assert len(results) == callers
        assert all(token is results[0] for token in results)

    def test_requires_callable(self) -> None:
        with pytest.raises(TypeError):
            CachingJwtProvider(None)  # type: ignore[arg-type]

    def test_negative_skew_rejected(self, obtain: MagicMock) -> None:
        with pytest.raises(ValueError):
            CachingJwtProvider(obtain, refresh_skew_seconds=-1)

    def test_audit_records_refresh(self, obtain: MagicMock, context: TokenContext) -> None:
        audit = TrustAuditLogger()
        provider = CachingJwtProvider(obtain, audit_logger=audit)
        provider.get_token(context)
        provider.get_token(TokenContext("sync", "alice", force_reload=True))
        events = audit.read_log()
        assert [event["event_type"] for event in events] == ["token_refreshed"] * 2
        assert events[0]["details"] == {"operation": "get", "forced": False}
        assert events[1]["details"] == {"operation": "sync", "forced": True}
