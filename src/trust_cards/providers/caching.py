"""CachingJwtProvider: caches a token and refreshes it single-flight.

State machine
-------------
The provider is either *Empty* or *Cached(token)*. A refresh happens when:

- it is Empty, or
- the cached token expires within ``refresh_skew_seconds``, or
- the caller sets ``context.force_reload``.

The check, the refresh and the publish of the new token are one critical
section, so concurrent callers that all find the token stale trigger a
single call to the obtaining function; the rest wait and then return the
freshly published token.
"""
from __future__ import annotations

import datetime
import logging
import threading
from typing import Optional

from trust_cards.audit import TrustAuditLogger
from trust_cards.jwt.token import Jwt
from trust_cards.providers.base import AccessTokenProvider
from trust_cards.providers.callback import ObtainTokenFunction
from trust_cards.providers.context import TokenContext

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SKEW_SECONDS = 5.0


class CachingJwtProvider(AccessTokenProvider):
    """Thread-safe caching token provider.

    Parameters
    ----------
    renew_jwt_function:
        Callable taking a :class:`TokenContext` and returning a token string.
    initial_jwt:
        Optional token to start out Cached with.
    refresh_skew_seconds:
        Refresh tokens this many seconds before they actually expire.
    audit_logger:
        Optional audit trail; every refresh is recorded.
    """

    def __init__(
        self,
        renew_jwt_function: ObtainTokenFunction,
        initial_jwt: Optional[Jwt] = None,
        refresh_skew_seconds: float = DEFAULT_REFRESH_SKEW_SECONDS,
        audit_logger: TrustAuditLogger | None = None,
    ) -> None:
        if not callable(renew_jwt_function):
            raise TypeError("renew_jwt_function must be callable")
        if refresh_skew_seconds < 0:
            raise ValueError("refresh_skew_seconds must not be negative")
        self._renew_jwt_function = renew_jwt_function
        self._jwt = initial_jwt
        self._skew = datetime.timedelta(seconds=refresh_skew_seconds)
        self._audit = audit_logger
        self._lock = threading.Lock()

    @property
    def cached_token(self) -> Optional[Jwt]:
        with self._lock:
            return self._jwt

    def get_token(self, context: TokenContext) -> Jwt:
        """Return the cached token, refreshing it first if needed.

        Raises
        ------
        MalformedTokenError
            If a refresh returns something that is not a signed token. The
            previously cached token (if any) is kept.
        """
        with self._lock:
            if self._needs_refresh(context):
                forced = context.force_reload
                token = Jwt.from_string(self._renew_jwt_function(context))
                self._jwt = token
                logger.info(
                    "Refreshed token for %s (expires %s%s)",
                    token.identity,
                    token.expires_at.isoformat(),
                    ", forced" if forced else "",
                )
                if self._audit is not None:
                    self._audit.log_token_refreshed(token.identity, context.operation, forced)
            return self._jwt

    def _needs_refresh(self, context: TokenContext) -> bool:
        if context.force_reload or self._jwt is None:
            return True
        now = datetime.datetime.now(datetime.timezone.utc)
        return self._jwt.expires_at <= now + self._skew


__all__ = ["CachingJwtProvider", "DEFAULT_REFRESH_SKEW_SECONDS"]
