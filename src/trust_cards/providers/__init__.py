"""Token providers: constant, callback and caching."""
from __future__ import annotations

from trust_cards.providers.base import AccessTokenProvider
from trust_cards.providers.caching import DEFAULT_REFRESH_SKEW_SECONDS, CachingJwtProvider
from trust_cards.providers.callback import CallbackJwtProvider, ObtainTokenFunction
from trust_cards.providers.const import ConstAccessTokenProvider
from trust_cards.providers.context import TokenContext

__all__ = [
    "AccessTokenProvider",
    "CachingJwtProvider",
    "CallbackJwtProvider",
    "ConstAccessTokenProvider",
    "DEFAULT_REFRESH_SKEW_SECONDS",
    "ObtainTokenFunction",
    "TokenContext",
]
