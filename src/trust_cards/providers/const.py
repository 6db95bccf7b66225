"""ConstAccessTokenProvider: always returns the same token."""
from __future__ import annotations

from trust_cards.jwt.token import AccessToken
from trust_cards.providers.base import AccessTokenProvider
from trust_cards.providers.context import TokenContext


class ConstAccessTokenProvider(AccessTokenProvider):
    """Returns the token it was built with, whatever the context."""

    def __init__(self, access_token: AccessToken) -> None:
        self._access_token = access_token

    def get_token(self, context: TokenContext) -> AccessToken:
        return self._access_token


__all__ = ["ConstAccessTokenProvider"]
