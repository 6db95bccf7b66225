"""AccessTokenProvider: abstract source of access tokens."""
from __future__ import annotations

import abc

from trust_cards.jwt.token import AccessToken
from trust_cards.providers.context import TokenContext


class AccessTokenProvider(abc.ABC):
    """Hands out an :class:`AccessToken` for a :class:`TokenContext`."""

    @abc.abstractmethod
    def get_token(self, context: TokenContext) -> AccessToken:
        """Return a token suitable for *context*."""


__all__ = ["AccessTokenProvider"]
