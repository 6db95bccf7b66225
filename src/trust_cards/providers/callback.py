"""CallbackJwtProvider: obtains a fresh token string on every call."""
from __future__ import annotations

import logging
from typing import Callable

from trust_cards.jwt.token import Jwt
from trust_cards.providers.base import AccessTokenProvider
from trust_cards.providers.context import TokenContext

logger = logging.getLogger(__name__)

ObtainTokenFunction = Callable[[TokenContext], str]


class CallbackJwtProvider(AccessTokenProvider):
    """Delegates to *obtain_token_function* and parses its result.

    Nothing is cached: every :meth:`get_token` call invokes the function.

    Parameters
    ----------
    obtain_token_function:
        Callable taking a :class:`TokenContext` and returning a token string,
        typically by asking the application backend.

    Raises
    ------
    TypeError
        If *obtain_token_function* is not callable.
    """

    def __init__(self, obtain_token_function: ObtainTokenFunction) -> None:
        if not callable(obtain_token_function):
            raise TypeError("obtain_token_function must be callable")
        self._obtain_token_function = obtain_token_function

    def get_token(self, context: TokenContext) -> Jwt:
        """Obtain and parse a token.

        Raises
        ------
        MalformedTokenError
            If the function returns something that is not a signed token.
        """
        logger.debug("Obtaining token for %s (%s)", context.identity, context.operation)
        return Jwt.from_string(self._obtain_token_function(context))


__all__ = ["CallbackJwtProvider", "ObtainTokenFunction"]
