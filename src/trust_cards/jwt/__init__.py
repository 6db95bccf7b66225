"""Access tokens: JWT codec, generator and verifier."""
from __future__ import annotations

from trust_cards.jwt.body import JwtBodyContent
from trust_cards.jwt.generator import JwtGenerator
from trust_cards.jwt.header import JWT_CONTENT_TYPE, JWT_TYPE, JwtHeaderContent
from trust_cards.jwt.signer import DEFAULT_ALGORITHM, AccessTokenSigner
from trust_cards.jwt.token import AccessToken, Jwt
from trust_cards.jwt.verifier import JwtVerifier

__all__ = [
    "AccessToken",
    "AccessTokenSigner",
    "DEFAULT_ALGORITHM",
    "JWT_CONTENT_TYPE",
    "JWT_TYPE",
    "Jwt",
    "JwtBodyContent",
    "JwtGenerator",
    "JwtHeaderContent",
    "JwtVerifier",
]
