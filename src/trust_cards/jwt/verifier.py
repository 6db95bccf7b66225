"""JwtVerifier: checks a token's header fields and signature."""
from __future__ import annotations

import logging
from typing import Any

from trust_cards.errors import SignatureVerificationError
from trust_cards.jwt.header import JWT_CONTENT_TYPE, JWT_TYPE
from trust_cards.jwt.signer import AccessTokenSigner
from trust_cards.jwt.token import Jwt

logger = logging.getLogger(__name__)


class JwtVerifier:
    """Verifies tokens issued under one API key.

    Expiry is not checked here; use :meth:`Jwt.is_expired`.
    """

    def __init__(
        self,
        access_token_signer: AccessTokenSigner,
        api_public_key: Any,
        api_public_key_id: str,
    ) -> None:
        self.access_token_signer = access_token_signer
        self.api_public_key = api_public_key
        self.api_public_key_id = api_public_key_id

    def verify_token(self, jwt: Jwt) -> bool:
        """Return True if *jwt* has the expected header and a valid signature."""
        header = jwt.header_content
        mismatch = None
        if header.key_id != self.api_public_key_id:
            mismatch = "key id"
        elif header.algorithm != self.access_token_signer.algorithm:
            mismatch = "algorithm"
        elif header.content_type != JWT_CONTENT_TYPE:
            mismatch = "content type"
        elif header.type != JWT_TYPE:
            mismatch = "type"
        elif jwt.signature_data is None:
            mismatch = "signature (missing)"
        if mismatch is not None:
            logger.debug("Token for %s rejected: %s mismatch", jwt.identity, mismatch)
            return False

        return self.access_token_signer.verify_token_signature(
            jwt.signature_data, jwt.unsigned_data, self.api_public_key
        )

    def require_valid(self, jwt: Jwt) -> Jwt:
        """Return *jwt* unchanged, or raise if it does not verify.

        Raises
        ------
        SignatureVerificationError
            If :meth:`verify_token` returns False.
        """
        if not self.verify_token(jwt):
            raise SignatureVerificationError(f"token for identity {jwt.identity!r}")
        return jwt


__all__ = ["JwtVerifier"]
