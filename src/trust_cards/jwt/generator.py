"""JwtGenerator: issues signed access tokens for an application."""
from __future__ import annotations

import datetime
import logging
from typing import Any, Mapping

from trust_cards.audit import TrustAuditLogger
from trust_cards.config import TrustCardsConfig
from trust_cards.errors import MissingIdentityError
from trust_cards.jwt.body import JwtBodyContent
from trust_cards.jwt.header import JwtHeaderContent
from trust_cards.jwt.signer import AccessTokenSigner
from trust_cards.jwt.token import Jwt

logger = logging.getLogger(__name__)


class JwtGenerator:
    """Builds and signs tokens with the application's API key.

    Parameters
    ----------
    app_id:
        Application id; becomes the ``iss`` claim.
    api_key:
        Private key object used to sign tokens.
    api_public_key_id:
        Id of the matching public key; becomes the ``kid`` header field.
    lifetime_minutes:
        Token lifetime.
    access_token_signer:
        Supplies the algorithm name and the signature operation.
    audit_logger:
        Optional audit trail; every issued token is recorded.
    """

    def __init__(
        self,
        app_id: str,
        api_key: Any,
        api_public_key_id: str,
        lifetime_minutes: int,
        access_token_signer: AccessTokenSigner,
        audit_logger: TrustAuditLogger | None = None,
    ) -> None:
        if lifetime_minutes <= 0:
            raise ValueError(f"lifetime_minutes must be positive, got {lifetime_minutes}")
        self.app_id = app_id
        self.api_key = api_key
        self.api_public_key_id = api_public_key_id
        self.lifetime_minutes = lifetime_minutes
        self.access_token_signer = access_token_signer
        self._audit = audit_logger

    @classmethod
    def from_config(
        cls,
        config: TrustCardsConfig,
        api_key: Any,
        access_token_signer: AccessTokenSigner | None = None,
    ) -> "JwtGenerator":
        audit_logger = (
            TrustAuditLogger(config.audit_log_path) if config.audit_log_path else None
        )
        return cls(
            app_id=config.app_id,
            api_key=api_key,
            api_public_key_id=config.api_key_id,
            lifetime_minutes=config.token_lifetime_minutes,
            access_token_signer=access_token_signer or AccessTokenSigner(),
            audit_logger=audit_logger,
        )

    def generate_token(
        self, identity: str | None, data: Mapping[str, Any] | None = None
    ) -> Jwt:
        """Issue a signed token for *identity*.

        Parameters
        ----------
        identity:
            Identity the token authorizes.
        data:
            Optional extra claims, carried under ``ada``.

        Raises
        ------
        MissingIdentityError
            If *identity* is None or empty.
        """
        if not identity:
            raise MissingIdentityError()

        issued_at = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
        expires_at = issued_at + datetime.timedelta(minutes=self.lifetime_minutes)

        header = JwtHeaderContent(
            algorithm=self.access_token_signer.algorithm,
            key_id=self.api_public_key_id,
        )
        body = JwtBodyContent(
            app_id=self.app_id,
            identity=identity,
            issued_at=issued_at,
            expires_at=expires_at,
            additional_data=dict(data or {}),
        )
        unsigned = Jwt(header, body)
        signature = self.access_token_signer.generate_token_signature(
            unsigned.unsigned_data, self.api_key
        )
        token = unsigned.with_signature(signature)

        logger.info("Issued token for %s (expires %s)", identity, expires_at.isoformat())
        if self._audit is not None:
            self._audit.log_token_issued(identity, self.app_id, expires_at)
        return token


__all__ = ["JwtGenerator"]
