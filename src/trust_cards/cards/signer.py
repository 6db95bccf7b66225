"""RequestSigner: adds self and authority signatures to signable requests.

Both kinds of signature cover the same bytes: the fingerprint (SHA-256
digest) of the request's canonical snapshot. They differ only in the id the
signature is filed under.
"""
from __future__ import annotations

import logging
from typing import Any

from trust_cards.audit import TrustAuditLogger
from trust_cards.cards.requests import SignableRequest
from trust_cards.crypto.provider import CryptoProvider

logger = logging.getLogger(__name__)


class RequestSigner:
    """Signs :class:`SignableRequest` objects through a :class:`CryptoProvider`.

    Parameters
    ----------
    crypto:
        Provider used to fingerprint snapshots and produce signatures.
    audit_logger:
        Optional audit trail; every signature added is recorded.
    """

    def __init__(
        self,
        crypto: CryptoProvider,
        audit_logger: TrustAuditLogger | None = None,
    ) -> None:
        self._crypto = crypto
        self._audit = audit_logger

    def self_sign(self, request: SignableRequest, private_key: Any) -> str:
        """Sign *request* with the key being published, keyed by its fingerprint.

        Returns
        -------
        str
            The signer id used, i.e. the fingerprint hex of the snapshot.
        """
        fingerprint = self._crypto.calculate_fingerprint(request.snapshot)
        signer_id = fingerprint.to_hex()
        self._add_signature(request, signer_id, fingerprint.value, private_key, "self")
        return signer_id

    def authority_sign(
        self, request: SignableRequest, authority_id: str, authority_private_key: Any
    ) -> str:
        """Sign *request* on behalf of a third party (an application) keyed by *authority_id*."""
        fingerprint = self._crypto.calculate_fingerprint(request.snapshot)
        self._add_signature(
            request, authority_id, fingerprint.value, authority_private_key, "authority"
        )
        return authority_id

    def _add_signature(
        self,
        request: SignableRequest,
        signer_id: str,
        digest: bytes,
        private_key: Any,
        kind: str,
    ) -> None:
        signature = self._crypto.sign(digest, private_key)
        request.sign_with(signer_id, signature)
        logger.info(
            "Added %s signature to %s (signer %s)",
            kind,
            type(request).__name__,
            signer_id,
        )
        if self._audit is not None:
            self._audit.log_card_signed(digest.hex(), signer_id, kind)


__all__ = ["RequestSigner"]
