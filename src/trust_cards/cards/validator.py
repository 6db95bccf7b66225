"""CardValidator: fail-closed, multi-verifier card validation.

A card is accepted only when all of the following hold:

1. its ``id`` equals the fingerprint hex of its snapshot (the card is
   content-addressed, so any altered snapshot byte breaks it);
2. it carries a signature from every required verifier, and each of those
   signatures verifies over the fingerprint.

The required verifiers are the validator's own set (the well-known service
verifier unless disabled, plus anything added with :meth:`add_verifier`)
together with the card's own public key under the card's fingerprint hex,
which is what makes a self-signature mandatory.

Cards reported as version ``"3.0"`` predate this scheme and are accepted
as-is; see :meth:`CardValidator._is_legacy_card`.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Optional

from trust_cards.audit import TrustAuditLogger
from trust_cards.buffer import Buffer, b64_decode
from trust_cards.cards.card import Card
from trust_cards.config import SERVICE_CARD_ID, SERVICE_PUBLIC_KEY, TrustCardsConfig
from trust_cards.crypto.provider import CryptoProvider
from trust_cards.errors import InvalidCardError, KeyImportError

logger = logging.getLogger(__name__)

LEGACY_CARD_VERSION = "3.0"

_RAW_KEY_TYPES = (Buffer, bytes, bytearray, memoryview)


class CardValidator:
    """Validates cards against a per-instance verifier set.

    Parameters
    ----------
    crypto:
        Provider used to fingerprint snapshots, import keys and verify
        signatures.
    include_default_verifiers:
        Seed the verifier set with the cards service verifier.
    audit_logger:
        Optional audit trail; every accept/reject decision is recorded.
    service_card_id / service_public_key:
        The default service verifier. ``service_public_key`` is base64 text
        of an exported public key.

    Example
    -------
    ::

        validator = CardValidator(Ed25519CryptoProvider())
        validator.add_verifier(app_id, app_public_key)
        if not validator.is_valid(card):
            ...
    """

    def __init__(
        self,
        crypto: CryptoProvider,
        include_default_verifiers: bool = True,
        audit_logger: TrustAuditLogger | None = None,
        service_card_id: str = SERVICE_CARD_ID,
        service_public_key: str = SERVICE_PUBLIC_KEY,
    ) -> None:
        self._crypto = crypto
        self._audit = audit_logger
        self._lock = threading.Lock()
        self._verifiers: dict[str, Any] = {}
        if include_default_verifiers:
            self._verifiers[service_card_id] = crypto.import_public_key(
                b64_decode(service_public_key)
            )

    @classmethod
    def from_config(
        cls,
        crypto: CryptoProvider,
        config: TrustCardsConfig,
        include_default_verifiers: bool = True,
    ) -> "CardValidator":
        audit_logger = (
            TrustAuditLogger(config.audit_log_path) if config.audit_log_path else None
        )
        return cls(
            crypto,
            include_default_verifiers=include_default_verifiers,
            audit_logger=audit_logger,
            service_card_id=config.service_card_id,
            service_public_key=config.service_public_key,
        )

    # ------------------------------------------------------------------
    # Verifier set
    # ------------------------------------------------------------------

    @property
    def verifiers(self) -> dict[str, Any]:
        """A copy of the current verifier set (id to public key object)."""
        with self._lock:
            return dict(self._verifiers)

    def add_verifier(self, verifier_id: str, public_key: Any) -> None:
        """Require a signature from *verifier_id* on every validated card.

        *public_key* may be a key object from the crypto provider or the
        exported key bytes.

        Raises
        ------
        KeyImportError
            If exported key bytes cannot be imported.
        """
        if isinstance(public_key, _RAW_KEY_TYPES):
            public_key = self._crypto.import_public_key(public_key)
        with self._lock:
            self._verifiers[verifier_id] = public_key
        logger.debug("Added card verifier %s", verifier_id)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def is_valid(self, card: Optional[Card]) -> bool:
        """Return True only if *card* passes every check."""
        if card is None:
            logger.warning("Rejected card: no card given")
            return False
        if self._is_legacy_card(card):
            logger.debug("Accepted legacy card %s without signature checks", card.id)
            self._record(card, True, "legacy card version")
            return True

        reason = self._rejection_reason(card)
        if reason is not None:
            logger.warning("Rejected card %s: %s", card.id, reason)
            self._record(card, False, reason)
            return False

        logger.debug("Accepted card %s", card.id)
        self._record(card, True)
        return True

    def validate_cards(self, cards: Iterable[Card]) -> list[Card]:
        """Validate every card; return them all or fail with the invalid ones.

        Raises
        ------
        InvalidCardError
            If one or more cards are not valid. ``invalid_cards`` lists them
            in input order.
        """
        checked = list(cards)
        invalid = [card for card in checked if not self.is_valid(card)]
        if invalid:
            raise InvalidCardError(invalid)
        return checked

    def _is_legacy_card(self, card: Card) -> bool:
        return card.version == LEGACY_CARD_VERSION

    def _rejection_reason(self, card: Card) -> str | None:
        if not card.snapshot:
            return "missing snapshot"
        if not card.signatures:
            return "no signatures"

        fingerprint = self._crypto.calculate_fingerprint(card.snapshot)
        fingerprint_hex = fingerprint.to_hex()
        if fingerprint_hex != card.id:
            return "id does not match snapshot fingerprint"

        try:
            card_key = self._crypto.import_public_key(card.public_key)
        except KeyImportError as exc:
            return f"card public key cannot be imported ({exc.reason})"

        required = self.verifiers
        required[fingerprint_hex] = card_key
        for verifier_id, public_key in required.items():
            signature = card.signatures.get(verifier_id)
            if signature is None:
                return f"missing signature from {verifier_id}"
            if not self._crypto.verify(fingerprint.value, signature, public_key):
                return f"signature from {verifier_id} does not verify"
        return None

    def _record(self, card: Card, valid: bool, reason: str = "") -> None:
        if self._audit is not None:
            self._audit.log_card_validation(card.id, valid, reason)


__all__ = ["CardValidator", "LEGACY_CARD_VERSION"]
