"""Identity cards: signable requests, signing, and validation."""
from __future__ import annotations

from trust_cards.cards.card import Card
from trust_cards.cards.envelope import CardEnvelope
from trust_cards.cards.requests import (
    MAX_DATA_ENTRIES,
    AddRelationRequest,
    CardScope,
    CreateCardRequest,
    DeleteRelationRequest,
    RevocationReason,
    RevokeCardRequest,
    SignableRequest,
)
from trust_cards.cards.signer import RequestSigner
from trust_cards.cards.snapshot import canonical_snapshot, parse_snapshot
from trust_cards.cards.validator import LEGACY_CARD_VERSION, CardValidator

__all__ = [
    "AddRelationRequest",
    "Card",
    "CardEnvelope",
    "CardScope",
    "CardValidator",
    "CreateCardRequest",
    "DeleteRelationRequest",
    "LEGACY_CARD_VERSION",
    "MAX_DATA_ENTRIES",
    "RequestSigner",
    "RevocationReason",
    "RevokeCardRequest",
    "SignableRequest",
    "canonical_snapshot",
    "parse_snapshot",
]
