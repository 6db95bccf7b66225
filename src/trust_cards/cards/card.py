"""Card: a published (or about-to-be-published) identity record.

A card is the read side of a :class:`CreateCardRequest`: the same snapshot
and signatures, with the snapshot fields unpacked for convenience. Cards
returned by a cards service also carry an ``id`` (the fingerprint hex of the
snapshot) and a ``version``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from trust_cards.cards.envelope import CardEnvelope
from trust_cards.cards.requests import CardScope, CreateCardRequest


@dataclass
class Card:
    """Identity card.

    Parameters
    ----------
    id:
        Fingerprint hex of ``snapshot``; ``None`` for cards built locally
        from a request that was never published.
    snapshot:
        Canonical snapshot bytes; everything else is derived from these.
    signatures:
        Signer id to raw signature bytes.
    version:
        Card format version reported by the service (``"4.0"`` for current
        cards, ``"3.0"`` for legacy ones).
    """

    id: Optional[str]
    snapshot: bytes
    identity: str
    identity_type: str
    public_key: bytes
    scope: CardScope = CardScope.APPLICATION
    data: dict[str, str] = field(default_factory=dict)
    device: Optional[str] = None
    device_name: Optional[str] = None
    version: Optional[str] = None
    signatures: dict[str, bytes] = field(default_factory=dict)
    relations: dict[str, object] = field(default_factory=dict)
    validation_token: Optional[bytes] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_request(
        cls,
        request: CreateCardRequest,
        card_id: str | None = None,
        version: str | None = None,
    ) -> "Card":
        """Build a card from a (signed) creation request."""
        return cls(
            id=card_id,
            snapshot=request.snapshot,
            identity=request.identity,
            identity_type=request.identity_type,
            public_key=request.public_key,
            scope=request.scope,
            data=dict(request.data),
            device=request.info.get("device"),
            device_name=request.info.get("device_name"),
            version=version,
            signatures=dict(request.signatures),
            relations=dict(request.relations),
            validation_token=request.validation_token,
        )

    @classmethod
    def from_response(cls, response: Mapping[str, object]) -> "Card":
        """Build a card from a decoded cards-service response body.

        Raises
        ------
        MalformedRequestError
            If the response is not envelope-shaped or its snapshot is not a
            card snapshot.
        """
        envelope = CardEnvelope.parse(response)
        request = CreateCardRequest.from_snapshot(
            envelope.snapshot_bytes(),
            envelope.signature_bytes(),
            envelope.validation_token_bytes(),
            envelope.meta.relations,
        )
        return cls.from_request(request, card_id=envelope.id, version=envelope.meta.card_version)

    @classmethod
    def import_card(cls, exported: str) -> "Card":
        """Inverse of :meth:`export`."""
        return cls.from_request(CreateCardRequest.import_request(exported))

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_request(self) -> CreateCardRequest:
        """Rebuild the creation request this card was made from."""
        return CreateCardRequest.from_snapshot(
            self.snapshot,
            self.signatures,
            self.validation_token,
            self.relations,
        )

    def export(self) -> str:
        return self.to_request().export()


__all__ = ["Card"]
