"""Signable requests: the objects that get signed before a card is issued or revoked.

Every request kind supplies a snapshot model (its logical fields as a flat
mapping). The canonical bytes of that model are taken once and frozen; from
then on signatures, fingerprints, and exports all refer to those exact
bytes, and the model fields can no longer be reassigned.

Request kinds
-------------
``CreateCardRequest``
    Binds an identity to a public key.
``RevokeCardRequest``
    Revokes a published card by id.
``AddRelationRequest`` / ``DeleteRelationRequest``
    Add or drop a trusted card in the signing card's relations.
"""
from __future__ import annotations

import abc
import binascii
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Protocol, TypeVar

from trust_cards.buffer import BufferLike, b64_decode, b64_encode, to_bytes
from trust_cards.cards.envelope import CardEnvelope
from trust_cards.cards.snapshot import (
    SnapshotState,
    optional_str_map,
    parse_snapshot,
    require_str,
)
from trust_cards.errors import MalformedModelError, MalformedRequestError, SnapshotFrozenError

MAX_DATA_ENTRIES = 16

_R = TypeVar("_R", bound="SignableRequest")


class SnapshotCarrier(Protocol):
    """Anything holding card snapshot bytes: a :class:`Card` or a creation request."""

    @property
    def snapshot(self) -> bytes: ...


class CardScope(str, Enum):
    """Where a card is visible."""

    APPLICATION = "application"
    GLOBAL = "global"


class RevocationReason(str, Enum):
    UNSPECIFIED = "unspecified"
    COMPROMISED = "compromised"


# ---------------------------------------------------------------------------
# SignableRequest
# ---------------------------------------------------------------------------


class SignableRequest(abc.ABC):
    """Base contract shared by all request kinds.

    Subclasses implement :meth:`snapshot_model` and
    :meth:`restore_from_snapshot_model`, and list their model attributes in
    ``_snapshot_fields`` so they are locked once the snapshot is taken.
    """

    _snapshot_fields: ClassVar[frozenset[str]] = frozenset()

    def __init__(self) -> None:
        self._state = SnapshotState()
        self.signatures: dict[str, bytes] = {}
        self.validation_token: bytes | None = None
        self.relations: dict[str, object] = {}

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._snapshot_fields:
            state = self.__dict__.get("_state")
            if state is not None and state.resolved:
                raise SnapshotFrozenError(name)
        super().__setattr__(name, value)

    # ------------------------------------------------------------------
    # Per-kind model
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def snapshot_model(self) -> dict[str, Any]:
        """Return the request's logical fields as a snapshot model."""

    @abc.abstractmethod
    def restore_from_snapshot_model(self, model: Mapping[str, Any]) -> None:
        """Populate fields from a parsed snapshot model.

        Raises
        ------
        MalformedModelError
            If a required field is missing or has the wrong type.
        """

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> bytes:
        """Canonical snapshot bytes; taken on first access, then fixed."""
        return self._state.resolve(self.snapshot_model)

    @property
    def snapshot_taken(self) -> bool:
        return self._state.resolved

    def sign_with(self, signer_id: str, signature: BufferLike) -> None:
        """Record *signature* under *signer_id*, replacing any earlier one.

        Freezes the snapshot if it has not been taken yet.
        """
        self._state.resolve(self.snapshot_model)
        self.signatures[signer_id] = to_bytes(signature)

    # ------------------------------------------------------------------
    # Restore / import
    # ------------------------------------------------------------------

    def restore(
        self,
        snapshot: BufferLike,
        signatures: Mapping[str, BufferLike],
        validation_token: BufferLike | None = None,
        relations: Mapping[str, object] | None = None,
    ) -> None:
        """Replace this request's content with a received snapshot and signatures.

        Raises
        ------
        MalformedRequestError
            If the snapshot is not parseable or lacks required fields.
        """
        snapshot_bytes = to_bytes(snapshot)
        try:
            staged = _staged(type(self), parse_snapshot(snapshot_bytes))
        except MalformedModelError as exc:
            raise MalformedRequestError(exc.reason) from exc
        received = {signer_id: to_bytes(sig) for signer_id, sig in signatures.items()}
        token = to_bytes(validation_token) if validation_token is not None else None

        # Nothing on self changes until the new content has been fully read.
        self._state = SnapshotState()
        for name in self._snapshot_fields:
            setattr(self, name, getattr(staged, name))
        self._state.pin(snapshot_bytes)
        self.signatures = received
        self.validation_token = token
        self.relations = dict(relations or {})

    @classmethod
    def from_snapshot(
        cls: type[_R],
        snapshot: BufferLike,
        signatures: Mapping[str, BufferLike],
        validation_token: BufferLike | None = None,
        relations: Mapping[str, object] | None = None,
    ) -> _R:
        """Build a request of this kind directly from received parts."""
        request = cls.__new__(cls)
        SignableRequest.__init__(request)
        request.restore(snapshot, signatures, validation_token, relations)
        return request

    @classmethod
    def import_request(cls: type[_R], exported: str) -> _R:
        """Inverse of :meth:`export`.

        Raises
        ------
        MalformedRequestError
            If *exported* is not a valid export of this request kind.
        """
        envelope = CardEnvelope.import_exported(exported)
        return cls.from_snapshot(
            envelope.snapshot_bytes(),
            envelope.signature_bytes(),
            envelope.validation_token_bytes(),
            envelope.meta.relations,
        )

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def envelope(self) -> CardEnvelope:
        return CardEnvelope.build(
            self.snapshot,
            self.signatures,
            self.validation_token,
            self.relations,
        )

    def request_model(self) -> dict[str, object]:
        """The wire envelope as a plain dict (before base64 encoding)."""
        return self.envelope().to_model()

    def export(self) -> str:
        """Export the request as base64 of its JSON envelope."""
        return self.envelope().export()


# ---------------------------------------------------------------------------
# CreateCardRequest
# ---------------------------------------------------------------------------


class CreateCardRequest(SignableRequest):
    """Request to publish a card binding *identity* to *public_key*.

    Parameters
    ----------
    identity:
        The identity value (user name, e-mail, ...).
    identity_type:
        What kind of identity it is ("username", "email", ...).
    public_key:
        Exported public key bytes (see ``CryptoProvider.export_public_key``).
    scope:
        Card visibility. Defaults to application scope.
    data:
        Up to 16 custom string entries stored in the card.
    info:
        Device information; only ``device`` and ``device_name`` are
        meaningful to readers of the card.

    ``data`` and ``info`` are held as read-only mappings.
    """

    _snapshot_fields = frozenset(
        {"identity", "identity_type", "public_key", "scope", "data", "info"}
    )

    def __init__(
        self,
        identity: str,
        identity_type: str,
        public_key: BufferLike,
        scope: CardScope | str = CardScope.APPLICATION,
        data: Mapping[str, str] | None = None,
        info: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.identity = identity
        self.identity_type = identity_type
        self.public_key = to_bytes(public_key)
        self.scope = CardScope(scope)
        self.data = MappingProxyType(_check_data(dict(data or {})))
        self.info = MappingProxyType(dict(info or {}))

    def snapshot_model(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "identity_type": self.identity_type,
            "public_key": b64_encode(self.public_key),
            "scope": self.scope.value,
            "data": dict(self.data) or None,
            "info": dict(self.info) or None,
        }

    def restore_from_snapshot_model(self, model: Mapping[str, Any]) -> None:
        identity = require_str(model, "identity")
        identity_type = require_str(model, "identity_type")
        try:
            public_key = b64_decode(require_str(model, "public_key"))
        except binascii.Error as exc:
            raise MalformedModelError("field 'public_key' is not valid base64") from exc
        try:
            scope = CardScope(model.get("scope", CardScope.APPLICATION.value))
        except ValueError as exc:
            raise MalformedModelError(f"unknown scope {model.get('scope')!r}") from exc
        data = _check_data(optional_str_map(model, "data"))
        info = optional_str_map(model, "info")

        self.identity = identity
        self.identity_type = identity_type
        self.public_key = public_key
        self.scope = scope
        self.data = MappingProxyType(data)
        self.info = MappingProxyType(info)


# ---------------------------------------------------------------------------
# RevokeCardRequest
# ---------------------------------------------------------------------------


class RevokeCardRequest(SignableRequest):
    """Request to revoke the card with *card_id*."""

    _snapshot_fields = frozenset({"card_id", "reason"})

    def __init__(
        self,
        card_id: str,
        reason: RevocationReason | str = RevocationReason.UNSPECIFIED,
    ) -> None:
        super().__init__()
        self.card_id = card_id
        self.reason = RevocationReason(reason)

    def snapshot_model(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "revocation_reason": self.reason.value,
        }

    def restore_from_snapshot_model(self, model: Mapping[str, Any]) -> None:
        card_id = require_str(model, "card_id")
        raw_reason = require_str(model, "revocation_reason")
        try:
            reason = RevocationReason(raw_reason)
        except ValueError as exc:
            raise MalformedModelError(f"unknown revocation reason {raw_reason!r}") from exc
        self.card_id = card_id
        self.reason = reason


# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------


class AddRelationRequest(SignableRequest):
    """Request to record *trusted_card* as a relation of the signing card.

    The snapshot is the trusted card's own snapshot, byte for byte. The
    request is authority-signed with the id of the card that gains the
    relation. ``trusted_card`` is a detached view of that card's fields.

    Raises
    ------
    MalformedModelError
        If *trusted_card*'s snapshot is not a card snapshot.
    """

    _snapshot_fields = frozenset({"trusted_card"})

    def __init__(self, trusted_card: SnapshotCarrier) -> None:
        super().__init__()
        snapshot = to_bytes(trusted_card.snapshot)
        self.restore_from_snapshot_model(parse_snapshot(snapshot))
        self._state.pin(snapshot)

    def snapshot_model(self) -> dict[str, Any]:
        return self.trusted_card.snapshot_model()

    def restore_from_snapshot_model(self, model: Mapping[str, Any]) -> None:
        self.trusted_card = _staged(CreateCardRequest, model)


class DeleteRelationRequest(RevokeCardRequest):
    """Request to drop the card with *card_id* from the signing card's relations.

    Same snapshot model as :class:`RevokeCardRequest`; authority-signed with
    the id of the card that loses the relation.
    """


def _staged(cls: type[_R], model: Mapping[str, Any]) -> _R:
    """Build a detached request of *cls* from *model* without a snapshot."""
    request = cls.__new__(cls)
    SignableRequest.__init__(request)
    request.restore_from_snapshot_model(model)
    return request


def _check_data(data: dict[str, str]) -> dict[str, str]:
    if len(data) > MAX_DATA_ENTRIES:
        raise MalformedModelError(
            f"'data' may hold at most {MAX_DATA_ENTRIES} entries, got {len(data)}"
        )
    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise MalformedModelError("'data' must map strings to strings")
    return data


__all__ = [
    "AddRelationRequest",
    "CardScope",
    "CreateCardRequest",
    "DeleteRelationRequest",
    "MAX_DATA_ENTRIES",
    "RevocationReason",
    "RevokeCardRequest",
    "SignableRequest",
    "SnapshotCarrier",
]
