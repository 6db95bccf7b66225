"""Pydantic models for the card export envelope and service responses.

Wire shape (base64 of UTF-8 JSON when exported)::

    {
      "content_snapshot": "<base64 snapshot>",
      "meta": {
        "signs": {"<signer id>": "<base64 signature>", ...},
        "validation": {"token": "<base64 token>"},   # optional
        "relations": {...}                            # optional
      }
    }

Service responses carry the same shape plus a top-level ``id`` and
``meta.card_version``.
"""
from __future__ import annotations

import binascii
import json
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from trust_cards.buffer import b64_decode, b64_encode
from trust_cards.errors import MalformedRequestError


class ValidationMeta(BaseModel):
    """``meta.validation`` block."""

    token: str


class EnvelopeMeta(BaseModel):
    """``meta`` block of the envelope."""

    signs: dict[str, str] = Field(default_factory=dict)
    validation: Optional[ValidationMeta] = None
    relations: Optional[dict[str, object]] = None
    card_version: Optional[str] = None


class CardEnvelope(BaseModel):
    """A request or card as it travels between parties."""

    id: Optional[str] = None
    content_snapshot: str
    meta: EnvelopeMeta = Field(default_factory=EnvelopeMeta)

    # ------------------------------------------------------------------
    # Decoded accessors
    # ------------------------------------------------------------------

    def snapshot_bytes(self) -> bytes:
        return _decode_field(self.content_snapshot, "content_snapshot")

    def signature_bytes(self) -> dict[str, bytes]:
        return {
            signer_id: _decode_field(signature, f"meta.signs[{signer_id!r}]")
            for signer_id, signature in self.meta.signs.items()
        }

    def validation_token_bytes(self) -> bytes | None:
        if self.meta.validation is None:
            return None
        return _decode_field(self.meta.validation.token, "meta.validation.token")

    # ------------------------------------------------------------------
    # Construction / parsing
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        snapshot: bytes,
        signatures: dict[str, bytes],
        validation_token: bytes | None = None,
        relations: dict[str, object] | None = None,
    ) -> "CardEnvelope":
        return cls(
            content_snapshot=b64_encode(snapshot),
            meta=EnvelopeMeta(
                signs={signer_id: b64_encode(sig) for signer_id, sig in signatures.items()},
                validation=(
                    ValidationMeta(token=b64_encode(validation_token))
                    if validation_token is not None
                    else None
                ),
                relations=relations or None,
            ),
        )

    @classmethod
    def parse(cls, data: object) -> "CardEnvelope":
        """Validate a decoded JSON mapping.

        Raises
        ------
        MalformedRequestError
            If *data* does not have the envelope shape.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedRequestError(
                f"envelope does not match the expected shape ({exc.error_count()} error(s))"
            ) from exc

    @classmethod
    def import_exported(cls, exported: str) -> "CardEnvelope":
        """Decode the base64 export string produced by :meth:`export`.

        Raises
        ------
        MalformedRequestError
            If the string is not base64, not JSON, or not envelope-shaped.
        """
        try:
            payload = json.loads(b64_decode(exported.strip()).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedRequestError(f"exported data is not valid ({exc})") from exc
        return cls.parse(payload)

    def to_model(self) -> dict[str, object]:
        """Return the envelope as a plain dict with absent blocks omitted."""
        return self.model_dump(exclude_none=True)

    def export(self) -> str:
        """Return the envelope as base64 of compact UTF-8 JSON."""
        payload = json.dumps(self.to_model(), separators=(",", ":"))
        return b64_encode(payload.encode("utf-8"))


def _decode_field(value: str, name: str) -> bytes:
    try:
        return b64_decode(value)
    except binascii.Error as exc:
        raise MalformedRequestError(f"{name} is not valid base64") from exc


__all__ = ["CardEnvelope", "EnvelopeMeta", "ValidationMeta"]
