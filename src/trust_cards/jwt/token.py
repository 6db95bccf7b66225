"""Jwt: compact signed access token.

Token format
------------
::

    base64url(header_json).base64url(body_json)[.base64url(signature)]

All segments are URL-safe base64 without padding. The first two segments
joined by ``.`` are the *unsigned data*, which is what the signature covers.
A token parsed from a string keeps its original header and body segments,
so it re-serializes (and verifies) byte-for-byte even if another issuer
formatted its JSON differently.
"""
from __future__ import annotations

import abc
import binascii
import datetime
from typing import Optional

from trust_cards.buffer import b64url_decode, b64url_encode
from trust_cards.errors import MalformedTokenError
from trust_cards.jwt.body import JwtBodyContent
from trust_cards.jwt.header import JwtHeaderContent


class AccessToken(abc.ABC):
    """What token providers hand out: a string form, an identity and an expiry check."""

    @property
    @abc.abstractmethod
    def identity(self) -> str:
        """Identity the token was issued for."""

    @abc.abstractmethod
    def is_expired(self, now: datetime.datetime | None = None) -> bool:
        """Return True if the token is no longer usable at *now*."""

    @abc.abstractmethod
    def __str__(self) -> str:
        """Wire form of the token."""


class Jwt(AccessToken):
    """A header/body pair, optionally signed.

    Parameters
    ----------
    header_content / body_content:
        The decoded token parts.
    signature_data:
        Raw signature over :attr:`unsigned_data`, or None for an unsigned
        token.
    encoded_parts:
        Original ``(header, body)`` segments when the token came off the
        wire. Omit when building a new token.
    """

    def __init__(
        self,
        header_content: JwtHeaderContent,
        body_content: JwtBodyContent,
        signature_data: Optional[bytes] = None,
        encoded_parts: tuple[str, str] | None = None,
    ) -> None:
        self._header_content = header_content
        self._body_content = body_content
        self._signature_data = signature_data
        if encoded_parts is None:
            encoded_parts = (
                b64url_encode(header_content.to_json()),
                b64url_encode(body_content.to_json()),
            )
        self._encoded_parts = encoded_parts

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def from_string(cls, token: str) -> "Jwt":
        """Parse a signed token string.

        Raises
        ------
        MalformedTokenError
            If the string does not have exactly three segments, a segment is
            not base64url, or the header/body are not valid token JSON.
        """
        if not isinstance(token, str):
            raise MalformedTokenError(f"expected str, got {type(token).__name__}")
        parts = token.strip().split(".")
        if len(parts) != 3:
            raise MalformedTokenError(f"expected 3 dot-separated parts, got {len(parts)}")

        header_segment, body_segment, signature_segment = parts
        try:
            header_raw = b64url_decode(header_segment)
            body_raw = b64url_decode(body_segment)
            signature = b64url_decode(signature_segment)
        except (binascii.Error, ValueError) as exc:
            raise MalformedTokenError(f"segment is not base64url ({exc})") from exc
        if not signature:
            raise MalformedTokenError("signature segment is empty")

        return cls(
            JwtHeaderContent.from_json(header_raw),
            JwtBodyContent.from_json(body_raw),
            signature,
            encoded_parts=(header_segment, body_segment),
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def header_content(self) -> JwtHeaderContent:
        return self._header_content

    @property
    def body_content(self) -> JwtBodyContent:
        return self._body_content

    @property
    def signature_data(self) -> Optional[bytes]:
        return self._signature_data

    @property
    def identity(self) -> str:
        return self._body_content.identity

    @property
    def expires_at(self) -> datetime.datetime:
        return self._body_content.expires_at

    @property
    def unsigned_data(self) -> bytes:
        """The bytes a signature covers: ``header.body`` segments."""
        return ".".join(self._encoded_parts).encode("ascii")

    @property
    def string_representation(self) -> str:
        unsigned = ".".join(self._encoded_parts)
        if self._signature_data is None:
            return unsigned
        return f"{unsigned}.{b64url_encode(self._signature_data)}"

    def with_signature(self, signature_data: bytes) -> "Jwt":
        """Return a signed copy of this token."""
        return Jwt(
            self._header_content,
            self._body_content,
            signature_data,
            encoded_parts=self._encoded_parts,
        )

    def is_expired(self, now: datetime.datetime | None = None) -> bool:
        current = now or datetime.datetime.now(datetime.timezone.utc)
        return current >= self._body_content.expires_at

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return self.string_representation

    def __repr__(self) -> str:
        return (
            f"Jwt(identity={self.identity!r}, app_id={self._body_content.app_id!r}, "
            f"expires_at={self.expires_at.isoformat()!r}, "
            f"signed={self._signature_data is not None})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Jwt):
            return NotImplemented
        return self.string_representation == other.string_representation

    def __hash__(self) -> int:
        return hash(self.string_representation)


__all__ = ["AccessToken", "Jwt"]
