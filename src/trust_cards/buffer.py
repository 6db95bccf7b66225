"""Buffer: the single normalized byte input accepted at API edges.

Callers hand over key material, snapshots, and signatures in whatever form
they hold them: raw ``bytes``, UTF-8 text, base64 text, or hex text. A
:class:`Buffer` pins down which of those a value is exactly once, at the
edge, so the rest of the package only ever deals with ``bytes``.

Also hosts the base64 helpers used by the card envelope (standard alphabet,
padded) and the JWT codec (URL-safe alphabet, unpadded).
"""
from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

_B64URL_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


class StringEncoding(str, Enum):
    """Text encodings a :class:`Buffer` can be read from or rendered to."""

    UTF8 = "utf8"
    BASE64 = "base64"
    HEX = "hex"


@dataclass(frozen=True)
class Buffer:
    """Immutable wrapper around a resolved byte sequence.

    Construct through one of the ``from_*`` class methods so the source
    encoding is explicit, or through :meth:`coerce` for values that are
    already ``bytes`` (or a ``Buffer``).

    Example
    -------
    ::

        key = Buffer.from_base64("MCowBQYDK2VwAyEA...")
        bytes(key)
    """

    data: bytes

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> "Buffer":
        return cls(bytes(data))

    @classmethod
    def from_string(
        cls, text: str, encoding: StringEncoding = StringEncoding.UTF8
    ) -> "Buffer":
        """Decode *text* according to *encoding*.

        Raises
        ------
        ValueError
            If *text* is not valid for the requested encoding.
        """
        encoding = StringEncoding(encoding)
        if encoding is StringEncoding.BASE64:
            return cls(b64_decode(text))
        if encoding is StringEncoding.HEX:
            return cls(bytes.fromhex(text))
        return cls(text.encode("utf-8"))

    @classmethod
    def from_utf8(cls, text: str) -> "Buffer":
        return cls.from_string(text, StringEncoding.UTF8)

    @classmethod
    def from_base64(cls, text: str) -> "Buffer":
        return cls.from_string(text, StringEncoding.BASE64)

    @classmethod
    def from_hex(cls, text: str) -> "Buffer":
        return cls.from_string(text, StringEncoding.HEX)

    @classmethod
    def coerce(cls, value: "BufferLike") -> "Buffer":
        """Normalize a :data:`BufferLike` into a ``Buffer``.

        ``str`` values are treated as UTF-8 text. Base64 or hex text must be
        wrapped explicitly with :meth:`from_base64` / :meth:`from_hex`.
        """
        if isinstance(value, Buffer):
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(bytes(value))
        if isinstance(value, str):
            return cls.from_utf8(value)
        raise TypeError(
            f"Expected bytes, str, or Buffer, got {type(value).__name__}"
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_string(self, encoding: StringEncoding = StringEncoding.UTF8) -> str:
        encoding = StringEncoding(encoding)
        if encoding is StringEncoding.BASE64:
            return b64_encode(self.data)
        if encoding is StringEncoding.HEX:
            return self.data.hex()
        return self.data.decode("utf-8")

    def to_base64(self) -> str:
        return self.to_string(StringEncoding.BASE64)

    def to_hex(self) -> str:
        return self.to_string(StringEncoding.HEX)

    def to_utf8(self) -> str:
        return self.to_string(StringEncoding.UTF8)

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)


BufferLike = Union[Buffer, bytes, bytearray, memoryview, str]


def to_bytes(value: BufferLike) -> bytes:
    """Shorthand for ``bytes(Buffer.coerce(value))``."""
    return Buffer.coerce(value).data


# ---------------------------------------------------------------------------
# base64 helpers
# ---------------------------------------------------------------------------


def b64_encode(data: bytes) -> str:
    """Standard-alphabet, padded base64 (the card envelope encoding)."""
    return base64.b64encode(data).decode("ascii")


def b64_decode(text: str) -> bytes:
    """Strictly decode standard base64; raises :class:`binascii.Error` on junk."""
    return base64.b64decode(text, validate=True)


def b64url_encode(data: bytes) -> str:
    """URL-safe base64 with the trailing ``=`` padding stripped (JWT segments)."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> bytes:
    """Decode an unpadded URL-safe base64 segment.

    Raises
    ------
    binascii.Error
        If *text* contains characters outside the URL-safe alphabet or has
        an impossible length.
    """
    if not _B64URL_ALPHABET.fullmatch(text):
        raise binascii.Error(f"Non base64url character in segment {text[:16]!r}")
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


__all__ = [
    "Buffer",
    "BufferLike",
    "StringEncoding",
    "b64_decode",
    "b64_encode",
    "b64url_decode",
    "b64url_encode",
    "to_bytes",
]
