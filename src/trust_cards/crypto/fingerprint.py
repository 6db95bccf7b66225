"""Fingerprint: hash digest of a canonical snapshot."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Fingerprint:
    """Immutable digest value with a canonical lowercase-hex form.

    A fingerprint doubles as the content-addressed identifier of whatever
    snapshot it was computed from: a card's ``id`` is ``fingerprint.to_hex()``
    and a self-signature is keyed by the same string.

    Parameters
    ----------
    value:
        Raw digest bytes.
    """

    value: bytes

    @classmethod
    def from_hex(cls, fingerprint_hex: str) -> "Fingerprint":
        """Parse the hex form back into a fingerprint.

        Raises
        ------
        ValueError
            If *fingerprint_hex* is not valid hex.
        """
        return cls(bytes.fromhex(fingerprint_hex))

    def to_hex(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return self.to_hex()


__all__ = ["Fingerprint"]
