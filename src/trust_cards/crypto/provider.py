"""CryptoProvider: the capability every signing and verifying component needs.

Cards, requests, and tokens never touch an asymmetric algorithm directly.
They hash, sign, and verify through a :class:`CryptoProvider`, which keeps
the algorithm itself pluggable. :class:`~trust_cards.crypto.ed25519.Ed25519CryptoProvider`
is the implementation shipped with the package.

Key objects are opaque to callers: whatever a provider returns from
:meth:`CryptoProvider.generate_keys` or the ``import_*`` methods is what it
expects back in :meth:`~CryptoProvider.sign` and :meth:`~CryptoProvider.verify`.
"""
from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any

from trust_cards.buffer import BufferLike
from trust_cards.crypto.fingerprint import Fingerprint


@dataclass(frozen=True)
class KeyPair:
    """A private key together with its public half."""

    private_key: Any
    public_key: Any


class CryptoProvider(abc.ABC):
    """Abstract hash/sign/verify/key-handling capability."""

    # ------------------------------------------------------------------
    # Hashing
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def compute_hash(self, data: BufferLike) -> bytes:
        """Return the digest of *data*."""

    def calculate_fingerprint(self, data: BufferLike) -> Fingerprint:
        """Return the :class:`Fingerprint` of *data* (its digest, wrapped)."""
        return Fingerprint(self.compute_hash(data))

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def sign(self, data: BufferLike, private_key: Any) -> bytes:
        """Sign *data* and return the raw signature bytes."""

    @abc.abstractmethod
    def verify(self, data: BufferLike, signature: BufferLike, public_key: Any) -> bool:
        """Return ``True`` if *signature* over *data* verifies under *public_key*.

        Never raises on a bad signature; a mismatch is reported as ``False``.
        """

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def generate_keys(self) -> KeyPair:
        """Generate a fresh key pair."""

    @abc.abstractmethod
    def import_private_key(self, key_data: BufferLike, password: bytes | None = None) -> Any:
        """Load a private key from its exported form."""

    @abc.abstractmethod
    def import_public_key(self, key_data: BufferLike) -> Any:
        """Load a public key from its exported form."""

    @abc.abstractmethod
    def export_private_key(self, private_key: Any, password: bytes | None = None) -> bytes:
        """Serialize a private key."""

    @abc.abstractmethod
    def export_public_key(self, public_key: Any) -> bytes:
        """Serialize a public key (the form embedded in card snapshots)."""

    @abc.abstractmethod
    def extract_public_key(self, private_key: Any) -> Any:
        """Return the public half of *private_key*."""


__all__ = ["CryptoProvider", "KeyPair"]
