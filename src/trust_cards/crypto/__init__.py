"""Crypto capability: hashing, signatures, and key handling.

Everything above this package talks to :class:`CryptoProvider` only. The
bundled :class:`Ed25519CryptoProvider` requires the ``cryptography`` package.
"""
from __future__ import annotations

from trust_cards.crypto.ed25519 import Ed25519CryptoProvider
from trust_cards.crypto.fingerprint import Fingerprint
from trust_cards.crypto.provider import CryptoProvider, KeyPair

__all__ = [
    "CryptoProvider",
    "Ed25519CryptoProvider",
    "Fingerprint",
    "KeyPair",
]
