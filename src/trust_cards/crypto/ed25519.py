"""Ed25519CryptoProvider: CryptoProvider backed by the ``cryptography`` package.

Hashing is SHA-256 (the fingerprint digest). Signatures are Ed25519 over the
bytes handed in, which for cards is the 32-byte fingerprint and for tokens is
the unsigned ``header.body`` string.

Key serialization
-----------------
- Public keys export as DER ``SubjectPublicKeyInfo``; that is the form
  embedded (base64) in card snapshots. Import additionally accepts PEM and
  the 32-byte raw key.
- Private keys export as DER PKCS#8, encrypted when a password is given.
  Import additionally accepts PEM and the 32-byte raw seed.
"""
from __future__ import annotations

import hashlib

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_der_private_key,
    load_der_public_key,
    load_pem_private_key,
    load_pem_public_key,
)

from trust_cards.buffer import BufferLike, to_bytes
from trust_cards.crypto.provider import CryptoProvider, KeyPair
from trust_cards.errors import KeyImportError

_PEM_MARKER = b"-----BEGIN"
_RAW_KEY_SIZE = 32


class Ed25519CryptoProvider(CryptoProvider):
    """Ed25519 + SHA-256 implementation of :class:`CryptoProvider`.

    Example
    -------
    ::

        crypto = Ed25519CryptoProvider()
        keys = crypto.generate_keys()
        fingerprint = crypto.calculate_fingerprint(b"snapshot")
        signature = crypto.sign(fingerprint.value, keys.private_key)
        assert crypto.verify(fingerprint.value, signature, keys.public_key)
    """

    def compute_hash(self, data: BufferLike) -> bytes:
        return hashlib.sha256(to_bytes(data)).digest()

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    def sign(self, data: BufferLike, private_key: Ed25519PrivateKey) -> bytes:
        """Sign *data* with an Ed25519 private key.

        Returns
        -------
        bytes
            The 64-byte Ed25519 signature.
        """
        return private_key.sign(to_bytes(data))

    def verify(
        self,
        data: BufferLike,
        signature: BufferLike,
        public_key: Ed25519PublicKey,
    ) -> bool:
        try:
            public_key.verify(to_bytes(signature), to_bytes(data))
            return True
        except (InvalidSignature, ValueError):
            return False

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def generate_keys(self) -> KeyPair:
        private_key = Ed25519PrivateKey.generate()
        return KeyPair(private_key=private_key, public_key=private_key.public_key())

    def import_private_key(
        self, key_data: BufferLike, password: bytes | None = None
    ) -> Ed25519PrivateKey:
        """Load an Ed25519 private key from PEM, DER PKCS#8, or a raw 32-byte seed.

        Raises
        ------
        KeyImportError
            If the data is not an Ed25519 private key or the password is wrong.
        """
        raw = to_bytes(key_data)
        try:
            if raw.startswith(_PEM_MARKER):
                key = load_pem_private_key(raw, password=password)
            elif len(raw) == _RAW_KEY_SIZE and password is None:
                key = Ed25519PrivateKey.from_private_bytes(raw)
            else:
                key = load_der_private_key(raw, password=password)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise KeyImportError(str(exc)) from exc
        if not isinstance(key, Ed25519PrivateKey):
            raise KeyImportError(f"expected an Ed25519 private key, got {type(key).__name__}")
        return key

    def import_public_key(self, key_data: BufferLike) -> Ed25519PublicKey:
        """Load an Ed25519 public key from PEM, DER SPKI, or raw 32 bytes.

        Raises
        ------
        KeyImportError
            If the data is not an Ed25519 public key.
        """
        raw = to_bytes(key_data)
        try:
            if raw.startswith(_PEM_MARKER):
                key = load_pem_public_key(raw)
            elif len(raw) == _RAW_KEY_SIZE:
                key = Ed25519PublicKey.from_public_bytes(raw)
            else:
                key = load_der_public_key(raw)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise KeyImportError(str(exc)) from exc
        if not isinstance(key, Ed25519PublicKey):
            raise KeyImportError(f"expected an Ed25519 public key, got {type(key).__name__}")
        return key

    def export_private_key(
        self, private_key: Ed25519PrivateKey, password: bytes | None = None
    ) -> bytes:
        encryption = BestAvailableEncryption(password) if password else NoEncryption()
        return private_key.private_bytes(Encoding.DER, PrivateFormat.PKCS8, encryption)

    def export_public_key(self, public_key: Ed25519PublicKey) -> bytes:
        return public_key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)

    def extract_public_key(self, private_key: Ed25519PrivateKey) -> Ed25519PublicKey:
        return private_key.public_key()


__all__ = ["Ed25519CryptoProvider"]
