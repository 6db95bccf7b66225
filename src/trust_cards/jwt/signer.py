"""AccessTokenSigner: names the token algorithm and signs/verifies unsigned token bytes."""
from __future__ import annotations

from typing import Any

from trust_cards.buffer import BufferLike
from trust_cards.crypto.ed25519 import Ed25519CryptoProvider
from trust_cards.crypto.provider import CryptoProvider

DEFAULT_ALGORITHM = "VEDS512"


class AccessTokenSigner:
    """Thin adapter between JWT code and a :class:`CryptoProvider`.

    Parameters
    ----------
    crypto:
        Provider used for signatures. Defaults to Ed25519.
    algorithm:
        Value written to (and expected in) the ``alg`` header field.
    """

    def __init__(
        self,
        crypto: CryptoProvider | None = None,
        algorithm: str = DEFAULT_ALGORITHM,
    ) -> None:
        self.crypto = crypto or Ed25519CryptoProvider()
        self.algorithm = algorithm

    def generate_token_signature(self, data: BufferLike, private_key: Any) -> bytes:
        return self.crypto.sign(data, private_key)

    def verify_token_signature(
        self, signature: BufferLike, data: BufferLike, public_key: Any
    ) -> bool:
        return self.crypto.verify(data, signature, public_key)


__all__ = ["AccessTokenSigner", "DEFAULT_ALGORITHM"]
