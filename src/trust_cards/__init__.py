"""trust-cards: signed identity cards and access tokens.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick start
-----------
::

    from trust_cards import (
        Ed25519CryptoProvider, CreateCardRequest, RequestSigner, Card, CardValidator,
    )

    crypto = Ed25519CryptoProvider()
    keys = crypto.generate_keys()
    request = CreateCardRequest("alice", "username", crypto.export_public_key(keys.public_key))
    RequestSigner(crypto).self_sign(request, keys.private_key)
    exported = request.export()
"""
from __future__ import annotations

__version__: str = "0.1.0"

from trust_cards.audit import AuditEvent, TrustAuditLogger
from trust_cards.buffer import Buffer, StringEncoding

# ------------------------------------------------------------------
# Cards
# ------------------------------------------------------------------
from trust_cards.cards import (
    AddRelationRequest,
    Card,
    CardScope,
    CardValidator,
    CreateCardRequest,
    DeleteRelationRequest,
    RequestSigner,
    RevocationReason,
    RevokeCardRequest,
    SignableRequest,
)
from trust_cards.config import SERVICE_CARD_ID, TrustCardsConfig, load_config

# ------------------------------------------------------------------
# Crypto
# ------------------------------------------------------------------
from trust_cards.crypto import CryptoProvider, Ed25519CryptoProvider, Fingerprint, KeyPair
from trust_cards.errors import (
    InvalidCardError,
    KeyImportError,
    MalformedModelError,
    MalformedRequestError,
    MalformedTokenError,
    MissingIdentityError,
    SignatureVerificationError,
    SnapshotFrozenError,
    TrustCardsError,
)

# ------------------------------------------------------------------
# Tokens
# ------------------------------------------------------------------
from trust_cards.jwt import (
    AccessToken,
    AccessTokenSigner,
    Jwt,
    JwtBodyContent,
    JwtGenerator,
    JwtHeaderContent,
    JwtVerifier,
)
from trust_cards.providers import (
    AccessTokenProvider,
    CachingJwtProvider,
    CallbackJwtProvider,
    ConstAccessTokenProvider,
    TokenContext,
)

__all__ = [
    "__version__",
    # Ambient
    "AuditEvent",
    "Buffer",
    "SERVICE_CARD_ID",
    "StringEncoding",
    "TrustAuditLogger",
    "TrustCardsConfig",
    "load_config",
    # Crypto
    "CryptoProvider",
    "Ed25519CryptoProvider",
    "Fingerprint",
    "KeyPair",
    # Cards
    "AddRelationRequest",
    "Card",
    "CardScope",
    "CardValidator",
    "CreateCardRequest",
    "DeleteRelationRequest",
    "RequestSigner",
    "RevocationReason",
    "RevokeCardRequest",
    "SignableRequest",
    # Tokens
    "AccessToken",
    "AccessTokenSigner",
    "Jwt",
    "JwtBodyContent",
    "JwtGenerator",
    "JwtHeaderContent",
    "JwtVerifier",
    # Providers
    "AccessTokenProvider",
    "CachingJwtProvider",
    "CallbackJwtProvider",
    "ConstAccessTokenProvider",
    "TokenContext",
    # Errors
    "InvalidCardError",
    "KeyImportError",
    "MalformedModelError",
    "MalformedRequestError",
    "MalformedTokenError",
    "MissingIdentityError",
    "SignatureVerificationError",
    "SnapshotFrozenError",
    "TrustCardsError",
]
