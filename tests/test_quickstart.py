"""End-to-end flows through the public trust_cards API."""
from __future__ import annotations

from trust_cards import (
    AccessTokenSigner,
    CachingJwtProvider,
    Card,
    CardValidator,
    CreateCardRequest,
    Ed25519CryptoProvider,
    Jwt,
    JwtGenerator,
    JwtVerifier,
    RequestSigner,
    TokenContext,
)
from trust_cards.buffer import b64_encode


def test_package_exposes_version() -> None:
    import trust_cards

    assert trust_cards.__version__ == "0.1.0"


def test_card_publish_and_validate() -> None:
    crypto = Ed25519CryptoProvider()
    owner = crypto.generate_keys()
    app = crypto.generate_keys()
    service = crypto.generate_keys()

    # Client side: build, self-sign and app-sign, then export.
    request = CreateCardRequest(
        identity="alice",
        identity_type="username",
        public_key=crypto.export_public_key(owner.public_key),
    )
    signer = RequestSigner(crypto)
    signer.self_sign(request, owner.private_key)
    signer.authority_sign(request, "app-1", app.private_key)
    exported = request.export()

    # Service side: import, add its own signature, respond with the card id.
    received = CreateCardRequest.import_request(exported)
    signer.authority_sign(received, "cards-service", service.private_key)
    response = received.request_model()
    response["id"] = crypto.calculate_fingerprint(received.snapshot).to_hex()
    response["meta"]["card_version"] = "4.0"

    # Client side again: validate what the service returned.
    validator = CardValidator(
        crypto,
        service_card_id="cards-service",
        service_public_key=b64_encode(crypto.export_public_key(service.public_key)),
    )
    validator.add_verifier("app-1", crypto.export_public_key(app.public_key))
    card = Card.from_response(response)
    assert validator.is_valid(card)
    assert card.snapshot == request.snapshot


def test_token_issue_cache_and_verify() -> None:
    signer = AccessTokenSigner()
    api = signer.crypto.generate_keys()
    generator = JwtGenerator("app-1", api.private_key, "key-1", 20, signer)
    verifier = JwtVerifier(signer, api.public_key, "key-1")

    provider = CachingJwtProvider(lambda ctx: str(generator.generate_token(ctx.identity)))
    token = provider.get_token(TokenContext(operation="get", identity="alice"))

    assert isinstance(token, Jwt)
    assert not token.is_expired()
    assert verifier.verify_token(token)
