#!/usr/bin/env python3
"""Example: Card lifecycle

Creates a card request, signs it as the owner and as the application,
simulates the cards service adding its signature, and validates the
returned card.

Usage:
    python examples/01_card_lifecycle.py

Requirements:
    pip install trust-cards
"""
from __future__ import annotations

import trust_cards
from trust_cards import (
    Card,
    CardValidator,
    CreateCardRequest,
    Ed25519CryptoProvider,
    RequestSigner,
)
from trust_cards.buffer import b64_encode


def main() -> None:
    print(f"trust-cards version: {trust_cards.__version__}")
    crypto = Ed25519CryptoProvider()
    owner = crypto.generate_keys()
    app = crypto.generate_keys()
    service = crypto.generate_keys()

    # Step 1: Build and sign the creation request
    request = CreateCardRequest(
        identity="alice@example.com",
        identity_type="email",
        public_key=crypto.export_public_key(owner.public_key),
        data={"department": "research"},
    )
    signer = RequestSigner(crypto)
    fingerprint_hex = signer.self_sign(request, owner.private_key)
    signer.authority_sign(request, "example-app", app.private_key)
    print(f"Request fingerprint: {fingerprint_hex}")

    # Step 2: The service signs and publishes it
    published = CreateCardRequest.import_request(request.export())
    signer.authority_sign(published, "example-service", service.private_key)
    response = published.request_model()
    response["id"] = fingerprint_hex
    response["meta"]["card_version"] = "4.0"

    # Step 3: Validate the published card
    validator = CardValidator(
        crypto,
        service_card_id="example-service",
        service_public_key=b64_encode(crypto.export_public_key(service.public_key)),
    )
    validator.add_verifier("example-app", app.public_key)
    card = Card.from_response(response)
    print(f"Card {card.id[:16]}... valid: {validator.is_valid(card)}")

    # Step 4: Any change to the snapshot breaks the content address
    card.snapshot = card.snapshot.replace(b"research", b"finance")
    print(f"Tampered card valid: {validator.is_valid(card)}")


if __name__ == "__main__":
    main()
