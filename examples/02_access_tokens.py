#!/usr/bin/env python3
"""Example: Access tokens

Issues a token for an identity, hands it out through a caching provider,
and verifies it with the application's public key.

Usage:
    python examples/02_access_tokens.py

Requirements:
    pip install trust-cards
"""
from __future__ import annotations

from trust_cards import (
    AccessTokenSigner,
    CachingJwtProvider,
    JwtGenerator,
    JwtVerifier,
    TokenContext,
)


def main() -> None:
    signer = AccessTokenSigner()
    api_keys = signer.crypto.generate_keys()
    generator = JwtGenerator(
        app_id="example-app",
        api_key=api_keys.private_key,
        api_public_key_id="example-key",
        lifetime_minutes=20,
        access_token_signer=signer,
    )

    # Step 1: Provider that asks the generator (normally a backend call)
    calls = 0

    def obtain(context: TokenContext) -> str:
        nonlocal calls
        calls += 1
        return str(generator.generate_token(context.identity))

    provider = CachingJwtProvider(obtain)
    context = TokenContext(operation="get", identity="alice")

    # Step 2: Repeated requests reuse the cached token
    token = provider.get_token(context)
    provider.get_token(context)
    print(f"Token for {token.identity}, expires {token.expires_at.isoformat()}")
    print(f"Obtain function called {calls} time(s)")

    # Step 3: Verify
    verifier = JwtVerifier(signer, api_keys.public_key, "example-key")
    print(f"Token verifies: {verifier.verify_token(token)}")


if __name__ == "__main__":
    main()
