"""Tests for trust_cards.cards.validator: CardValidator."""
from __future__ import annotations

import pytest

from trust_cards.audit import TrustAuditLogger
from trust_cards.buffer import b64_encode
from trust_cards.cards.card import Card
from trust_cards.cards.requests import CreateCardRequest
from trust_cards.cards.signer import RequestSigner
from trust_cards.cards.validator import LEGACY_CARD_VERSION, CardValidator
from trust_cards.config import SERVICE_CARD_ID
from trust_cards.crypto import Ed25519CryptoProvider, KeyPair
from trust_cards.errors import InvalidCardError

_TEST_SERVICE_ID = "test-cards-service"
_APP_ID = "app-0001"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def crypto() -> Ed25519CryptoProvider:
    return Ed25519CryptoProvider()


@pytest.fixture(scope="module")
def service_keys(crypto: Ed25519CryptoProvider) -> KeyPair:
    return crypto.generate_keys()


@pytest.fixture(scope="module")
def app_keys(crypto: Ed25519CryptoProvider) -> KeyPair:
    return crypto.generate_keys()


@pytest.fixture()
def validator(crypto: Ed25519CryptoProvider, service_keys: KeyPair) -> CardValidator:
    """Validator whose default verifier is the test service key."""
    return CardValidator(
        crypto,
        service_card_id=_TEST_SERVICE_ID,
        service_public_key=b64_encode(crypto.export_public_key(service_keys.public_key)),
    )


def _publish(
    crypto: Ed25519CryptoProvider,
    service_keys: KeyPair,
    identity: str = "alice",
    app_keys: KeyPair | None = None,
) -> Card:
    """Build a card the way the service returns it: self, app and service signed."""
    owner = crypto.generate_keys()
    request = CreateCardRequest(identity, "username", crypto.export_public_key(owner.public_key))
    signer = RequestSigner(crypto)
    card_id = signer.self_sign(request, owner.private_key)
    if app_keys is not None:
        signer.authority_sign(request, _APP_ID, app_keys.private_key)
    signer.authority_sign(request, _TEST_SERVICE_ID, service_keys.private_key)
    return Card.from_request(request, card_id=card_id, version="4.0")


# ---------------------------------------------------------------------------
# Verifier set
# ---------------------------------------------------------------------------


class TestVerifierSet:
    def test_default_verifier_is_the_service(self, crypto: Ed25519CryptoProvider) -> None:
        assert set(CardValidator(crypto).verifiers) == {SERVICE_CARD_ID}

    def test_defaults_can_be_skipped(self, crypto: Ed25519CryptoProvider) -> None:
        assert CardValidator(crypto, include_default_verifiers=False).verifiers == {}

    def test_verifiers_returns_a_copy(self, validator: CardValidator) -> None:
        validator.verifiers["injected"] = object()
        assert "injected" not in validator.verifiers

    def test_add_verifier_accepts_exported_bytes(
        self, crypto: Ed25519CryptoProvider, validator: CardValidator, app_keys: KeyPair
    ) -> None:
        validator.add_verifier(_APP_ID, crypto.export_public_key(app_keys.public_key))
        assert _APP_ID in validator.verifiers

    def test_verifier_state_is_per_instance(
        self, crypto: Ed25519CryptoProvider, app_keys: KeyPair
    ) -> None:
        first = CardValidator(crypto)
        second = CardValidator(crypto)
        first.add_verifier(_APP_ID, app_keys.public_key)
        assert _APP_ID not in second.verifiers


# ---------------------------------------------------------------------------
# is_valid
# ---------------------------------------------------------------------------


class TestIsValid:
    def test_published_card_is_valid(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        assert validator.is_valid(_publish(crypto, service_keys)) is True

    def test_flipped_snapshot_byte_invalidates(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        tampered = bytearray(card.snapshot)
        tampered[len(tampered) // 2] ^= 0x01
        card.snapshot = bytes(tampered)
        assert validator.is_valid(card) is False

    def test_id_must_match_fingerprint(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        card.id = "00" * 32
        assert validator.is_valid(card) is False

    def test_missing_id_is_invalid(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        card.id = None
        assert validator.is_valid(card) is False

    def test_self_signature_required(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        del card.signatures[card.id]
        assert validator.is_valid(card) is False

    def test_self_signature_must_be_by_card_key(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        impostor = crypto.generate_keys()
        card.signatures[card.id] = crypto.sign(bytes.fromhex(card.id), impostor.private_key)
        assert validator.is_valid(card) is False

    def test_service_signature_required(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        del card.signatures[_TEST_SERVICE_ID]
        assert validator.is_valid(card) is False

    def test_real_service_verifier_rejects_unpublished_card(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair
    ) -> None:
        card = _publish(crypto, service_keys)
        assert CardValidator(crypto).is_valid(card) is False

    def test_added_verifier_required(
        self,
        crypto: Ed25519CryptoProvider,
        service_keys: KeyPair,
        app_keys: KeyPair,
        validator: CardValidator,
    ) -> None:
        validator.add_verifier(_APP_ID, app_keys.public_key)
        assert validator.is_valid(_publish(crypto, service_keys)) is False
        assert validator.is_valid(_publish(crypto, service_keys, app_keys=app_keys)) is True

    def test_wrong_key_under_right_id(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        other = crypto.generate_keys()
        card.signatures[_TEST_SERVICE_ID] = crypto.sign(bytes.fromhex(card.id), other.private_key)
        assert validator.is_valid(card) is False

    def test_self_signed_card_valid_without_defaults(self, crypto: Ed25519CryptoProvider) -> None:
        owner = crypto.generate_keys()
        request = CreateCardRequest("bob", "email", crypto.export_public_key(owner.public_key))
        card_id = RequestSigner(crypto).self_sign(request, owner.private_key)
        card = Card.from_request(request, card_id=card_id)
        assert CardValidator(crypto, include_default_verifiers=False).is_valid(card) is True

    def test_unimportable_card_key_is_invalid(self, crypto: Ed25519CryptoProvider) -> None:
        signer_keys = crypto.generate_keys()
        request = CreateCardRequest("bob", "email", b"not a key")
        card_id = RequestSigner(crypto).self_sign(request, signer_keys.private_key)
        card = Card.from_request(request, card_id=card_id)
        assert CardValidator(crypto, include_default_verifiers=False).is_valid(card) is False


# ---------------------------------------------------------------------------
# Structural rejects and the legacy branch
# ---------------------------------------------------------------------------


class TestStructuralChecks:
    def test_none_card(self, validator: CardValidator) -> None:
        assert validator.is_valid(None) is False

    def test_empty_signatures(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        card.signatures = {}
        assert validator.is_valid(card) is False

    def test_empty_snapshot(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        card.snapshot = b""
        assert validator.is_valid(card) is False

    def test_legacy_version_accepted(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        card = _publish(crypto, service_keys)
        card.signatures = {}
        card.version = LEGACY_CARD_VERSION
        assert validator.is_valid(card) is True


# ---------------------------------------------------------------------------
# validate_cards
# ---------------------------------------------------------------------------


class TestValidateCards:
    def test_all_valid_returns_cards(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        cards = [_publish(crypto, service_keys, "a"), _publish(crypto, service_keys, "b")]
        assert validator.validate_cards(cards) == cards

    def test_lists_every_invalid_card(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair, validator: CardValidator
    ) -> None:
        good = _publish(crypto, service_keys, "good")
        bad_one = _publish(crypto, service_keys, "bad1")
        bad_one.id = "ff" * 32
        bad_two = _publish(crypto, service_keys, "bad2")
        bad_two.signatures = {}

        with pytest.raises(InvalidCardError) as exc_info:
            validator.validate_cards([bad_one, good, bad_two])
        assert exc_info.value.invalid_cards == [bad_one, bad_two]
        assert "2 card(s)" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------------


class TestValidatorAudit:
    def test_decisions_recorded(
        self, crypto: Ed25519CryptoProvider, service_keys: KeyPair
    ) -> None:
        audit = TrustAuditLogger()
        validator = CardValidator(
            crypto,
            audit_logger=audit,
            service_card_id=_TEST_SERVICE_ID,
            service_public_key=b64_encode(crypto.export_public_key(service_keys.public_key)),
        )
        good = _publish(crypto, service_keys)
        bad = _publish(crypto, service_keys)
        del bad.signatures[_TEST_SERVICE_ID]

        validator.is_valid(good)
        validator.is_valid(bad)

        events = audit.read_log()
        assert events[0]["event_type"] == "card_validated"
        assert events[0]["subject"] == good.id
        assert events[1]["event_type"] == "card_rejected"
        assert _TEST_SERVICE_ID in events[1]["details"]["reason"]
