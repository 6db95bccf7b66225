"""Exception taxonomy shared by cards, tokens, and providers.

Parse failures (``Malformed*``) are kept apart from trust failures
(:class:`InvalidCardError`, :class:`SignatureVerificationError`) so callers
can tell "bad input" from "input well-formed but untrusted".
"""
from __future__ import annotations

from typing import Sequence


class TrustCardsError(Exception):
    """Base class for all trust-cards errors."""


# ---------------------------------------------------------------------------
# Structural (parse) errors
# ---------------------------------------------------------------------------


class MalformedModelError(TrustCardsError, ValueError):
    """Raised when a snapshot model is missing required fields or has bad types."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed snapshot model: {reason}")


class MalformedRequestError(TrustCardsError, ValueError):
    """Raised when an exported request envelope cannot be parsed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed request: {reason}")


class MalformedTokenError(TrustCardsError, ValueError):
    """Raised when a token string is not a well-formed three-part JWT."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Wrong JWT format: {reason}")


class KeyImportError(TrustCardsError, ValueError):
    """Raised when key material cannot be imported by a crypto provider."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cannot import key: {reason}")


# ---------------------------------------------------------------------------
# Precondition / state errors
# ---------------------------------------------------------------------------


class MissingIdentityError(TrustCardsError, ValueError):
    """Raised when a token is requested without an identity."""

    def __init__(self) -> None:
        super().__init__("Identity property is mandatory")


class SnapshotFrozenError(TrustCardsError):
    """Raised when a request field is changed after its snapshot was taken."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(
            f"Cannot modify {field_name!r}: the request snapshot has already been "
            "taken and is what signatures cover"
        )


# ---------------------------------------------------------------------------
# Trust errors
# ---------------------------------------------------------------------------


class SignatureVerificationError(TrustCardsError):
    """Raised when well-formed input fails signature verification."""

    def __init__(self, subject: str) -> None:
        self.subject = subject
        super().__init__(f"Signature verification failed for {subject}")


class InvalidCardError(TrustCardsError):
    """Raised by batch validation when one or more cards are not valid.

    Parameters
    ----------
    invalid_cards:
        Every card that failed validation, in input order.
    """

    def __init__(self, invalid_cards: Sequence[object]) -> None:
        self.invalid_cards = list(invalid_cards)
        ids = ", ".join(
            str(getattr(card, "id", None) or "<no id>") for card in self.invalid_cards
        )
        super().__init__(
            f"{len(self.invalid_cards)} card(s) failed validation: {ids}"
        )


__all__ = [
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
