"""JWT body content.

The wire claims ``iss`` and ``sub`` are derived from the application id and
the identity with fixed prefixes; parsing strips the prefixes again.
Timestamps travel as integer epoch seconds and are held as aware UTC
datetimes.
"""
from __future__ import annotations

import datetime
import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from trust_cards.errors import MalformedTokenError

ISSUER_PREFIX = "virgil-"
SUBJECT_PREFIX = "identity-"


@dataclass(frozen=True)
class JwtBodyContent:
    """Immutable JWT body.

    Parameters
    ----------
    app_id:
        Application the token is issued for.
    identity:
        Identity the token authorizes.
    issued_at / expires_at:
        Aware UTC datetimes, whole seconds.
    additional_data:
        Free-form claims carried under ``ada``; written as ``null`` when empty.
    """

    app_id: str
    identity: str
    issued_at: datetime.datetime
    expires_at: datetime.datetime
    additional_data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def issuer(self) -> str:
        return ISSUER_PREFIX + self.app_id

    @property
    def subject(self) -> str:
        return SUBJECT_PREFIX + self.identity

    def to_json(self) -> bytes:
        claims: dict[str, Any] = {
            "iss": self.issuer,
            "sub": self.subject,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
            "ada": dict(self.additional_data) if self.additional_data else None,
        }
        return json.dumps(claims, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_json(cls, raw: bytes) -> "JwtBodyContent":
        """Parse a decoded body segment.

        Raises
        ------
        MalformedTokenError
            If a claim is missing, has the wrong type, or lacks its prefix.
        """
        try:
            claims = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedTokenError(f"body is not JSON ({exc})") from exc
        if not isinstance(claims, dict):
            raise MalformedTokenError("body must be a JSON object")

        issuer = _prefixed_claim(claims, "iss", ISSUER_PREFIX)
        subject = _prefixed_claim(claims, "sub", SUBJECT_PREFIX)
        additional_data = claims.get("ada") or {}
        if not isinstance(additional_data, dict):
            raise MalformedTokenError("claim 'ada' must be a JSON object")

        return cls(
            app_id=issuer.removeprefix(ISSUER_PREFIX),
            identity=subject.removeprefix(SUBJECT_PREFIX),
            issued_at=_epoch_claim(claims, "iat"),
            expires_at=_epoch_claim(claims, "exp"),
            additional_data=additional_data,
        )


def _prefixed_claim(claims: Mapping[str, Any], key: str, prefix: str) -> str:
    value = claims.get(key)
    if not isinstance(value, str) or not value.startswith(prefix):
        raise MalformedTokenError(f"claim {key!r} must be a string starting with {prefix!r}")
    return value


def _epoch_claim(claims: Mapping[str, Any], key: str) -> datetime.datetime:
    value = claims.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedTokenError(f"claim {key!r} must be integer epoch seconds")
    try:
        return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedTokenError(f"claim {key!r} is out of range") from exc


__all__ = ["ISSUER_PREFIX", "JwtBodyContent", "SUBJECT_PREFIX"]
