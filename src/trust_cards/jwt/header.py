"""JWT header content."""
from __future__ import annotations

import json
from dataclasses import dataclass

from trust_cards.errors import MalformedTokenError

JWT_TYPE = "JWT"
JWT_CONTENT_TYPE = "virgil-jwt;v=1"


@dataclass(frozen=True)
class JwtHeaderContent:
    """Immutable JWT header.

    Serialized as ``{"alg", "kid", "typ", "cty"}`` in that order.
    """

    algorithm: str
    key_id: str
    type: str = JWT_TYPE
    content_type: str = JWT_CONTENT_TYPE

    def to_json(self) -> bytes:
        return json.dumps(
            {
                "alg": self.algorithm,
                "kid": self.key_id,
                "typ": self.type,
                "cty": self.content_type,
            },
            separators=(",", ":"),
        ).encode("utf-8")

    @classmethod
    def from_json(cls, raw: bytes) -> "JwtHeaderContent":
        """Parse a decoded header segment.

        Raises
        ------
        MalformedTokenError
            If the segment is not a JSON object with string ``alg``, ``kid``,
            ``typ`` and ``cty`` members.
        """
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedTokenError(f"header is not JSON ({exc})") from exc
        if not isinstance(payload, dict):
            raise MalformedTokenError("header must be a JSON object")

        values = {}
        for key in ("alg", "kid", "typ", "cty"):
            value = payload.get(key)
            if not isinstance(value, str):
                raise MalformedTokenError(f"header field {key!r} is missing or not a string")
            values[key] = value
        return cls(
            algorithm=values["alg"],
            key_id=values["kid"],
            type=values["typ"],
            content_type=values["cty"],
        )


__all__ = ["JWT_CONTENT_TYPE", "JWT_TYPE", "JwtHeaderContent"]
