"""Canonical snapshot codec.

A snapshot is the one byte sequence that is ever hashed or signed for a
request. It is produced from a request's snapshot model (a flat mapping of
its logical fields) as UTF-8 JSON with sorted keys and compact separators,
so two logically equal models always produce identical bytes. Top-level
``None`` values are dropped: an absent optional field and an unset one are
the same thing on the wire.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Mapping

from trust_cards.errors import MalformedModelError


def canonical_snapshot(model: Mapping[str, Any]) -> bytes:
    """Serialize a snapshot model to its canonical bytes."""
    present = {key: value for key, value in model.items() if value is not None}
    return json.dumps(
        present,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def parse_snapshot(snapshot: bytes) -> dict[str, Any]:
    """Parse snapshot bytes back into a model mapping.

    Raises
    ------
    MalformedModelError
        If *snapshot* is not UTF-8 JSON encoding an object.
    """
    try:
        model = json.loads(snapshot.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedModelError(f"snapshot is not UTF-8 JSON ({exc})") from exc
    if not isinstance(model, dict):
        raise MalformedModelError(
            f"snapshot must encode a JSON object, got {type(model).__name__}"
        )
    return model


def require_str(model: Mapping[str, Any], key: str) -> str:
    """Return ``model[key]`` if it is a non-empty string.

    Raises
    ------
    MalformedModelError
        If the key is absent or not a non-empty string.
    """
    value = model.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedModelError(f"field {key!r} is required and must be a non-empty string")
    return value


def optional_str_map(model: Mapping[str, Any], key: str) -> dict[str, str]:
    """Return ``model[key]`` as a ``str -> str`` dict, or ``{}`` if absent."""
    value = model.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise MalformedModelError(f"field {key!r} must map strings to strings")
    return dict(value)


class SnapshotState:
    """Two-state holder for a request's snapshot bytes.

    Starts *unresolved*; :meth:`resolve` builds the bytes from the model
    exactly once, and :meth:`pin` adopts bytes received from elsewhere.
    After either, :attr:`value` never changes.
    """

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value: bytes | None = None

    @property
    def resolved(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> bytes | None:
        return self._value

    def resolve(self, build_model: Callable[[], Mapping[str, Any]]) -> bytes:
        if self._value is None:
            self._value = canonical_snapshot(build_model())
        return self._value

    def pin(self, snapshot: bytes) -> None:
        if self._value is not None:
            raise RuntimeError("snapshot already resolved")
        self._value = bytes(snapshot)


__all__ = [
    "SnapshotState",
    "canonical_snapshot",
    "optional_str_map",
    "parse_snapshot",
    "require_str",
]
