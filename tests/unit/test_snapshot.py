"""Tests for trust_cards.cards.snapshot: canonical codec and SnapshotState."""
from __future__ import annotations

import pytest

from trust_cards.cards.snapshot import (
    SnapshotState,
    canonical_snapshot,
    optional_str_map,
    parse_snapshot,
    require_str,
)
from trust_cards.errors import MalformedModelError


# ---------------------------------------------------------------------------
# canonical_snapshot
# ---------------------------------------------------------------------------


class TestCanonicalSnapshot:
    def test_sorted_compact_and_none_dropped(self) -> None:
        assert canonical_snapshot({"b": 1, "a": "x", "c": None}) == b'{"a":"x","b":1}'

    def test_insertion_order_does_not_matter(self) -> None:
        first = canonical_snapshot({"identity": "alice", "scope": "global"})
        second = canonical_snapshot({"scope": "global", "identity": "alice"})
        assert first == second

    def test_nested_maps_are_sorted(self) -> None:
        assert canonical_snapshot({"data": {"z": "1", "a": "2"}}) == b'{"data":{"a":"2","z":"1"}}'

    def test_non_ascii_kept_as_utf8(self) -> None:
        assert canonical_snapshot({"identity": "é"}) == '{"identity":"é"}'.encode("utf-8")


# ---------------------------------------------------------------------------
# parse_snapshot and field helpers
# ---------------------------------------------------------------------------


class TestParseSnapshot:
    def test_parses_object(self) -> None:
        assert parse_snapshot(b'{"a":"b"}') == {"a": "b"}

    @pytest.mark.parametrize("raw", [b"{", b"\xff\xfe", b"[1,2]", b'"text"'])
    def test_rejects_non_object(self, raw: bytes) -> None:
        with pytest.raises(MalformedModelError):
            parse_snapshot(raw)

    def test_require_str_missing(self) -> None:
        with pytest.raises(MalformedModelError, match="identity"):
            require_str({}, "identity")

    def test_require_str_empty(self) -> None:
        with pytest.raises(MalformedModelError):
            require_str({"identity": ""}, "identity")

    def test_optional_map_absent_is_empty(self) -> None:
        assert optional_str_map({}, "data") == {}

    def test_optional_map_rejects_non_string_values(self) -> None:
        with pytest.raises(MalformedModelError):
            optional_str_map({"data": {"a": 1}}, "data")


# ---------------------------------------------------------------------------
# SnapshotState
# ---------------------------------------------------------------------------


class TestSnapshotState:
    def test_resolves_once(self) -> None:
        calls = []

        def build() -> dict[str, str]:
            calls.append(1)
            return {"n": str(len(calls))}

        state = SnapshotState()
        assert not state.resolved
        first = state.resolve(build)
        second = state.resolve(build)
        assert first == second == b'{"n":"1"}'
        assert len(calls) == 1
        assert state.resolved

    def test_pin_adopts_exact_bytes(self) -> None:
        state = SnapshotState()
        state.pin(b'{"b":1, "a":2}')
        assert state.value == b'{"b":1, "a":2}'
        assert state.resolve(lambda: {"ignored": True}) == b'{"b":1, "a":2}'

    def test_pin_after_resolve_raises(self) -> None:
        state = SnapshotState()
        state.resolve(lambda: {"a": 1})
        with pytest.raises(RuntimeError):
            state.pin(b"{}")
