"""Tests for trust_cards.buffer: Buffer and the base64 helpers."""
from __future__ import annotations

import binascii

import pytest

from trust_cards.buffer import (
    Buffer,
    StringEncoding,
    b64_decode,
    b64_encode,
    b64url_decode,
    b64url_encode,
    to_bytes,
)


# ---------------------------------------------------------------------------
# Buffer construction
# ---------------------------------------------------------------------------


class TestBufferConstruction:
    def test_from_base64(self) -> None:
        assert Buffer.from_base64("aGVsbG8=") == Buffer(b"hello")

    def test_from_hex(self) -> None:
        assert Buffer.from_hex("6869").data == b"hi"

    def test_from_utf8_encodes_text(self) -> None:
        assert Buffer.from_utf8("hé").data == "hé".encode("utf-8")

    def test_from_string_accepts_encoding_value(self) -> None:
        assert Buffer.from_string("6869", "hex").data == b"hi"

    def test_from_bytes_copies_bytearray(self) -> None:
        source = bytearray(b"abc")
        buffer = Buffer.from_bytes(source)
        source[0] = ord("z")
        assert buffer.data == b"abc"

    def test_invalid_base64_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            Buffer.from_base64("not base64!")

    def test_invalid_hex_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            Buffer.from_hex("zz")


# ---------------------------------------------------------------------------
# Buffer.coerce / to_bytes
# ---------------------------------------------------------------------------


class TestCoerce:
    def test_buffer_is_returned_as_is(self) -> None:
        buffer = Buffer(b"x")
        assert Buffer.coerce(buffer) is buffer

    def test_memoryview_is_accepted(self) -> None:
        assert to_bytes(memoryview(b"abc")) == b"abc"

    def test_str_is_treated_as_utf8(self) -> None:
        assert to_bytes("abc") == b"abc"

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(TypeError):
            Buffer.coerce(123)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Buffer rendering
# ---------------------------------------------------------------------------


class TestRendering:
    def test_to_hex(self) -> None:
        assert Buffer(b"\x00\xff").to_hex() == "00ff"

    def test_to_base64(self) -> None:
        assert Buffer(b"hello").to_base64() == "aGVsbG8="

    def test_to_string_utf8(self) -> None:
        assert Buffer(b"abc").to_string(StringEncoding.UTF8) == "abc"

    def test_bytes_and_len(self) -> None:
        buffer = Buffer(b"abc")
        assert bytes(buffer) == b"abc"
        assert len(buffer) == 3


# ---------------------------------------------------------------------------
# base64 helpers
# ---------------------------------------------------------------------------


class TestBase64Helpers:
    def test_standard_roundtrip(self) -> None:
        assert b64_decode(b64_encode(b"\x00\x01\x02")) == b"\x00\x01\x02"

    def test_standard_decode_is_strict(self) -> None:
        with pytest.raises(binascii.Error):
            b64_decode("ab$c")

    def test_url_encode_strips_padding_and_uses_url_alphabet(self) -> None:
        assert b64url_encode(b"\xfb\xff") == "-_8"

    def test_url_decode_restores_padding(self) -> None:
        assert b64url_decode("-_8") == b"\xfb\xff"

    def test_url_decode_rejects_standard_alphabet(self) -> None:
        with pytest.raises(binascii.Error):
            b64url_decode("ab+c")

    def test_url_decode_rejects_padding_characters(self) -> None:
        with pytest.raises(binascii.Error):
            b64url_decode("YQ==")

    def test_url_decode_rejects_trailing_newline(self) -> None:
        with pytest.raises(binascii.Error, match="Non base64url character"):
            b64url_decode("YWJj\n")
