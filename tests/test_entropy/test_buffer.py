"""Tests for EntropyBuffer."""

from __future__ import annotations

import numpy as np
import pytest

from qflip.entropy.buffer import EntropyBuffer


class TestEntropyBuffer:
    """Construction, immutability and bit access."""

    def test_bit_length(self) -> None:
        assert EntropyBuffer(b"\x00\x01\x02").bit_length == 24
        assert len(EntropyBuffer(b"\x00\x01\x02")) == 3

    def test_bytearray_is_copied_to_bytes(self) -> None:
        source = bytearray(b"\x01\x02")
        buffer = EntropyBuffer(source)
        source[0] = 0xFF
        assert isinstance(buffer.data, bytes)
        assert buffer.data == b"\x01\x02"

    def test_frozen(self) -> None:
        buffer = EntropyBuffer(b"\x00")
        with pytest.raises(AttributeError):
            buffer.data = b"\x01"  # type: ignore[misc]

    def test_bit_order_is_lsb_first(self) -> None:
        # 0x01 sets bit 0, 0x80 sets bit 15 (bit 7 of byte 1).
        buffer = EntropyBuffer(b"\x01\x80")
        assert buffer.bit(0) == 1
        assert [buffer.bit(i) for i in range(1, 15)] == [0] * 14
        assert buffer.bit(15) == 1

    def test_bit_out_of_range(self) -> None:
        buffer = EntropyBuffer(b"\x00")
        with pytest.raises(IndexError):
            buffer.bit(8)
        with pytest.raises(IndexError):
            buffer.bit(-1)

    def test_bits_matches_bit(self) -> None:
        buffer = EntropyBuffer(b"\x5a\xc3\x0f")
        bits = buffer.bits()
        assert bits.dtype == np.uint8
        assert bits.tolist() == [buffer.bit(i) for i in range(buffer.bit_length)]

    def test_as_array_is_uint8_view(self) -> None:
        arr = EntropyBuffer(b"\x00\xff").as_array()
        assert arr.dtype == np.uint8
        assert arr.tolist() == [0, 255]


class TestHexConversion:
    """Hex parsing and formatting."""

    def test_to_hex_lowercase_no_prefix(self) -> None:
        assert EntropyBuffer(b"\xde\xad\xbe\xef").to_hex() == "deadbeef"

    @pytest.mark.parametrize("text", ["deadbeef", "0xdeadbeef", "0XDEADBEEF", "  0xdeadbeef\n"])
    def test_from_hex_accepts_prefix_and_whitespace(self, text: str) -> None:
        assert EntropyBuffer.from_hex(text).data == b"\xde\xad\xbe\xef"

    def test_from_hex_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            EntropyBuffer.from_hex("0xnothex")
