"""Tests for the single INTEGER encoder and decoder."""

import pytest

from sigcodec.der import (
    DecodedInteger,
    decode_der_integer,
    encode_der_integer,
)
from sigcodec.errors import (
    CapacityExceededError,
    InvalidArgumentError,
    MalformedEncodingError,
    SignatureCodecError,
    UnsupportedEncodingError,
)

GUARD = 0xA5


def encode(data, capacity=None):
    out = bytearray(capacity if capacity is not None else len(data) + 3)
    n = encode_der_integer(data, out)
    return bytes(out[:n])


def decode(der, width):
    out = bytearray(width)
    result = decode_der_integer(der, out)
    return bytes(out), result


def guarded(capacity, extra=4):
    """Buffer of capacity bytes followed by guard bytes, plus a view of the usable part."""
    buf = bytearray([GUARD]) * (capacity + extra)
    return buf, memoryview(buf)[:capacity]


class TestEncodeDerInteger:
    def test_value_one(self):
        assert encode(b"\x00" * 31 + b"\x01") == bytes.fromhex("020101")

    def test_zero_encodes_single_zero_byte(self):
        assert encode(b"\x00" * 32) == bytes.fromhex("020100")
        assert encode(b"\x00") == bytes.fromhex("020100")

    def test_high_bit_gets_stuffing_byte(self):
        der = encode(b"\xff" * 32)
        assert der[:3] == bytes.fromhex("022100")
        assert der[3:] == b"\xff" * 32
        assert len(der) == 35

    def test_single_byte_with_high_bit(self):
        assert encode(b"\x80") == bytes.fromhex("02020080")

    def test_leading_zeros_are_dropped(self):
        data = b"\x00" * 10 + b"\x11" * 22
        der = encode(data)
        assert der[0] == 0x02
        assert der[1] == 22
        assert der[2:] == b"\x11" * 22

    def test_leading_zeros_then_high_bit(self):
        data = b"\x00" * 10 + b"\x90" + b"\x01" * 21
        der = encode(data)
        assert der[1] == 23
        assert der[2] == 0x00
        assert der[3:] == data[10:]

    def test_never_two_leading_zero_bytes(self):
        for first in (0x00, 0x01, 0x7F, 0x80, 0xFF):
            der = encode(bytes([0, 0, first, 0x42]))
            assert der[2:4] != b"\x00\x00"

    def test_returns_bytes_written(self):
        out = bytearray(10)
        assert encode_der_integer(b"\x00\x00\x7f", out) == 3
        assert out == bytearray(bytes.fromhex("02017f") + bytes(7))

    def test_accepts_memoryview_output(self):
        buf, view = guarded(4)
        assert encode_der_integer(b"\x12\x34", view) == 4
        assert buf[:4] == bytes.fromhex("02021234")
        assert buf[4:] == bytes([GUARD]) * 4

    def test_exact_capacity(self):
        assert encode(b"\xff" * 32, capacity=35) == bytes.fromhex("022100") + b"\xff" * 32

    @pytest.mark.parametrize("capacity", [0, 1, 2, 3, 34])
    def test_undersized_output_is_untouched(self, capacity):
        buf, view = guarded(capacity)
        with pytest.raises(CapacityExceededError):
            encode_der_integer(b"\xff" * 32, view)
        assert buf == bytearray([GUARD]) * (capacity + 4)

    def test_max_length_value(self):
        der = encode(b"\x7f" * 127)
        assert der[1] == 0x7F
        assert len(der) == 129

    def test_stuffing_past_limit_is_unsupported(self):
        buf, view = guarded(200)
        with pytest.raises(UnsupportedEncodingError):
            encode_der_integer(b"\x80" * 127, view)
        assert buf == bytearray([GUARD]) * 204

    def test_long_value_is_unsupported(self):
        with pytest.raises(UnsupportedEncodingError):
            encode(b"\x01" * 128)

    def test_capacity_checked_before_length_limit(self):
        with pytest.raises(CapacityExceededError):
            encode(b"\x01" * 200, capacity=10)

    def test_empty_input(self):
        with pytest.raises(InvalidArgumentError):
            encode(b"", capacity=8)

    def test_missing_arguments(self):
        with pytest.raises(InvalidArgumentError):
            encode_der_integer(None, bytearray(8))
        with pytest.raises(InvalidArgumentError):
            encode_der_integer(b"\x01", None)

    def test_read_only_output(self):
        with pytest.raises(InvalidArgumentError):
            encode_der_integer(b"\x01", bytes(8))

    def test_not_bytes_like(self):
        with pytest.raises(InvalidArgumentError):
            encode_der_integer(12, bytearray(8))

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            encode(b"", capacity=8)
        assert issubclass(CapacityExceededError, SignatureCodecError)


class TestDecodeDerInteger:
    def test_value_one(self):
        value, result = decode(bytes.fromhex("020101"), 32)
        assert value == b"\x00" * 31 + b"\x01"
        assert result == DecodedInteger(consumed=3, length=1)

    def test_strips_stuffing_byte(self):
        value, result = decode(bytes.fromhex("022100") + b"\xff" * 32, 32)
        assert value == b"\xff" * 32
        assert result.consumed == 35
        assert result.length == 32

    def test_restores_leading_zeros(self):
        value, result = decode(bytes([0x02, 22]) + b"\x11" * 22, 32)
        assert value == b"\x00" * 10 + b"\x11" * 22
        assert result.length == 22

    def test_single_zero_byte(self):
        value, result = decode(bytes.fromhex("020100"), 4)
        assert value == bytes(4)
        assert result == DecodedInteger(consumed=3, length=1)

    def test_stuffing_byte_before_low_value_is_stripped(self):
        value, result = decode(bytes.fromhex("02020005"), 2)
        assert value == b"\x00\x05"
        assert result == DecodedInteger(consumed=4, length=1)

    def test_trailing_bytes_are_not_consumed(self):
        value, result = decode(bytes.fromhex("020142deadbeef"), 1)
        assert value == b"\x42"
        assert result.consumed == 3

    def test_pads_previous_contents(self):
        out = bytearray(b"\xee" * 8)
        decode_der_integer(bytes.fromhex("02021234"), out)
        assert out == bytearray(bytes(6) + b"\x12\x34")

    def test_exact_width_fits(self):
        value, _ = decode(bytes.fromhex("02021234"), 2)
        assert value == b"\x12\x34"

    def test_rejects_double_leading_zero(self):
        with pytest.raises(MalformedEncodingError):
            decode(bytes.fromhex("020300" "0001"), 32)

    def test_rejects_two_zero_bytes(self):
        with pytest.raises(MalformedEncodingError):
            decode(bytes.fromhex("02020000"), 32)

    @pytest.mark.parametrize("length_byte", [0x80, 0x81, 0xFF])
    def test_rejects_long_form_length(self, length_byte):
        der = bytes([0x02, length_byte]) + b"\x01" * 200
        with pytest.raises(UnsupportedEncodingError):
            decode(der, 256)

    def test_rejects_zero_length(self):
        with pytest.raises(MalformedEncodingError):
            decode(bytes.fromhex("020001"), 32)

    @pytest.mark.parametrize("tag", [0x00, 0x03, 0x30, 0x82])
    def test_rejects_wrong_tag(self, tag):
        with pytest.raises(MalformedEncodingError):
            decode(bytes([tag, 0x01, 0x01]), 32)

    @pytest.mark.parametrize("der", ["", "02", "0201"])
    def test_rejects_short_input(self, der):
        with pytest.raises(MalformedEncodingError):
            decode(bytes.fromhex(der), 32)

    def test_rejects_truncated_value(self):
        with pytest.raises(MalformedEncodingError):
            decode(bytes.fromhex("0204010203"), 32)

    def test_truncation_respects_view_bounds(self):
        backing = bytes.fromhex("020401020304")
        with pytest.raises(MalformedEncodingError):
            decode_der_integer(memoryview(backing)[:5], bytearray(8))

    def test_undersized_output_is_untouched(self):
        buf, view = guarded(31)
        with pytest.raises(CapacityExceededError):
            decode_der_integer(bytes.fromhex("022100") + b"\xff" * 32, view)
        assert buf == bytearray([GUARD]) * 35

    def test_failed_decode_leaves_output_alone(self):
        out = bytearray(b"\xee" * 4)
        with pytest.raises(MalformedEncodingError):
            decode_der_integer(bytes.fromhex("0203000001"), out)
        assert out == bytearray(b"\xee" * 4)

    def test_writes_stay_inside_view(self):
        buf, view = guarded(4)
        decode_der_integer(bytes.fromhex("020101"), view)
        assert buf == bytearray(b"\x00\x00\x00\x01") + bytearray([GUARD]) * 4

    def test_missing_arguments(self):
        with pytest.raises(InvalidArgumentError):
            decode_der_integer(None, bytearray(4))
        with pytest.raises(InvalidArgumentError):
            decode_der_integer(b"\x02\x01\x01", None)


class TestRoundTrip:
    @pytest.mark.parametrize("width", [1, 20, 32, 66])
    @pytest.mark.parametrize("pattern", [
        lambda w: bytes(w),
        lambda w: b"\xff" * w,
        lambda w: b"\x00" * (w - 1) + b"\x01",
        lambda w: b"\x80" + bytes(w - 1),
        lambda w: b"\x7f" + b"\xa5" * (w - 1),
        lambda w: bytes(w // 2) + b"\x9c" * (w - w // 2),
        lambda w: bytes(range(w)),
    ])
    def test_round_trip(self, width, pattern):
        data = pattern(width)
        der = encode(data)
        value, result = decode(der, width)
        assert value == data
        assert result.consumed == len(der)
