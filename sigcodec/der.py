"""
DER INTEGER Codec for Raw ECDSA Signatures

This module converts an ECDSA signature between its raw form, two fixed-width
big-endian unsigned integers (r, s), and a pair of DER INTEGER TLVs written
back to back:

    [0x02][r-len][r][0x02][s-len][s]

Each value is minimally encoded: leading zero bytes are dropped and a single
0x00 stuffing byte is prepended only when the first remaining byte has its
high bit set (DER integers are signed). Only short-form lengths are
supported, so a value may carry at most 127 bytes.

There is deliberately no enclosing SEQUENCE; see sigcodec.interop for the
conversion to and from the standard ECDSA-Sig-Value structure.

Functions:
    encode_der_integer(data, out):
        Encodes one big-endian unsigned integer as an INTEGER TLV into out.

    decode_der_integer(der, out):
        Decodes one INTEGER TLV into out, zero-padded to len(out).

    encode_signature(r, s, out):
        Encodes r then s into out.

    decode_signature_separate(der, r_out, s_out):
        Decodes r and s into two independently sized buffers.

    decode_signature_fixed(der, rs_out):
        Decodes r and s into the two equal halves of rs_out.

    rs_to_der(r, s), der_to_rs(der, component_len):
        Allocating wrappers returning bytes.

Output buffers are caller owned: their length is the capacity, and nothing is
written to them unless every check for the TLV being processed has passed.
"""

import logging
from typing import NamedTuple

from sigcodec.errors import (
    CapacityExceededError,
    InvalidArgumentError,
    MalformedEncodingError,
    UnsupportedEncodingError,
)

logger = logging.getLogger(__name__)

DER_TAG_INTEGER = 0x02

# Short-form lengths only, 0x80 and above would start a long-form length
DER_INTEGER_MAX_LEN = 0x7F

DER_UINT_MASK = 0x80

ASN1_DER_TAG_OFFSET = 0
ASN1_DER_LEN_OFFSET = 1
ASN1_DER_VAL_OFFSET = 2


class DecodedInteger(NamedTuple):
    # bytes of DER input used, stuffing byte included
    consumed: int
    # width of the integer once the stuffing byte is removed
    length: int


class DecodedSignature(NamedTuple):
    r_length: int
    s_length: int
    consumed: int


def _readable(buf, name):
    if buf is None:
        raise InvalidArgumentError(f"{name} is required")
    try:
        return memoryview(buf).cast("B")
    except TypeError as e:
        raise InvalidArgumentError(f"{name} must be a bytes-like object") from e


def _writable(buf, name):
    view = _readable(buf, name)
    if view.readonly:
        raise InvalidArgumentError(f"{name} must be a writable buffer")
    return view


def check_components(r, s):
    """
    Validate raw r and s before they are encoded in either form.

    Returns:
        tuple: (r, s) as byte views

    Raises:
        InvalidArgumentError: a component is missing, empty or the widths differ
    """
    r = _readable(r, "r")
    s = _readable(s, "s")

    if len(r) == 0 or len(s) == 0:
        raise InvalidArgumentError("r and s must not be empty")
    if len(r) != len(s):
        raise InvalidArgumentError(
            f"r and s must have the same width ({len(r)} != {len(s)})"
        )

    return r, s


def encode_der_integer(data, out):
    """
    Encode a big-endian unsigned integer as a DER INTEGER TLV.

    Args:
        data (bytes-like): Big-endian unsigned integer, possibly zero-padded
        out (bytearray or writable memoryview): Destination; the TLV is
            written at offset 0 and len(out) is the capacity

    Returns:
        int: Number of bytes written (tag + length + value)

    Raises:
        InvalidArgumentError: data is empty or a buffer is unusable
        CapacityExceededError: the TLV does not fit in out
        UnsupportedEncodingError: the value would exceed 127 bytes
    """
    data = _readable(data, "data")
    out = _writable(out, "out")

    data_len = len(data)
    if data_len == 0:
        raise InvalidArgumentError("nothing to encode")

    # the last byte is always kept, an all-zero input encodes as 00
    start = 0
    while start < data_len - 1 and data[start] == 0x00:
        start += 1

    stuffing = 1 if data[start] & DER_UINT_MASK else 0
    write_length = data_len - start
    integer_len = stuffing + write_length

    if ASN1_DER_VAL_OFFSET + integer_len > len(out):
        logger.debug(
            "INTEGER needs %d bytes, output holds %d",
            ASN1_DER_VAL_OFFSET + integer_len, len(out)
        )
        raise CapacityExceededError("encoded INTEGER does not fit in output buffer")

    if integer_len > DER_INTEGER_MAX_LEN:
        logger.debug("INTEGER value of %d bytes needs a long-form length", integer_len)
        raise UnsupportedEncodingError(
            f"INTEGER value of {integer_len} bytes exceeds {DER_INTEGER_MAX_LEN}"
        )

    # commit writes
    value_start = ASN1_DER_VAL_OFFSET + stuffing
    out[value_start:value_start + write_length] = data[start:]
    if stuffing:
        out[ASN1_DER_VAL_OFFSET] = 0x00
    out[ASN1_DER_LEN_OFFSET] = integer_len
    out[ASN1_DER_TAG_OFFSET] = DER_TAG_INTEGER

    return ASN1_DER_VAL_OFFSET + integer_len


def decode_der_integer(der, out):
    """
    Decode one DER INTEGER TLV into a fixed-width big-endian buffer.

    The integer is right-aligned in out and the remaining head of out is
    filled with zero bytes.

    Args:
        der (bytes-like): Input starting with an INTEGER TLV; trailing bytes
            are left alone
        out (bytearray or writable memoryview): Destination, len(out) is the
            capacity

    Returns:
        DecodedInteger: bytes consumed from der and decoded integer width

    Raises:
        InvalidArgumentError: a buffer is missing or unusable
        MalformedEncodingError: truncated input, wrong tag, zero length or
            two leading zero bytes
        UnsupportedEncodingError: long-form length byte
        CapacityExceededError: the integer is wider than out
    """
    der = _readable(der, "der")
    out = _writable(out, "out")

    if len(der) < ASN1_DER_VAL_OFFSET + 1:
        logger.debug("Only %d bytes left, no room for an INTEGER", len(der))
        raise MalformedEncodingError("not enough data for an INTEGER")

    tag = der[ASN1_DER_TAG_OFFSET]
    if tag != DER_TAG_INTEGER:
        logger.debug("Expected INTEGER tag, found 0x%02x", tag)
        raise MalformedEncodingError(f"not a DER INTEGER (tag 0x{tag:02x})")

    integer_length = der[ASN1_DER_LEN_OFFSET]
    if integer_length == 0:
        logger.debug("INTEGER with zero length")
        raise MalformedEncodingError("INTEGER length must not be zero")
    if integer_length > DER_INTEGER_MAX_LEN:
        logger.debug("Long-form length byte 0x%02x", integer_length)
        raise UnsupportedEncodingError("long-form INTEGER lengths are not supported")

    if ASN1_DER_VAL_OFFSET + integer_length > len(der):
        logger.debug(
            "INTEGER declares %d value bytes, %d available",
            integer_length, len(der) - ASN1_DER_VAL_OFFSET
        )
        raise MalformedEncodingError("INTEGER runs past the end of the input")

    cur = ASN1_DER_VAL_OFFSET

    # a single byte can never be a stuffing byte
    if integer_length > 1:
        if der[cur] == 0x00:
            integer_length -= 1
            cur += 1

        if der[cur] == 0x00:
            logger.debug("INTEGER starts with two zero bytes")
            raise MalformedEncodingError("INTEGER is not minimally encoded")

    if integer_length > len(out):
        logger.debug(
            "INTEGER is %d bytes wide, output holds %d", integer_length, len(out)
        )
        raise CapacityExceededError("decoded INTEGER does not fit in output buffer")

    # pad so the least significant byte lands on the last byte of out
    padding = len(out) - integer_length
    out[:padding] = bytes(padding)
    out[padding:] = der[cur:cur + integer_length]

    return DecodedInteger(consumed=cur + integer_length, length=integer_length)


def encode_signature(r, s, out):
    """
    Encode the raw signature components r and s as two INTEGER TLVs.

    Args:
        r (bytes-like): Big-endian r component
        s (bytes-like): Big-endian s component, same width as r
        out (bytearray or writable memoryview): Destination buffer

    Returns:
        int: Total number of bytes written to out
    """
    r, s = check_components(r, s)
    out = _writable(out, "out")

    out_len_r = encode_der_integer(r, out)
    out_len_s = encode_der_integer(s, out[out_len_r:])

    return out_len_r + out_len_s


def decode_signature_separate(der, r_out, s_out):
    """
    Decode two consecutive INTEGER TLVs into separate r and s buffers.

    Each component is zero-padded to the length of its own buffer. Bytes
    after the second TLV are not inspected; compare the returned consumed
    count with len(der) to reject trailing data.

    Args:
        der (bytes-like): Encoded signature
        r_out (bytearray or writable memoryview): Destination for r
        s_out (bytearray or writable memoryview): Destination for s

    Returns:
        DecodedSignature: decoded widths of r and s, and total bytes consumed
    """
    der = _readable(der, "der")
    r_out = _writable(r_out, "r_out")
    s_out = _writable(s_out, "s_out")

    decoded_r = decode_der_integer(der, r_out)
    decoded_s = decode_der_integer(der[decoded_r.consumed:], s_out)

    return DecodedSignature(
        r_length=decoded_r.length,
        s_length=decoded_s.length,
        consumed=decoded_r.consumed + decoded_s.consumed,
    )


def decode_signature_fixed(der, rs_out):
    """
    Decode an encoded signature into one buffer holding r || s.

    rs_out is split into two halves of len(rs_out) // 2 bytes; r goes into
    the first and s into the second, each zero-padded to the half width.

    Raises:
        InvalidArgumentError: rs_out has an odd length
    """
    rs_out = _writable(rs_out, "rs_out")

    if len(rs_out) % 2 != 0:
        raise InvalidArgumentError("rs_out length must be even")

    component_length = len(rs_out) // 2
    return decode_signature_separate(
        der, rs_out[:component_length], rs_out[component_length:]
    )


def max_signature_len(component_len):
    """Largest stream encode_signature can produce for components of this width."""
    return 2 * (ASN1_DER_VAL_OFFSET + 1 + component_len)


def rs_to_der(r, s):
    """
    Encode r and s and return the result as bytes.

    Args:
        r (bytes-like): Big-endian r component
        s (bytes-like): Big-endian s component, same width as r

    Returns:
        bytes: The two INTEGER TLVs
    """
    r = _readable(r, "r")
    out = bytearray(max_signature_len(len(r)))
    total = encode_signature(r, s, out)
    return bytes(out[:total])


def der_to_rs(der, component_len):
    """
    Decode an encoded signature into fixed-width r and s.

    Bytes after the s INTEGER are rejected.

    Args:
        der (bytes-like): Encoded signature
        component_len (int): Width of each component, e.g. 32 for P-256

    Returns:
        tuple: (r, s) as bytes of component_len each
    """
    if component_len <= 0:
        raise InvalidArgumentError("component_len must be positive")

    der = _readable(der, "der")
    rs = bytearray(2 * component_len)
    decoded = decode_signature_fixed(der, rs)
    if decoded.consumed != len(der):
        logger.debug("%d bytes after the s INTEGER", len(der) - decoded.consumed)
        raise MalformedEncodingError("trailing data after signature")

    return bytes(rs[:component_len]), bytes(rs[component_len:])
