"""
Conversion between the bare INTEGER pair and the standard ECDSA-Sig-Value.

Most libraries (OpenSSL, cryptography, X.509 and CMS signatures) expect

    ECDSA-Sig-Value ::= SEQUENCE { r INTEGER, s INTEGER }

while sigcodec.der produces the two INTEGERs without the SEQUENCE. The
helpers here translate between the two explicitly, using the cryptography
package for the SEQUENCE side.

Functions:
    curve_by_name(name): cryptography curve instance for a curve name
    component_len_for_curve(curve): byte width of r and s on a curve
    int_to_component(value, component_len): fixed-width big-endian bytes
    der_to_sequence(der): bare INTEGER pair -> ECDSA-Sig-Value
    sequence_to_der(signature): ECDSA-Sig-Value -> bare INTEGER pair
    rs_to_sequence(r, s): raw components -> ECDSA-Sig-Value
    sequence_to_rs(signature, component_len): ECDSA-Sig-Value -> raw components
"""

import logging

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from sigcodec.der import (
    DER_INTEGER_MAX_LEN,
    check_components,
    decode_signature_separate,
    der_to_rs,
    rs_to_der,
)
from sigcodec.errors import (
    CapacityExceededError,
    InvalidArgumentError,
    MalformedEncodingError,
)

logger = logging.getLogger(__name__)

CURVES = {
    "secp256r1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
    "secp256k1": ec.SECP256K1,
    "secp224r1": ec.SECP224R1,
    "secp192r1": ec.SECP192R1,
    "brainpoolp256r1": ec.BrainpoolP256R1,
    "brainpoolp384r1": ec.BrainpoolP384R1,
    "brainpoolp512r1": ec.BrainpoolP512R1,
}

# common aliases
CURVES["p-256"] = CURVES["prime256v1"] = ec.SECP256R1
CURVES["p-384"] = ec.SECP384R1
CURVES["p-521"] = ec.SECP521R1


def curve_by_name(name):
    """
    Look up a curve by name.

    Args:
        name (str): Curve name, case insensitive (e.g. "secp256r1", "P-256")

    Returns:
        ec.EllipticCurve: Curve instance from the cryptography package
    """
    try:
        return CURVES[name.lower()]()
    except KeyError:
        raise InvalidArgumentError(f"unknown curve: {name}") from None


def component_len_for_curve(curve):
    """Width in bytes of r and s for the given cryptography curve."""
    return (curve.key_size + 7) // 8


def int_to_component(value, component_len):
    """
    Convert a non-negative integer to fixed-width big-endian bytes.

    Raises:
        CapacityExceededError: value is negative or needs more than
            component_len bytes
    """
    try:
        return value.to_bytes(component_len, byteorder="big")
    except OverflowError as e:
        raise CapacityExceededError(
            f"integer does not fit in {component_len} bytes"
        ) from e


def rs_to_sequence(r, s):
    """
    Build an ECDSA-Sig-Value from raw big-endian components.

    Args:
        r (bytes-like): Big-endian r component
        s (bytes-like): Big-endian s component

    Returns:
        bytes: DER SEQUENCE { r INTEGER, s INTEGER }
    """
    r, s = check_components(r, s)
    return encode_dss_signature(
        int.from_bytes(r, byteorder="big"), int.from_bytes(s, byteorder="big")
    )


def _decode_sequence(signature):
    if signature is None:
        raise InvalidArgumentError("signature is required")
    try:
        r, s = decode_dss_signature(bytes(signature))
    except ValueError as e:
        logger.debug("cryptography rejected the signature: %s", e)
        raise MalformedEncodingError("invalid ECDSA-Sig-Value") from e

    if r < 0 or s < 0:
        logger.debug("ECDSA-Sig-Value holds a negative INTEGER")
        raise MalformedEncodingError("r and s must not be negative")

    return r, s


def sequence_to_rs(signature, component_len):
    """
    Split an ECDSA-Sig-Value into fixed-width r and s.

    Args:
        signature (bytes): DER SEQUENCE { r INTEGER, s INTEGER }
        component_len (int): Width of each returned component

    Returns:
        tuple: (r, s) as bytes of component_len each
    """
    r, s = _decode_sequence(signature)
    return int_to_component(r, component_len), int_to_component(s, component_len)


def der_to_sequence(der):
    """
    Wrap a bare INTEGER pair into an ECDSA-Sig-Value SEQUENCE.

    Trailing bytes after the second INTEGER are rejected.
    """
    r = bytearray(DER_INTEGER_MAX_LEN)
    s = bytearray(DER_INTEGER_MAX_LEN)
    decoded = decode_signature_separate(der, r, s)
    if decoded.consumed != len(der):
        logger.debug("%d bytes after the s INTEGER", len(der) - decoded.consumed)
        raise MalformedEncodingError("trailing data after signature")

    return rs_to_sequence(r, s)


def sequence_to_der(signature):
    """Strip the SEQUENCE from an ECDSA-Sig-Value, keeping the INTEGER pair."""
    r, s = _decode_sequence(signature)
    component_len = max((r.bit_length() + 7) // 8, (s.bit_length() + 7) // 8, 1)
    return rs_to_der(
        int_to_component(r, component_len), int_to_component(s, component_len)
    )


def raw_signature_to_der(signature, curve):
    """
    Encode a raw r || s signature (as returned by HSMs and PKCS#11 tokens).

    Args:
        signature (bytes): Concatenated big-endian r and s
        curve (ec.EllipticCurve): Curve the signature was made on

    Returns:
        bytes: The two INTEGER TLVs
    """
    if signature is None:
        raise InvalidArgumentError("signature is required")
    try:
        signature = memoryview(signature).cast("B")
    except TypeError as e:
        raise InvalidArgumentError("signature must be a bytes-like object") from e

    component_len = component_len_for_curve(curve)
    if len(signature) != 2 * component_len:
        raise InvalidArgumentError(
            f"expected {2 * component_len} signature bytes for {curve.name}, "
            f"got {len(signature)}"
        )
    return rs_to_der(signature[:component_len], signature[component_len:])


def der_to_raw_signature(der, curve):
    """Decode the INTEGER pair into a raw r || s signature for the curve."""
    r, s = der_to_rs(der, component_len_for_curve(curve))
    return r + s
