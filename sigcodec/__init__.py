"""Convert ECDSA signatures between raw (r, s) components and DER INTEGER pairs."""

from sigcodec.der import (
    DecodedInteger,
    DecodedSignature,
    decode_der_integer,
    decode_signature_fixed,
    decode_signature_separate,
    der_to_rs,
    encode_der_integer,
    encode_signature,
    max_signature_len,
    rs_to_der,
)
from sigcodec.errors import (
    CapacityExceededError,
    InvalidArgumentError,
    MalformedEncodingError,
    SignatureCodecError,
    UnsupportedEncodingError,
)

__version__ = "0.1.0"
