"""
Signature codec exceptions.

Every failure of the codec is reported as one of the exceptions below, all of
which derive from SignatureCodecError (itself a ValueError, so callers that
only care about "bad input" can keep catching ValueError).

Classes:
    InvalidArgumentError: a required argument is missing or unusable.
    MalformedEncodingError: the DER input breaks the INTEGER TLV rules.
    CapacityExceededError: a value does not fit in the destination buffer.
    UnsupportedEncodingError: a value would need a long-form DER length.
"""


class SignatureCodecError(ValueError):
    """Base class for every error raised by sigcodec."""


class InvalidArgumentError(SignatureCodecError):
    pass


class MalformedEncodingError(SignatureCodecError):
    pass


class CapacityExceededError(SignatureCodecError):
    pass


class UnsupportedEncodingError(SignatureCodecError):
    """Raised for INTEGER values longer than 127 bytes (long-form lengths)."""
