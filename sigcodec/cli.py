"""
Command line front end: convert ECDSA signatures between raw r/s hex and DER.

    convert-sig encode R_HEX S_HEX [--width N | --curve NAME] [--sequence]
    convert-sig decode DER_HEX [--width N | --curve NAME] [--sequence]
"""

import argparse
import sys

from sigcodec.colors import Colors, colored
from sigcodec.der import DER_INTEGER_MAX_LEN, decode_signature_separate, der_to_rs, rs_to_der
from sigcodec.errors import InvalidArgumentError, MalformedEncodingError, SignatureCodecError
from sigcodec.interop import (
    component_len_for_curve,
    curve_by_name,
    rs_to_sequence,
    sequence_to_der,
    sequence_to_rs,
)
from sigcodec.logger import get_logger, set_verbose_mode


def parse_arguments(argv=None):
    """Parse command line arguments using argparse."""
    parser = argparse.ArgumentParser(
        prog="convert-sig",
        description="Convert ECDSA signatures between raw r/s and DER INTEGER pairs",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    encode_parser = subparsers.add_parser("encode", help="Encode raw r and s")
    encode_parser.add_argument("r", help="r component as hex")
    encode_parser.add_argument("s", help="s component as hex")

    decode_parser = subparsers.add_parser("decode", help="Decode an encoded signature")
    decode_parser.add_argument("der", help="Encoded signature as hex")

    for sub in (encode_parser, decode_parser):
        width = sub.add_mutually_exclusive_group()
        width.add_argument(
            "-w", "--width",
            type=int,
            help="Component width in bytes"
        )
        width.add_argument(
            "-c", "--curve",
            help="Take the component width from a curve (e.g. secp256r1)"
        )
        sub.add_argument(
            "--sequence",
            action="store_true",
            help="Use the standard ECDSA-Sig-Value SEQUENCE instead of a bare INTEGER pair"
        )

    return parser.parse_args(argv)


def component_width(args):
    """Component width requested on the command line, or None."""
    if args.curve:
        return component_len_for_curve(curve_by_name(args.curve))
    if args.width is not None and args.width <= 0:
        raise InvalidArgumentError("width must be positive")
    return args.width


def left_pad(value, width, name):
    if len(value) > width:
        raise InvalidArgumentError(f"{name} is {len(value)} bytes, wider than {width}")
    return value.rjust(width, b"\x00")


def encode_command(args, logger):
    r = bytes.fromhex(args.r)
    s = bytes.fromhex(args.s)

    width = component_width(args) or max(len(r), len(s))
    r = left_pad(r, width, "r")
    s = left_pad(s, width, "s")
    logger.debug(f"Encoding {width}-byte components")

    if args.sequence:
        return rs_to_sequence(r, s).hex()
    return rs_to_der(r, s).hex()


def decode_command(args, logger):
    der = bytes.fromhex(args.der)
    width = component_width(args)

    if args.sequence:
        if width:
            return sequence_to_rs(der, width)
        der = sequence_to_der(der)

    if width:
        logger.debug(f"Decoding into {width}-byte components")
        return der_to_rs(der, width)

    r = bytearray(DER_INTEGER_MAX_LEN)
    s = bytearray(DER_INTEGER_MAX_LEN)
    decoded = decode_signature_separate(der, r, s)
    if decoded.consumed != len(der):
        raise MalformedEncodingError(
            f"{len(der) - decoded.consumed} trailing bytes after signature"
        )

    width = max(decoded.r_length, decoded.s_length)
    logger.debug(f"Widest component is {width} bytes")
    return bytes(r[-width:]), bytes(s[-width:])


def main(argv=None):
    """Main entry point for the signature conversion tool."""
    args = parse_arguments(argv)

    # Set global verbose mode and get a logger for this module
    set_verbose_mode(args.verbose)
    logger = get_logger()

    try:
        if args.command == "encode":
            print(encode_command(args, logger))
        else:
            r, s = decode_command(args, logger)
            print(f"r: {r.hex()}")
            print(f"s: {s.hex()}")
        return 0

    except SignatureCodecError as e:
        print(colored(f"Error: {e}", Colors.RED, sys.stderr), file=sys.stderr)
        return 1
    except ValueError as e:
        print(colored(f"Invalid input: {e}", Colors.RED, sys.stderr), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
