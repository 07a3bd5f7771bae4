"""
A5Vault - Command Line Entry Point

Runs one A5/1 key setup, fills the A->B and B->A keystream buffers and
prints them. Optionally traces register contents for the first steps or
runs the known-answer self-test.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .core_crypto.a51 import InvalidInputError, KeySetupVariant, key_setup
from .core_crypto.keystream import BURST_BITS, run_bursts
from .core_crypto.vectors import verify_known_answers
from .integration.trace import TraceRecorder


DEFAULT_KEY = 0x911A2B3C4D5E6F0F
DEFAULT_FRAME = 0x134
DEFAULT_TRACE_STEPS = 6

logger = logging.getLogger(__name__)


def _int_arg(text: str) -> int:
    """Parse a hex integer, with or without a 0x prefix."""
    try:
        return int(text, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="a5vault",
        description="A5/1 keystream generator",
    )
    parser.add_argument("--key", type=_int_arg, default=DEFAULT_KEY,
                        help="64-bit key, hex (default: %(default)#x)")
    parser.add_argument("--frame", type=_int_arg, default=DEFAULT_FRAME,
                        help="22-bit frame number, hex (default: %(default)#x)")
    parser.add_argument("--variant", choices=[v.value for v in KeySetupVariant],
                        default=KeySetupVariant.SHIFT_IN.value,
                        help="key setup procedure (default: %(default)s)")
    parser.add_argument("--bits", type=int, default=BURST_BITS,
                        help="keystream bits per direction (default: %(default)s)")
    parser.add_argument("--trace", type=int, nargs="?", const=DEFAULT_TRACE_STEPS,
                        default=0, metavar="N",
                        help="print register contents for the first N steps")
    parser.add_argument("--selftest", action="store_true",
                        help="run the known-answer vectors and exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="enable debug logging")
    return parser


def run_selftest() -> int:
    """Print PASS/FAIL per known-answer vector. Returns the exit status."""
    results = verify_known_answers()
    for name, passed in results.items():
        print(f"  {'PASS' if passed else 'FAIL'}  {name}")
    return 0 if all(results.values()) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for A5Vault."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG)

    if args.selftest:
        return run_selftest()

    if args.trace < 0:
        parser.error("--trace must be non-negative")

    recorder = TraceRecorder(limit=args.trace) if args.trace else None
    try:
        state = key_setup(args.key, args.frame, KeySetupVariant(args.variant))
        _, keystream = run_bursts(state, args.bits, on_step=recorder)
    except InvalidInputError as e:
        parser.error(str(e))

    if recorder is not None:
        print(recorder.render())
        print()

    print(f"Variant: {args.variant}")
    print(f"A->B: {keystream.a_to_b.hex()}")
    print(f"B->A: {keystream.b_to_a.hex()}")
    logger.debug("Produced %d bits per direction", args.bits)
    return 0


if __name__ == "__main__":
    sys.exit(main())
