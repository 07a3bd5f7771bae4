"""
Known-answer vectors for the A5/1 generator.

SHIFT_IN_VECTOR pins the default (non-standard) key setup; its bits were
derived by running the shift-in setup and step rules by hand.
CANONICAL_VECTOR is the published A5/1 reference vector.
"""

from dataclasses import dataclass
from typing import Dict

from cryptography.hazmat.primitives import constant_time

from .a51 import KeySetupVariant, generate, key_setup
from .keystream import pack_bits, run_bursts


@dataclass(frozen=True)
class KnownAnswer:
    """Expected output of one key/frame pair."""
    name: str
    key: int
    frame: int
    variant: KeySetupVariant
    n_bits: int         # Bits per direction
    a_to_b: bytes
    b_to_a: bytes = b""  # Empty when only the first direction is pinned


SHIFT_IN_VECTOR = KnownAnswer(
    name="shift-in",
    key=0x911A2B3C4D5E6F0F,
    frame=0x134,
    variant=KeySetupVariant.SHIFT_IN,
    n_bits=6,
    a_to_b=bytes([0x3C]),  # 0 0 1 1 1 1
)

CANONICAL_VECTOR = KnownAnswer(
    name="canonical",
    key=0x1223456789ABCDEF,
    frame=0x134,
    variant=KeySetupVariant.CANONICAL,
    n_bits=114,
    a_to_b=bytes.fromhex("534EAA582FE8151AB6E1855A728C00"),
    b_to_a=bytes.fromhex("24FD35A35D5FB6526D32F906DF1AC0"),
)

KNOWN_ANSWERS = (SHIFT_IN_VECTOR, CANONICAL_VECTOR)


def check_vector(vector: KnownAnswer) -> bool:
    """Run one vector and compare the packed keystream in constant time."""
    state = key_setup(vector.key, vector.frame, vector.variant)
    if vector.b_to_a:
        _, keystream = run_bursts(state, vector.n_bits)
        return (constant_time.bytes_eq(keystream.a_to_b, vector.a_to_b)
                and constant_time.bytes_eq(keystream.b_to_a, vector.b_to_a))
    _, bits = generate(state, vector.n_bits)
    return constant_time.bytes_eq(pack_bits(bits), vector.a_to_b)


def verify_known_answers() -> Dict[str, bool]:
    """Run every known-answer vector. Returns {vector name: passed}."""
    return {vector.name: check_vector(vector) for vector in KNOWN_ANSWERS}
