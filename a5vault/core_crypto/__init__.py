# Core Cryptography Module
"""
A5/1 keystream generator and its caller-side helpers:
- a51: register lanes, clock control, key setup, keystream generation
- keystream: MSB-first packing, directional bursts, XOR application
- vectors: known-answer self-test
"""

from .a51 import (
    A51,
    CipherState,
    InvalidInputError,
    KeySetupVariant,
    StepTrace,
    clock_step,
    generate,
    iter_keystream,
    key_setup,
    majority,
    output_bit,
    parity,
)
from .keystream import (
    A51Cipher,
    DirectionalKeystream,
    BURST_BITS,
    BURST_BYTES,
    pack_bits,
    run_bursts,
    unpack_bits,
    xor_encrypt,
)

__all__ = [
    'A51',
    'A51Cipher',
    'CipherState',
    'DirectionalKeystream',
    'InvalidInputError',
    'KeySetupVariant',
    'StepTrace',
    'BURST_BITS',
    'BURST_BYTES',
    'clock_step',
    'generate',
    'iter_keystream',
    'key_setup',
    'majority',
    'output_bit',
    'pack_bits',
    'parity',
    'run_bursts',
    'unpack_bits',
    'xor_encrypt',
]
