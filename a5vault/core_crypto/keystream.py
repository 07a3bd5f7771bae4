"""
Keystream Packing and Application

Caller-side helpers around the A5/1 generator:
- MSB-first packing of keystream bits into zero-initialised byte buffers
- The two 114-bit directional bursts (A->B, then B->A) of one GSM frame
- XOR encryption/decryption with keystream bytes
"""

from dataclasses import dataclass
from typing import Generator, Iterable, List, Optional, Tuple

from .a51 import (
    A51, CipherState, KeySetupVariant, StepHook, generate, key_setup
)


BURST_BITS = 114
BURST_BYTES = (BURST_BITS + 7) // 8  # 15


def packed_length(n_bits: int) -> int:
    """Number of bytes needed to hold n_bits."""
    return (n_bits + 7) // 8


def pack_bits(bits: Iterable[int], n_bytes: Optional[int] = None) -> bytes:
    """
    Pack bits into bytes, most significant bit first.

    Bit i lands in byte i // 8 at position 7 - (i % 8). The buffer starts
    zeroed, so a partial final byte keeps zeros in its low positions.

    Args:
        bits: Sequence of 0/1 values
        n_bytes: Buffer size (defaults to just enough for the bits)

    Returns:
        Packed bytes

    Raises:
        ValueError: If the bits do not fit in n_bytes
    """
    bits = list(bits)
    size = packed_length(len(bits)) if n_bytes is None else n_bytes
    if packed_length(len(bits)) > size:
        raise ValueError(f"{len(bits)} bits do not fit in {size} bytes")

    buffer = bytearray(size)
    for i, bit in enumerate(bits):
        buffer[i // 8] |= (bit & 1) << (7 - (i & 7))
    return bytes(buffer)


def unpack_bits(data: bytes, n_bits: Optional[int] = None) -> List[int]:
    """Inverse of pack_bits: read n_bits (default all) MSB first."""
    total = len(data) * 8 if n_bits is None else n_bits
    if total > len(data) * 8:
        raise ValueError(f"Cannot read {total} bits from {len(data)} bytes")
    return [(data[i // 8] >> (7 - (i & 7))) & 1 for i in range(total)]


@dataclass(frozen=True)
class DirectionalKeystream:
    """Keystream for one frame: uplink and downlink bursts."""
    a_to_b: bytes
    b_to_a: bytes

    def hex(self) -> Tuple[str, str]:
        return self.a_to_b.hex(), self.b_to_a.hex()


def run_bursts(
    state: CipherState,
    burst_bits: int = BURST_BITS,
    on_step: Optional[StepHook] = None
) -> Tuple[CipherState, DirectionalKeystream]:
    """
    Fill the A->B and B->A buffers from one key setup.

    The second burst continues from the state left by the first; the
    generator is not re-keyed between directions.

    Args:
        state: State returned by key_setup()
        burst_bits: Bits per direction
        on_step: Optional trace hook passed to generate()

    Returns:
        (state after both bursts, DirectionalKeystream)
    """
    n_bytes = packed_length(burst_bits)
    state, a_bits = generate(state, burst_bits, on_step)
    state, b_bits = generate(state, burst_bits, on_step)
    return state, DirectionalKeystream(
        a_to_b=pack_bits(a_bits, n_bytes),
        b_to_a=pack_bits(b_bits, n_bytes),
    )


def frame_keystream(
    key: int,
    frame: int,
    variant: KeySetupVariant = KeySetupVariant.SHIFT_IN,
    burst_bits: int = BURST_BITS
) -> DirectionalKeystream:
    """Key setup followed by run_bursts()."""
    _, keystream = run_bursts(key_setup(key, frame, variant), burst_bits)
    return keystream


def xor_encrypt(data: bytes, keystream: bytes) -> bytes:
    """
    XOR data with keystream (encryption and decryption are the same).

    Args:
        data: Data to encrypt/decrypt
        keystream: Keystream bytes (must be at least as long as data)

    Returns:
        XOR result
    """
    if len(keystream) < len(data):
        raise ValueError("Keystream must be at least as long as data")
    return bytes(d ^ k for d, k in zip(data, keystream))


class A51Cipher:
    """
    Stream cipher XORing data with A5/1 keystream.

    WARNING: A5/1 is broken. Use this for study and interoperability
    testing, never to protect real data.

    Example:
        >>> cipher = A51Cipher(key=0x1223456789ABCDEF, frame=0x134)
        >>> ciphertext = cipher.encrypt(b"Hello, GSM!")
        >>> cipher.reset()
        >>> cipher.decrypt(ciphertext)
        b'Hello, GSM!'
    """

    def __init__(
        self,
        key: int,
        frame: int,
        variant: KeySetupVariant = KeySetupVariant.SHIFT_IN
    ):
        self._generator = A51(key, frame, variant)

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt plaintext, consuming len(plaintext) bytes of keystream."""
        keystream = self._generator.generate_bytes(len(plaintext))
        return xor_encrypt(plaintext, keystream)

    def decrypt(self, ciphertext: bytes) -> bytes:
        """
        Decrypt ciphertext.

        The generator must be at the same position as when encryption
        started (call reset() first when reusing one instance).
        """
        return self.encrypt(ciphertext)

    def encrypt_stream(self, data: Iterable[int]) -> Generator[int, None, None]:
        """Yield encrypted bytes one at a time."""
        for byte in data:
            yield byte ^ self._generator.next_byte()

    def reset(self, frame: Optional[int] = None):
        """Re-key, optionally for a new frame number."""
        self._generator.reset(frame=frame)

    @property
    def generator(self) -> A51:
        """Access to the underlying generator."""
        return self._generator
