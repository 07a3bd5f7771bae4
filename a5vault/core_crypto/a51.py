"""
A5/1 Keystream Generator

The GSM A5/1 over-the-air voice-privacy keystream generator, built from
three irregularly clocked linear feedback shift registers.

Components:
- Register lanes R1, R2, R3 (19, 22 and 23 bits) with fixed feedback taps
- Majority-vote clock control on each lane's middle bit
- Key setup (shift-in loading, plus the published loading phase on request)
- Keystream bit extraction from the top bit of every lane

Variant Note:
    The default key setup (KeySetupVariant.SHIFT_IN) shifts the 64 key bits
    straight into the three lanes without clocking them and never mixes in
    the frame number. This is NOT the published A5/1 loading phase and its
    output does not match the published test vectors. The published
    behaviour is available as KeySetupVariant.CANONICAL.

Security Note:
    A5/1 is broken (time-memory tradeoff and correlation attacks recover the
    session key in practice). This module is for study and interoperability
    testing only.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

KEY_BITS = 64
FRAME_BITS = 22
MIXING_CLOCKS = 100  # Discarded majority clocks after canonical loading

KEY_LIMIT = 1 << KEY_BITS
FRAME_LIMIT = 1 << FRAME_BITS


class InvalidInputError(ValueError):
    """Raised when a key, frame number, bit count or register is out of range."""
    pass


# ============================================================================
# Register Lanes
# ============================================================================

@dataclass(frozen=True)
class RegisterLane:
    """
    Fixed description of one A5/1 shift register.

    Attributes:
        name: Lane label ("R1", "R2", "R3")
        size: Width in bits
        taps: Feedback tap mask (bits XORed into the new low bit)
        clock_bit: Position of the middle bit used for clock control
        shift: Key offset (counted from bit 64) where shift-in loading starts
    """
    name: str
    size: int
    taps: int
    clock_bit: int
    shift: int

    @property
    def mask(self) -> int:
        """Mask covering the lane's width."""
        return (1 << self.size) - 1

    @property
    def top_bit(self) -> int:
        """Position of the output bit."""
        return self.size - 1

    def control(self, value: int) -> bool:
        """True if the middle (clock control) bit is set."""
        return bool((value >> self.clock_bit) & 1)

    def output(self, value: int) -> int:
        """Top bit of the register."""
        return (value >> self.top_bit) & 1

    def clock(self, value: int) -> int:
        """Shift left once, feeding back the parity of the tapped bits."""
        return ((value << 1) & self.mask) | parity(value & self.taps)


# Taps correspond to x^19 + x^5 + x^2 + x + 1, x^22 + x + 1
# and x^23 + x^15 + x^2 + x + 1.
R1 = RegisterLane("R1", size=19, taps=0x072000, clock_bit=8, shift=64)   # taps 18,17,16,13
R2 = RegisterLane("R2", size=22, taps=0x300000, clock_bit=10, shift=45)  # taps 21,20
R3 = RegisterLane("R3", size=23, taps=0x700080, clock_bit=10, shift=23)  # taps 22,21,20,7

LANES: Tuple[RegisterLane, RegisterLane, RegisterLane] = (R1, R2, R3)


class KeySetupVariant(Enum):
    """How the key (and frame number) are loaded into the registers."""

    SHIFT_IN = "shift-in"     # Key bits shifted in unclocked, frame ignored
    CANONICAL = "canonical"   # Published A5/1 loading phase


# ============================================================================
# Cipher State
# ============================================================================

@dataclass(frozen=True)
class CipherState:
    """
    Complete state of the generator: the three register values.

    Instances are immutable; clocking returns a new state. Values wider
    than their lane are rejected on construction, so every reachable state
    has zero bits above each lane's width.
    """
    r1: int = 0
    r2: int = 0
    r3: int = 0

    def __post_init__(self):
        for lane, value in zip(LANES, self.registers):
            _check_int(value, lane.name)
            if value < 0 or value > lane.mask:
                raise InvalidInputError(
                    f"{lane.name} must fit in {lane.size} bits, got {value:#x}"
                )

    @property
    def registers(self) -> Tuple[int, int, int]:
        """Register values in lane order (R1, R2, R3)."""
        return (self.r1, self.r2, self.r3)

    def __repr__(self) -> str:
        return (f"CipherState(r1=0x{self.r1:05x}, r2=0x{self.r2:06x}, "
                f"r3=0x{self.r3:06x})")


@dataclass(frozen=True)
class StepTrace:
    """One generation step as seen by an instrumentation hook."""
    index: int
    state: CipherState  # State before this step's clock
    bit: int
    clocked: Tuple[bool, bool, bool]


StepHook = Callable[[StepTrace], None]


# ============================================================================
# Primitive Functions
# ============================================================================

def parity(word: int) -> int:
    """Return the XOR of all bits of a non-negative integer (popcount mod 2)."""
    return bin(word).count("1") & 1


def majority(a: bool, b: bool, c: bool) -> bool:
    """Return True iff at least two of the three inputs are true."""
    return (bool(a) + bool(b) + bool(c)) >= 2


def clock_mask(state: CipherState) -> Tuple[bool, bool, bool]:
    """
    Decide which lanes advance on the next majority-controlled clock.

    A lane clocks when its middle bit agrees with the majority of the
    three middle bits, so at least two lanes always clock.
    """
    controls = [lane.control(value) for lane, value in zip(LANES, state.registers)]
    maj = majority(*controls)
    return tuple(c == maj for c in controls)


def clock_step(state: CipherState, force_all: bool = False) -> CipherState:
    """
    Clock the generator once.

    Args:
        state: Current state
        force_all: Clock every lane regardless of the majority rule
                   (used only by the canonical loading phase)

    Returns:
        The next state
    """
    selected = (True, True, True) if force_all else clock_mask(state)
    return _clock_lanes(state, selected)


def _clock_lanes(state: CipherState, selected: Tuple[bool, bool, bool]) -> CipherState:
    return CipherState(*(
        lane.clock(value) if move else value
        for lane, value, move in zip(LANES, state.registers, selected)
    ))


def output_bit(state: CipherState) -> int:
    """Keystream bit for the current state: XOR of the three top bits."""
    return R1.output(state.r1) ^ R2.output(state.r2) ^ R3.output(state.r3)


# ============================================================================
# Key Setup
# ============================================================================

def _check_int(value, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer, got {type(value).__name__}")


def _check_range(value, limit: int, name: str) -> None:
    _check_int(value, name)
    if value < 0 or value >= limit:
        raise InvalidInputError(f"{name} must be in [0, {limit:#x}), got {value:#x}")


def _shift_in(key: int) -> CipherState:
    registers = []
    for lane in LANES:
        reg = 0
        for i in range(lane.size):
            bit = (key >> (lane.shift - i - 1)) & 1
            reg = ((reg << 1) ^ bit) & lane.mask
        registers.append(reg)
    return CipherState(*registers)


def _xor_low_bit(state: CipherState, bit: int) -> CipherState:
    return CipherState(state.r1 ^ bit, state.r2 ^ bit, state.r3 ^ bit)


def _canonical(key: int, frame: int) -> CipherState:
    state = CipherState()
    key_bytes = key.to_bytes(KEY_BITS // 8, "big")

    # Least significant bit of the first key byte first, all lanes clocked
    for i in range(KEY_BITS):
        state = clock_step(state, force_all=True)
        state = _xor_low_bit(state, (key_bytes[i // 8] >> (i & 7)) & 1)

    for i in range(FRAME_BITS):
        state = clock_step(state, force_all=True)
        state = _xor_low_bit(state, (frame >> i) & 1)

    # The published generator clocks before each output bit; the extra
    # clock lines that up with generate(), which emits before clocking.
    for _ in range(MIXING_CLOCKS + 1):
        state = clock_step(state)

    return state


def key_setup(
    key: int,
    frame: int,
    variant: KeySetupVariant = KeySetupVariant.SHIFT_IN
) -> CipherState:
    """
    Load a 64-bit key and 22-bit frame number into a fresh state.

    With the default SHIFT_IN variant the three lanes together take the
    64 key bits most-significant first (R1 gets bits 63..45, R2 bits
    44..23, R3 bits 22..0) with no clocking, and the frame number is
    validated but not used.

    Args:
        key: Session key, 0 <= key < 2**64
        frame: Frame number, 0 <= frame < 2**22
        variant: Loading procedure to apply

    Returns:
        Initial cipher state

    Raises:
        InvalidInputError: If key or frame is outside its range
    """
    _check_range(key, KEY_LIMIT, "key")
    _check_range(frame, FRAME_LIMIT, "frame")
    variant = KeySetupVariant(variant)

    if variant is KeySetupVariant.CANONICAL:
        state = _canonical(key, frame)
    else:
        state = _shift_in(key)

    logger.debug("Key setup complete (variant=%s)", variant.value)
    return state


# ============================================================================
# Keystream Generation
# ============================================================================

def _check_bit_count(n_bits) -> None:
    _check_int(n_bits, "n_bits")
    if n_bits < 0:
        raise InvalidInputError(f"n_bits must be non-negative, got {n_bits}")


def _advance(state: CipherState, index: int, on_step: Optional[StepHook]) -> Tuple[int, CipherState]:
    # Emit from the pre-clock state, then clock under majority control
    bit = output_bit(state)
    selected = clock_mask(state)
    if on_step is not None:
        on_step(StepTrace(index=index, state=state, bit=bit, clocked=selected))
    return bit, _clock_lanes(state, selected)


def generate(
    state: CipherState,
    n_bits: int,
    on_step: Optional[StepHook] = None
) -> Tuple[CipherState, List[int]]:
    """
    Produce n_bits of keystream.

    Each step reads output_bit() and then applies one majority clock.
    The input state is not modified; the returned state continues the
    stream, so generate(s, a + b) equals generate(s, a) followed by
    generate(s', b).

    Args:
        state: State to start from
        n_bits: Number of bits to produce (0 returns the state unchanged)
        on_step: Optional hook called with a StepTrace for every step

    Returns:
        (advanced state, list of bits)
    """
    _check_bit_count(n_bits)
    bits = []
    for index in range(n_bits):
        bit, state = _advance(state, index, on_step)
        bits.append(bit)
    logger.debug("Generated %d keystream bits", n_bits)
    return state, bits


def iter_keystream(
    state: CipherState,
    n_bits: Optional[int] = None,
    on_step: Optional[StepHook] = None
) -> Iterator[int]:
    """
    Lazily yield keystream bits starting from state.

    Bits are computed only as they are consumed. With n_bits=None the
    iterator is unbounded.
    """
    if n_bits is not None:
        _check_bit_count(n_bits)
    index = 0
    while n_bits is None or index < n_bits:
        bit, state = _advance(state, index, on_step)
        yield bit
        index += 1


class A51:
    """
    Stateful A5/1 generator owning one keystream session.

    Wraps key_setup() and the step function for callers that prefer an
    object which advances in place. Each session should hold its own
    instance; instances are not safe to share between threads.

    Example:
        >>> gen = A51(key=0x911A2B3C4D5E6F0F, frame=0x134)
        >>> gen.generate_bits(6)
        [0, 0, 1, 1, 1, 1]
    """

    def __init__(
        self,
        key: int,
        frame: int,
        variant: KeySetupVariant = KeySetupVariant.SHIFT_IN,
        on_step: Optional[StepHook] = None
    ):
        self._key = key
        self._frame = frame
        self._variant = KeySetupVariant(variant)
        self._on_step = on_step
        self._state = key_setup(key, frame, self._variant)
        self._position = 0

    @property
    def state(self) -> CipherState:
        """Current state."""
        return self._state

    @property
    def position(self) -> int:
        """Number of bits produced since the last key setup."""
        return self._position

    @property
    def variant(self) -> KeySetupVariant:
        return self._variant

    def next_bit(self) -> int:
        """Produce one keystream bit and advance."""
        bit, self._state = _advance(self._state, self._position, self._on_step)
        self._position += 1
        return bit

    def generate_bits(self, count: int) -> List[int]:
        """Produce count keystream bits."""
        _check_bit_count(count)
        return [self.next_bit() for _ in range(count)]

    def next_byte(self) -> int:
        """Produce the next 8 bits packed most-significant first."""
        byte_val = 0
        for _ in range(8):
            byte_val = (byte_val << 1) | self.next_bit()
        return byte_val

    def generate_bytes(self, count: int) -> bytes:
        """Produce count bytes of keystream (bits packed MSB first)."""
        _check_bit_count(count)
        return bytes(self.next_byte() for _ in range(count))

    def reset(self, key: Optional[int] = None, frame: Optional[int] = None):
        """
        Re-run key setup.

        Args:
            key: Optional new key (keeps the current one if None)
            frame: Optional new frame number (keeps the current one if None)
        """
        if key is not None:
            self._key = key
        if frame is not None:
            self._frame = frame
        self._state = key_setup(self._key, self._frame, self._variant)
        self._position = 0

    def __repr__(self) -> str:
        return (f"A51(variant={self._variant.value}, position={self._position}, "
                f"state={self._state!r})")
