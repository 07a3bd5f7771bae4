"""
Trace Module

Observability for the A5/1 generator, kept out of the generation loop.
The core functions accept an ``on_step`` hook; this module provides the
hooks and the rendering of register contents.

Features:
- Recording of every generation step (pre-clock state, output bit, clocked lanes)
- Logging hook that reports steps at DEBUG level
- Register rendering as decimal value plus bits grouped by four
"""

import logging
from typing import Callable, List, Optional

from ..core_crypto.a51 import LANES, CipherState, StepTrace


# ============================================================================
# Rendering
# ============================================================================

def format_register(value: int, size: int) -> str:
    """
    Render a register as its decimal value and its bits, MSB first.

    Bits are grouped by four from the most significant end, e.g.
    ``format_register(5, 6)`` gives ``"5 \\t0001 01"``.
    """
    bits = format(value, f"0{size}b")
    groups = [bits[i:i + 4] for i in range(0, size, 4)]
    return f"{value} \t{' '.join(groups)}"


def format_state(state: CipherState) -> List[str]:
    """One line per lane: ``R1 = <format_register>``."""
    return [
        f"{lane.name} = {format_register(value, lane.size)}"
        for lane, value in zip(LANES, state.registers)
    ]


def format_step(trace: StepTrace) -> str:
    """Render one generation step as a block of lines."""
    lines = [f"Iteration {trace.index + 1}"]
    lines.extend(format_state(trace.state))
    lines.append(f"Keystream bit: {trace.bit}")
    return "\n".join(lines)


# ============================================================================
# Hooks
# ============================================================================

class TraceRecorder:
    """
    Collects StepTrace records, optionally up to a limit.

    Pass the instance itself as the ``on_step`` hook.
    """

    def __init__(self, limit: Optional[int] = None):
        self._limit = limit
        self._steps: List[StepTrace] = []
        self._callbacks: List[Callable[[StepTrace], None]] = []

    def __call__(self, trace: StepTrace) -> None:
        if self._limit is not None and len(self._steps) >= self._limit:
            return
        self._steps.append(trace)
        for callback in self._callbacks:
            callback(trace)

    def add_callback(self, callback: Callable[[StepTrace], None]) -> None:
        """Add a callback to be notified of each recorded step."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[StepTrace], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def steps(self) -> List[StepTrace]:
        return list(self._steps)

    @property
    def bits(self) -> List[int]:
        """Output bits of the recorded steps."""
        return [step.bit for step in self._steps]

    def clear(self) -> None:
        self._steps.clear()

    def render(self) -> str:
        """All recorded steps, separated by blank lines."""
        return "\n\n".join(format_step(step) for step in self._steps)

    def __len__(self) -> int:
        return len(self._steps)


def logging_hook(
    log: Optional[logging.Logger] = None,
    level: int = logging.DEBUG
) -> Callable[[StepTrace], None]:
    """
    Build an ``on_step`` hook that logs each step.

    Args:
        log: Logger to use (defaults to this module's logger)
        level: Log level for step records

    Returns:
        Callback suitable for generate(..., on_step=...)
    """
    log = log or logging.getLogger(__name__)

    def hook(trace: StepTrace) -> None:
        if not log.isEnabledFor(level):
            return
        r1, r2, r3 = trace.state.registers
        moved = "".join(
            lane.name[-1] if clocked else "-"
            for lane, clocked in zip(LANES, trace.clocked)
        )
        log.log(level, "step=%d bit=%d r1=%05x r2=%06x r3=%06x clocked=%s",
                trace.index, trace.bit, r1, r2, r3, moved)

    return hook
