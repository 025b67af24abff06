"""Progress emission throttling."""

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class ProgressState:
    """Per-stage progress bookkeeping, discarded when the stage ends."""

    total_duration: float | None = None
    last_emitted: float | None = None
    last_emit_at: float | None = None


class ProgressThrottle:
    """Decides which progress values are worth forwarding to the sink.

    A value passes when it moved more than ``min_delta`` points since the last
    emission or ``min_interval`` seconds have elapsed. Emitted values never go
    below the previous one.
    """

    def __init__(
        self,
        min_delta: float = 0.5,
        min_interval: float = 0.2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.min_delta = min_delta
        self.min_interval = min_interval
        self.clock = clock
        self.state = ProgressState()

    def offer(self, value: float) -> float | None:
        """Return the value to emit, or None if it should be dropped."""
        state = self.state
        if state.last_emitted is not None:
            value = max(value, state.last_emitted)
            elapsed = self.clock() - (state.last_emit_at or 0.0)
            if abs(value - state.last_emitted) <= self.min_delta and elapsed <= self.min_interval:
                return None
        self._mark(value)
        return value

    def force(self, value: float) -> float:
        """Heartbeat: always emitted, regardless of throttle state."""
        if self.state.last_emitted is not None:
            value = max(value, self.state.last_emitted)
        self._mark(value)
        return value

    def _mark(self, value: float) -> None:
        self.state.last_emitted = value
        self.state.last_emit_at = self.clock()
