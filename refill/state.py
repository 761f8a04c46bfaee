"""Per-invocation bookkeeping: algorithm tags, engine state, cancellation
and progress reporting.

A `Reporter` is created fresh for each engine call and threaded through the
stages. It is the only object a stage talks to besides the image and mask
buffers, so stages stay free of UI concerns: they poll `check()` for
cancellation and call `advance()` with the fraction of their own work done.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from refill.errors import InpaintCancelled


class Algorithm(str, Enum):
    TEXTURE = "texture"
    DIFFUSION = "diffusion"
    HYBRID = "hybrid"


class Status(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EngineState(str, Enum):
    IDLE = "idle"
    SYNTHESIZING = "synthesizing"
    SMOOTHING = "smoothing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Phase(str, Enum):
    """Coarse phase tags handed to progress sinks."""

    DETECT = "detect"
    ANALYZE = "analyze"
    INPAINT = "inpaint"
    FINALIZE = "finalize"


ProgressSink = Callable[[int, Phase], None]

_TERMINAL = {EngineState.COMPLETED, EngineState.CANCELLED, EngineState.FAILED}

# Percentage bands per phase.
_ANALYZE_END = 10
_INPAINT_END = 95


class CancelToken:
    """Cooperative cancellation flag, safe to set from any thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class InpaintResult:
    """Outcome of one engine invocation."""

    image: np.ndarray
    status: Status
    algorithm: Algorithm
    filled: int = 0
    remaining: int = 0
    elapsed: float = 0.0

    @property
    def completed(self) -> bool:
        return self.status is Status.COMPLETED


class Reporter:
    """Tracks state, cancellation and progress for a single invocation."""

    def __init__(
        self,
        cancel: CancelToken | None = None,
        progress: ProgressSink | None = None,
        on_state: Callable[[EngineState], None] | None = None,
    ):
        self._cancel = cancel
        self._progress = progress
        self._on_state = on_state
        self._last_pct: int | None = None
        self._span = (_ANALYZE_END, _INPAINT_END)
        self.state = EngineState.IDLE

    @property
    def cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.cancelled

    def transition(self, state: EngineState) -> None:
        if self.state in _TERMINAL:
            raise RuntimeError(
                f"Cannot move from terminal state {self.state.value} to {state.value}"
            )
        self.state = state
        if self._on_state is not None:
            self._on_state(state)

    def check(self) -> None:
        """Raise InpaintCancelled if cancellation has been requested."""
        if self.cancelled:
            raise InpaintCancelled()

    def emit(self, pct: int, phase: Phase) -> None:
        if self._progress is None or pct == self._last_pct:
            return
        self._last_pct = pct
        self._progress(pct, phase)

    def analyze(self) -> None:
        self.emit(0, Phase.ANALYZE)

    def stage(self, state: EngineState, start: float = 0.0, end: float = 1.0) -> None:
        """Enter a running stage occupying [start, end] of the inpaint band."""
        self.transition(state)
        lo, hi = _ANALYZE_END, _INPAINT_END
        self._span = (lo + (hi - lo) * start, lo + (hi - lo) * end)
        self.emit(int(self._span[0]), Phase.INPAINT)

    def advance(self, fraction: float) -> None:
        lo, hi = self._span
        fraction = min(max(fraction, 0.0), 1.0)
        self.emit(int(lo + (hi - lo) * fraction), Phase.INPAINT)

    def finish(self, status: Status) -> None:
        self.emit(_INPAINT_END, Phase.FINALIZE)
        if status is Status.CANCELLED:
            self.transition(EngineState.CANCELLED)
        else:
            self.transition(EngineState.COMPLETED)
        self.emit(100, Phase.FINALIZE)

    def fail(self) -> None:
        if self.state not in _TERMINAL:
            self.transition(EngineState.FAILED)
