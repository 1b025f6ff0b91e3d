"""Thread-safe build progress and cooperative cancellation.

The pipeline thread advances a ``BuildProgress`` and polls a
``CancellationToken``; display threads read ``snapshot()`` and may call
``cancel()``. These two objects are the only state shared between them.
"""

import threading
from dataclasses import dataclass, field

from ..core.models import BuildState


class CancellationToken:
    """Caller-initiated stop request, polled by the pipeline."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class BuildProgress:
    """Progress state shared between the pipeline and display threads.

    ``current_step`` only ever increases and never exceeds ``total_steps``
    once a total has been set.
    """

    total_steps: int = 0
    current_step: int = 0
    state: BuildState = BuildState.IDLE
    cancelled: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def begin(self, total_steps: int, start_step: int = 0) -> None:
        """Reset counters for a new build.

        Args:
            total_steps: Estimated number of steps for the whole build
            start_step: Initial position (head start shown before work begins)
        """
        with self._lock:
            self.total_steps = max(0, total_steps)
            self.current_step = min(max(0, start_step), self.total_steps)
            self.state = BuildState.IDLE
            self.cancelled = False

    def advance(self, steps: int = 1) -> int:
        """Move forward by ``steps``, clamped to the total. Returns the new step."""
        with self._lock:
            if steps > 0:
                self.current_step = min(self.current_step + steps, self.total_steps)
            return self.current_step

    def set_state(self, state: BuildState) -> None:
        with self._lock:
            self.state = state

    def mark_cancelled(self) -> None:
        with self._lock:
            self.cancelled = True
            self.state = BuildState.CANCELLED

    def finish(self) -> None:
        """Jump to 100%."""
        with self._lock:
            self.current_step = self.total_steps
            self.state = BuildState.DONE

    def snapshot(self) -> dict:
        """Return a thread-safe copy of all display-relevant fields."""
        with self._lock:
            return {
                "total_steps": self.total_steps,
                "current_step": self.current_step,
                "state": self.state.value,
                "cancelled": self.cancelled,
                "fraction": (
                    self.current_step / self.total_steps if self.total_steps else 0.0
                ),
            }
