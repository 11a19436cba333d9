"""
CLIENT STATE MODULE
===================

Mutable state shared by every chat call of one AIService: which model is
active, and when the last request went out. Created once at startup and
handed to AIService; never written to disk.

All reads and writes go through a lock because FastAPI runs sync endpoints
in a threadpool, so several chat calls can touch this object at once.
"""

import threading
import time
from typing import Callable, Iterable, List


class ClientState:
    """
    Active model selection plus request pacing.

    The active model is always one of known_models; set_active_model()
    refuses anything else and leaves the current selection untouched.
    """

    # Length of the window used for request_count.
    WINDOW_SECONDS = 60.0

    def __init__(self, known_models: Iterable[str], active_model: str = None,
                 clock: Callable[[], float] = time.monotonic):
        self._known_models: List[str] = list(known_models)
        if not self._known_models:
            raise ValueError("ClientState needs at least one known model")
        if active_model is None:
            active_model = self._known_models[0]
        if active_model not in self._known_models:
            raise ValueError(f"Unknown model: {active_model}")

        self._active_model = active_model
        self._clock = clock
        self._lock = threading.Lock()
        self.last_request_time = None
        self.request_count = 0

    @property
    def known_models(self) -> List[str]:
        return list(self._known_models)

    @property
    def active_model(self) -> str:
        with self._lock:
            return self._active_model

    def set_active_model(self, model: str) -> bool:
        """Switch the active model. Returns False (no change) for unknown ids."""
        if model not in self._known_models:
            return False
        with self._lock:
            self._active_model = model
        return True

    def reserve_request_slot(self, min_interval: float) -> float:
        """
        Book the next request and return how long the caller must wait first.

        The slot is booked at now + wait, so a second caller arriving during
        the wait is spaced min_interval after the first one rather than
        sleeping for the same remainder.
        """
        with self._lock:
            now = self._clock()
            wait = 0.0
            if self.last_request_time is not None:
                elapsed = now - self.last_request_time
                if elapsed > self.WINDOW_SECONDS:
                    self.request_count = 0
                if elapsed < min_interval:
                    wait = min_interval - elapsed
            self.last_request_time = now + wait
            self.request_count += 1
            return wait
