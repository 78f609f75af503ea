"""Fixed-interval timer backed by a single background thread."""

import logging
import threading
import time
from typing import Callable, Optional

log = logging.getLogger(__name__)


class IntervalDriver:
    """Calls `callback` immediately, then every `interval_s` seconds.

    Callbacks run one at a time on the driver thread. When a callback
    overruns the interval the next one fires right after it returns;
    missed ticks are coalesced, never run in parallel.
    """

    def __init__(self, interval_s: float, callback: Callable[[], None]):
        if interval_s <= 0:
            raise ValueError(f"interval_s must be > 0, got {interval_s}")
        self.interval_s = interval_s
        self.callback = callback
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.fired = 0

    def _run(self):
        while not self._stop_event.is_set():
            started = time.monotonic()
            try:
                self.callback()
            except Exception:
                log.exception("tick callback failed")
            self.fired += 1
            elapsed = time.monotonic() - started
            self._stop_event.wait(max(0.0, self.interval_s - elapsed))

    def start(self):
        if self._thread is not None:
            raise RuntimeError("Driver already started")
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="gpumon-driver", daemon=True
        )
        self._thread.start()

    def cancel(self, timeout: float = 5.0) -> bool:
        """Stop firing. Returns False if the driver was already cancelled.

        Safe to call from inside the callback; the thread is only joined
        when cancelling from another thread.
        """
        if self._thread is None or self._stop_event.is_set():
            return False
        self._stop_event.set()
        if threading.current_thread() is not self._thread:
            self._thread.join(timeout=timeout)
        return True

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )
