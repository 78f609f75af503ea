"""Bounded, newest-first retention buffer for the live table."""

import threading
from typing import List, Tuple

from .types import Sample


class HistoryStore:
    def __init__(self, max_rows: int):
        if max_rows < 1:
            raise ValueError(f"max_rows must be >= 1, got {max_rows}")
        self.max_rows = max_rows
        self._rows: List[Sample] = []
        self._lock = threading.Lock()

    def insert(self, sample: Sample) -> None:
        """Prepend sample; evict from the oldest end down to max_rows."""
        with self._lock:
            self._rows.insert(0, sample)
            del self._rows[self.max_rows:]

    def snapshot(self) -> Tuple[Sample, ...]:
        with self._lock:
            return tuple(self._rows)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
