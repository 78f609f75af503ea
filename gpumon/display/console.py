"""Terminal viewport built on rich.live.Live."""

import threading
from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.text import Text

from .base import DisplaySurface


class ConsoleSurface(DisplaySurface):
    def __init__(self, console: Optional[Console] = None, refresh_per_second: float = 4):
        self.console = console or Console()
        self.refresh_per_second = refresh_per_second
        self._live: Optional[Live] = None
        self._lock = threading.Lock()

    def open(self) -> None:
        with self._lock:
            if self._live is not None:
                return
            self._live = Live(
                Text("starting..."),
                console=self.console,
                refresh_per_second=self.refresh_per_second,
                auto_refresh=False,
            )
            self._live.start(refresh=True)

    def is_open(self) -> bool:
        with self._lock:
            return self._live is not None

    def write(self, contents: str) -> None:
        with self._lock:
            if self._live is None:
                return
            # no_wrap keeps wide tables from folding mid-row
            self._live.update(Text(contents, no_wrap=True), refresh=True)

    def close(self) -> None:
        with self._lock:
            live, self._live = self._live, None
        if live is not None:
            live.stop()
