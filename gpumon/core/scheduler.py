"""Monitoring session: drives collect -> store -> render -> persist.

One Scheduler owns all per-session state (catalog, history, CSV log,
display surface, timer), so independent sessions can coexist.

States: STOPPED -> RUNNING -> STOPPED. Every timer tick is turned into an
Event and fed through handle(), the single transition function.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple

from gpumon.config import MonitorConfig
from gpumon.display.base import DisplaySurface
from gpumon.render.base import TableFormatter
from gpumon.render.renderer import TableRenderer

from .collector import DeviceCatalog, MetricsQuery, SampleCollector
from .csv_sink import CsvSink
from .driver import IntervalDriver
from .errors import AlreadyRunningError, CollectionError, PersistenceError, RenderError
from .history import HistoryStore
from .types import Sample

log = logging.getLogger(__name__)


class SchedulerState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class Event(Enum):
    TICK = "tick"
    SURFACE_CLOSED = "surface_closed"


class Scheduler:
    def __init__(
        self,
        config: MonitorConfig,
        query: MetricsQuery,
        formatter: TableFormatter,
        surface_factory: Callable[[], DisplaySurface],
        clock: Optional[Callable[[], str]] = None,
        driver_factory: Callable[[float, Callable[[], None]], IntervalDriver] = IntervalDriver,
    ):
        self.config = config.validate()
        self.query = query
        self.collector = SampleCollector(query) if clock is None else SampleCollector(query, clock)
        self.renderer = TableRenderer(formatter)
        self.surface_factory = surface_factory
        self.driver_factory = driver_factory
        self.csv = CsvSink(config.resolve_csv_path())
        self._history = HistoryStore(config.max_rows)
        self._lock = threading.Lock()
        self._state = SchedulerState.STOPPED
        self._driver: Optional[IntervalDriver] = None
        self._surface: Optional[DisplaySurface] = None
        self._catalog: Optional[DeviceCatalog] = None
        self.ticks_recorded = 0
        self.ticks_skipped = 0
        self.render_failures = 0

    # --- lifecycle ---

    def start(self) -> None:
        """Discover devices, reset the log and history, start ticking.

        Raises AlreadyRunningError, CollectionError or PersistenceError
        before any timer is started.
        """
        with self._lock:
            if self._state is SchedulerState.RUNNING:
                raise AlreadyRunningError("monitoring is already running")
            catalog = DeviceCatalog.discover(self.query)
            surface = self.surface_factory()
            surface.open()
            try:
                self.csv.initialize(catalog)
            except PersistenceError:
                surface.close()
                raise
            self._history.clear()
            self._catalog = catalog
            self._surface = surface
            self.ticks_recorded = 0
            self.ticks_skipped = 0
            self.render_failures = 0
            self._driver = self.driver_factory(self.config.interval_s, self.tick)
            self._state = SchedulerState.RUNNING
            self._driver.start()
        log.info(
            "monitoring %d device(s) every %ss, logging to %s",
            catalog.count, self.config.interval_s, self.csv.path,
        )

    def stop(self) -> Optional[Path]:
        """Cancel the timer and release the surface. Idempotent.

        Safe from any thread, including from inside a tick. Returns the CSV
        path when a running session was stopped, None otherwise.
        """
        with self._lock:
            if self._state is SchedulerState.STOPPED:
                return None
            self._state = SchedulerState.STOPPED
            driver, self._driver = self._driver, None
            surface, self._surface = self._surface, None
        if driver is not None:
            driver.cancel()
        if surface is not None and surface.is_open():
            surface.close()
        log.info(
            "monitoring stopped: %d sample(s) written to %s",
            self.csv.rows_written, self.csv.path,
        )
        return self.csv.path

    # --- ticks ---

    def tick(self) -> None:
        surface = self._surface
        if surface is None or not surface.is_open():
            self.handle(Event.SURFACE_CLOSED)
        else:
            self.handle(Event.TICK)

    def handle(self, event: Event) -> None:
        if event is Event.SURFACE_CLOSED:
            log.info("display closed, stopping")
            self.stop()
        elif event is Event.TICK:
            if self._state is SchedulerState.RUNNING:
                self._record_sample()
        else:
            raise ValueError(f"unknown event {event!r}")

    def _record_sample(self) -> None:
        catalog = self._catalog
        try:
            sample = self.collector.collect(catalog)
        except CollectionError as exc:
            self.ticks_skipped += 1
            log.warning("skipping tick: %s", exc)
            return

        self._history.insert(sample)
        rows = self._history.snapshot()
        try:
            text = self.renderer.render(catalog, rows)
        except RenderError as exc:
            self.render_failures += 1
            log.warning("table formatting failed, showing raw rows: %s", exc)
            text = self.renderer.fallback(catalog, rows)
        surface = self._surface
        if surface is not None:
            surface.write(text)

        if self._state is not SchedulerState.RUNNING:
            # stop() already reported the row count
            log.debug("session stopped mid-tick, sample %s not logged", sample.timestamp)
            return
        try:
            self.csv.append(sample)
        except PersistenceError as exc:
            log.error("%s", exc)
            return
        self.ticks_recorded += 1

    # --- read-only views ---

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def catalog(self) -> Optional[DeviceCatalog]:
        return self._catalog

    @property
    def history(self) -> Tuple[Sample, ...]:
        return self._history.snapshot()

    @property
    def csv_path(self) -> Path:
        return self.csv.path
