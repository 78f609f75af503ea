"""Fakes for the metrics query, formatter, display surface and timer."""

import itertools
from typing import List, Sequence, Union

import pytest

from gpumon.config import MonitorConfig
from gpumon.core.collector import MetricsQuery
from gpumon.core.errors import RenderError
from gpumon.core.scheduler import Scheduler
from gpumon.display.base import DisplaySurface
from gpumon.render.base import TableFormatter


class FakeQuery(MetricsQuery):
    """Returns canned device names and per-tick metric lines.

    Each entry of `ticks` is either a list of lines or an exception to raise.
    """

    def __init__(self, names: List[str], ticks: Sequence[Union[List[str], Exception]] = ()):
        self.names = names
        self.ticks = list(ticks)
        self.metric_calls = 0

    def list_devices(self) -> List[str]:
        return list(self.names)

    def read_metrics(self) -> List[str]:
        result = self.ticks[self.metric_calls]
        self.metric_calls += 1
        if isinstance(result, Exception):
            raise result
        return list(result)


class EchoFormatter(TableFormatter):
    """Joins cells with ' | ' so tests can assert on exact output."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    @property
    def name(self) -> str:
        return "echo"

    def format(self, headers, rows) -> str:
        self.calls += 1
        if self.fail:
            raise RenderError("formatter exited with 2")
        return "\n".join(" | ".join(r) for r in [list(headers)] + [list(r) for r in rows])


class FakeSurface(DisplaySurface):
    def __init__(self):
        self.opened = False
        self.closed = False
        self.close_calls = 0
        self.writes: List[str] = []

    def open(self) -> None:
        self.opened = True

    def is_open(self) -> bool:
        return self.opened and not self.closed

    def write(self, contents: str) -> None:
        if self.is_open():
            self.writes.append(contents)

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class ManualDriver:
    """Driver stand-in: ticks only when the test calls fire()."""

    instances: List["ManualDriver"] = []

    def __init__(self, interval_s, callback):
        self.interval_s = interval_s
        self.callback = callback
        self.started = False
        self.cancel_calls = 0
        ManualDriver.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self, timeout: float = 5.0) -> bool:
        self.cancel_calls += 1
        return self.cancel_calls == 1

    def fire(self, times: int = 1):
        for _ in range(times):
            self.callback()


@pytest.fixture
def csv_path(tmp_path):
    return tmp_path / "log" / "gpu_metrics.csv"


@pytest.fixture
def make_scheduler(csv_path):
    """Build a Scheduler wired to fakes; returns (scheduler, surfaces)."""
    ManualDriver.instances.clear()

    def _make(query, formatter=None, max_rows=3, csv=None, **config):
        surfaces: List[FakeSurface] = []

        def surface_factory():
            surfaces.append(FakeSurface())
            return surfaces[-1]

        counter = itertools.count(1)
        scheduler = Scheduler(
            MonitorConfig(max_rows=max_rows, csv_path=csv or csv_path, **config),
            query,
            formatter or EchoFormatter(),
            surface_factory,
            clock=lambda: f"2026-01-01 00:00:{next(counter):02d}",
            driver_factory=ManualDriver,
        )
        return scheduler, surfaces

    return _make


@pytest.fixture
def fake_query():
    return FakeQuery


@pytest.fixture
def echo_formatter():
    return EchoFormatter


@pytest.fixture
def fake_surface():
    return FakeSurface


@pytest.fixture
def drivers():
    ManualDriver.instances.clear()
    return ManualDriver.instances
