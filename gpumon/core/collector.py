"""Device discovery and per-tick sample collection.

The metrics query is a line-oriented text producer:
  - list_devices(): one device name per line
  - read_metrics(): one "memory_used, utilization" line per device
Any command (or local API) that honours that contract can stand in for
nvidia-smi.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import CollectionError
from .types import TIMESTAMP_FORMAT, Device, DeviceReading, Sample

log = logging.getLogger(__name__)


class MetricsQuery(ABC):
    """Black-box producer of device names and per-device readings."""

    @abstractmethod
    def list_devices(self) -> List[str]:
        ...

    @abstractmethod
    def read_metrics(self) -> List[str]:
        ...


class CommandQuery(MetricsQuery):
    """Runs external commands and returns their non-blank stdout lines."""

    def __init__(
        self,
        device_cmd: Sequence[str],
        metrics_cmd: Sequence[str],
        timeout_s: Optional[float] = 10.0,
    ):
        self.device_cmd = list(device_cmd)
        self.metrics_cmd = list(metrics_cmd)
        self.timeout_s = timeout_s

    def list_devices(self) -> List[str]:
        return self._run(self.device_cmd)

    def read_metrics(self) -> List[str]:
        return self._run(self.metrics_cmd)

    def _run(self, cmd: List[str]) -> List[str]:
        try:
            result = subprocess.run(
                cmd, capture_output=True, encoding="utf-8", timeout=self.timeout_s
            )
        except subprocess.TimeoutExpired:
            raise CollectionError(f"{cmd[0]} timed out after {self.timeout_s}s")
        except OSError as exc:
            raise CollectionError(f"cannot run {cmd[0]}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise CollectionError(f"{cmd[0]} wrote undecodable output: {exc}") from exc
        if result.returncode != 0:
            detail = result.stderr.strip() or result.stdout.strip()
            raise CollectionError(
                f"{cmd[0]} exited with {result.returncode}: {detail}"
            )
        return [line for line in result.stdout.splitlines() if line.strip()]


class NvidiaSmiQuery(CommandQuery):
    def __init__(self, binary: str = "nvidia-smi", timeout_s: Optional[float] = 10.0):
        super().__init__(
            device_cmd=[binary, "--query-gpu=name", "--format=csv,noheader"],
            metrics_cmd=[
                binary,
                "--query-gpu=memory.used,utilization.gpu",
                "--format=csv,noheader,nounits",
            ],
            timeout_s=timeout_s,
        )


@dataclass(frozen=True)
class DeviceCatalog:
    """Devices discovered once at session start; ordinal order is column order."""
    devices: Tuple[Device, ...]

    @classmethod
    def discover(cls, query: MetricsQuery) -> "DeviceCatalog":
        names = [name.strip() for name in query.list_devices()]
        names = [name for name in names if name]
        if not names:
            raise CollectionError("metrics query reported no devices")
        catalog = cls(tuple(Device(index=i, name=name) for i, name in enumerate(names)))
        log.info("discovered %d device(s): %s", catalog.count, ", ".join(names))
        return catalog

    @property
    def count(self) -> int:
        return len(self.devices)

    @property
    def names(self) -> List[str]:
        return [d.name for d in self.devices]


def parse_reading(line: str) -> DeviceReading:
    parts = [p.strip() for p in line.split(",")]
    if len(parts) != 2 or not all(parts):
        raise CollectionError(f"malformed metrics line: {line!r}")
    return DeviceReading(memory_used=parts[0], utilization=parts[1])


def _now() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


class SampleCollector:
    def __init__(self, query: MetricsQuery, clock: Callable[[], str] = _now):
        self.query = query
        self.clock = clock

    def collect(self, catalog: DeviceCatalog) -> Sample:
        """Query readings for every catalogued device.

        A line count that disagrees with the catalog (hot-plug, truncated
        output) fails the sample rather than shifting columns.
        """
        lines = self.query.read_metrics()
        timestamp = self.clock()
        if len(lines) != catalog.count:
            raise CollectionError(
                f"expected {catalog.count} metrics line(s), got {len(lines)}"
            )
        readings = tuple(parse_reading(line) for line in lines)
        return Sample(timestamp=timestamp, readings=readings)
