"""Core data types for GPU metric sampling."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _as_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class Device:
    index: int
    name: str


@dataclass(frozen=True)
class DeviceReading:
    """One device's readings, kept as the raw text the query reported.

    Unit suffixes are added at render time via the *_label properties.
    """
    memory_used: str
    utilization: str

    @property
    def memory_label(self) -> str:
        return f"{self.memory_used}MiB"

    @property
    def utilization_label(self) -> str:
        return f"{self.utilization}%"

    @property
    def memory_used_mib(self) -> Optional[float]:
        return _as_float(self.memory_used)

    @property
    def utilization_pct(self) -> Optional[float]:
        return _as_float(self.utilization)


@dataclass(frozen=True)
class Sample:
    timestamp: str
    readings: Tuple[DeviceReading, ...] = field(default_factory=tuple)

    def cells(self) -> List[str]:
        """Flat [mem, usage, mem, usage, ...] row in device order."""
        row: List[str] = []
        for reading in self.readings:
            row.append(reading.memory_label)
            row.append(reading.utilization_label)
        return row
