"""Renders retained history into the text shown on the display surface."""

from typing import List, Sequence

from gpumon.core.collector import DeviceCatalog
from gpumon.core.schema import display_headers
from gpumon.core.types import Sample

from .base import TableFormatter, to_delimited


def _info_lines(catalog: DeviceCatalog, history: Sequence[Sample]) -> List[str]:
    updated = history[0].timestamp if history else "-"
    lines = [f"GPU monitor  last update: {updated}  rows: {len(history)}"]
    lines += [f"id {d.index}: {d.name}" for d in catalog.devices]
    lines.append("")
    return lines


class TableRenderer:
    def __init__(self, formatter: TableFormatter):
        self.formatter = formatter

    def render(self, catalog: DeviceCatalog, history: Sequence[Sample]) -> str:
        """Info header, device names, then the formatted table.

        Timestamps live in the info line only; table rows carry readings.
        Raises RenderError if the formatter fails.
        """
        headers = display_headers(catalog.count)
        rows = [sample.cells() for sample in history]
        table = self.formatter.format(headers, rows)
        return "\n".join(_info_lines(catalog, history) + [table])

    def fallback(self, catalog: DeviceCatalog, history: Sequence[Sample]) -> str:
        """Unformatted dump used when the formatter is unavailable."""
        headers = display_headers(catalog.count)
        rows = [sample.cells() for sample in history]
        return "\n".join(_info_lines(catalog, history) + to_delimited(headers, rows))
