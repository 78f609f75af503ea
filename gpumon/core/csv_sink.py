"""Append-only CSV log of every collected sample."""

import csv
import logging
import os
import tempfile
from pathlib import Path
from typing import List

from .collector import DeviceCatalog
from .errors import PersistenceError
from .schema import csv_headers
from .types import Sample

log = logging.getLogger(__name__)


def _write_row(f, row: List[str]) -> None:
    # csv quoting only kicks in for values containing the delimiter
    csv.writer(f, lineterminator="\n").writerow(row)


class CsvSink:
    """Header written once per session, then one line per sample.

    The file is opened and closed on every write; no handle is held across
    ticks.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.rows_written = 0

    def initialize(self, catalog: DeviceCatalog) -> None:
        """Truncate the log and write the header, atomically."""
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=self.path.parent
            )
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
                _write_row(f, csv_headers(catalog.count))
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"cannot initialize {self.path}: {exc}") from exc
        self.rows_written = 0
        log.debug("initialized CSV log %s", self.path)

    def append(self, sample: Sample) -> None:
        try:
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                _write_row(f, [sample.timestamp] + sample.cells())
        except OSError as exc:
            raise PersistenceError(f"cannot append to {self.path}: {exc}") from exc
        self.rows_written += 1
