"""Table formatters backed by the `tabulate` package.

TabulateCliFormatter shells out to the `tabulate` console script once per
tick; TabulateFormatter calls the library in-process.
"""

import os
import shutil
import subprocess
from typing import List, Optional, Sequence

from tabulate import tabulate, tabulate_formats

from gpumon.core.errors import RenderError

from .base import TableFormatter, to_delimited

DEFAULT_STYLE = "pipe"
TABULATE_COMMAND = "tabulate"


class TabulateCliFormatter(TableFormatter):
    """Feeds comma-delimited text to the external `tabulate` command."""

    def __init__(
        self,
        style: str = DEFAULT_STYLE,
        search_path: Optional[str] = None,
        timeout_s: Optional[float] = 10.0,
    ):
        self.style = style
        self.search_path = search_path
        self.timeout_s = timeout_s

    @property
    def name(self) -> str:
        return "tabulate-cli"

    def locate(self) -> Optional[str]:
        """Resolve the tool, trying search_path before $PATH."""
        dirs: List[str] = []
        if self.search_path:
            dirs.append(self.search_path)
        if os.environ.get("PATH"):
            dirs.append(os.environ["PATH"])
        return shutil.which(TABULATE_COMMAND, path=os.pathsep.join(dirs) or None)

    def format(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        exe = self.locate()
        if exe is None:
            raise RenderError(f"{TABULATE_COMMAND!r} not found (search path: {self.search_path})")
        cmd = [exe, "-1", "-s", ",", "-f", self.style]
        stdin = "\n".join(to_delimited(headers, rows)) + "\n"
        try:
            result = subprocess.run(
                cmd, input=stdin, capture_output=True, text=True, timeout=self.timeout_s
            )
        except subprocess.TimeoutExpired:
            raise RenderError(f"{TABULATE_COMMAND} timed out after {self.timeout_s}s")
        except OSError as exc:
            raise RenderError(f"cannot run {exe}: {exc}") from exc
        if result.returncode != 0:
            detail = (result.stderr.strip() or result.stdout.strip()).splitlines()
            raise RenderError(
                f"{TABULATE_COMMAND} exited with {result.returncode}: "
                f"{detail[0] if detail else 'no output'}"
            )
        return result.stdout.rstrip("\n")


class TabulateFormatter(TableFormatter):
    """In-process rendering through tabulate.tabulate()."""

    def __init__(self, style: str = DEFAULT_STYLE):
        self.style = style

    @property
    def name(self) -> str:
        return "tabulate"

    def format(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        if self.style not in tabulate_formats:
            raise RenderError(f"unknown table style {self.style!r}")
        # disable_numparse keeps "500MiB"-style cells and alignment stable
        return tabulate(
            [list(row) for row in rows],
            headers=list(headers),
            tablefmt=self.style,
            disable_numparse=True,
        )
