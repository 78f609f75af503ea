"""TableFormatter ABC — the pluggable table-formatting collaborator."""

from abc import ABC, abstractmethod
from typing import List, Sequence


class TableFormatter(ABC):
    """Turns a header row plus data rows into a text table."""

    @abstractmethod
    def format(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        """Return the formatted table. Raises RenderError on failure."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this formatter (e.g. 'tabulate-cli')."""
        ...


def to_delimited(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> List[str]:
    """Header line followed by one comma-joined line per row."""
    return [",".join(headers)] + [",".join(row) for row in rows]
