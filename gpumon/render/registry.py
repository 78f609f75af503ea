"""Formatter registry — maps --formatter name to TableFormatter class."""

from typing import Dict, List, Type

from .base import TableFormatter
from .formatters import TabulateCliFormatter, TabulateFormatter

_FORMATTERS: Dict[str, Type[TableFormatter]] = {}

DEFAULT_FORMATTER = "tabulate-cli"


def register(name: str, cls: Type[TableFormatter]) -> None:
    _FORMATTERS[name] = cls


def get_formatter(name: str, **options) -> TableFormatter:
    if name not in _FORMATTERS:
        available = ", ".join(sorted(_FORMATTERS.keys())) or "(none)"
        raise ValueError(f"Unknown formatter '{name}'. Available: {available}")
    return _FORMATTERS[name](**options)


def available_formatters() -> List[str]:
    return sorted(_FORMATTERS.keys())


register("tabulate-cli", TabulateCliFormatter)
register("tabulate", TabulateFormatter)
