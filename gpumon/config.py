"""Runtime configuration for a monitoring session.

Defaults can be overridden through GPUMON_* environment variables; CLI
flags override both.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from gpumon.core.errors import ConfigError

DEFAULT_INTERVAL_S = 2.0
DEFAULT_MAX_ROWS = 20
DEFAULT_TABLE_STYLE = "pipe"
DEFAULT_FORMATTER = "tabulate-cli"
CSV_FILENAME = "gpu_metrics.csv"

# env var -> (field, parser)
_ENV_VARS = {
    "GPUMON_INTERVAL": ("interval_s", float),
    "GPUMON_MAX_ROWS": ("max_rows", int),
    "GPUMON_TABLE_STYLE": ("table_style", str),
    "GPUMON_FORMATTER": ("formatter", str),
    "GPUMON_FORMATTER_PATH": ("formatter_path", str),
    "GPUMON_CSV_PATH": ("csv_path", Path),
}


@dataclass
class MonitorConfig:
    interval_s: float = DEFAULT_INTERVAL_S
    max_rows: int = DEFAULT_MAX_ROWS
    table_style: str = DEFAULT_TABLE_STYLE
    formatter: str = DEFAULT_FORMATTER
    formatter_path: Optional[str] = None
    csv_path: Optional[Path] = None
    query_timeout_s: Optional[float] = 10.0
    nvidia_smi: str = "nvidia-smi"
    _resolved_csv: Optional[Path] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides: Any) -> "MonitorConfig":
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for var, (name, parse) in _ENV_VARS.items():
            raw = environ.get(var)
            if raw is None or raw == "":
                continue
            try:
                values[name] = parse(raw)
            except ValueError:
                raise ConfigError(f"{var}={raw!r} is not a valid {parse.__name__}")
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def validate(self) -> "MonitorConfig":
        if self.interval_s <= 0:
            raise ConfigError(f"interval must be positive, got {self.interval_s}")
        if self.max_rows < 1:
            raise ConfigError(f"max rows must be >= 1, got {self.max_rows}")
        return self

    def resolve_csv_path(self) -> Path:
        """Configured CSV path, or a file in a per-process temp directory.

        The temporary directory is created once and reused for the
        lifetime of this config.
        """
        if self.csv_path is not None:
            return Path(self.csv_path).expanduser()
        if self._resolved_csv is None:
            self._resolved_csv = Path(tempfile.mkdtemp(prefix="gpumon-")) / CSV_FILENAME
        return self._resolved_csv

