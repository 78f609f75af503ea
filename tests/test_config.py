"""Tests for MonitorConfig defaults and environment overrides."""

from pathlib import Path

import pytest

from gpumon.config import MonitorConfig
from gpumon.core.errors import ConfigError


class TestMonitorConfig:
    """MonitorConfig defaults, env overrides and validation."""

    def test_defaults(self):
        config = MonitorConfig.from_env({})
        assert config.interval_s == 2.0
        assert config.max_rows == 20
        assert config.table_style == "pipe"
        assert config.formatter == "tabulate-cli"
        assert config.formatter_path is None

    def test_env_overrides(self):
        config = MonitorConfig.from_env({
            "GPUMON_INTERVAL": "0.5",
            "GPUMON_MAX_ROWS": "7",
            "GPUMON_TABLE_STYLE": "grid",
            "GPUMON_FORMATTER_PATH": "/opt/tabulate/bin",
            "GPUMON_CSV_PATH": "/var/log/gpu.csv",
        })
        assert config.interval_s == 0.5
        assert config.max_rows == 7
        assert config.table_style == "grid"
        assert config.formatter_path == "/opt/tabulate/bin"
        assert config.csv_path == Path("/var/log/gpu.csv")

    def test_explicit_overrides_beat_env(self):
        config = MonitorConfig.from_env({"GPUMON_MAX_ROWS": "7"}, max_rows=3, table_style=None)
        assert config.max_rows == 3
        assert config.table_style == "pipe"

    def test_bad_env_value(self):
        with pytest.raises(ConfigError, match="GPUMON_MAX_ROWS"):
            MonitorConfig.from_env({"GPUMON_MAX_ROWS": "lots"})

    @pytest.mark.parametrize("kwargs", [{"interval_s": 0}, {"max_rows": 0}, {"interval_s": -1}])
    def test_validate(self, kwargs):
        with pytest.raises(ConfigError):
            MonitorConfig(**kwargs).validate()

    def test_default_csv_path_is_stable_temp_file(self):
        config = MonitorConfig()
        path = config.resolve_csv_path()
        assert path.name == "gpu_metrics.csv"
        assert path.parent.name.startswith("gpumon-")
        assert path.parent.is_dir()
        assert config.resolve_csv_path() == path

    def test_configured_csv_path(self, tmp_path):
        config = MonitorConfig(csv_path=tmp_path / "x.csv")
        assert config.resolve_csv_path() == tmp_path / "x.csv"
