#!/usr/bin/env python3
"""gpumon command line.

Usage:
  # Live table, CSV log in a temp dir, Ctrl+C to quit
  gpumon start

  # Faster updates, keep 50 rows, grid style, fixed log location
  gpumon start --interval 1 --max-rows 50 --style grid --csv ./gpu.csv

  # Run for a minute then quit
  gpumon start --duration 60

  # List the devices the metrics query reports
  gpumon devices
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional

from tabulate import tabulate_formats

from gpumon.config import MonitorConfig
from gpumon.core.collector import DeviceCatalog, NvidiaSmiQuery
from gpumon.core.errors import ConfigError, MonitorError
from gpumon.core.scheduler import Scheduler
from gpumon.display.base import DisplaySurface
from gpumon.display.console import ConsoleSurface
from gpumon.render.registry import available_formatters, get_formatter


def build_scheduler(
    config: MonitorConfig,
    surface_factory: Callable[[], DisplaySurface] = ConsoleSurface,
) -> Scheduler:
    if config.table_style not in tabulate_formats:
        raise ConfigError(
            f"unknown table style {config.table_style!r}; "
            f"choose from {', '.join(sorted(tabulate_formats))}"
        )
    query = NvidiaSmiQuery(config.nvidia_smi, timeout_s=config.query_timeout_s)
    options = {"style": config.table_style}
    if config.formatter == "tabulate-cli":
        options.update(search_path=config.formatter_path, timeout_s=config.query_timeout_s)
    formatter = get_formatter(config.formatter, **options)
    return Scheduler(config, query, formatter, surface_factory)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gpumon", description="Periodic GPU metrics sampler")
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--nvidia-smi", default=None,
        help="nvidia-smi binary to query (default: nvidia-smi on $PATH)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="Start monitoring; Ctrl+C quits")
    start.add_argument("--interval", type=float, default=None,
                       help="Update interval in seconds (default: 2)")
    start.add_argument("--max-rows", type=int, default=None,
                       help="Rows kept in the live table (default: 20)")
    start.add_argument("--style", default=None,
                       help="Table style, e.g. pipe, grid, simple (default: pipe)")
    start.add_argument("--formatter", default=None, choices=available_formatters(),
                       help="Table formatter (default: tabulate-cli)")
    start.add_argument("--formatter-path", default=None,
                       help="Directory searched for the tabulate command before $PATH")
    start.add_argument("--csv", type=Path, default=None,
                       help="CSV log path (default: temp directory)")
    start.add_argument("--duration", type=float, default=None,
                       help="Quit after N seconds (default: run until Ctrl+C)")

    sub.add_parser("devices", help="List discovered devices and exit")
    return parser.parse_args(argv)


def run_start(args: argparse.Namespace) -> int:
    try:
        config = MonitorConfig.from_env(
            interval_s=args.interval,
            max_rows=args.max_rows,
            table_style=args.style,
            formatter=args.formatter,
            formatter_path=args.formatter_path,
            csv_path=args.csv,
            nvidia_smi=args.nvidia_smi,
        ).validate()
        scheduler = build_scheduler(config)
        scheduler.start()
    except (MonitorError, ValueError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    deadline = time.monotonic() + args.duration if args.duration else None
    try:
        while scheduler.is_running:
            if deadline is not None and time.monotonic() >= deadline:
                break
            time.sleep(0.2)
    except KeyboardInterrupt:
        pass

    scheduler.stop()
    print(f"Stopped. {scheduler.csv.rows_written} samples written to {scheduler.csv_path}")
    return 0


def run_devices(args: argparse.Namespace) -> int:
    query = NvidiaSmiQuery(args.nvidia_smi or "nvidia-smi")
    try:
        catalog = DeviceCatalog.discover(query)
    except MonitorError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    for device in catalog.devices:
        print(f"id {device.index}: {device.name}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "start":
        return run_start(args)
    return run_devices(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
