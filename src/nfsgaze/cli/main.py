"""
Command-line interface for the nfsgaze NFS statistics monitor.

This module parses the command line, loads the configuration file, merges
the two (command-line flags win), sets up logging and wires the parser,
delta engine, renderer, metrics exporters and recorder into an NfsMonitor.

Examples:
    nfsgaze /mnt/nfs
    nfsgaze -m /mnt/nfs --ops READ,WRITE --bw -i 5
    nfsgaze --nfsiostat --attr /mnt/nfs -c 10
"""

import argparse
import copy
import logging
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..display.renderer import StatsRenderer
from ..metrics.prometheus import MetricsManager
from ..models.config import MetricsConfig, MonitorConfig
from ..monitoring.monitor import NfsMonitor
from ..stats.delta import parse_operations_filter
from ..storage.recorder import DeltaRecorder
from ..validation import (
    NfsGazeError,
    ValidationError,
    handle_cli_error,
    validate_positive_float,
    validate_positive_integer,
)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser.

    Options that have a configuration file counterpart default to None so
    that an unset flag falls back to the file value.
    """
    parser = argparse.ArgumentParser(
        prog="nfsgaze",
        description="NFS I/O statistics monitor: per-operation rates and latencies from mountstats.",
    )
    parser.add_argument("mount_point", nargs="?", help="Mount point to monitor (default: all NFS mounts).")
    parser.add_argument("-m", "--mount", dest="mount", help="Mount point to monitor; overrides the positional argument.")
    parser.add_argument("--ops", help="Comma-separated list of operations to show, e.g. READ,WRITE.")
    parser.add_argument("-i", "--interval", type=str, default=None, help="Seconds between reports.")
    parser.add_argument("-c", "--count", type=str, default=None, help="Number of reports (0 = until interrupted).")
    parser.add_argument("--attr", action="store_true", default=None, help="Show attribute cache statistics.")
    parser.add_argument("--bw", action="store_true", default=None, help="Show bandwidth columns.")
    parser.add_argument("--clear", action="store_true", default=None, help="Clear the screen between reports.")
    parser.add_argument("--nfsiostat", action="store_true", default=None, help="Use the nfsiostat output format.")
    parser.add_argument("-f", "--file", dest="mountstats", type=Path, default=None, help="Path to the mountstats file.")
    parser.add_argument("--config", type=Path, default=None, help="Path to a config.toml file.")
    parser.add_argument("--prometheus-port", type=str, default=None, help="Serve Prometheus metrics on this port.")
    parser.add_argument("--record", type=Path, default=None, help="Record delta records to Parquet files in this directory.")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: from config, else INFO).",
    )
    return parser


def setup_logging(level: str) -> None:
    # Logs go to stderr so they never interleave with the statistics on stdout.
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT, stream=sys.stderr)
    logging.getLogger().setLevel(level)


def apply_cli_overrides(monitor_config: MonitorConfig, args: argparse.Namespace) -> MonitorConfig:
    """
    Overlay command-line values onto the loaded configuration, in place.

    Raises:
        ValidationError: If a command-line value is invalid
    """
    collection = monitor_config.collection
    display = monitor_config.display

    if args.interval is not None:
        collection.interval_seconds = validate_positive_float(
            args.interval, min_value=0.01, field_name="--interval"
        )
    if args.count is not None:
        collection.count = validate_positive_integer(args.count, min_value=0, field_name="--count")
    if args.mountstats is not None:
        collection.mountstats_path = args.mountstats

    if args.bw:
        display.show_bandwidth = True
    if args.attr:
        display.show_attr = True
    if args.clear:
        display.clear_screen = True
    if args.nfsiostat:
        display.nfsiostat_format = True

    if args.prometheus_port is not None:
        port = validate_positive_integer(
            args.prometheus_port, min_value=1, max_value=65535, field_name="--prometheus-port"
        )
        monitor_config.metrics = MetricsConfig(
            enable_prometheus=True,
            prometheus_port=port,
            prometheus_addr=monitor_config.metrics.prometheus_addr,
        )

    if args.record is not None:
        monitor_config.storage.enabled = True
        monitor_config.storage.output_dir = args.record

    return monitor_config


def create_monitor(monitor_config: MonitorConfig, args: argparse.Namespace) -> NfsMonitor:
    """Build the NfsMonitor and its collaborators from the merged configuration."""
    collection = monitor_config.collection
    display = monitor_config.display
    operations_filter = parse_operations_filter(args.ops)

    renderer = StatsRenderer(
        show_bandwidth=display.show_bandwidth,
        show_attr=display.show_attr,
        nfsiostat_format=display.nfsiostat_format,
        clear_screen=display.clear_screen,
    )

    metrics = MetricsManager(monitor_config.metrics)

    recorder = None
    if monitor_config.storage.enabled:
        recorder = DeltaRecorder(
            monitor_config.storage.output_dir,
            monitor_config.storage,
            metadata={
                "mountstats_path": str(collection.mountstats_path),
                "interval_seconds": collection.interval_seconds,
                "mount_point": args.mount or args.mount_point,
                "operations_filter": sorted(operations_filter),
            },
        )

    return NfsMonitor(
        mountstats_path=collection.mountstats_path,
        interval_seconds=collection.interval_seconds,
        mount_point=args.mount or args.mount_point,
        operations_filter=operations_filter,
        renderer=renderer,
        metrics=metrics if metrics.enabled else None,
        recorder=recorder,
    )


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface of nfsgaze.

    Exits with status 0 after the requested number of reports or on
    SIGINT/SIGTERM, and with status 1 on configuration errors, invalid
    arguments, an unreadable or malformed initial report, or an unknown
    mount point.
    """
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level or "INFO")

    try:
        if args.config is not None:
            set_config_path(args.config)
        app_config = get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    # Overrides apply to a copy; the cached configuration stays as loaded.
    monitor_config = copy.deepcopy(app_config.monitor)
    if args.log_level is None:
        logging.getLogger().setLevel(monitor_config.log_level)

    try:
        apply_cli_overrides(monitor_config, args)
    except ValidationError as e:
        handle_cli_error(error=e, context="argument validation", exit_code=1, logger=logger)

    monitor = create_monitor(monitor_config, args)
    monitor.install_signal_handlers()
    try:
        monitor.run(count=monitor_config.collection.count)
    except (NfsGazeError, OSError) as e:
        handle_cli_error(error=e, context="monitoring", exit_code=1, logger=logger)
    finally:
        monitor.restore_signal_handlers()


if __name__ == "__main__":
    main_cli()
