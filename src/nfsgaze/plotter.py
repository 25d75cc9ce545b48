"""
Generates plots from recorded monitoring sessions.

This module reads the Parquet session files written by the recorder (see
``nfsgaze.storage.recorder``) and creates interactive time-series charts
with Plotly:

- operations per second, one line per NFS operation;
- average round trip time per operation, in milliseconds.

One pair of charts is produced per recorded mount. Charts are saved as HTML
and, if Kaleido is installed, as static PNG images.

Usage:
  nfsgaze-plot --record-dir nfsgaze_records
  nfsgaze-plot --record-dir nfsgaze_records --output-dir plots
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

# Third-party library imports
import plotly.graph_objects as go
import polars as pl

from .storage.parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)

# --- Module Constants ---

# Metric column -> (chart title, y-axis label, file suffix)
PLOTTED_METRICS = {
    "ops_per_sec": ("Operations per second", "ops/s", "ops"),
    "avg_rtt": ("Average RTT", "avg RTT (ms)", "rtt"),
}

PLOT_COLUMNS = ["timestamp", "mount_path", "operation"] + list(PLOTTED_METRICS)


def _safe_name(mount_path: str) -> str:
    """Turn a mount path into a file name fragment, e.g. ``/mnt/nfs`` -> ``mnt_nfs``."""
    name = re.sub(r"[^A-Za-z0-9]+", "_", mount_path).strip("_")
    return name or "root"


def _save_plotly_figure(fig: go.Figure, base_filename: str, output_dir: Path) -> Optional[Path]:
    """
    Saves a Plotly figure as HTML and, if possible, PNG.

    Returns:
        Path of the HTML file, or None if it could not be written
    """
    plot_filename_html = output_dir / f"{base_filename}.html"
    try:
        fig.write_html(plot_filename_html)
        logger.info(f"Interactive plot saved to: {plot_filename_html}")
    except Exception as e:
        logger.error(f"Failed to save plot {plot_filename_html} using Plotly: {e}", exc_info=True)
        return None

    # Static export is optional and needs Kaleido.
    try:
        plot_filename_png = output_dir / f"{base_filename}.png"
        fig.write_image(plot_filename_png, width=1200, height=600)
        logger.info(f"Static plot saved to: {plot_filename_png}")
    except Exception as e_kaleido:
        logger.warning(
            f"Failed to save static plot to PNG (Kaleido might be missing or misconfigured): {e_kaleido}"
        )
    return plot_filename_html


def _generate_metric_plot(
    df_mount: pl.DataFrame,
    metric: str,
    mount_path: str,
    session_name: str,
    output_dir: Path,
) -> Optional[Path]:
    title, y_label, suffix = PLOTTED_METRICS[metric]

    fig = go.Figure()
    for (operation,), group_df in df_mount.sort("timestamp").group_by(["operation"], maintain_order=True):
        fig.add_trace(
            go.Scatter(
                x=group_df["timestamp"].to_list(),
                y=group_df[metric].to_list(),
                mode="lines+markers",
                name=operation,
            )
        )

    fig.update_layout(
        title=f"{title} - {mount_path}<br>{session_name}",
        legend_title_text="Operation",
        xaxis_title="Time",
        yaxis_title=y_label,
    )

    base_filename = f"{session_name}_{_safe_name(mount_path)}_{suffix}"
    return _save_plotly_figure(fig, base_filename, output_dir)


def plot_session_file(data_filepath: Path, output_dir: Path) -> List[Path]:
    """
    Generate all charts of one recorded session.

    Args:
        data_filepath: Parquet file written by the recorder
        output_dir: Directory receiving the charts

    Returns:
        Paths of the HTML charts written
    """
    written = []
    try:
        df = ParquetStorage().load_dataframe(str(data_filepath), columns=PLOT_COLUMNS)
    except Exception as e:
        logger.error(f"Error reading {data_filepath}: {e}")
        return written

    if df.is_empty():
        logger.warning(f"No data in {data_filepath}. Skipping plot.")
        return written

    output_dir.mkdir(parents=True, exist_ok=True)
    session_name = data_filepath.stem
    for (mount_path,), df_mount in df.group_by(["mount_path"], maintain_order=True):
        for metric in PLOTTED_METRICS:
            html_path = _generate_metric_plot(df_mount, metric, mount_path, session_name, output_dir)
            if html_path is not None:
                written.append(html_path)
    return written


def generate_plots_for_records(record_dir: Path, output_dir: Optional[Path] = None) -> List[Path]:
    """
    Generate charts for every session file in a recording directory.

    Args:
        record_dir: Directory containing ``*.parquet`` session files
        output_dir: Where to write charts; ``record_dir`` when None

    Returns:
        Paths of all HTML charts written
    """
    output_dir = output_dir or record_dir
    logger.info(f"Searching for Parquet session files in: {record_dir}")
    parquet_files = sorted(record_dir.glob("*.parquet"))

    if not parquet_files:
        logger.info(f"No Parquet session files found in {record_dir}")
        return []

    written = []
    for data_file in parquet_files:
        logger.info(f"--- Generating plots for {data_file.name} ---")
        written.extend(plot_session_file(data_file, output_dir))
    return written


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of ``nfsgaze-plot``."""
    parser = argparse.ArgumentParser(description="Generate charts from recorded nfsgaze sessions.")
    parser.add_argument("--record-dir", type=Path, required=True, help="Directory with recorded sessions.")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for the charts (default: --record-dir).")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not args.record_dir.is_dir():
        logger.error(f"Record directory not found: {args.record_dir}")
        return 1

    written = generate_plots_for_records(args.record_dir, args.output_dir)
    logger.info(f"Wrote {len(written)} chart(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
