"""Command launcher for the corset loft tools."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from loft.rings import compute_ring_metrics

from .pipelines.build_loft import add_build_arguments, format_ring_table, load_job, run_from_args

__all__ = ["build_cli", "print_ring_metrics"]


def print_ring_metrics(job_path: Path) -> str:
    """Print the ring table for *job_path* and return it."""

    job = load_job(job_path)
    metrics = compute_ring_metrics(list(job.panels), job.config)
    table = format_ring_table(metrics)
    print(table)
    return table


def build_cli(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Corset loft command launcher")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_build_arguments(
        subparsers.add_parser(
            "build",
            help="Loft panels from a job file and export meshes, textures and outlines",
        )
    )

    metrics = subparsers.add_parser(
        "metrics",
        help="Print per-ring half-circumference and radius for a job file",
    )
    metrics.add_argument("job", type=Path, help="Path to the loft job (JSON or YAML)")

    args = parser.parse_args(argv)

    if args.command == "build":
        return run_from_args(args)

    if args.command == "metrics":
        print_ring_metrics(args.job)
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 0
