"""Command line entry point for population synthesis runs.

Example
-------
``python -m popsynth.run --config configs/base.yml --mode single --override single_star.mass_steps=10``
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import config_utils
from .config_utils import configure_logging, load_config
from .io.writer import OutputLog
from .population import PopulationResult, evolve_population
from .schema import Config
from .types import EvolutionStatus

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = (EvolutionStatus.DONE, EvolutionStatus.AIS_EXPLORATORY)


def run(cfg: Config) -> PopulationResult:
    """Evolve the population described by ``cfg`` with file output under ``cfg.io.outdir``."""

    output = OutputLog(cfg.io.outdir)
    logger.info("run: mode=%s grid=%s outdir=%s", cfg.mode, cfg.grid_filename, cfg.io.outdir)
    return evolve_population(cfg, output=output)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evolve a population of single stars or binaries")
    parser.add_argument("--config", type=Path, default=None, help="Path to YAML configuration")
    parser.add_argument("--mode", choices=["single", "binary"], help="Override mode from the CLI")
    parser.add_argument("--grid", type=Path, help="Grid file with one set of initial conditions per line")
    parser.add_argument("--outdir", type=Path, help="Override io.outdir")
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a console progress bar when the population size is known.",
    )
    parser.add_argument(
        "--quiet",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Suppress status lines, timing output and INFO logs (use --no-quiet to force them on).",
    )
    parser.add_argument(
        "--override",
        action="append",
        nargs="+",
        metavar="PATH=VALUE",
        help="Apply configuration overrides using dotted paths; e.g. --override seed.fixed=true",
    )
    parser.add_argument(
        "--overrides-file",
        action="append",
        type=Path,
        help="Load overrides from a file (one PATH=VALUE per line).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point; returns the process exit code."""

    args = build_parser().parse_args(argv)

    override_list: List[str] = []
    if args.overrides_file:
        for override_path in args.overrides_file:
            override_list.extend(config_utils.read_overrides_file(override_path))
    if args.override:
        for group in args.override:
            override_list.extend(group)
    cfg = load_config(args.config, overrides=override_list)

    update = {}
    if args.mode is not None:
        update["mode"] = args.mode
    if args.grid is not None:
        update["grid"] = cfg.grid.model_copy(update={"filename": args.grid})
    io_update = {}
    if args.quiet is not None:
        io_update["quiet"] = bool(args.quiet)
    if args.progress:
        io_update["progress"] = True
    if args.outdir is not None:
        io_update["outdir"] = args.outdir
    if io_update:
        update["io"] = cfg.io.model_copy(update=io_update)
    if update:
        cfg = cfg.model_copy(update=update)

    configure_logging(logging.WARNING if cfg.io.quiet else logging.INFO)
    result = run(cfg)
    logger.info("run finished: %s (%d evolved)", result.status.name, result.n_evolved)
    return 0 if result.status in SUCCESS_STATUSES else 1


__all__ = ["SUCCESS_STATUSES", "run", "build_parser", "main"]

if __name__ == "__main__":  # pragma: no cover - standard CLI entrypoint
    raise SystemExit(main())
