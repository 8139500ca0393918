"""Adaptive importance sampling bookkeeping for binary populations.

Only the contracts used by the population loop live here: announcing the
exploratory settings, loading the Gaussians of a previous exploratory phase
and deciding when the exploratory phase should stop.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, TextIO

import numpy as np
import pandas as pd

from .errors import ConfigurationError
from .schema import AISConfig

logger = logging.getLogger(__name__)

GAUSSIAN_COLUMNS = ("mass_1", "mass_2", "separation", "sigma_mass_1", "sigma_mass_2", "sigma_separation", "weight")


class AIS:
    def __init__(self, cfg: AISConfig, *, stream: Optional[TextIO] = None) -> None:
        self.cfg = cfg
        self.stream = stream
        self.gaussians: Optional[pd.DataFrame] = None

    @property
    def exploratory(self) -> bool:
        return bool(self.cfg.exploratory_phase)

    @property
    def refinement(self) -> bool:
        return bool(self.cfg.refinement_phase)

    def print_exploratory_settings(self) -> None:
        lines: List[str] = [
            "Adaptive importance sampling: exploratory phase",
            f"  stop after {self.cfg.exploratory_max_systems} binaries",
        ]
        for line in lines:
            if self.stream is not None:
                self.stream.write(line + "\n")
            else:
                logger.info(line)

    def define_gaussians(self, path: Optional[Path] = None) -> pd.DataFrame:
        """Load the Gaussians written by a previous exploratory phase."""

        source = Path(path) if path is not None else self.cfg.gaussians_file
        if source is None:
            raise ConfigurationError("AIS refinement requires a gaussians file")
        try:
            table = pd.read_csv(source)
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"cannot read AIS gaussians file {source}: {exc}") from exc
        missing = [column for column in GAUSSIAN_COLUMNS if column not in table.columns]
        if missing:
            raise ConfigurationError(f"AIS gaussians file {source} lacks columns: {', '.join(missing)}")
        if table.empty:
            raise ConfigurationError(f"AIS gaussians file {source} defines no gaussians")
        table = table.loc[:, list(GAUSSIAN_COLUMNS)].apply(pd.to_numeric, errors="coerce")
        values = table.to_numpy(dtype=float)
        if not np.isfinite(values).all():
            raise ConfigurationError(f"AIS gaussians file {source} holds non-numeric entries")
        if (values < 0.0).any():
            raise ConfigurationError(f"AIS gaussians file {source} holds negative entries")
        if table["weight"].sum() <= 0.0:
            raise ConfigurationError(f"AIS gaussians file {source} has no positive weight")
        self.gaussians = table
        logger.info("AIS: loaded %d gaussians from %s", len(table), source)
        return table

    def should_stop_exploratory_phase(self, index: int) -> bool:
        """Return True once ``index + 1`` binaries have been explored."""

        return self.exploratory and index + 1 >= self.cfg.exploratory_max_systems


__all__ = ["AIS", "GAUSSIAN_COLUMNS"]
