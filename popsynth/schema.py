"""Configuration schema for population synthesis runs.

This module defines Pydantic models that mirror the structure of the YAML
configuration files consumed by :mod:`popsynth.run`.  All models are frozen:
a loaded :class:`Config` is an immutable snapshot that is passed explicitly to
the grid readers, the population loop and the sampling helpers.  Command line
adjustments produce a new snapshot via ``model_copy(update=...)``.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import constants
from .errors import ConfigurationError


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class GridConfig(_Frozen):
    """Optional grid file supplying one set of initial conditions per row."""

    filename: Optional[Path] = Field(None, description="Path to the grid file; None disables grid input")

    @field_validator("filename", mode="before")
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SingleStarSweep(_Frozen):
    """Uniform mass sweep used for single stars when no grid file is given."""

    mass_min: float = Field(constants.DEFAULT_SINGLE_STAR_MASS_MIN, gt=0.0, description="Lowest initial mass [Msun]")
    mass_max: float = Field(constants.DEFAULT_SINGLE_STAR_MASS_MAX, gt=0.0, description="Upper sweep bound [Msun]")
    mass_steps: int = Field(constants.DEFAULT_SINGLE_STAR_MASS_STEPS, gt=0, description="Number of stars in the sweep")

    @model_validator(mode="after")
    def _check_order(self) -> "SingleStarSweep":
        if self.mass_min > self.mass_max:
            raise ConfigurationError(
                f"single_star.mass_min ({self.mass_min}) must be less than or equal to mass_max ({self.mass_max})"
            )
        return self

    @property
    def mass_increment(self) -> float:
        return (self.mass_max - self.mass_min) / self.mass_steps


class SeedConfig(_Frozen):
    """Random seed policy.

    When ``fixed`` is false the base seed is derived from the process start
    time; the per-object seed is always ``base + index``.
    """

    fixed: bool = False
    value: int = Field(0, ge=0)


class BinarySystem(_Frozen):
    """Binary population controls and individual-system overrides."""

    n_binaries: int = Field(constants.DEFAULT_N_BINARIES, gt=0, description="Number of binaries when no grid file")
    individual_system: bool = Field(False, description="Evolve binaries with the fixed properties below")
    primary_mass: float = Field(20.0, gt=0.0)
    secondary_mass: float = Field(10.0, gt=0.0)
    metallicity_1: Optional[float] = Field(None, gt=0.0, description="Defaults to the top-level metallicity")
    metallicity_2: Optional[float] = Field(None, gt=0.0, description="Defaults to the top-level metallicity")
    separation: float = Field(0.0, ge=0.0, description="Initial separation [AU]; 0 means unset")
    period: float = Field(0.0, ge=0.0, description="Initial orbital period [days]; 0 means unset")
    eccentricity: float = Field(0.0, ge=0.0)

    @field_validator("eccentricity")
    def _bound_eccentricity(cls, value: float) -> float:
        if value >= 1.0:
            raise ConfigurationError("binary.eccentricity must be < 1")
        return value


class Sampling(_Frozen):
    """Distributions for randomly drawn binaries."""

    mass_min: float = Field(5.0, gt=0.0, description="Primary mass lower bound [Msun]")
    mass_max: float = Field(150.0, gt=0.0, description="Primary mass upper bound [Msun]")
    imf_slope: float = Field(-2.3, description="Power-law slope of the primary mass function")
    q_min: float = Field(0.01, gt=0.0, le=1.0)
    q_max: float = Field(1.0, gt=0.0, le=1.0)
    separation_min: float = Field(0.1, gt=0.0, description="[AU]")
    separation_max: float = Field(1000.0, gt=0.0, description="[AU]")
    eccentricity: Literal["zero", "thermal", "flat"] = "zero"

    @model_validator(mode="after")
    def _check_bounds(self) -> "Sampling":
        if self.mass_min > self.mass_max:
            raise ConfigurationError("sampling.mass_min must not exceed sampling.mass_max")
        if self.q_min > self.q_max:
            raise ConfigurationError("sampling.q_min must not exceed sampling.q_max")
        if self.separation_min > self.separation_max:
            raise ConfigurationError("sampling.separation_min must not exceed sampling.separation_max")
        return self


class AISConfig(_Frozen):
    """Adaptive importance sampling toggles."""

    exploratory_phase: bool = False
    refinement_phase: bool = False
    exploratory_max_systems: int = Field(
        1000,
        gt=0,
        description="Number of binaries after which the exploratory phase stops",
    )
    gaussians_file: Optional[Path] = Field(None, description="Gaussians defined by a previous exploratory phase")

    @model_validator(mode="after")
    def _check_refinement(self) -> "AISConfig":
        if self.refinement_phase and self.gaussians_file is None:
            raise ConfigurationError("ais.refinement_phase requires ais.gaussians_file")
        return self


class IO(_Frozen):
    outdir: Path = Field(Path("out"), description="Directory for detailed output and population tables")
    quiet: bool = Field(False, description="Suppress status lines and timing announcements")
    progress: bool = Field(False, description="Show a progress bar when the population size is known")
    write_population: bool = Field(True, description="Write population.parquet and summary.json")


class Config(_Frozen):
    """Top-level configuration object."""

    mode: Literal["single", "binary"] = Field("binary", description="Evolve single stars or binaries")
    metallicity: float = Field(constants.DEFAULT_METALLICITY, gt=0.0, description="Default metallicity Z")
    che_mode: Literal["none", "optimistic", "pessimistic"] = "none"
    grid: GridConfig = GridConfig()
    single_star: SingleStarSweep = SingleStarSweep()
    seed: SeedConfig = SeedConfig()
    binary: BinarySystem = BinarySystem()
    sampling: Sampling = Sampling()
    ais: AISConfig = AISConfig()
    io: IO = IO()

    @field_validator("mode", mode="before")
    def _normalise_mode(cls, value: Any) -> Any:
        text = str(value).strip().lower() if value is not None else "binary"
        if text in {"single", "sse", "single_star"}:
            return "single"
        if text in {"binary", "bse", "binary_star"}:
            return "binary"
        raise ConfigurationError("mode must be 'single' or 'binary'")

    @property
    def grid_filename(self) -> Optional[Path]:
        return self.grid.filename

    def primary_metallicity(self) -> float:
        value = self.binary.metallicity_1
        return float(value) if value is not None else self.metallicity

    def secondary_metallicity(self) -> float:
        value = self.binary.metallicity_2
        return float(value) if value is not None else self.metallicity


__all__ = [
    "GridConfig",
    "SingleStarSweep",
    "SeedConfig",
    "BinarySystem",
    "Sampling",
    "AISConfig",
    "IO",
    "Config",
]
