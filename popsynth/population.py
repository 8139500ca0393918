"""Population evolution loops for single stars and binaries.

Each loop derives a seed per object (``base + index``), obtains the initial
conditions from a grid file, a mass sweep or the sampling distributions,
constructs and evolves exactly one object per iteration and then tears down
that object's detailed output.  The loop always ends with a terminal
:class:`~popsynth.types.EvolutionStatus`:

``DONE``
    every object was evolved (or the grid file was read to its end);
``STOPPED``
    a grid record was invalid or a detailed output file failed to close;
``ERROR``
    the grid file could not be opened or its header is unusable;
``AIS_EXPLORATORY``
    the adaptive importance sampling exploratory phase asked to stop.

Grid-file and teardown exceptions are converted into these statuses and
never escape to the caller.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple

from . import orbits
from .ais import AIS
from .engine import BinaryStar, Star
from .errors import ConfigurationError, EvolutionError, GridFileError, ResourceTeardownError, RowDataError
from .io.grid_file import BSE_SCHEMA, SSE_SCHEMA, GridFile, GridRow, GridSchema, open_grid
from .io.writer import BSE_DETAILED, SSE_DETAILED, OutputLog
from .rand import RandomService
from .runtime.catalog import DiagnosticCatalog
from .runtime.progress import ProgressReporter, RunTimer
from .sampling import sample_binary, sample_binary_from_gaussians
from .schema import Config
from .types import EvolutionStatus, StellarType
from .warnings import OutputWarning, SamplingWarning

logger = logging.getLogger(__name__)


@dataclass
class EvolutionRecord:
    """Initial conditions and outcome of one evolved object."""

    index: int
    seed: int
    status: EvolutionStatus
    masses: Tuple[float, ...]
    metallicities: Tuple[float, ...]
    stellar_types: Tuple[StellarType, ...]
    separation: Optional[float] = None
    eccentricity: Optional[float] = None
    grid_line: Optional[int] = None

    def as_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {"index": self.index, "seed": self.seed, "status": self.status.name}
        if len(self.masses) == 1:
            row["mass"] = self.masses[0]
            row["metallicity"] = self.metallicities[0]
            row["stellar_type"] = self.stellar_types[0].label
        else:
            for n, (mass, metallicity, stellar_type) in enumerate(
                zip(self.masses, self.metallicities, self.stellar_types), start=1
            ):
                row[f"mass_{n}"] = mass
                row[f"metallicity_{n}"] = metallicity
                row[f"stellar_type_{n}"] = stellar_type.label
            row["separation"] = self.separation
            row["eccentricity"] = self.eccentricity
        if self.grid_line is not None:
            row["grid_line"] = self.grid_line
        return row


@dataclass
class PopulationResult:
    status: EvolutionStatus
    n_evolved: int = 0
    records: List[EvolutionRecord] = field(default_factory=list)
    lines_read: int = 0
    base_seed: int = 0


def _open_grid(cfg: Config, schema: GridSchema) -> Tuple[Optional[GridFile], EvolutionStatus]:
    if cfg.grid_filename is None:
        return None, EvolutionStatus.CONTINUE
    try:
        grid = open_grid(cfg.grid_filename, schema, default_metallicity=cfg.metallicity)
    except GridFileError as exc:
        logger.error("grid file %s unusable: %s", cfg.grid_filename, exc)
        return None, EvolutionStatus.ERROR
    return grid, EvolutionStatus.CONTINUE


def _next_grid_row(grid: Optional[GridFile]) -> Tuple[Optional[GridRow], EvolutionStatus]:
    """Return ``(row, status)``; ``row`` is None once reading has ended."""

    if grid is None or not grid.is_open:
        return None, EvolutionStatus.STOPPED
    try:
        row = grid.read_record()
    except (RowDataError, OSError) as exc:
        logger.error("grid file reading stopped: %s", exc)
        grid.close()
        return None, EvolutionStatus.STOPPED
    if row is None:
        grid.close()
        return None, EvolutionStatus.DONE
    return row, EvolutionStatus.CONTINUE


def _close_detailed(output: Optional[OutputLog], kind: str, index: int) -> None:
    if output is not None and not output.close_standard_file(kind):
        raise ResourceTeardownError(f"{kind} output file for object {index} not closed")


def _evolve(obj, index: int) -> EvolutionStatus:
    try:
        return obj.evolve(index)
    except EvolutionError as exc:
        logger.error("object %d failed to evolve: %s", index, exc)
        return EvolutionStatus.ERROR


def _finish(
    cfg: Config,
    result: PopulationResult,
    grid: Optional[GridFile],
    output: Optional[OutputLog],
    timer: RunTimer,
    stream: TextIO,
    *,
    close_all: bool = False,
) -> PopulationResult:
    if grid is not None:
        result.lines_read = grid.line_no - 1
        grid.close()
    if not cfg.io.quiet and result.status is not EvolutionStatus.CONTINUE:
        stream.write(f"\n{result.status.label}\n")
    if close_all and output is not None:
        output.close_all_standard_files()
    if output is not None and cfg.io.write_population:
        output.write_population(
            summary={
                "mode": cfg.mode,
                "status": result.status.name,
                "n_evolved": result.n_evolved,
                "base_seed": result.base_seed,
                "grid_file": cfg.grid_filename,
                "lines_read": result.lines_read,
            }
        )
    timer.finish()
    return result


def evolve_single_stars(
    cfg: Config,
    *,
    star_factory: Callable[..., Any] = Star,
    output: Optional[OutputLog] = None,
    rng: Optional[RandomService] = None,
    stream: Optional[TextIO] = None,
) -> PopulationResult:
    """Evolve single stars from a grid file or a uniform mass sweep.

    Parameters
    ----------
    cfg:
        Configuration snapshot; ``cfg.grid_filename`` selects grid input,
        otherwise ``cfg.single_star`` defines the sweep.
    star_factory:
        Called as ``star_factory(seed, mass, metallicity, output=output)``.
    output:
        Detailed output and population table sink; optional.
    rng:
        Random service to reseed per object.
    stream:
        Status channel, standard output by default.
    """

    stream = stream if stream is not None else sys.stdout
    quiet = cfg.io.quiet
    timer = RunTimer("stars", stream=stream, enabled=not quiet)
    rng = rng if rng is not None else RandomService()
    base_seed = rng.base_seed(cfg.seed)
    catalog = DiagnosticCatalog()

    grid, status = _open_grid(cfg, SSE_SCHEMA)
    if cfg.grid_filename is not None:
        n_stars = 1
    else:
        n_stars = cfg.single_star.mass_steps
    progress = ProgressReporter(
        n_stars,
        label="star",
        enabled=cfg.io.progress and cfg.grid_filename is None and not quiet,
        stream=stream,
    )
    result = PopulationResult(status=status, base_seed=base_seed)

    index = 0
    star = None
    while status is EvolutionStatus.CONTINUE and index < n_stars:
        seed = rng.seed(base_seed + index)
        grid_line = None
        if cfg.grid_filename is not None:
            row, status = _next_grid_row(grid)
            if row is not None:
                n_stars += 1
                mass, metallicity, grid_line = row.mass, row.metallicity, row.line_no
        else:
            mass = cfg.single_star.mass_min + index * cfg.single_star.mass_increment
            metallicity = cfg.metallicity

        if status is EvolutionStatus.CONTINUE:
            star = star_factory(seed, mass, metallicity, output=output)
            star_status = _evolve(star, index)
            record = EvolutionRecord(
                index=index,
                seed=seed,
                status=star_status,
                masses=(mass,),
                metallicities=(star.metallicity,),
                stellar_types=(star.stellar_type,),
                grid_line=grid_line,
            )
            result.records.append(record)
            if output is not None:
                output.add_population_row(record.as_row())
            if not quiet:
                stream.write(
                    f"{index}: RandomSeed = {seed}, Initial Mass = {mass:g}, "
                    f"Metallicity = {star.metallicity:g}, {star.stellar_type.label}\n"
                )

        try:
            _close_detailed(output, SSE_DETAILED, index)
        except ResourceTeardownError as exc:
            catalog.show_warning_once("file_not_closed", str(exc), OutputWarning)
            status = EvolutionStatus.STOPPED

        catalog.clean()
        progress.update(index)
        index += 1
    star = None

    if status is EvolutionStatus.CONTINUE and index >= n_stars:
        status = EvolutionStatus.DONE
    result.status = status
    result.n_evolved = len(result.records)
    return _finish(cfg, result, grid, output, timer, stream)


def individual_separation(cfg: Config, catalog: DiagnosticCatalog) -> float:
    """Separation [AU] of a user-specified binary; 0.0 when neither is given."""

    binary = cfg.binary
    if binary.separation > 0.0:
        if binary.period > 0.0:
            catalog.show_warning_once(
                "separation_and_period",
                "both separation and orbital period given; using separation",
                SamplingWarning,
            )
        return float(binary.separation)
    if binary.period <= 0.0:
        catalog.show_warning_once(
            "neither_separation_nor_period",
            "neither separation nor orbital period given",
            SamplingWarning,
        )
        return 0.0
    return orbits.separation_from_period(binary.primary_mass, binary.secondary_mass, binary.period)


def _status_line(index: int, status: EvolutionStatus, binary, che_mode: str) -> str:
    if che_mode == "none":
        return f"{index}: {status.label}: {binary.star_1_type.label} + {binary.star_2_type.label}"
    return (
        f"{index}: {status.label}: "
        f"({binary.star_1_initial_type.label} -> {binary.star_1_type.label}) + "
        f"({binary.star_2_initial_type.label} -> {binary.star_2_type.label})"
    )


def evolve_binary_stars(
    cfg: Config,
    *,
    binary_factory: Callable[..., Any] = BinaryStar,
    ais: Optional[AIS] = None,
    output: Optional[OutputLog] = None,
    rng: Optional[RandomService] = None,
    stream: Optional[TextIO] = None,
) -> PopulationResult:
    """Evolve binaries from a grid file, an individual system or random draws.

    ``binary_factory`` is called as ``binary_factory(seed, mass_1, mass_2,
    metallicity_1, metallicity_2, separation, eccentricity, kick_1, kick_2,
    output=output)``.
    """

    stream = stream if stream is not None else sys.stdout
    quiet = cfg.io.quiet
    timer = RunTimer("binaries", stream=stream, enabled=not quiet)
    rng = rng if rng is not None else RandomService()
    base_seed = rng.base_seed(cfg.seed)
    catalog = DiagnosticCatalog()
    ais = ais if ais is not None else AIS(cfg.ais, stream=None if quiet else stream)

    status = EvolutionStatus.CONTINUE
    if cfg.ais.exploratory_phase:
        ais.print_exploratory_settings()
    if cfg.ais.refinement_phase:
        try:
            ais.define_gaussians()
        except ConfigurationError as exc:
            logger.error("%s", exc)
            status = EvolutionStatus.ERROR

    grid = None
    if status is EvolutionStatus.CONTINUE:
        grid, status = _open_grid(cfg, BSE_SCHEMA)
    n_binaries = 1 if cfg.grid_filename is not None else cfg.binary.n_binaries
    progress = ProgressReporter(
        n_binaries,
        label="binary",
        enabled=cfg.io.progress and cfg.grid_filename is None and not quiet,
        stream=stream,
    )
    result = PopulationResult(status=status, base_seed=base_seed)

    index = 0
    binary = None
    while status is EvolutionStatus.CONTINUE and index < n_binaries:
        seed = rng.seed(base_seed + index)
        grid_line = None
        if cfg.grid_filename is not None:
            row, status = _next_grid_row(grid)
            if row is not None:
                n_binaries += 1
                grid_line = row.line_no
                binary = binary_factory(
                    seed,
                    row.mass_1,
                    row.mass_2,
                    row.metallicity_1,
                    row.metallicity_2,
                    row.separation,
                    row.eccentricity,
                    row.kick_1,
                    row.kick_2,
                    output=output,
                )
        elif cfg.binary.individual_system:
            binary = binary_factory(
                seed,
                cfg.binary.primary_mass,
                cfg.binary.secondary_mass,
                cfg.primary_metallicity(),
                cfg.secondary_metallicity(),
                individual_separation(cfg, catalog),
                cfg.binary.eccentricity,
                None,
                None,
                output=output,
            )
        else:
            if cfg.ais.refinement_phase and ais.gaussians is not None:
                drawn = sample_binary_from_gaussians(rng.generator, ais.gaussians, cfg.sampling)
            else:
                drawn = sample_binary(rng.generator, cfg.sampling)
            binary = binary_factory(
                seed,
                drawn.mass_1,
                drawn.mass_2,
                cfg.metallicity,
                cfg.metallicity,
                drawn.separation,
                drawn.eccentricity,
                None,
                None,
                output=output,
            )

        if status is EvolutionStatus.CONTINUE:
            binary_status = _evolve(binary, index)
            record = EvolutionRecord(
                index=index,
                seed=seed,
                status=binary_status,
                masses=(binary.star_1.mass, binary.star_2.mass),
                metallicities=(binary.star_1.metallicity, binary.star_2.metallicity),
                stellar_types=(binary.star_1_type, binary.star_2_type),
                separation=binary.separation,
                eccentricity=binary.eccentricity,
                grid_line=grid_line,
            )
            result.records.append(record)
            if output is not None:
                output.add_population_row(record.as_row())
            if not quiet:
                stream.write(_status_line(index, binary_status, binary, cfg.che_mode) + "\n")

            if cfg.ais.exploratory_phase and ais.should_stop_exploratory_phase(index):
                catalog.show_warning_once(
                    "ais_stop",
                    f"binary simulation stopped: {EvolutionStatus.AIS_EXPLORATORY.label}",
                    SamplingWarning,
                )
                status = EvolutionStatus.AIS_EXPLORATORY
                break

            try:
                _close_detailed(output, BSE_DETAILED, index)
            except ResourceTeardownError as exc:
                catalog.show_warning_once("file_not_closed", str(exc), OutputWarning)
                status = EvolutionStatus.STOPPED

        catalog.clean()
        progress.update(index)
        index += 1
    binary = None

    if status is EvolutionStatus.CONTINUE and index >= n_binaries:
        status = EvolutionStatus.DONE
    result.status = status
    result.n_evolved = len(result.records)
    return _finish(cfg, result, grid, output, timer, stream, close_all=True)


def evolve_population(cfg: Config, **kwargs: Any) -> PopulationResult:
    """Dispatch to the single- or binary-star loop according to ``cfg.mode``."""

    if cfg.mode == "single":
        return evolve_single_stars(cfg, **kwargs)
    return evolve_binary_stars(cfg, **kwargs)


__all__ = [
    "EvolutionRecord",
    "PopulationResult",
    "individual_separation",
    "evolve_single_stars",
    "evolve_binary_stars",
    "evolve_population",
]
