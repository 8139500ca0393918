"""Output helper utilities.

:class:`OutputLog` owns the per-object detailed output files written while a
population is evolved and accumulates one summary row per evolved object.
Detailed files are CSV, the population table is written to Parquet with
column units stored in the schema metadata, and run summaries are JSON.
All functions ensure that destination directories are created when
necessary.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, TextIO, Tuple

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

logger = logging.getLogger(__name__)

SSE_DETAILED = "sse_detailed"
BSE_DETAILED = "bse_detailed"

POPULATION_UNITS = {
    "index": "count",
    "seed": "count",
    "mass": "Msun",
    "mass_1": "Msun",
    "mass_2": "Msun",
    "metallicity": "dimensionless",
    "metallicity_1": "dimensionless",
    "metallicity_2": "dimensionless",
    "separation": "AU",
    "eccentricity": "dimensionless",
    "status": "category",
    "stellar_type": "category",
    "stellar_type_1": "category",
    "stellar_type_2": "category",
    "grid_line": "count",
}


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_parquet(df: pd.DataFrame, path: Path, *, compression: str = "snappy") -> None:
    """Write a DataFrame to a Parquet file using ``pyarrow``.

    Parameters
    ----------
    df:
        Table to serialise.
    path:
        Destination file path.
    compression:
        Parquet codec, or ``"none"``.
    """
    _ensure_parent(path)
    units = {column: POPULATION_UNITS[column] for column in df.columns if column in POPULATION_UNITS}
    table = pa.Table.from_pandas(df, preserve_index=False)
    metadata = dict(table.schema.metadata or {})
    metadata[b"units"] = json.dumps(units, sort_keys=True).encode("utf-8")
    table = table.replace_schema_metadata(metadata)
    compression_arg = None if compression == "none" else compression
    pq.write_table(table, path, compression=compression_arg)


def write_summary(summary: Mapping[str, Any], path: Path) -> None:
    """Write a summary dictionary to ``summary.json``."""
    _ensure_parent(path)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(summary, fh, indent=2, sort_keys=True, default=str)


class OutputLog:
    """Detailed per-object output plus the in-memory population table.

    At most one detailed file is open per kind; it belongs to the object
    currently being evolved and is closed by the population loop once that
    object is done.
    """

    def __init__(self, outdir: Path, *, detailed: bool = True) -> None:
        self.outdir = Path(outdir)
        self.detailed = bool(detailed)
        self._files: Dict[str, Tuple[int, TextIO]] = {}
        self._population: List[Dict[str, Any]] = []

    def detailed_path(self, kind: str, index: int) -> Path:
        return self.outdir / "detailed" / f"{kind}_{index:06d}.csv"

    def log_detailed(self, kind: str, index: int, record: Mapping[str, Any]) -> None:
        """Append ``record`` to the detailed file of object ``index``."""

        if not self.detailed:
            return
        current = self._files.get(kind)
        if current is not None and current[0] != index:
            self.close_standard_file(kind)
            current = None
        if current is None:
            path = self.detailed_path(kind, index)
            _ensure_parent(path)
            handle = path.open("w", encoding="utf-8", newline="")
            current = (index, handle)
            self._files[kind] = current
            header = True
        else:
            header = False
        pd.DataFrame([dict(record)]).to_csv(current[1], header=header, index=False)

    def add_population_row(self, row: Mapping[str, Any]) -> None:
        self._population.append(dict(row))

    @property
    def population(self) -> pd.DataFrame:
        return pd.DataFrame(self._population)

    def flush(self) -> None:
        for _, handle in self._files.values():
            handle.flush()

    def close_standard_file(self, kind: str) -> bool:
        """Close the open file of ``kind``; return False if closing failed."""

        current = self._files.pop(kind, None)
        if current is None:
            return True
        index, handle = current
        try:
            handle.close()
        except OSError as exc:
            logger.error("failed to close %s output for object %d: %s", kind, index, exc)
            return False
        return True

    def close_all_standard_files(self) -> bool:
        ok = True
        for kind in list(self._files):
            ok = self.close_standard_file(kind) and ok
        return ok

    def write_population(self, *, summary: Optional[Mapping[str, Any]] = None) -> Optional[Path]:
        """Write ``population.parquet`` (and ``summary.json``) under ``outdir``."""

        summary_path = self.outdir / "summary.json"
        if summary is not None:
            write_summary(summary, summary_path)
        if not self._population:
            logger.info("no evolved objects; population table not written")
            return None
        path = self.outdir / "population.parquet"
        write_parquet(self.population, path)
        logger.info("population table written to %s (%d rows)", path, len(self._population))
        return path


__all__ = [
    "SSE_DETAILED",
    "BSE_DETAILED",
    "POPULATION_UNITS",
    "write_parquet",
    "write_summary",
    "OutputLog",
]
