"""Grid file header parsing and record reading.

A grid file enumerates the initial conditions of a population run, one
evolvable object per data record.  The first non-empty line is a
comma-separated header naming the columns (case-insensitive); every later
line is a data record whose fields follow the header order.

Two schemas are supported:

``SSE_SCHEMA`` (single stars)
    Columns ``MASS`` (required) and ``METALLICITY`` (optional).  The header
    itself is optional: a first line holding a single bare value is taken as
    data and the file is read as a one-column ``MASS`` grid.

``BSE_SCHEMA`` (binaries)
    Columns ``MASS_1``, ``MASS_2``, ``METALLICITY_1``, ``METALLICITY_2`` and
    ``ECCENTRICITY`` (all required), at least one of ``SEPARATION`` /
    ``PERIOD`` and optionally the complete group of eight ``KICK_*`` columns.
    Units: Msun, AU, days, km/s and radians.

Problems are reported in three tiers.  Header problems raise
:class:`~popsynth.errors.HeaderStructureError` and leave the file closed.
Invalid or disallowed negative data raise
:class:`~popsynth.errors.RowDataError`, abandoning the rest of the file.
Recoverable issues (empty fields, short rows, extra columns, defaulted
metallicity, period-derived separation) emit
:class:`~popsynth.warnings.RowDataWarning` and reading continues.

Files are decoded as UTF-8 with undecodable bytes replaced, so a stray
Latin-1 byte inside a comment is harmless and one inside a field makes that
field invalid data.
"""
from __future__ import annotations

import logging
import math
import warnings
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, TextIO, Tuple, Union

from .. import orbits
from ..errors import FileAccessError, HeaderStructureError, RowDataError
from ..warnings import RowDataWarning
from .records import RecordCursor, split_fields

logger = logging.getLogger(__name__)

KICK_COLUMNS_1 = ("KICK_VELOCITY_1", "KICK_THETA_1", "KICK_PHI_1", "KICK_MEAN_ANOMALY_1")
KICK_COLUMNS_2 = ("KICK_VELOCITY_2", "KICK_THETA_2", "KICK_PHI_2", "KICK_MEAN_ANOMALY_2")
KICK_COLUMNS = KICK_COLUMNS_1 + KICK_COLUMNS_2


class HeaderState(Enum):
    """Whether the grid file carried its own header line."""

    PRESENT = "present"
    ABSENT = "absent"


@dataclass(frozen=True)
class GridHeader:
    """Ordered, validated column names of a grid file."""

    columns: Tuple[str, ...]
    state: HeaderState = HeaderState.PRESENT

    def __len__(self) -> int:
        return len(self.columns)

    def __contains__(self, column: object) -> bool:
        return column in self.columns

    @property
    def has_kicks(self) -> bool:
        return all(column in self.columns for column in KICK_COLUMNS)


@dataclass(frozen=True)
class KickParameters:
    """Supernova kick drawn for one component (km/s and radians)."""

    velocity: float
    theta: float
    phi: float
    mean_anomaly: float

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.velocity, self.theta, self.phi, self.mean_anomaly)


@dataclass(frozen=True)
class SingleGridRow:
    mass: float
    metallicity: float
    line_no: int = 0

    def as_vector(self) -> Tuple[float, float]:
        return (self.mass, self.metallicity)


@dataclass(frozen=True)
class BinaryGridRow:
    """Initial conditions of one binary read from a grid record.

    ``period`` echoes the supplied ``PERIOD`` value (0.0 when absent); the
    separation has already been derived from it where required.
    """

    mass_1: float
    mass_2: float
    metallicity_1: float
    metallicity_2: float
    separation: float
    eccentricity: float
    kick_1: Optional[KickParameters] = None
    kick_2: Optional[KickParameters] = None
    period: float = 0.0
    line_no: int = 0

    def as_vector(self) -> Tuple[float, ...]:
        """Return the 6-field vector, or 14 fields when kicks are present."""

        base = (
            self.mass_1,
            self.mass_2,
            self.metallicity_1,
            self.metallicity_2,
            self.separation,
            self.eccentricity,
        )
        if self.kick_1 is None or self.kick_2 is None:
            return base
        return base + self.kick_1.as_tuple() + self.kick_2.as_tuple()


GridRow = Union[SingleGridRow, BinaryGridRow]


def _count_problems(counts: Mapping[str, int], column: str, *, required: bool = True) -> List[str]:
    found = counts.get(column, 0)
    if found < 1 and required:
        return [f"missing header {column}"]
    if found > 1:
        return [f"duplicate header {column}"]
    return []


class GridSchema:
    """Column vocabulary and validation rules of one grid flavour."""

    name = "grid"
    vocabulary: Tuple[str, ...] = ()
    non_negative: frozenset = frozenset()
    headerless_columns: Optional[Tuple[str, ...]] = None

    def validate(self, counts: Mapping[str, int]) -> List[str]:
        raise NotImplementedError

    def empty_value(self, column: str, line_no: int, default_metallicity: float) -> float:
        """Return the value substituted for an empty or missing field."""

        warnings.warn(
            f"grid file line {line_no}: missing data for {column}; 0.0 used",
            RowDataWarning,
            stacklevel=3,
        )
        return 0.0

    def build_row(
        self,
        values: Dict[str, float],
        header: GridHeader,
        line_no: int,
        default_metallicity: float,
    ) -> GridRow:
        raise NotImplementedError


class SingleStarSchema(GridSchema):
    name = "SSE"
    vocabulary = ("MASS", "METALLICITY")
    non_negative = frozenset(vocabulary)
    headerless_columns = ("MASS",)

    def validate(self, counts: Mapping[str, int]) -> List[str]:
        problems = _count_problems(counts, "MASS")
        problems += _count_problems(counts, "METALLICITY", required=False)
        return problems

    def empty_value(self, column: str, line_no: int, default_metallicity: float) -> float:
        if column == "METALLICITY":
            warnings.warn(
                f"grid file line {line_no}: default metallicity {default_metallicity} used",
                RowDataWarning,
                stacklevel=3,
            )
            return float(default_metallicity)
        return super().empty_value(column, line_no, default_metallicity)

    def build_row(
        self,
        values: Dict[str, float],
        header: GridHeader,
        line_no: int,
        default_metallicity: float,
    ) -> SingleGridRow:
        if "METALLICITY" in header:
            metallicity = values["METALLICITY"]
        else:
            warnings.warn(
                f"grid file line {line_no}: no METALLICITY column; default metallicity {default_metallicity} used",
                RowDataWarning,
                stacklevel=3,
            )
            metallicity = float(default_metallicity)
        return SingleGridRow(mass=values["MASS"], metallicity=metallicity, line_no=line_no)


class BinaryStarSchema(GridSchema):
    name = "BSE"
    vocabulary = (
        "MASS_1",
        "MASS_2",
        "METALLICITY_1",
        "METALLICITY_2",
        "SEPARATION",
        "ECCENTRICITY",
        "PERIOD",
    ) + KICK_COLUMNS
    non_negative = frozenset(("MASS_1", "MASS_2", "METALLICITY_1", "METALLICITY_2", "SEPARATION", "ECCENTRICITY"))

    def validate(self, counts: Mapping[str, int]) -> List[str]:
        problems: List[str] = []
        for column in ("MASS_1", "MASS_2", "METALLICITY_1", "METALLICITY_2", "ECCENTRICITY"):
            problems += _count_problems(counts, column)
        if counts.get("SEPARATION", 0) < 1 and counts.get("PERIOD", 0) < 1:
            problems.append("missing header one of {SEPARATION, PERIOD}")
        else:
            problems += _count_problems(counts, "SEPARATION", required=False)
            problems += _count_problems(counts, "PERIOD", required=False)
        if any(counts.get(column, 0) > 0 for column in KICK_COLUMNS):
            for column in KICK_COLUMNS:
                problems += _count_problems(counts, column)
        return problems

    def build_row(
        self,
        values: Dict[str, float],
        header: GridHeader,
        line_no: int,
        default_metallicity: float,
    ) -> BinaryGridRow:
        mass_1 = values["MASS_1"]
        mass_2 = values["MASS_2"]
        separation = values.get("SEPARATION", 0.0)
        period = values.get("PERIOD", 0.0)
        if separation <= 0.0 and period > 0.0 and mass_1 > 0.0 and mass_2 > 0.0:
            separation = orbits.separation_from_period(mass_1, mass_2, period)
            warnings.warn(
                f"grid file line {line_no}: separation {separation:.6g} AU derived from period {period} d",
                RowDataWarning,
                stacklevel=3,
            )
        kick_1 = kick_2 = None
        if header.has_kicks:
            kick_1 = KickParameters(*(values[column] for column in KICK_COLUMNS_1))
            kick_2 = KickParameters(*(values[column] for column in KICK_COLUMNS_2))
        return BinaryGridRow(
            mass_1=mass_1,
            mass_2=mass_2,
            metallicity_1=values["METALLICITY_1"],
            metallicity_2=values["METALLICITY_2"],
            separation=separation,
            eccentricity=values["ECCENTRICITY"],
            kick_1=kick_1,
            kick_2=kick_2,
            period=period,
            line_no=line_no,
        )


SSE_SCHEMA = SingleStarSchema()
BSE_SCHEMA = BinaryStarSchema()


def parse_header(cursor: RecordCursor, schema: GridSchema) -> Tuple[int, GridHeader]:
    """Read the header from ``cursor`` and return ``(next_line_no, header)``.

    Raises :class:`HeaderStructureError` when the first non-empty line is a
    header attempt that fails validation.  For schemas that allow it, a line
    consisting of one unrecognised bare token is treated as the first data
    record: the cursor is rewound and a default header is returned.
    """

    checkpoint = cursor.checkpoint()
    counts: Counter = Counter()
    columns: List[str] = []
    unknown: List[str] = []
    empty = 0
    token_count = 0

    item = cursor.next_record()
    if item is not None:
        line_no, record = item
        for token in split_fields(record.upper()):
            token_count += 1
            if not token:
                empty += 1
                continue
            if token in schema.vocabulary:
                counts[token] += 1
                columns.append(token)
            else:
                unknown.append(token)

    problems = schema.validate(counts)
    if schema.headerless_columns is not None and token_count <= 1 and not counts:
        cursor.restore(checkpoint)
        logger.info("grid file has no header; assuming columns %s", ",".join(schema.headerless_columns))
        return cursor.line_no, GridHeader(schema.headerless_columns, HeaderState.ABSENT)

    problems += [f"unknown header {token}" for token in unknown]
    if empty:
        problems.append(f"empty header ({empty} column{'s' if empty > 1 else ''})")
    if problems:
        for problem in problems:
            logger.error("%s grid file: %s", schema.name, problem)
        raise HeaderStructureError(
            f"{schema.name} grid file header is invalid: " + "; ".join(problems),
            problems,
        )
    return cursor.line_no, GridHeader(tuple(columns), HeaderState.PRESENT)


def _parse_value(token: str, column: str, line_no: int, schema: GridSchema) -> float:
    try:
        value = float(token)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        logger.error("grid file line %d: invalid data for %s: %r", line_no, column, token)
        raise RowDataError(f"invalid data at line {line_no}: {token!r}", line_no, token)
    if value < 0.0 and column in schema.non_negative:
        logger.error("grid file line %d: negative data for %s: %s", line_no, column, token)
        raise RowDataError(f"negative data for {column} at line {line_no}: {token}", line_no, token)
    return value


def read_record(
    cursor: RecordCursor,
    header: GridHeader,
    schema: GridSchema,
    *,
    default_metallicity: float,
) -> Tuple[int, Optional[GridRow]]:
    """Read the next data record and return ``(next_line_no, row)``.

    ``row`` is ``None`` once the stream holds no further non-empty record.
    :class:`RowDataError` is raised for non-numeric fields and for negative
    values in range-checked columns; the partially parsed row is discarded.
    """

    item = cursor.next_record()
    if item is None:
        return cursor.line_no, None
    line_no, record = item

    fields = split_fields(record)
    values: Dict[str, float] = {}
    for column_index, token in enumerate(fields):
        if column_index >= len(header):
            warnings.warn(
                f"grid file line {line_no}: extra column {column_index + 1} ignored",
                RowDataWarning,
                stacklevel=2,
            )
            continue
        column = header.columns[column_index]
        if not token:
            values[column] = schema.empty_value(column, line_no, default_metallicity)
            continue
        values[column] = _parse_value(token, column, line_no, schema)

    for column in header.columns[len(fields):]:
        values[column] = schema.empty_value(column, line_no, default_metallicity)

    row = schema.build_row(values, header, line_no, default_metallicity)
    return cursor.line_no, row


class GridFile:
    """An open grid file positioned after its header.

    Example
    -------
    >>> with GridFile.open("grid.txt", SSE_SCHEMA, default_metallicity=0.0142) as grid:  # doctest: +SKIP
    ...     for row in grid:
    ...         print(row.mass, row.metallicity)
    """

    def __init__(
        self,
        stream: TextIO,
        schema: GridSchema,
        *,
        default_metallicity: float,
        path: Optional[Path] = None,
    ) -> None:
        self.path = path
        self.schema = schema
        self.default_metallicity = float(default_metallicity)
        self._stream: Optional[TextIO] = stream
        self._cursor = RecordCursor(stream)
        self.line_no, self.header = parse_header(self._cursor, schema)

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        schema: GridSchema,
        *,
        default_metallicity: float,
    ) -> "GridFile":
        """Open ``path`` and parse its header.

        Raises :class:`FileAccessError` when the file cannot be opened and
        :class:`HeaderStructureError` (after closing the file) when the
        header is invalid.
        """

        grid_path = Path(path)
        try:
            stream = grid_path.open("r", encoding="utf-8", errors="replace", newline="")
        except OSError as exc:
            logger.error("error opening grid file %s: %s", grid_path, exc)
            raise FileAccessError(f"cannot open grid file {grid_path}: {exc}") from exc
        try:
            return cls(stream, schema, default_metallicity=default_metallicity, path=grid_path)
        except Exception:
            stream.close()
            raise

    @property
    def is_open(self) -> bool:
        return self._stream is not None and not self._stream.closed

    @property
    def exhausted(self) -> bool:
        return self._cursor.exhausted

    def read_record(self) -> Optional[GridRow]:
        """Return the next row, or ``None`` at end of file."""

        if not self.is_open:
            raise ValueError("read from a closed grid file")
        self.line_no, row = read_record(
            self._cursor,
            self.header,
            self.schema,
            default_metallicity=self.default_metallicity,
        )
        return row

    def close(self) -> None:
        if self._stream is not None and not self._stream.closed:
            self._stream.close()

    def __iter__(self) -> Iterator[GridRow]:
        while True:
            row = self.read_record()
            if row is None:
                return
            yield row

    def __enter__(self) -> "GridFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_grid(path: Union[str, Path], schema: GridSchema, *, default_metallicity: float) -> GridFile:
    """Open a grid file positioned at its first data record."""

    return GridFile.open(path, schema, default_metallicity=default_metallicity)


def read_grid(path: Union[str, Path], schema: GridSchema, *, default_metallicity: float) -> List[GridRow]:
    """Read every row of a grid file; errors propagate unchanged."""

    with GridFile.open(path, schema, default_metallicity=default_metallicity) as grid:
        return list(grid)


__all__ = [
    "KICK_COLUMNS",
    "HeaderState",
    "GridHeader",
    "KickParameters",
    "SingleGridRow",
    "BinaryGridRow",
    "GridRow",
    "GridSchema",
    "SingleStarSchema",
    "BinaryStarSchema",
    "SSE_SCHEMA",
    "BSE_SCHEMA",
    "parse_header",
    "read_record",
    "GridFile",
    "open_grid",
    "read_grid",
]
