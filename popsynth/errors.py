"""Custom exceptions for the :mod:`popsynth` package."""
from __future__ import annotations

from typing import Sequence


class PopSynthError(Exception):
    """Base exception for population synthesis errors."""


class ConfigurationError(PopSynthError, ValueError):
    """Invalid or inconsistent configuration values."""


class GridFileError(PopSynthError):
    """Base class for grid file problems."""


class FileAccessError(GridFileError, OSError):
    """The grid file could not be opened."""


class HeaderStructureError(GridFileError, ValueError):
    """The grid header is missing, duplicates or misnames required columns."""

    def __init__(self, message: str, problems: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.problems = list(problems)


class RowDataError(GridFileError, ValueError):
    """A grid record holds a non-numeric or disallowed negative value."""

    def __init__(self, message: str, line_no: int | None = None, token: str | None = None) -> None:
        super().__init__(message)
        self.line_no = line_no
        self.token = token


class ResourceTeardownError(PopSynthError, RuntimeError):
    """A per-object output file failed to close."""


class EvolutionError(PopSynthError, RuntimeError):
    """The evolution engine could not construct or evolve an object."""


__all__ = [
    "PopSynthError",
    "ConfigurationError",
    "GridFileError",
    "FileAccessError",
    "HeaderStructureError",
    "RowDataError",
    "ResourceTeardownError",
    "EvolutionError",
]
