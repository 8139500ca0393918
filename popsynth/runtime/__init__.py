"""Runtime helpers used by the population loop."""

from .catalog import DiagnosticCatalog
from .progress import ProgressReporter, RunTimer, format_wall_time

__all__ = [
    "DiagnosticCatalog",
    "ProgressReporter",
    "RunTimer",
    "format_wall_time",
]
