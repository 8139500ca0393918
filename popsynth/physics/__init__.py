"""Physics kernels used by the evolution engine."""

from . import white_dwarfs
from .white_dwarfs import SHELL_FOR_REGIME, WhiteDwarf

__all__ = ["white_dwarfs", "SHELL_FOR_REGIME", "WhiteDwarf"]
