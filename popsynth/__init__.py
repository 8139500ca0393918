"""Population synthesis driver for single stars and binaries."""
from . import constants, orbits
from .errors import PopSynthError
from .types import EvolutionStatus

__all__ = ["constants", "orbits", "PopSynthError", "EvolutionStatus"]
