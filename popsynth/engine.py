"""Evolvable objects driven by the population loop.

The population loop only needs ``evolve(index)`` and a few read-only
properties, described by :class:`Evolvable`.  :class:`Star` and
:class:`BinaryStar` are zero-age reference implementations: they classify
the initial Hurley type, write one detailed-output record and return.  A
full stellar-evolution integrator is plugged in through the factory
arguments of :func:`popsynth.population.evolve_single_stars` and
:func:`popsynth.population.evolve_binary_stars`.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from . import constants
from .io.grid_file import KickParameters
from .io.writer import BSE_DETAILED, SSE_DETAILED, OutputLog
from .types import EvolutionStatus, StellarType

logger = logging.getLogger(__name__)


class Evolvable(Protocol):
    @property
    def metallicity(self) -> float: ...

    def evolve(self, index: int) -> EvolutionStatus: ...


def zero_age_type(mass: float) -> StellarType:
    """Hurley type of a hydrogen main-sequence star of ``mass`` Msun."""

    if mass <= 0.0:
        return StellarType.MASSLESS_REMNANT
    if mass <= constants.MS_CONVECTIVE_MASS_LIMIT:
        return StellarType.MS_LTE_07
    return StellarType.MS_GT_07


class Star:
    def __init__(self, seed: int, mass: float, metallicity: float, *, output: Optional[OutputLog] = None) -> None:
        self.seed = int(seed)
        self.mass = float(mass)
        self._metallicity = float(metallicity)
        self.output = output
        self.initial_type = zero_age_type(self.mass)
        self.stellar_type = self.initial_type
        self.status = EvolutionStatus.CONTINUE

    @property
    def metallicity(self) -> float:
        return self._metallicity

    def evolve(self, index: int) -> EvolutionStatus:
        if self.output is not None:
            self.output.log_detailed(
                SSE_DETAILED,
                index,
                {
                    "time": 0.0,
                    "seed": self.seed,
                    "mass": self.mass,
                    "metallicity": self.metallicity,
                    "stellar_type": int(self.stellar_type),
                },
            )
        self.status = EvolutionStatus.DONE
        return self.status


class BinaryStar:
    """Zero-age binary built from explicit initial conditions.

    ``separation`` is in AU; a non-positive separation leaves the stars in
    contact and the binary ends as ``STARS_TOUCHING``.
    """

    def __init__(
        self,
        seed: int,
        mass_1: float,
        mass_2: float,
        metallicity_1: float,
        metallicity_2: float,
        separation: float,
        eccentricity: float,
        kick_1: Optional[KickParameters] = None,
        kick_2: Optional[KickParameters] = None,
        *,
        output: Optional[OutputLog] = None,
    ) -> None:
        self.seed = int(seed)
        self.star_1 = Star(seed, mass_1, metallicity_1)
        self.star_2 = Star(seed, mass_2, metallicity_2)
        self.separation = float(separation)
        self.eccentricity = float(eccentricity)
        self.kick_1 = kick_1
        self.kick_2 = kick_2
        self.output = output
        self.status = EvolutionStatus.CONTINUE

    @property
    def metallicity(self) -> float:
        return self.star_1.metallicity

    @property
    def star_1_initial_type(self) -> StellarType:
        return self.star_1.initial_type

    @property
    def star_2_initial_type(self) -> StellarType:
        return self.star_2.initial_type

    @property
    def star_1_type(self) -> StellarType:
        return self.star_1.stellar_type

    @property
    def star_2_type(self) -> StellarType:
        return self.star_2.stellar_type

    def evolve(self, index: int) -> EvolutionStatus:
        if StellarType.MASSLESS_REMNANT in (self.star_1_type, self.star_2_type):
            status = EvolutionStatus.MASSLESS_REMNANT
        elif self.separation <= 0.0:
            status = EvolutionStatus.STARS_TOUCHING
        else:
            status = EvolutionStatus.DONE
        if self.output is not None:
            record = {
                "time": 0.0,
                "seed": self.seed,
                "mass_1": self.star_1.mass,
                "mass_2": self.star_2.mass,
                "separation": self.separation,
                "eccentricity": self.eccentricity,
                "stellar_type_1": int(self.star_1_type),
                "stellar_type_2": int(self.star_2_type),
            }
            if self.kick_1 is not None and self.kick_2 is not None:
                record["kick_velocity_1"] = self.kick_1.velocity
                record["kick_velocity_2"] = self.kick_2.velocity
            self.output.log_detailed(BSE_DETAILED, index, record)
        logger.debug("binary %d evolved to %s", index, status.name)
        self.status = status
        return status


__all__ = ["Evolvable", "zero_age_type", "Star", "BinaryStar"]
