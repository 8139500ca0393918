"""Keplerian orbit utilities for binary initial conditions."""
from __future__ import annotations

import numpy as np

from . import constants


def separation_from_period(mass_1: float, mass_2: float, period_days: float) -> float:
    """Return the semi-major axis implied by Kepler's third law.

    Parameters
    ----------
    mass_1, mass_2:
        Component masses in solar masses.
    period_days:
        Orbital period in days.

    Returns
    -------
    float
        Semi-major axis in astronomical units.
    """
    period_yr = period_days / constants.DAYS_IN_YEAR
    total_mass = mass_1 + mass_2
    a3 = constants.G_AU_MSUN_YR * total_mass * period_yr * period_yr / (4.0 * np.pi * np.pi)
    return float(np.cbrt(a3))


def period_from_separation(mass_1: float, mass_2: float, separation_au: float) -> float:
    """Return the orbital period (days) of a binary with the given semi-major axis."""

    total_mass = mass_1 + mass_2
    if total_mass <= 0.0:
        raise ValueError("total mass must be positive")
    period_yr = np.sqrt(4.0 * np.pi * np.pi * separation_au**3 / (constants.G_AU_MSUN_YR * total_mass))
    return float(period_yr * constants.DAYS_IN_YEAR)


__all__ = ["separation_from_period", "period_from_separation"]
