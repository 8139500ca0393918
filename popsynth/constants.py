"""Physical constants and default parameters for population synthesis runs.

Units follow the conventions of rapid binary population synthesis codes:
masses in solar masses, radii in solar radii, separations in astronomical
units, periods in days and times in Myr unless stated otherwise.
"""
from __future__ import annotations

import math

# Gravitational constant in AU^3 Msun^-1 yr^-2
G_AU_MSUN_YR: float = 4.0 * math.pi * math.pi

DAYS_IN_YEAR: float = 365.25

# Chandrasekhar mass (Msun)
MCH: float = 1.44

# 10 km expressed in Rsun
NEUTRON_STAR_RADIUS: float = (1.0 / 7.0) * 1.0e-4

# Baryon numbers for white dwarf cooling (Hurley et al. 2000, eq. 90)
BARYON_NUMBER_HE_WD: float = 4.0
BARYON_NUMBER_CO_WD: float = 15.0
BARYON_NUMBER_ONE_WD: float = 17.0

# Quadratic fits in (M, log10 Mdot) to Nomoto et al. 2007, table 5
MT_LIMIT_CRIT_NOMOTO_0: float = -8.33017
MT_LIMIT_CRIT_NOMOTO_1: float = 2.96481
MT_LIMIT_CRIT_NOMOTO_2: float = -0.98665
MT_LIMIT_STABLE_NOMOTO_0: float = -9.21757
MT_LIMIT_STABLE_NOMOTO_1: float = 3.57319
MT_LIMIT_STABLE_NOMOTO_2: float = -1.2178

# Linear fits to Piersanti et al. 2014, table A1
MT_LIMIT_CRIT_PIERSANTI_0: float = -5.515495
MT_LIMIT_CRIT_PIERSANTI_1: float = 0.93
MT_LIMIT_STABLE_PIERSANTI_0: float = -5.7
MT_LIMIT_STABLE_PIERSANTI_1: float = 0.8
MT_LIMIT_DET_PIERSANTI_0: float = -7.4
MT_LIMIT_DET_PIERSANTI_1: float = 0.88

# Program defaults
DEFAULT_METALLICITY: float = 0.0142
DEFAULT_SINGLE_STAR_MASS_MIN: float = 5.0
DEFAULT_SINGLE_STAR_MASS_MAX: float = 100.0
DEFAULT_SINGLE_STAR_MASS_STEPS: int = 100
DEFAULT_N_BINARIES: int = 10

# Mass boundary between the two Hurley main-sequence types (Msun)
MS_CONVECTIVE_MASS_LIMIT: float = 0.7
