"""Accretion onto white dwarfs.

Closed-form mass-retention efficiencies and remnant properties used when a
white dwarf accretes from a companion.  All scalar functions accept numpy
arrays as well and broadcast ``mass`` against ``log_rate``.

Notes
-----
* Hydrogen limits are quadratic fits in mass to Nomoto et al. (2007),
  table 5; helium limits are linear fits to Piersanti et al. (2014), table A1.
* The helium accumulation threshold is deliberately lower than the
  published detonation limit so that a double-detonation channel remains
  accessible.
* Luminosity and radius follow Hurley, Pols & Tout (2000), eqs. 90 and 91.
"""
from __future__ import annotations

import logging
import warnings
from types import MappingProxyType
from typing import Mapping, Optional

import numpy as np

from .. import constants
from ..types import AccretionRegime, StellarType
from ..warnings import RegimeUnsetWarning

logger = logging.getLogger(__name__)

H_SHELL = "HShell"
HE_SHELL = "HeShell"

SHELL_FOR_REGIME: Mapping[AccretionRegime, str] = MappingProxyType(
    {
        AccretionRegime.HELIUM_ACCUMULATION: HE_SHELL,
        AccretionRegime.HELIUM_FLASHES: HE_SHELL,
        AccretionRegime.HELIUM_STABLE_BURNING: HE_SHELL,
        AccretionRegime.HELIUM_OPT_THICK_WINDS: HE_SHELL,
        AccretionRegime.HELIUM_WHITE_DWARF_HELIUM_SUB_CHANDRASEKHAR: HE_SHELL,
        AccretionRegime.HELIUM_WHITE_DWARF_HELIUM_IGNITION: HE_SHELL,
        AccretionRegime.HYDROGEN_FLASHES: H_SHELL,
        AccretionRegime.HYDROGEN_STABLE_BURNING: H_SHELL,
        AccretionRegime.HYDROGEN_OPT_THICK_WINDS: H_SHELL,
        AccretionRegime.HELIUM_WHITE_DWARF_HYDROGEN_FLASHES: H_SHELL,
        AccretionRegime.HELIUM_WHITE_DWARF_HYDROGEN_ACCUMULATION: H_SHELL,
    }
)

BARYON_NUMBER = MappingProxyType(
    {
        StellarType.HELIUM_WHITE_DWARF: constants.BARYON_NUMBER_HE_WD,
        StellarType.CARBON_OXYGEN_WHITE_DWARF: constants.BARYON_NUMBER_CO_WD,
        StellarType.OXYGEN_NEON_WHITE_DWARF: constants.BARYON_NUMBER_ONE_WD,
    }
)

# Cubic coefficients (c0, c1, c2, c3) in the linear accretion rate, keyed by
# the upper mass edge of each bracket.
_PTY_BRACKETS = (
    (0.6, (6.0e-3, 5.1e-2, 8.3e-3, -3.317e-4)),
    (0.7, (-3.5e-2, 7.5e-2, -1.8e-3, 3.266e-5)),
    (0.81, (9.3e-2, 1.8e-2, 1.6e-3, -4.111e-5)),
    (0.92, (-7.59e-2, 1.54e-2, 4.0e-4, -5.905e-6)),
    (np.inf, (-0.323, 4.1e-2, -7.0e-4, 4.733e-6)),
)


def _as_result(value: np.ndarray):
    return float(value) if np.ndim(value) == 0 else value


def critical_rate_hydrogen(mass):
    """log10 of the upper stable hydrogen-burning rate [Msun/yr]."""

    m = np.asarray(mass, dtype=float)
    return _as_result(
        constants.MT_LIMIT_CRIT_NOMOTO_0 + constants.MT_LIMIT_CRIT_NOMOTO_1 * m + constants.MT_LIMIT_CRIT_NOMOTO_2 * m * m
    )


def stable_rate_hydrogen(mass):
    """log10 of the lower stable hydrogen-burning rate [Msun/yr]."""

    m = np.asarray(mass, dtype=float)
    return _as_result(
        constants.MT_LIMIT_STABLE_NOMOTO_0
        + constants.MT_LIMIT_STABLE_NOMOTO_1 * m
        + constants.MT_LIMIT_STABLE_NOMOTO_2 * m * m
    )


def critical_rate_helium(mass):
    m = np.asarray(mass, dtype=float)
    return _as_result(constants.MT_LIMIT_CRIT_PIERSANTI_0 + constants.MT_LIMIT_CRIT_PIERSANTI_1 * m)


def stable_rate_helium(mass):
    m = np.asarray(mass, dtype=float)
    return _as_result(constants.MT_LIMIT_STABLE_PIERSANTI_0 + constants.MT_LIMIT_STABLE_PIERSANTI_1 * m)


def accumulation_rate_helium(mass):
    m = np.asarray(mass, dtype=float)
    return _as_result(constants.MT_LIMIT_DET_PIERSANTI_0 + constants.MT_LIMIT_DET_PIERSANTI_1 * m)


def eta_hydrogen(mass, log_rate):
    """Hydrogen mass-retention efficiency.

    Parameters
    ----------
    mass:
        White dwarf mass [Msun].
    log_rate:
        log10 of the mass-transfer rate [Msun/yr].

    Returns
    -------
    float or numpy.ndarray
        ``10**(critical - log_rate)`` above the critical rate, 1 in the
        stable band and 0 below it.
    """

    rate = np.asarray(log_rate, dtype=float)
    critical = np.asarray(critical_rate_hydrogen(mass))
    stable = np.asarray(stable_rate_hydrogen(mass))
    eta = np.where(
        rate > critical,
        np.power(10.0, np.minimum(critical - rate, 0.0)),
        np.where(rate >= stable, 1.0, 0.0),
    )
    return _as_result(eta)


def eta_pty(mass, log_rate):
    """Helium retention between the accumulation and stable thresholds.

    The fit is a cubic in the linear rate ``10**log_rate`` whose coefficients
    depend on the mass bracket; the result is clipped to ``[0, 1]``.
    """

    m = np.asarray(mass, dtype=float)
    x = np.power(10.0, np.asarray(log_rate, dtype=float))
    m, x = np.broadcast_arrays(m, x)
    eta = np.zeros(m.shape, dtype=float)
    lower = -np.inf
    for upper, (c0, c1, c2, c3) in _PTY_BRACKETS:
        in_bracket = (m > lower) & (m <= upper)
        poly = c0 + c1 * x + c2 * x * x + c3 * x * x * x
        eta = np.where(in_bracket, poly, eta)
        lower = upper
    return _as_result(np.clip(eta, 0.0, 1.0))


def eta_helium(mass, log_rate):
    """Helium mass-retention efficiency over the four accretion regimes."""

    rate = np.asarray(log_rate, dtype=float)
    critical = np.asarray(critical_rate_helium(mass))
    stable = np.asarray(stable_rate_helium(mass))
    accumulation = np.asarray(accumulation_rate_helium(mass))
    eta = np.where(
        rate > critical,
        np.power(10.0, np.minimum(critical - rate, 0.0)),
        np.where(
            rate >= stable,
            1.0,
            np.where(rate >= accumulation, np.asarray(eta_pty(mass, log_rate)), 1.0),
        ),
    )
    return _as_result(eta)


def luminosity_on_phase(mass, time, metallicity, baryon_number):
    """White dwarf cooling luminosity [Lsun] at age ``time`` [Myr]."""

    m = np.asarray(mass, dtype=float)
    t = np.asarray(time, dtype=float)
    return _as_result(635.0 * m * np.power(metallicity, 0.4) / np.power(baryon_number * (t + 0.1), 1.4))


def radius_on_phase(mass):
    """White dwarf radius [Rsun], never smaller than a neutron star."""

    m = np.asarray(mass, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = np.power(constants.MCH / m, 2.0 / 3.0) - np.power(m / constants.MCH, 2.0 / 3.0)
        radius = 0.0115 * np.sqrt(np.where(ratio > 0.0, ratio, 0.0))
    return _as_result(np.maximum(radius, constants.NEUTRON_STAR_RADIUS))


class WhiteDwarf:
    """Accreting white dwarf tracking hydrogen and helium shell masses."""

    def __init__(
        self,
        mass: float,
        metallicity: float,
        stellar_type: StellarType = StellarType.CARBON_OXYGEN_WHITE_DWARF,
        *,
        accretion_regime: AccretionRegime = AccretionRegime.NONE,
    ) -> None:
        if not stellar_type.is_white_dwarf:
            raise ValueError(f"{stellar_type.label} is not a white dwarf type")
        self.mass = float(mass)
        self.metallicity = float(metallicity)
        self.stellar_type = stellar_type
        self.accretion_regime = accretion_regime
        self.h_shell = 0.0
        self.he_shell = 0.0

    @property
    def baryon_number(self) -> float:
        return BARYON_NUMBER[self.stellar_type]

    def eta_h(self, log_rate: float) -> float:
        return eta_hydrogen(self.mass, log_rate)

    def eta_he(self, log_rate: float) -> float:
        return eta_helium(self.mass, log_rate)

    def eta_pty(self, log_rate: float) -> float:
        return eta_pty(self.mass, log_rate)

    def luminosity(self, time: float) -> float:
        return luminosity_on_phase(self.mass, time, self.metallicity, self.baryon_number)

    def radius(self) -> float:
        return radius_on_phase(self.mass)

    def resolve_shell_change(self, accreted_mass: float) -> Optional[str]:
        """Add ``accreted_mass`` to the shell selected by the current regime.

        Returns the name of the updated shell, or ``None`` when the regime has
        no shell mapping, in which case a :class:`RegimeUnsetWarning` is
        issued and neither shell changes.
        """

        shell = SHELL_FOR_REGIME.get(self.accretion_regime)
        if shell is None:
            warnings.warn(
                f"accretion regime {self.accretion_regime.value!r} has no shell; {accreted_mass} Msun not recorded",
                RegimeUnsetWarning,
                stacklevel=2,
            )
            return None
        if shell == H_SHELL:
            self.h_shell += accreted_mass
        else:
            self.he_shell += accreted_mass
        return shell

    def accrete(self, transferred_mass: float, log_rate: float, *, he_rich: bool) -> float:
        """Retain part of ``transferred_mass`` and record it in a shell.

        Returns the retained mass.
        """

        eta = self.eta_he(log_rate) if he_rich else self.eta_h(log_rate)
        retained = float(eta) * transferred_mass
        logger.debug(
            "accrete: M=%.4g log_rate=%.3f he_rich=%s eta=%.4g retained=%.4g",
            self.mass,
            log_rate,
            he_rich,
            eta,
            retained,
        )
        if self.resolve_shell_change(retained) is not None:
            self.mass += retained
        return retained


__all__ = [
    "H_SHELL",
    "HE_SHELL",
    "SHELL_FOR_REGIME",
    "BARYON_NUMBER",
    "critical_rate_hydrogen",
    "stable_rate_hydrogen",
    "critical_rate_helium",
    "stable_rate_helium",
    "accumulation_rate_helium",
    "eta_hydrogen",
    "eta_helium",
    "eta_pty",
    "luminosity_on_phase",
    "radius_on_phase",
    "WhiteDwarf",
]
