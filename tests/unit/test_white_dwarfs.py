import warnings

import numpy as np
import pytest

from popsynth import constants
from popsynth.physics import white_dwarfs as wd
from popsynth.types import AccretionRegime, StellarType
from popsynth.warnings import RegimeUnsetWarning

MASSES = np.linspace(0.5, 1.35, 18)


def test_hydrogen_limits_are_ordered() -> None:
    assert np.all(wd.critical_rate_hydrogen(MASSES) > wd.stable_rate_hydrogen(MASSES))


def test_helium_limits_are_ordered() -> None:
    assert np.all(wd.critical_rate_helium(MASSES) > wd.stable_rate_helium(MASSES))
    assert np.all(wd.stable_rate_helium(MASSES) > wd.accumulation_rate_helium(MASSES))


def test_eta_hydrogen_regimes() -> None:
    mass = 1.0
    critical = wd.critical_rate_hydrogen(mass)
    stable = wd.stable_rate_hydrogen(mass)
    assert wd.eta_hydrogen(mass, 0.5 * (critical + stable)) == 1.0
    assert wd.eta_hydrogen(mass, stable) == 1.0
    assert wd.eta_hydrogen(mass, critical + 0.5) == pytest.approx(10.0**-0.5)
    assert wd.eta_hydrogen(mass, stable - 0.1) == 0.0


def test_eta_helium_regimes() -> None:
    mass = 1.0
    critical = wd.critical_rate_helium(mass)
    stable = wd.stable_rate_helium(mass)
    accumulation = wd.accumulation_rate_helium(mass)
    assert wd.eta_helium(mass, 0.5 * (critical + stable)) == 1.0
    assert wd.eta_helium(mass, critical + 1.0) == pytest.approx(0.1)
    assert wd.eta_helium(mass, accumulation - 0.5) == 1.0
    between = 0.5 * (stable + accumulation)
    assert wd.eta_helium(mass, between) == pytest.approx(wd.eta_pty(mass, between))


def test_efficiencies_are_bounded_over_mass_rate_grid() -> None:
    m, rate = np.meshgrid(MASSES, np.linspace(-11.0, -3.0, 81))
    for eta in (wd.eta_hydrogen(m, rate), wd.eta_helium(m, rate), wd.eta_pty(m, rate)):
        assert eta.shape == m.shape
        assert np.all((eta >= 0.0) & (eta <= 1.0))


def test_stable_band_is_exactly_one_for_fixed_mass() -> None:
    for mass in MASSES:
        rates = np.linspace(wd.stable_rate_helium(mass), wd.critical_rate_helium(mass), 11)
        assert np.all(wd.eta_helium(mass, rates) == 1.0)
        rates = np.linspace(wd.stable_rate_hydrogen(mass), wd.critical_rate_hydrogen(mass), 11)
        assert np.all(wd.eta_hydrogen(mass, rates) == 1.0)


def test_eta_pty_uses_linear_rate_cubic() -> None:
    log_rate = 0.5
    x = 10.0**log_rate
    expected = 6.0e-3 + 5.1e-2 * x + 8.3e-3 * x * x - 3.317e-4 * x**3
    assert wd.eta_pty(0.55, log_rate) == pytest.approx(expected)


def test_luminosity_closed_form() -> None:
    value = wd.luminosity_on_phase(0.6, 100.0, 0.02, constants.BARYON_NUMBER_CO_WD)
    expected = 635.0 * 0.6 * 0.02**0.4 / (15.0 * 100.1) ** 1.4
    assert value == pytest.approx(expected)


def test_radius_closed_form_and_floor() -> None:
    mass = 0.6
    expected = 0.0115 * np.sqrt((constants.MCH / mass) ** (2.0 / 3.0) - (mass / constants.MCH) ** (2.0 / 3.0))
    assert wd.radius_on_phase(mass) == pytest.approx(expected)
    assert wd.radius_on_phase(constants.MCH) == constants.NEUTRON_STAR_RADIUS
    assert wd.radius_on_phase(2.0) == constants.NEUTRON_STAR_RADIUS


def test_shell_table_covers_every_set_regime() -> None:
    assert set(wd.SHELL_FOR_REGIME) == set(AccretionRegime) - {AccretionRegime.NONE}


@pytest.mark.parametrize("regime", list(wd.SHELL_FOR_REGIME))
def test_shell_change_touches_one_shell(regime: AccretionRegime) -> None:
    dwarf = wd.WhiteDwarf(0.8, 0.02, accretion_regime=regime)
    shell = dwarf.resolve_shell_change(0.01)
    dwarf.resolve_shell_change(0.02)
    if shell == wd.H_SHELL:
        assert (dwarf.h_shell, dwarf.he_shell) == (pytest.approx(0.03), 0.0)
    else:
        assert (dwarf.h_shell, dwarf.he_shell) == (0.0, pytest.approx(0.03))


def test_unset_regime_never_changes_shells() -> None:
    dwarf = wd.WhiteDwarf(0.8, 0.02)
    for _ in range(3):
        with pytest.warns(RegimeUnsetWarning):
            assert dwarf.resolve_shell_change(0.1) is None
    assert (dwarf.h_shell, dwarf.he_shell) == (0.0, 0.0)


def test_accrete_in_stable_helium_band_retains_everything() -> None:
    dwarf = wd.WhiteDwarf(1.0, 0.02, accretion_regime=AccretionRegime.HELIUM_STABLE_BURNING)
    log_rate = 0.5 * (wd.critical_rate_helium(1.0) + wd.stable_rate_helium(1.0))
    with warnings.catch_warnings():
        warnings.simplefilter("error", RegimeUnsetWarning)
        retained = dwarf.accrete(0.05, log_rate, he_rich=True)
    assert retained == pytest.approx(0.05)
    assert dwarf.he_shell == pytest.approx(0.05)
    assert dwarf.mass == pytest.approx(1.05)


def test_white_dwarf_rejects_non_degenerate_type() -> None:
    with pytest.raises(ValueError):
        wd.WhiteDwarf(1.0, 0.02, StellarType.MS_GT_07)


def test_baryon_number_follows_type() -> None:
    dwarf = wd.WhiteDwarf(0.3, 0.02, StellarType.HELIUM_WHITE_DWARF)
    assert dwarf.baryon_number == constants.BARYON_NUMBER_HE_WD
    assert dwarf.luminosity(10.0) == pytest.approx(wd.luminosity_on_phase(0.3, 10.0, 0.02, 4.0))
