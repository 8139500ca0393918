"""Enumerations shared by the population loop, the engine and the physics kernel."""
from __future__ import annotations

from enum import Enum, IntEnum


class EvolutionStatus(Enum):
    """Terminal state of an evolved object or of a population run.

    ``CONTINUE`` is the only non-terminal value.  The enum value is the label
    printed on the status channel.
    """

    CONTINUE = "Continue evolution"
    DONE = "Simulation completed"
    ERROR = "An error occurred"
    STOPPED = "Evolution stopped"
    TIMES_UP = "Allowed time exceeded"
    STEPS_UP = "Allowed timesteps exceeded"
    WD_WD = "Double White Dwarf"
    MASSLESS_REMNANT = "Massless Remnant"
    STARS_TOUCHING = "Stars touching"
    UNBOUND = "Binary unbound"
    AIS_EXPLORATORY = "AIS Exploratory phase"

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self is not EvolutionStatus.CONTINUE


class StellarType(IntEnum):
    """Hurley et al. (2000) stellar types."""

    MS_LTE_07 = 0
    MS_GT_07 = 1
    HERTZSPRUNG_GAP = 2
    FIRST_GIANT_BRANCH = 3
    CORE_HELIUM_BURNING = 4
    EARLY_ASYMPTOTIC_GIANT_BRANCH = 5
    THERMALLY_PULSING_ASYMPTOTIC_GIANT_BRANCH = 6
    NAKED_HELIUM_STAR_MS = 7
    NAKED_HELIUM_STAR_HERTZSPRUNG_GAP = 8
    NAKED_HELIUM_STAR_GIANT_BRANCH = 9
    HELIUM_WHITE_DWARF = 10
    CARBON_OXYGEN_WHITE_DWARF = 11
    OXYGEN_NEON_WHITE_DWARF = 12
    NEUTRON_STAR = 13
    BLACK_HOLE = 14
    MASSLESS_REMNANT = 15
    CHEMICALLY_HOMOGENEOUS = 16
    NONE = 99

    @property
    def label(self) -> str:
        return STELLAR_TYPE_LABEL[self]

    @property
    def is_white_dwarf(self) -> bool:
        return self in (
            StellarType.HELIUM_WHITE_DWARF,
            StellarType.CARBON_OXYGEN_WHITE_DWARF,
            StellarType.OXYGEN_NEON_WHITE_DWARF,
        )


STELLAR_TYPE_LABEL = {
    StellarType.MS_LTE_07: "Main_Sequence_<=_0.7",
    StellarType.MS_GT_07: "Main_Sequence_>_0.7",
    StellarType.HERTZSPRUNG_GAP: "Hertzsprung_Gap",
    StellarType.FIRST_GIANT_BRANCH: "First_Giant_Branch",
    StellarType.CORE_HELIUM_BURNING: "Core_Helium_Burning",
    StellarType.EARLY_ASYMPTOTIC_GIANT_BRANCH: "Early_Asymptotic_Giant_Branch",
    StellarType.THERMALLY_PULSING_ASYMPTOTIC_GIANT_BRANCH: "Thermally_Pulsing_Asymptotic_Giant_Branch",
    StellarType.NAKED_HELIUM_STAR_MS: "Naked_Helium_Star_MS",
    StellarType.NAKED_HELIUM_STAR_HERTZSPRUNG_GAP: "Naked_Helium_Star_Hertzsprung_Gap",
    StellarType.NAKED_HELIUM_STAR_GIANT_BRANCH: "Naked_Helium_Star_Giant_Branch",
    StellarType.HELIUM_WHITE_DWARF: "Helium_White_Dwarf",
    StellarType.CARBON_OXYGEN_WHITE_DWARF: "Carbon-Oxygen_White_Dwarf",
    StellarType.OXYGEN_NEON_WHITE_DWARF: "Oxygen-Neon_White_Dwarf",
    StellarType.NEUTRON_STAR: "Neutron_Star",
    StellarType.BLACK_HOLE: "Black_Hole",
    StellarType.MASSLESS_REMNANT: "Massless_Remnant",
    StellarType.CHEMICALLY_HOMOGENEOUS: "Chemically_Homogeneous",
    StellarType.NONE: "Not_a_Star!",
}


class AccretionRegime(Enum):
    """Physical mode under which a white dwarf accretes transferred material."""

    NONE = "none"
    HELIUM_ACCUMULATION = "helium_accumulation"
    HELIUM_FLASHES = "helium_flashes"
    HELIUM_STABLE_BURNING = "helium_stable_burning"
    HELIUM_OPT_THICK_WINDS = "helium_opt_thick_winds"
    HELIUM_WHITE_DWARF_HELIUM_SUB_CHANDRASEKHAR = "helium_white_dwarf_helium_sub_chandrasekhar"
    HELIUM_WHITE_DWARF_HELIUM_IGNITION = "helium_white_dwarf_helium_ignition"
    HYDROGEN_FLASHES = "hydrogen_flashes"
    HYDROGEN_STABLE_BURNING = "hydrogen_stable_burning"
    HYDROGEN_OPT_THICK_WINDS = "hydrogen_opt_thick_winds"
    HELIUM_WHITE_DWARF_HYDROGEN_FLASHES = "helium_white_dwarf_hydrogen_flashes"
    HELIUM_WHITE_DWARF_HYDROGEN_ACCUMULATION = "helium_white_dwarf_hydrogen_accumulation"


__all__ = [
    "EvolutionStatus",
    "StellarType",
    "STELLAR_TYPE_LABEL",
    "AccretionRegime",
]
