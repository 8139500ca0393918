from pathlib import Path

import pytest
from pydantic import ValidationError

from popsynth import constants
from popsynth.config_utils import apply_overrides_dict, load_config, parse_override_value, read_overrides_file
from popsynth.errors import ConfigurationError
from popsynth.schema import BinarySystem, Config, SingleStarSweep


def test_defaults_without_file() -> None:
    cfg = load_config()
    assert cfg.mode == "binary"
    assert cfg.metallicity == constants.DEFAULT_METALLICITY
    assert cfg.grid_filename is None
    assert cfg.single_star.mass_steps == constants.DEFAULT_SINGLE_STAR_MASS_STEPS
    assert cfg.primary_metallicity() == cfg.metallicity


def test_yaml_file_and_overrides(tmp_path: Path) -> None:
    path = tmp_path / "run.yml"
    path.write_text(
        "mode: SSE\n"
        "metallicity: 0.02\n"
        "grid:\n"
        "  filename: ''\n"
        "single_star:\n"
        "  mass_min: 1.0\n"
        "  mass_max: 3.0\n"
        "  mass_steps: 3\n",
        encoding="utf-8",
    )
    cfg = load_config(path, overrides=["seed.fixed=true", "seed.value=7", "binary.metallicity_2=0.001"])
    assert cfg.mode == "single"
    assert cfg.grid_filename is None
    assert cfg.single_star.mass_increment == pytest.approx(2.0 / 3.0)
    assert cfg.seed.fixed is True and cfg.seed.value == 7
    assert cfg.secondary_metallicity() == 0.001


def test_invalid_values_raise_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(overrides=["single_star.mass_min=10", "single_star.mass_max=5"])
    with pytest.raises(ConfigurationError):
        load_config(overrides=["mode=triple"])
    with pytest.raises(ConfigurationError):
        load_config(overrides=["ais.refinement_phase=true"])
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.yml")


def test_model_validators_reject_inconsistent_values() -> None:
    with pytest.raises(ValueError):
        SingleStarSweep(mass_min=3.0, mass_max=1.0)
    with pytest.raises(ValueError):
        BinarySystem(eccentricity=1.0)


def test_config_is_frozen() -> None:
    cfg = Config()
    with pytest.raises(ValidationError):
        cfg.metallicity = 0.5
    updated = cfg.model_copy(update={"metallicity": 0.5})
    assert updated.metallicity == 0.5 and cfg.metallicity == constants.DEFAULT_METALLICITY


def test_override_parsing_and_errors(tmp_path: Path) -> None:
    assert parse_override_value("true") is True
    assert parse_override_value("12") == 12
    assert parse_override_value("1e-3") == pytest.approx(1e-3)
    assert parse_override_value("'grid.txt'") == "grid.txt"
    assert parse_override_value('"001"') == "001"
    assert parse_override_value("None") is None
    assert parse_override_value("inf") == "inf"
    with pytest.raises(ConfigurationError):
        apply_overrides_dict({}, ["no_equals_sign"])
    overrides = tmp_path / "overrides.txt"
    overrides.write_text("# comment\nseed.fixed=true\n\nmetallicity=0.01 # inline\n", encoding="utf-8")
    assert read_overrides_file(overrides) == ["seed.fixed=true", "metallicity=0.01"]
