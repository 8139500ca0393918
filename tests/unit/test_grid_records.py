import warnings

import pytest

from popsynth import orbits
from popsynth.errors import RowDataError
from popsynth.io.grid_file import BSE_SCHEMA, KICK_COLUMNS, SSE_SCHEMA, open_grid, read_grid
from popsynth.warnings import RowDataWarning

Z = 0.0142
BSE_PERIOD_HEADER = "MASS_1,MASS_2,METALLICITY_1,METALLICITY_2,PERIOD,ECCENTRICITY"


def test_mass_only_header_uses_default_metallicity_for_every_row(write_grid) -> None:
    path = write_grid("MASS\n1.0\n2.0\n3.0\n")
    with pytest.warns(RowDataWarning, match="default metallicity"):
        rows = read_grid(path, SSE_SCHEMA, default_metallicity=Z)
    assert [row.metallicity for row in rows] == [Z, Z, Z]


def test_empty_mass_field_defaults_to_zero_and_continues(write_grid) -> None:
    path = write_grid("MASS,METALLICITY\n,0.02\n4.0,0.01\n")
    with pytest.warns(RowDataWarning, match="missing data for MASS"):
        rows = read_grid(path, SSE_SCHEMA, default_metallicity=Z)
    assert [row.as_vector() for row in rows] == [(0.0, 0.02), (4.0, 0.01)]


def test_empty_and_missing_metallicity_use_default(write_grid) -> None:
    path = write_grid("MASS,METALLICITY\n1.0,\n2.0\n")
    with pytest.warns(RowDataWarning):
        rows = read_grid(path, SSE_SCHEMA, default_metallicity=Z)
    assert [row.metallicity for row in rows] == [Z, Z]


def test_extra_column_is_ignored(write_grid) -> None:
    path = write_grid("MASS,METALLICITY\n1.0,0.02,99\n")
    with pytest.warns(RowDataWarning, match="extra column 3 ignored"):
        rows = read_grid(path, SSE_SCHEMA, default_metallicity=Z)
    assert rows[0].as_vector() == (1.0, 0.02)


@pytest.mark.parametrize("bad", ["abc", "1.5abc", "nan"])
def test_non_numeric_field_stops_reading(write_grid, bad: str) -> None:
    path = write_grid(f"MASS\n1.0\n{bad}\n3.0\n")
    with open_grid(path, SSE_SCHEMA, default_metallicity=Z) as grid:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RowDataWarning)
            assert grid.read_record().mass == 1.0
            with pytest.raises(RowDataError) as excinfo:
                grid.read_record()
    assert excinfo.value.line_no == 3
    assert excinfo.value.token == bad


def test_negative_single_values_are_fatal(write_grid) -> None:
    path = write_grid("MASS,METALLICITY\n1.0,-0.02\n")
    with pytest.raises(RowDataError, match="negative data for METALLICITY"):
        read_grid(path, SSE_SCHEMA, default_metallicity=Z)


def test_separation_derived_from_period(write_grid) -> None:
    path = write_grid(BSE_PERIOD_HEADER + "\n10,8,0.02,0.02,100,0.1\n")
    with pytest.warns(RowDataWarning, match="derived from period"):
        (row,) = read_grid(path, BSE_SCHEMA, default_metallicity=Z)
    expected = (18.0 * (100.0 / 365.25) ** 2) ** (1.0 / 3.0)
    assert row.separation == pytest.approx(expected)
    assert row.separation == pytest.approx(orbits.separation_from_period(10.0, 8.0, 100.0))
    assert row.eccentricity == 0.1
    assert row.kick_1 is None and row.kick_2 is None
    assert len(row.as_vector()) == 6


def test_explicit_separation_wins_over_period(write_grid) -> None:
    path = write_grid("MASS_1,MASS_2,METALLICITY_1,METALLICITY_2,SEPARATION,PERIOD,ECCENTRICITY\n10,8,0.02,0.02,3.5,100,0\n")
    with warnings.catch_warnings():
        warnings.simplefilter("error", RowDataWarning)
        (row,) = read_grid(path, BSE_SCHEMA, default_metallicity=Z)
    assert row.separation == 3.5
    assert row.period == 100.0


def test_zero_separation_with_period_falls_back_to_kepler(write_grid) -> None:
    path = write_grid("MASS_1,MASS_2,METALLICITY_1,METALLICITY_2,SEPARATION,PERIOD,ECCENTRICITY\n1,1,0.02,0.02,0,365.25,0\n")
    with pytest.warns(RowDataWarning):
        (row,) = read_grid(path, BSE_SCHEMA, default_metallicity=Z)
    assert row.separation == pytest.approx(2.0 ** (1.0 / 3.0))


def test_negative_period_and_kicks_are_accepted(write_grid) -> None:
    header = ",".join(("MASS_1", "MASS_2", "METALLICITY_1", "METALLICITY_2", "SEPARATION", "PERIOD", "ECCENTRICITY") + KICK_COLUMNS)
    values = "10,8,0.02,0.02,2.0,-1,0.0,-50,0.1,0.2,0.3,60,-0.1,0.2,0.3"
    path = write_grid(f"{header}\n{values}\n")
    (row,) = read_grid(path, BSE_SCHEMA, default_metallicity=Z)
    assert row.kick_1.velocity == -50.0
    assert row.kick_2.theta == -0.1
    assert row.separation == 2.0
    vector = row.as_vector()
    assert len(vector) == 14
    assert vector[6:10] == (-50.0, 0.1, 0.2, 0.3)


@pytest.mark.parametrize("column", ["MASS_1", "METALLICITY_2", "SEPARATION", "ECCENTRICITY"])
def test_negative_binary_values_are_fatal(write_grid, column: str) -> None:
    header = ["MASS_1", "MASS_2", "METALLICITY_1", "METALLICITY_2", "SEPARATION", "ECCENTRICITY"]
    values = ["10", "8", "0.02", "0.02", "2.0", "0.1"]
    values[header.index(column)] = "-1"
    path = write_grid(",".join(header) + "\n" + ",".join(values) + "\n")
    with pytest.raises(RowDataError, match=f"negative data for {column}"):
        read_grid(path, BSE_SCHEMA, default_metallicity=Z)


def test_empty_binary_field_defaults_to_zero(write_grid) -> None:
    path = write_grid("MASS_1,MASS_2,METALLICITY_1,METALLICITY_2,SEPARATION,ECCENTRICITY\n10,8,,0.02,2.0\n")
    with pytest.warns(RowDataWarning) as record:
        (row,) = read_grid(path, BSE_SCHEMA, default_metallicity=Z)
    assert row.metallicity_1 == 0.0
    assert row.eccentricity == 0.0
    messages = [str(w.message) for w in record]
    assert any("METALLICITY_1" in m for m in messages)
    assert any("ECCENTRICITY" in m for m in messages)
