import json
from pathlib import Path

import pandas as pd

from popsynth.run import main


def test_cli_single_sweep_writes_population(tmp_path: Path) -> None:
    outdir = tmp_path / "out"
    code = main(
        [
            "--mode",
            "single",
            "--outdir",
            str(outdir),
            "--quiet",
            "--override",
            "single_star.mass_min=1.0",
            "single_star.mass_max=3.0",
            "single_star.mass_steps=3",
            "--override",
            "seed.fixed=true",
            "seed.value=11",
        ]
    )
    assert code == 0
    table = pd.read_parquet(outdir / "population.parquet")
    assert list(table["seed"]) == [11, 12, 13]
    assert json.loads((outdir / "summary.json").read_text(encoding="utf-8"))["mode"] == "single"


def test_cli_binary_grid_and_overrides_file(tmp_path: Path) -> None:
    grid = tmp_path / "binaries.txt"
    grid.write_text(
        "MASS_1,MASS_2,METALLICITY_1,METALLICITY_2,SEPARATION,ECCENTRICITY\n20,10,0.02,0.02,1.5,0.0\n",
        encoding="utf-8",
    )
    overrides = tmp_path / "overrides.txt"
    overrides.write_text(f"io.outdir={tmp_path / 'bin'}\nio.quiet=true\n", encoding="utf-8")
    code = main(["--grid", str(grid), "--overrides-file", str(overrides)])
    assert code == 0
    table = pd.read_parquet(tmp_path / "bin" / "population.parquet")
    assert table["separation"].tolist() == [1.5]
    assert table["grid_line"].tolist() == [2]


def test_cli_missing_grid_fails(tmp_path: Path) -> None:
    code = main(["--mode", "single", "--grid", str(tmp_path / "absent.txt"), "--outdir", str(tmp_path), "--quiet"])
    assert code == 1
