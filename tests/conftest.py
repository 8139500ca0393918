from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from popsynth.engine import BinaryStar, Star  # noqa: E402
from popsynth.schema import IO, Config, SeedConfig  # noqa: E402

FIXED_SEED = 100


@pytest.fixture
def write_grid(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper writing grid text to ``tmp_path``."""

    def _write(text: str, name: str = "grid.txt") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def base_config(tmp_path: Path) -> Config:
    return Config(
        seed=SeedConfig(fixed=True, value=FIXED_SEED),
        io=IO(outdir=tmp_path / "out", quiet=True, write_population=False),
    )


@pytest.fixture
def recorded_stars() -> List[Star]:
    return []


@pytest.fixture
def star_factory(recorded_stars: List[Star]) -> Callable[..., Star]:
    def _factory(seed, mass, metallicity, *, output=None) -> Star:
        star = Star(seed, mass, metallicity, output=output)
        recorded_stars.append(star)
        return star

    return _factory


@pytest.fixture
def recorded_binaries() -> List[BinaryStar]:
    return []


@pytest.fixture
def binary_factory(recorded_binaries: List[BinaryStar]) -> Callable[..., BinaryStar]:
    def _factory(*args, output=None) -> BinaryStar:
        binary = BinaryStar(*args, output=output)
        recorded_binaries.append(binary)
        return binary

    return _factory
