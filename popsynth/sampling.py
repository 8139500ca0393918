"""Random initial conditions for binaries drawn without a grid file."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .schema import Sampling


@dataclass(frozen=True)
class BinaryInitialConditions:
    mass_1: float
    mass_2: float
    separation: float
    eccentricity: float


def sample_power_law(rng: np.random.Generator, slope: float, low: float, high: float) -> float:
    """Draw from ``p(x) ~ x**slope`` on ``[low, high]`` by inverse transform."""

    if low == high:
        return float(low)
    u = rng.uniform()
    k = slope + 1.0
    if np.isclose(k, 0.0):
        value = low * (high / low) ** u
    else:
        value = (low**k + u * (high**k - low**k)) ** (1.0 / k)
    return float(np.clip(value, low, high))


def sample_eccentricity(rng: np.random.Generator, distribution: str) -> float:
    if distribution == "thermal":
        return float(np.sqrt(rng.uniform()))
    if distribution == "flat":
        return float(rng.uniform())
    return 0.0


def sample_binary(rng: np.random.Generator, sampling: Sampling) -> BinaryInitialConditions:
    """Draw one binary from the configured distributions.

    The primary mass follows a power law, the mass ratio is flat in
    ``[q_min, q_max]`` and the separation is flat in ``log a``.
    """

    mass_1 = sample_power_law(rng, sampling.imf_slope, sampling.mass_min, sampling.mass_max)
    q = float(rng.uniform(sampling.q_min, sampling.q_max))
    log_a = rng.uniform(np.log10(sampling.separation_min), np.log10(sampling.separation_max))
    return BinaryInitialConditions(
        mass_1=mass_1,
        mass_2=mass_1 * q,
        separation=float(10.0**log_a),
        eccentricity=sample_eccentricity(rng, sampling.eccentricity),
    )


def sample_binary_from_gaussians(
    rng: np.random.Generator,
    gaussians: pd.DataFrame,
    sampling: Sampling,
) -> BinaryInitialConditions:
    """Draw one binary from the weighted Gaussian mixture of an AIS refinement phase.

    A component is chosen with probability proportional to ``weight``; the
    masses and separation are then drawn from its normal distributions and
    clipped into the configured sampling ranges, with the secondary kept
    within ``[q_min, q_max]`` times the primary.
    """

    weights = gaussians["weight"].to_numpy(dtype=float)
    row = gaussians.iloc[int(rng.choice(len(weights), p=weights / weights.sum()))]
    mass_1 = float(np.clip(rng.normal(row["mass_1"], row["sigma_mass_1"]), sampling.mass_min, sampling.mass_max))
    mass_2 = float(
        np.clip(rng.normal(row["mass_2"], row["sigma_mass_2"]), sampling.q_min * mass_1, sampling.q_max * mass_1)
    )
    separation = float(
        np.clip(rng.normal(row["separation"], row["sigma_separation"]), sampling.separation_min, sampling.separation_max)
    )
    return BinaryInitialConditions(
        mass_1=mass_1,
        mass_2=mass_2,
        separation=separation,
        eccentricity=sample_eccentricity(rng, sampling.eccentricity),
    )


__all__ = [
    "BinaryInitialConditions",
    "sample_power_law",
    "sample_eccentricity",
    "sample_binary",
    "sample_binary_from_gaussians",
]
