"""Random-number service used by the population loop."""
from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np

from .schema import SeedConfig

logger = logging.getLogger(__name__)


class RandomService:
    """Seedable wrapper around :class:`numpy.random.Generator`.

    ``default_seed`` is fixed when the service is created, from the wall
    clock unless given explicitly, so that every object in a run derives its
    seed from the same base.
    """

    def __init__(self, default_seed: Optional[int] = None) -> None:
        if default_seed is None:
            default_seed = int(time.time())
        self.default_seed = int(default_seed)
        self.current_seed = self.default_seed
        self.generator = np.random.default_rng(self.current_seed)

    def base_seed(self, policy: SeedConfig) -> int:
        """Return the user-fixed seed or the default seed."""

        return int(policy.value) if policy.fixed else self.default_seed

    def seed(self, value: int) -> int:
        """Reseed the generator and return the seed actually applied."""

        self.current_seed = int(value)
        self.generator = np.random.default_rng(self.current_seed)
        logger.debug("random service reseeded with %d", self.current_seed)
        return self.current_seed


__all__ = ["RandomService"]
