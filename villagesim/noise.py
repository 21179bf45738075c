"""Seeded fractal noise sampled over numpy arrays."""

from __future__ import annotations

import random

import numpy as np
from noise import pnoise2

from . import config


class FractalNoise:
    """Perlin noise summed over a few octaves, mapped to [0, 1].

    ``pnoise2`` itself is unseeded; the seed picks a sampling offset and a
    permutation ``base`` so two instances built with the same seed return
    identical samples.
    """

    def __init__(
        self,
        seed: int,
        octaves: int = config.NOISE_OCTAVES,
        falloff: float = config.NOISE_FALLOFF,
    ) -> None:
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        self.seed = seed
        self.octaves = int(octaves)
        self.falloff = float(falloff)
        rng = random.Random(seed)
        self.offset_x = rng.uniform(0, 1000)
        self.offset_y = rng.uniform(0, 1000)
        self.base = rng.randrange(256)
        self._sample = np.vectorize(self._point, otypes=[np.float64])

    def _point(self, x: float, y: float) -> float:
        value = pnoise2(
            x + self.offset_x,
            y + self.offset_y,
            octaves=self.octaves,
            persistence=self.falloff,
            base=self.base,
        )
        return min(1.0, max(0.0, (value + 1.0) / 2.0))

    def sample(self, x, y) -> np.ndarray:
        return self._sample(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))

    def __call__(self, x, y) -> np.ndarray:
        return self.sample(x, y)
