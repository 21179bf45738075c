"""Terrain grid: land/ocean classification and resource density."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math
import random

import numpy as np

from . import config
from .logger import log
from .noise import FractalNoise


NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (di, dj) for di in (-1, 0, 1) for dj in (-1, 0, 1) if not (di == 0 and dj == 0)
)


@dataclass(frozen=True)
class TerrainCell:
    is_land: bool
    resource_density: float


def _neighbor_sum(values: np.ndarray) -> np.ndarray:
    """Sum of the 8 toroidal neighbours of every cell."""
    total = np.zeros_like(values, dtype=np.float64)
    for di, dj in NEIGHBOR_OFFSETS:
        # rolling by -d brings cell (i + di, j + dj) to (i, j)
        total += np.roll(values, shift=(-di, -dj), axis=(0, 1))
    return total


class TerrainGrid:
    """Land mask and resource density indexed ``[col, row]``, wrapping at the edges."""

    def __init__(self, land: np.ndarray, resources: np.ndarray, cell_size: float, seed: int | None = None) -> None:
        if land.shape != resources.shape:
            raise ValueError(f"land {land.shape} and resources {resources.shape} differ in shape")
        if cell_size < 1:
            raise ValueError(f"cell_size must be at least 1, got {cell_size}")
        self.land = land.astype(bool)
        self.resources = resources.astype(np.float64)
        self.cols, self.rows = self.land.shape
        self.cell_size = cell_size
        self.seed = seed

    @classmethod
    def generate(
        cls,
        seed: int,
        cols: int,
        rows: int,
        ocean_threshold: float = config.OCEAN_THRESHOLD,
        cell_size: float = config.CELL_SIZE,
        smoothing_iterations: int = config.SMOOTHING_ITERATIONS,
    ) -> "TerrainGrid":
        if cols < 1 or rows < 1:
            raise ValueError(f"grid must be at least 1x1, got {cols}x{rows}")
        noise = FractalNoise(seed)
        ii, jj = np.meshgrid(np.arange(cols), np.arange(rows), indexing="ij")

        nx = ii * config.NOISE_SCALE
        ny = jj * config.NOISE_SCALE
        height = np.zeros((cols, rows), dtype=np.float64)
        frequency = 1.0
        for weight, offset in zip(config.TERRAIN_OCTAVE_WEIGHTS, config.TERRAIN_OCTAVE_OFFSETS):
            height += noise(nx * frequency + offset, ny * frequency + offset) * weight
            frequency *= 2.0
        height /= sum(config.TERRAIN_OCTAVE_WEIGHTS)

        land = height >= ocean_threshold
        resources = np.where(land, cls._resource_density(noise, ii, jj), 0.0)

        grid = cls(land, resources, cell_size, seed=seed)
        for _ in range(smoothing_iterations):
            grid._smooth_once()
        log.debug(
            "Generated %dx%d terrain (seed=%s, threshold=%.2f): land=%.1f%%",
            cols,
            rows,
            seed,
            ocean_threshold,
            grid.land_fraction * 100.0,
        )
        return grid

    @staticmethod
    def _resource_density(noise: FractalNoise, ii: np.ndarray, jj: np.ndarray) -> np.ndarray:
        rx = ii * config.RESOURCE_NOISE_SCALE
        ry = jj * config.RESOURCE_NOISE_SCALE
        density = np.zeros(ii.shape, dtype=np.float64)
        for frequency, offset, exponent, amplitude in config.RESOURCE_LAYERS:
            layer = noise(rx * frequency + offset, ry * frequency + offset)
            density = np.maximum(density, np.power(layer, exponent) * amplitude)
        return np.clip(density, 0.0, 1.0)

    def _smooth_once(self) -> None:
        land_f = self.land.astype(np.float64)
        land_neighbors = _neighbor_sum(land_f)
        ocean_neighbors = len(NEIGHBOR_OFFSETS) - land_neighbors
        neighbor_resources = _neighbor_sum(self.resources * land_f)

        grow = ~self.land & (land_neighbors > config.SMOOTHING_NEIGHBOR_LIMIT)
        erode = self.land & (ocean_neighbors > config.SMOOTHING_NEIGHBOR_LIMIT)

        with np.errstate(invalid="ignore", divide="ignore"):
            mean = np.where(
                land_neighbors > 0,
                neighbor_resources / np.maximum(land_neighbors, 1.0),
                config.SMOOTHING_DEFAULT_RESOURCE,
            )

        resources = self.resources.copy()
        resources[grow] = mean[grow]
        resources[erode] = 0.0
        land = self.land.copy()
        land[grow] = True
        land[erode] = False
        self.land = land
        self.resources = resources

    @property
    def width(self) -> float:
        return self.cols * self.cell_size

    @property
    def height(self) -> float:
        return self.rows * self.cell_size

    @property
    def land_fraction(self) -> float:
        return float(self.land.mean()) if self.land.size else 0.0

    def wrap_index(self, col: int, row: int) -> Tuple[int, int]:
        return col % self.cols, row % self.rows

    def cell_index(self, x: float, y: float) -> Tuple[int, int]:
        return self.wrap_index(int(math.floor(x / self.cell_size)), int(math.floor(y / self.cell_size)))

    def cell(self, col: int, row: int) -> TerrainCell:
        col, row = self.wrap_index(col, row)
        return TerrainCell(bool(self.land[col, row]), float(self.resources[col, row]))

    def terrain_at(self, x: float, y: float) -> TerrainCell:
        return self.cell(*self.cell_index(x, y))

    def is_land_at(self, x: float, y: float) -> bool:
        col, row = self.cell_index(x, y)
        return bool(self.land[col, row])

    def resource_at(self, x: float, y: float) -> float:
        col, row = self.cell_index(x, y)
        return float(self.resources[col, row])

    def cell_center(self, col: int, row: int) -> Tuple[float, float]:
        return col * self.cell_size + self.cell_size / 2.0, row * self.cell_size + self.cell_size / 2.0

    def find_land_position(
        self, rng: random.Random, attempts: int = config.LAND_SEARCH_ATTEMPTS
    ) -> Tuple[float, float]:
        for _ in range(attempts):
            col = rng.randrange(self.cols)
            row = rng.randrange(self.rows)
            if self.land[col, row]:
                return self.cell_center(col, row)
        return self.width / 2.0, self.height / 2.0
