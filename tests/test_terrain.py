import random

import numpy as np
import pytest

from villagesim.terrain import TerrainCell, TerrainGrid

from conftest import make_terrain


def test_generation_is_deterministic_per_seed():
    a = TerrainGrid.generate(42, 10, 10, ocean_threshold=0.45)
    b = TerrainGrid.generate(42, 10, 10, ocean_threshold=0.45)
    np.testing.assert_array_equal(a.land, b.land)
    np.testing.assert_array_equal(a.resources, b.resources)


def test_ocean_cells_hold_no_resources():
    grid = TerrainGrid.generate(9, 40, 30)
    assert grid.land.shape == (40, 30)
    assert np.all(grid.resources[~grid.land] == 0.0)
    assert np.all((grid.resources >= 0.0) & (grid.resources <= 1.0))


def test_threshold_extremes():
    assert TerrainGrid.generate(4, 20, 20, ocean_threshold=0.0).land.all()
    assert not TerrainGrid.generate(4, 20, 20, ocean_threshold=1.01).land.any()


def test_higher_threshold_means_less_land():
    low = TerrainGrid.generate(8, 60, 60, ocean_threshold=0.3)
    high = TerrainGrid.generate(8, 60, 60, ocean_threshold=0.6)
    assert high.land_fraction <= low.land_fraction


def test_invalid_dimensions():
    with pytest.raises(ValueError):
        TerrainGrid.generate(1, 0, 10)
    with pytest.raises(ValueError):
        TerrainGrid(np.ones((2, 2)), np.ones((3, 3)), cell_size=5)
    with pytest.raises(ValueError):
        TerrainGrid(np.ones((2, 2)), np.ones((2, 2)), cell_size=0)


def test_terrain_at_wraps_toroidally():
    land = np.zeros((10, 10), dtype=bool)
    land[0, 0] = True
    grid = make_terrain(10, 10, cell_size=5, density=0.7, land=land)

    assert grid.terrain_at(2, 2) == TerrainCell(True, 0.7)
    assert grid.terrain_at(52, 2) == grid.terrain_at(2, 2)
    assert grid.terrain_at(-48, -48) == grid.terrain_at(2, 2)
    assert grid.terrain_at(-3, 2) == grid.cell(9, 0)
    assert not grid.is_land_at(7, 2)


def test_smoothing_fills_enclosed_gap():
    land = np.ones((8, 8), dtype=bool)
    land[3, 3] = False
    resources = np.where(land, 0.6, 0.0)
    grid = TerrainGrid(land, resources, cell_size=5)
    grid._smooth_once()
    assert grid.land[3, 3]
    assert grid.resources[3, 3] == pytest.approx(0.6)


def test_smoothing_erodes_lone_cell():
    land = np.zeros((8, 8), dtype=bool)
    land[4, 4] = True
    grid = TerrainGrid(land, np.where(land, 0.9, 0.0), cell_size=5)
    grid._smooth_once()
    assert not grid.land.any()
    assert grid.resources[4, 4] == 0.0


def test_find_land_position():
    land = np.zeros((10, 10), dtype=bool)
    land[6, 2] = True
    grid = make_terrain(10, 10, cell_size=5, land=land)
    x, y = grid.find_land_position(random.Random(0), attempts=2000)
    assert grid.is_land_at(x, y)
    assert (x, y) == grid.cell_center(6, 2)


def test_find_land_position_falls_back_to_centre():
    grid = make_terrain(10, 10, cell_size=5, land=np.zeros((10, 10), dtype=bool))
    assert grid.find_land_position(random.Random(0)) == (25.0, 25.0)
