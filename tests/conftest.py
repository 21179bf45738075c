import logging
import random

import numpy as np
import pytest

from villagesim.logger import LOGGER_NAME
from villagesim.terrain import TerrainGrid
from villagesim.world import World


def make_terrain(cols=20, rows=20, cell_size=5, density=0.5, land=None):
    if land is None:
        land = np.ones((cols, rows), dtype=bool)
    resources = np.where(land, density, 0.0)
    return TerrainGrid(land, resources, cell_size=cell_size)


@pytest.fixture
def land_terrain():
    return make_terrain()


@pytest.fixture
def empty_world(land_terrain):
    """All-land 100x100 world with no agents or resource nodes."""
    return World(land_terrain, random.Random(7), food_count=0, wood_count=0, bush_count=0)


@pytest.fixture
def small_world():
    return World.create(seed=3, width=150, height=150, citizens=4, organisms=1)


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    log = logging.getLogger(LOGGER_NAME)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.setLevel(logging.NOTSET)
