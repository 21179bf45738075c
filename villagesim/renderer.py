"""Rendering utilities for the village world."""

from __future__ import annotations

from typing import Dict, Iterable, Tuple
import math

import numpy as np

from .world import World


OCEAN_CHAR = "~"
# land characters by increasing resource density
LAND_CHARS = ".,:;#"

OCEAN_COLOR = (30, 60, 140)
LAND_POOR_COLOR = (170, 160, 110)
LAND_RICH_COLOR = (40, 140, 50)

FOOD_COLOR = (230, 200, 40)
WOOD_COLOR = (110, 70, 30)
BERRY_COLOR = (200, 40, 120)
HOUSE_COLOR = (230, 230, 230)
SITE_COLOR = (150, 150, 150)
CITIZEN_COLOR = (220, 60, 60)
DEAD_COLOR = (60, 60, 60)
ORGANISM_COLOR = (250, 250, 80)


def _markers(world: World) -> Iterable[Tuple[float, float, str, Tuple[int, int, int]]]:
    """Drawable entities, later ones painted over earlier ones."""
    for food in world.foods:
        yield food.x, food.y, "f", FOOD_COLOR
    for wood in world.woods:
        yield wood.x, wood.y, "W", WOOD_COLOR
    for bush in world.bushes:
        yield bush.x, bush.y, "b", BERRY_COLOR
    for house in world.houses:
        if house.is_complete:
            yield house.x, house.y, "H", HOUSE_COLOR
        else:
            yield house.x, house.y, "h", SITE_COLOR
    for citizen in world.citizens:
        if citizen.is_dead:
            yield citizen.x, citizen.y, "x", DEAD_COLOR
        else:
            yield citizen.x, citizen.y, "C", CITIZEN_COLOR
    for organism in world.organisms:
        yield organism.x, organism.y, "x" if organism.is_dead else "o", ORGANISM_COLOR


def render_ascii(world: World, max_width: int = 120, max_height: int = 60) -> str:
    terrain = world.terrain
    scale_x = max(1, int(math.ceil(terrain.cols / max_width)))
    scale_y = max(1, int(math.ceil(terrain.rows / max_height)))
    out_width = int(math.ceil(terrain.cols / scale_x))
    out_height = int(math.ceil(terrain.rows / scale_y))

    marker_map: Dict[Tuple[int, int], str] = {}
    for x, y, char, _color in _markers(world):
        col, row = terrain.cell_index(x, y)
        marker_map[(col // scale_x, row // scale_y)] = char

    lines = []
    for sy in range(out_height):
        row_chars = []
        row = min(terrain.rows - 1, sy * scale_y)
        for sx in range(out_width):
            col = min(terrain.cols - 1, sx * scale_x)
            if terrain.land[col, row]:
                level = int(terrain.resources[col, row] * (len(LAND_CHARS) - 1) + 0.5)
                char = LAND_CHARS[min(len(LAND_CHARS) - 1, max(0, level))]
            else:
                char = OCEAN_CHAR
            row_chars.append(marker_map.get((sx, sy), char))
        lines.append("".join(row_chars))
    return "\n".join(lines)


def render_frame(world: World, scale: int = 1) -> np.ndarray:
    """RGB image of shape ``(rows * scale, cols * scale, 3)``, one block per cell."""
    terrain = world.terrain
    scale = max(1, int(scale))
    poor = np.array(LAND_POOR_COLOR, dtype=np.float64)
    rich = np.array(LAND_RICH_COLOR, dtype=np.float64)

    # terrain arrays are [col, row]; images are [row, col]
    density = terrain.resources.T[..., None]
    land = terrain.land.T[..., None]
    image = np.where(land, poor + (rich - poor) * density, np.array(OCEAN_COLOR, dtype=np.float64))
    image = image.astype(np.uint8)

    for x, y, _char, color in _markers(world):
        col, row = terrain.cell_index(x, y)
        image[row, col] = color

    if scale > 1:
        image = np.repeat(np.repeat(image, scale, axis=0), scale, axis=1)
    return image


def render_ppm(world: World, path: str, scale: int = 4) -> None:
    image = render_frame(world, scale=scale)
    img_h, img_w = image.shape[:2]
    with open(path, "w", encoding="ascii") as handle:
        handle.write(f"P3\n{img_w} {img_h}\n255\n")
        for row in image:
            handle.write(" ".join(f"{r} {g} {b}" for r, g, b in row) + "\n")
