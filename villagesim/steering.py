"""Steering helpers shared by the mobile agents.

Vectors are numpy float arrays of shape ``(2,)``.
"""

from __future__ import annotations

from typing import Optional, Tuple
import math
import random

import numpy as np

from . import config


def vec(x: float = 0.0, y: float = 0.0) -> np.ndarray:
    return np.array([x, y], dtype=np.float64)


def magnitude(v: np.ndarray) -> float:
    return float(np.hypot(v[0], v[1]))


def limit(v: np.ndarray, max_mag: float) -> np.ndarray:
    mag = magnitude(v)
    if mag > max_mag and mag > 0.0:
        return v * (max_mag / mag)
    return v


def normalize(v: np.ndarray) -> np.ndarray:
    mag = magnitude(v)
    if mag == 0.0:
        return np.zeros(2, dtype=np.float64)
    return v / mag


def arrival_speed(
    distance: float,
    max_speed: float,
    arrival_radius: float = config.ARRIVAL_RADIUS,
    min_speed: float = config.ARRIVAL_MIN_SPEED,
) -> float:
    if distance >= arrival_radius:
        return max_speed
    return min_speed + (max_speed - min_speed) * (distance / arrival_radius)


def seek(
    pos: np.ndarray,
    vel: np.ndarray,
    target: np.ndarray,
    max_speed: float,
    max_force: float,
    arrival_radius: float = config.ARRIVAL_RADIUS,
    min_speed: float = config.ARRIVAL_MIN_SPEED,
) -> np.ndarray:
    """Steering force toward ``target``, slowing down inside the arrival radius."""
    desired = np.asarray(target, dtype=np.float64) - pos
    distance = magnitude(desired)
    if distance == 0.0:
        return limit(-vel, max_force)
    speed = arrival_speed(distance, max_speed, arrival_radius, min_speed)
    desired = desired / distance * speed
    return limit(desired - vel, max_force)


def wander(
    pos: np.ndarray,
    width: float,
    height: float,
    rng: random.Random,
    distance: float = config.WANDER_DISTANCE,
    inset: float = config.WANDER_INSET,
) -> np.ndarray:
    """Random point ``distance`` away, clamped inside the inset boundary."""
    angle = rng.uniform(0.0, 2.0 * math.pi)
    x = pos[0] + math.cos(angle) * distance
    y = pos[1] + math.sin(angle) * distance
    x = min(max(x, width * inset), width * (1.0 - inset))
    y = min(max(y, height * inset), height * (1.0 - inset))
    return vec(x, y)


def out_of_bounds(p: np.ndarray, width: float, height: float, inset: float = config.AVOID_INSET) -> bool:
    return (
        p[0] < width * inset
        or p[0] > width * (1.0 - inset)
        or p[1] < height * inset
        or p[1] > height * (1.0 - inset)
    )


def boundary_force(
    next_pos: np.ndarray,
    pos: np.ndarray,
    width: float,
    height: float,
    strength: float = config.CENTER_FORCE,
) -> Optional[np.ndarray]:
    """Push toward the world centre when ``next_pos`` leaves the inset area."""
    if not out_of_bounds(next_pos, width, height):
        return None
    center = vec(width / 2.0, height / 2.0)
    return normalize(center - pos) * strength


def integrate(
    pos: np.ndarray,
    vel: np.ndarray,
    acc: np.ndarray,
    max_speed: float,
    width: float,
    height: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Apply acceleration, boundary avoidance and speed limit; return ``(pos, vel)``."""
    new_vel = limit(vel + acc, max_speed)
    next_pos = pos + new_vel
    push = boundary_force(next_pos, pos, width, height)
    if push is not None:
        new_vel = limit(new_vel + push, max_speed)
        next_pos = pos + new_vel
    return next_pos, new_vel
