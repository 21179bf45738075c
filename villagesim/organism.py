"""Grid-stepping forager that follows resource gradients and berry bushes."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Sequence, Tuple
import math
import random

from . import config
from .agents import clamp
from .logger import log
from .resources import BerryBush

if TYPE_CHECKING:
    from .world import World


# (dx, dy, name); the last entry is "stay"
DIRECTIONS: Tuple[Tuple[int, int, str], ...] = (
    (0, -1, "N"),
    (1, -1, "NE"),
    (1, 0, "E"),
    (1, 1, "SE"),
    (0, 1, "S"),
    (-1, 1, "SW"),
    (-1, 0, "W"),
    (-1, -1, "NW"),
    (0, 0, "Stay"),
)
STAY = len(DIRECTIONS) - 1


def weighted_choice(weights: Sequence[float], rng: random.Random, fallback: int = STAY) -> int:
    """Index drawn proportionally to ``weights``.

    All-zero weights mean "stay"; ``fallback`` covers rounding fall-through.
    """
    total = sum(w for w in weights if w > 0.0)
    if total <= 0.0:
        return STAY
    threshold = rng.random() * total
    cumulative = 0.0
    for index, weight in enumerate(weights):
        if weight <= 0.0:
            continue
        cumulative += weight
        if threshold <= cumulative:
            return index
    return fallback


@dataclass(eq=False)
class Organism:
    id: int
    x: float
    y: float
    energy: float = config.ORGANISM_START_ENERGY
    max_energy: float = config.ORGANISM_MAX_ENERGY
    energy_loss: float = config.ORGANISM_ENERGY_LOSS
    size: float = config.ORGANISM_SIZE
    memory_duration: int = config.ORGANISM_MEMORY_DURATION
    movement_interval: int = config.ORGANISM_MOVEMENT_INTERVAL
    exploration_chance: float = config.EXPLORATION_CHANCE
    history_length: int = config.ORGANISM_HISTORY_LENGTH
    move_count: int = 0
    last_direction: Optional[int] = None
    berries_collected: float = 0.0
    dead: bool = False
    age: int = 0
    death_timer: int = 0
    visited: Dict[Tuple[int, int], int] = field(default_factory=dict)
    history: Deque[Tuple[float, float]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.history = deque(maxlen=max(1, self.history_length))
        self._move_clock = 0

    @property
    def is_dead(self) -> bool:
        return self.dead

    @property
    def death_animation_done(self) -> bool:
        return self.dead and self.death_timer >= config.DEATH_ANIMATION_TICKS

    def update(self, world: "World") -> None:
        self.age += 1
        if self.dead:
            self.death_timer = min(self.death_timer + 1, config.DEATH_ANIMATION_TICKS)
            return
        self.tick_energy(world)
        if self.dead:
            return
        self._move_clock += 1
        if self._move_clock >= self.movement_interval:
            self._move_clock = 0
            self.step(world)

    def tick_energy(self, world: "World") -> float:
        """Graze, harvest nearby berries and pay the upkeep; returns the energy change."""
        before = self.energy
        gained = world.terrain.resource_at(self.x, self.y) * config.ORGANISM_GRAZE_RATE
        bush = world.nearest(
            world.bushes, self.x, self.y, config.BERRY_HARVEST_DISTANCE, lambda b: not b.is_depleted()
        )
        if bush is not None:
            harvested = bush.harvest(config.BERRY_HARVEST_AMOUNT)
            self.berries_collected += harvested
            gained += harvested * config.BERRY_ENERGY
        self.energy = clamp(self.energy + gained - self.energy_loss, 0.0, self.max_energy)
        if self.energy <= 0.0:
            self.die()
        return self.energy - before

    def die(self) -> None:
        if self.dead:
            return
        self.dead = True
        log.info("Organism %d starved after %d moves", self.id, self.move_count)

    # --------------------------------------------------------------- movement

    def nearest_bush(self, world: "World") -> Tuple[Optional[BerryBush], float]:
        bush = world.nearest(world.bushes, self.x, self.y, None, lambda b: not b.is_depleted())
        if bush is None:
            return None, math.inf
        return bush, math.hypot(bush.x - self.x, bush.y - self.y)

    def direction_weights(self, world: "World") -> Tuple[List[float], List[int]]:
        terrain = world.terrain
        cell = terrain.cell_size
        current = terrain.resource_at(self.x, self.y)
        bush, bush_dist = self.nearest_bush(world)
        urgency = 5.0 - 4.0 * clamp(self.energy / self.max_energy, 0.0, 1.0) if self.max_energy > 0 else 5.0

        weights = [0.0] * len(DIRECTIONS)
        valid: List[int] = []
        for i, (dx, dy, _name) in enumerate(DIRECTIONS[:STAY]):
            nx = self.x + dx * cell
            ny = self.y + dy * cell
            if not terrain.is_land_at(nx, ny):
                continue
            seen = self.visited.get(terrain.cell_index(nx, ny))
            if seen is not None and self.move_count - seen < self.memory_duration / 2:
                weights[i] = config.RECENT_VISIT_WEIGHT
                continue
            valid.append(i)

            gain = terrain.resource_at(nx, ny) - current
            if gain > 0:
                weight = 1.0 + gain * config.GAIN_WEIGHT
            else:
                weight = 1.0 + gain * config.LOSS_WEIGHT

            if bush is not None and bush_dist > 0:
                alignment = math.cos(math.atan2(bush.y - self.y, bush.x - self.x) - math.atan2(dy, dx))
                if alignment > 0:
                    weight += alignment * config.BERRY_ALIGNMENT_WEIGHT * urgency
                if bush_dist < config.BERRY_HARVEST_DISTANCE * 1.5 and alignment > config.BERRY_CLOSE_ALIGNMENT:
                    weight += config.BERRY_CLOSE_BONUS

            if self.last_direction is not None and i == self.last_direction:
                weight *= config.MOMENTUM_BONUS
            weights[i] = max(config.MIN_MOVE_WEIGHT, weight)

        stay = config.STAY_WEIGHT
        if current < config.STAY_POOR_RESOURCE:
            stay *= config.STAY_POOR_FACTOR
        if bush is not None and bush_dist < config.BERRY_HARVEST_DISTANCE:
            stay = config.STAY_NEAR_BERRY_WEIGHT
        weights[STAY] = stay
        return weights, valid

    def choose_direction(self, world: "World") -> int:
        weights, valid = self.direction_weights(world)
        if not valid:
            return STAY
        if world.rng.random() < self.exploration_chance:
            return world.rng.choice(valid)
        return weighted_choice(weights, world.rng, fallback=valid[0])

    def _remember(self, world: "World") -> None:
        self.visited[world.terrain.cell_index(self.x, self.y)] = self.move_count
        stale = [key for key, seen in self.visited.items() if self.move_count - seen > self.memory_duration]
        for key in stale:
            del self.visited[key]

    def step(self, world: "World", direction: Optional[int] = None) -> int:
        """Make one grid move; picks a direction itself unless one is given.

        A move onto ocean turns into a stay. Returns the direction taken.
        """
        if direction is not None and not 0 <= direction < len(DIRECTIONS):
            raise ValueError(f"direction must be in [0, {STAY}], got {direction}")
        self.move_count += 1
        self._remember(world)
        if direction is None:
            direction = self.choose_direction(world)

        dx, dy, _name = DIRECTIONS[direction]
        cell = world.terrain.cell_size
        if direction != STAY and not world.terrain.is_land_at(self.x + dx * cell, self.y + dy * cell):
            direction = STAY
            dx, dy = 0, 0
        self.x = (self.x + dx * cell) % world.width
        self.y = (self.y + dy * cell) % world.height
        if direction != STAY:
            self.last_direction = direction
        self.history.appendleft((self.x, self.y))
        return direction
