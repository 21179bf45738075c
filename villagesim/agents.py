"""Citizen model: needs, motivation scoring and behaviors."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Deque, Dict, Optional, Tuple
import math
import random

import numpy as np

from . import config
from .logger import log
from .resources import Food, House, Wood
from .steering import integrate, magnitude, seek, vec, wander

if TYPE_CHECKING:
    from .world import World


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def clamp01(x: float) -> float:
    return clamp(x, 0.0, 1.0)


def lerp_ratio(value: float, start: float, end: float) -> float:
    """Position of ``value`` between ``start`` and ``end``, clamped to [0, 1]."""
    if end == start:
        return 1.0 if value >= end else 0.0
    return clamp01((value - start) / (end - start))


class Behavior(str, Enum):
    IDLE = "idle"
    RESTING = "resting"
    EXERCISING = "exercising"
    SEEKING_FOOD = "seeking_food"
    COLLECTING_WOOD = "collecting_wood"
    CONSTRUCTING = "constructing"
    DEAD = "dead"


class DeathCause(str, Enum):
    STARVATION = "starvation"
    BOREDOM = "boredom"


MOTIVATION_BEHAVIORS: Dict[str, Behavior] = {
    "rest": Behavior.RESTING,
    "exercise": Behavior.EXERCISING,
    "seek_food": Behavior.SEEKING_FOOD,
    "collect_wood": Behavior.COLLECTING_WOOD,
    "build_house": Behavior.CONSTRUCTING,
    "idle": Behavior.IDLE,
}
BEHAVIOR_MOTIVATIONS: Dict[Behavior, str] = {b: name for name, b in MOTIVATION_BEHAVIORS.items()}


def select_behavior(
    current: str,
    scores: Dict[str, float],
    hysteresis_bonus: float = config.HYSTERESIS_BONUS,
    change_threshold: float = config.CHANGE_THRESHOLD,
) -> str:
    """Pick the winning motivation, keeping ``current`` unless clearly beaten."""
    if current not in scores:
        return max(scores.items(), key=lambda kv: kv[1])[0] if scores else "idle"
    incumbent = scores[current] + hysteresis_bonus
    best_name = current
    best_score = incumbent
    for name, score in scores.items():
        if name == current:
            continue
        if score > incumbent + change_threshold and score > best_score:
            best_name = name
            best_score = score
    return best_name


@dataclass(eq=False)
class Citizen:
    id: int
    x: float
    y: float
    energy: float = 50.0
    fullness: float = 50.0
    boredom: float = 0.0
    size: float = config.CITIZEN_SIZE
    max_speed: float = config.CITIZEN_MAX_SPEED
    max_force: float = config.CITIZEN_MAX_FORCE
    perception: float = config.CITIZEN_PERCEPTION
    max_boredom: float = config.MAX_BOREDOM
    energy_decay_rate: float = config.ENERGY_DECAY_RATE
    boredom_increase_rate: float = config.BOREDOM_INCREASE_RATE
    rest_threshold: float = config.REST_THRESHOLD
    rest_recovery_rate: float = config.REST_RECOVERY_RATE
    wood_capacity: int = config.CITIZEN_WOOD_CAPACITY
    decision_interval: int = config.DECISION_INTERVAL
    history_length: int = config.CITIZEN_HISTORY_LENGTH
    behavior: Behavior = Behavior.IDLE
    forced_rest: bool = False
    wood: int = 0
    house: Optional[House] = None
    target: Optional[Any] = None
    motivation_scores: Dict[str, float] = field(default_factory=dict)
    age: int = 0
    death_timer: int = 0
    death_cause: Optional[DeathCause] = None
    pos: np.ndarray = field(init=False, repr=False)
    vel: np.ndarray = field(init=False, repr=False)
    acc: np.ndarray = field(init=False, repr=False)
    history: Deque[Tuple[float, float]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.pos = vec(self.x, self.y)
        self.vel = vec()
        self.acc = vec()
        self.history = deque(maxlen=max(1, self.history_length))
        self._decision_clock = max(1, self.decision_interval) - 1

    @classmethod
    def random(cls, agent_id: int, x: float, y: float, rng: random.Random, **overrides: Any) -> "Citizen":
        params: Dict[str, Any] = {
            "energy": rng.uniform(*config.INITIAL_ENERGY_RANGE),
            "fullness": rng.uniform(*config.INITIAL_FULLNESS_RANGE),
            "boredom": rng.uniform(*config.INITIAL_BOREDOM_RANGE),
        }
        params.update(overrides)
        return cls(id=agent_id, x=x, y=y, **params)

    # ------------------------------------------------------------------ state

    @property
    def is_dead(self) -> bool:
        return self.behavior is Behavior.DEAD

    @property
    def is_resting(self) -> bool:
        return self.behavior is Behavior.RESTING

    @property
    def speed(self) -> float:
        return magnitude(self.vel)

    @property
    def death_animation_done(self) -> bool:
        return self.is_dead and self.death_timer >= config.DEATH_ANIMATION_TICKS

    def _sync_xy(self) -> None:
        self.x = float(self.pos[0])
        self.y = float(self.pos[1])

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(x - self.pos[0], y - self.pos[1])

    # ------------------------------------------------------------------- tick

    def update(self, world: "World") -> None:
        self.age += 1
        if self.is_dead:
            self.death_timer = min(self.death_timer + 1, config.DEATH_ANIMATION_TICKS)
            return
        if self.energy <= 0.0:
            self.die(DeathCause.STARVATION)
            return

        self._metabolize()
        if self.energy <= 0.0:
            self.die(DeathCause.STARVATION)
            return
        self._update_rest()
        self._update_boredom()

        if self.energy <= 0.0:
            self.die(DeathCause.STARVATION)
            return
        if self.boredom >= self.max_boredom:
            self.die(DeathCause.BOREDOM)
            return

        if not self.forced_rest:
            self._decision_clock += 1
            if self._decision_clock >= self.decision_interval:
                self._decision_clock = 0
                self.decide()

        self._run_behavior(world)
        if not self.is_resting:
            self._move(world)
        self.history.append((self.x, self.y))

    def _metabolize(self) -> None:
        self.energy -= self.energy_decay_rate
        if self.fullness > 0.0:
            digested = min(config.DIGESTION_RATE, self.fullness)
            self.fullness -= digested
            self.energy += digested * config.DIGESTION_EFFICIENCY
        self.fullness = clamp(self.fullness, 0.0, config.FULLNESS_MAX)
        self.energy = clamp(self.energy, 0.0, config.ENERGY_MAX)

    def _update_rest(self) -> None:
        if self.energy < self.rest_threshold:
            if not self.is_resting:
                self._switch(Behavior.RESTING)
            self.forced_rest = True
        if not self.is_resting:
            return

        self.vel[:] = 0.0
        self.energy += self.rest_recovery_rate
        if self.fullness > 0.0:
            bonus = min(config.REST_DIGESTION_BONUS, self.fullness)
            self.fullness -= bonus
            self.energy += bonus * config.REST_DIGESTION_EFFICIENCY
        self.fullness = clamp(self.fullness, 0.0, config.FULLNESS_MAX)
        self.energy = clamp(self.energy, 0.0, config.ENERGY_MAX)

        if self.forced_rest and self.energy > self.rest_threshold * config.REST_EXIT_MULTIPLIER:
            self._switch(Behavior.IDLE)

    def _update_boredom(self) -> None:
        speed = self.speed
        if speed < config.BOREDOM_MOVING_SPEED:
            self.boredom += self.boredom_increase_rate
        else:
            self.boredom -= speed * config.BOREDOM_DECAY_FACTOR
        self.boredom = clamp(self.boredom, 0.0, self.max_boredom)

    def die(self, cause: DeathCause) -> None:
        if self.is_dead:
            return
        self._release_claims()
        if self.house is not None and not self.house.is_complete:
            self.house.release_owner(self)
            self.house = None
        self.behavior = Behavior.DEAD
        self.death_cause = cause
        self.forced_rest = False
        self.target = None
        self.vel[:] = 0.0
        self.acc[:] = 0.0
        log.info("Citizen %d died of %s at age %d", self.id, cause.value, self.age)

    # -------------------------------------------------------------- decisions

    def compute_motivations(self) -> Dict[str, float]:
        return {
            "rest": self._rest_score(),
            "exercise": self._exercise_score(),
            "seek_food": self._seek_food_score(),
            "collect_wood": self._collect_wood_score(),
            "build_house": self._build_house_score(),
            "idle": config.IDLE_SCORE,
        }

    def _rest_score(self) -> float:
        if self.energy < self.rest_threshold:
            return config.REST_SCORE_FORCED
        return config.REST_SCORE_MAX * (1.0 - lerp_ratio(self.energy, 0.0, config.ENERGY_MAX))

    def _exercise_score(self) -> float:
        if self.energy < config.EXERCISE_MIN_ENERGY:
            return 0.0
        return config.EXERCISE_SCORE_MAX * lerp_ratio(self.boredom, config.EXERCISE_BOREDOM_START, self.max_boredom)

    def _seek_food_score(self) -> float:
        if self.fullness >= config.FULLNESS_MAX:
            return 0.0
        score = config.SEEK_FOOD_SCORE_MAX * (1.0 - lerp_ratio(self.fullness, 0.0, config.FULLNESS_MAX))
        if self.fullness < config.HUNGRY_FULLNESS:
            score += config.HUNGRY_BONUS
        return score

    def _owns_incomplete_house(self) -> bool:
        return self.house is not None and not self.house.is_complete

    def _collect_wood_score(self) -> float:
        if self.wood >= self.wood_capacity:
            return 0.0
        emptiness = 1.0 - lerp_ratio(self.wood, 0.0, self.wood_capacity)
        score = config.COLLECT_WOOD_SCORE_MIN + (config.COLLECT_WOOD_SCORE_MAX - config.COLLECT_WOOD_SCORE_MIN) * emptiness
        if self._owns_incomplete_house():
            score += config.COLLECT_WOOD_HOUSE_BONUS
        if self.fullness < config.HUNGRY_FULLNESS or self.energy < config.TIRED_ENERGY:
            score -= config.COLLECT_WOOD_TIRED_PENALTY
        return max(0.0, score)

    def _build_house_score(self) -> float:
        if self.house is not None and self.house.is_complete:
            return 0.0
        if self.wood <= 0:
            return 0.0
        score = config.BUILD_HOUSE_BASE + config.BUILD_HOUSE_WOOD_BONUS * lerp_ratio(self.wood, 0.0, self.wood_capacity)
        if self._owns_incomplete_house():
            score += config.BUILD_HOUSE_PROGRESS_BONUS
        return score

    def decide(self) -> Behavior:
        self.motivation_scores = self.compute_motivations()
        current = BEHAVIOR_MOTIVATIONS.get(self.behavior, "idle")
        winner = MOTIVATION_BEHAVIORS[select_behavior(current, self.motivation_scores)]
        if winner is not self.behavior:
            self._switch(winner)
        return self.behavior

    def _switch(self, behavior: Behavior) -> None:
        self._release_claims()
        self.target = None
        self.forced_rest = False
        self.behavior = behavior

    def _release_claims(self) -> None:
        if isinstance(self.target, Wood):
            self.target.release(self.id)

    # -------------------------------------------------------------- behaviors

    def _run_behavior(self, world: "World") -> None:
        if self.behavior is Behavior.RESTING:
            self._do_rest()
        elif self.behavior is Behavior.EXERCISING:
            self._do_exercise()
        elif self.behavior is Behavior.SEEKING_FOOD:
            self._do_seek_food(world)
        elif self.behavior is Behavior.COLLECTING_WOOD:
            self._do_collect_wood(world)
        elif self.behavior is Behavior.CONSTRUCTING:
            self._do_build_house(world)
        else:
            self._do_idle()

    def _steer_to(self, x: float, y: float) -> None:
        self.acc += seek(self.pos, self.vel, vec(x, y), self.max_speed, self.max_force)

    def _wander(self, world: "World") -> None:
        target = self.target
        if not isinstance(target, np.ndarray) or self.distance_to(target[0], target[1]) < config.TARGET_REACHED_DISTANCE:
            target = wander(self.pos, world.width, world.height, world.rng)
            for _ in range(config.WANDER_LAND_ATTEMPTS):
                if world.terrain.is_land_at(target[0], target[1]):
                    break
                target = wander(self.pos, world.width, world.height, world.rng)
            self.target = target
        self._steer_to(target[0], target[1])

    def _do_rest(self) -> None:
        self.vel[:] = 0.0
        self.target = None

    def _do_idle(self) -> None:
        self.target = None
        self.vel *= 0.95

    def _do_exercise(self) -> None:
        angle = self.age * config.EXERCISE_ANGULAR_SPEED
        orbit = self.pos + vec(math.cos(angle), math.sin(angle)) * config.EXERCISE_RADIUS
        self.target = orbit
        self._steer_to(orbit[0], orbit[1])
        self.boredom = max(0.0, self.boredom - config.EXERCISE_BOREDOM_DECAY)
        self.energy = max(0.0, self.energy - config.EXERCISE_ENERGY_COST)

    def _do_seek_food(self, world: "World") -> None:
        food = self.target if isinstance(self.target, Food) else None
        if food is not None and (food.is_depleted() or not world.contains(world.foods, food)):
            food = None
            self.target = None
        if food is None:
            food = world.nearest(world.foods, self.x, self.y, self.perception, lambda f: not f.is_depleted())
            if food is not None:
                self.target = food
        if food is None:
            self._wander(world)
            return

        if self.distance_to(food.x, food.y) < (self.size + food.size) / 2.0:
            self.fullness = clamp(self.fullness + food.eat(), 0.0, config.FULLNESS_MAX)
            self.target = None
            return
        self._steer_to(food.x, food.y)

    def _wood_available(self, wood: Wood) -> bool:
        return not wood.is_depleted() and wood.collector_id in (None, self.id)

    def _do_collect_wood(self, world: "World") -> None:
        if self.wood >= self.wood_capacity:
            self._release_claims()
            self.target = None
            return
        wood = self.target if isinstance(self.target, Wood) else None
        if wood is not None and not (self._wood_available(wood) and world.contains(world.woods, wood)):
            wood.release(self.id)
            wood = None
            self.target = None
        if wood is None:
            wood = world.nearest(world.woods, self.x, self.y, self.perception, self._wood_available)
            if wood is not None:
                self.target = wood
        if wood is None:
            self._wander(world)
            return

        if self.distance_to(wood.x, wood.y) > config.COLLECT_DISTANCE:
            self._steer_to(wood.x, wood.y)
            return
        if not wood.try_claim(self.id):
            self.target = None
            return
        self.vel[:] = 0.0
        harvested = wood.update_collection(config.COLLECT_RATE)
        if harvested > 0:
            taken = min(harvested, self.wood_capacity - self.wood)
            self.wood += taken
            wood.return_wood(harvested - taken)
            self.target = None

    def _house_target(self, world: "World") -> Optional[House]:
        if self.house is not None and self.house.is_complete:
            return None
        if self.house is not None and world.contains(world.houses, self.house):
            return self.house
        candidate = world.nearest(
            world.houses,
            self.x,
            self.y,
            self.perception,
            lambda h: not h.is_complete and h.owner is None,
        )
        if candidate is not None:
            candidate.set_owner(self)
            self.house = candidate
            return candidate
        if self.house is None and self.wood >= config.NEW_HOUSE_MIN_WOOD:
            angle = world.rng.uniform(0.0, 2.0 * math.pi)
            offset = world.rng.uniform(*config.NEW_HOUSE_OFFSET)
            hx = clamp(self.x + math.cos(angle) * offset, world.width * config.WANDER_INSET, world.width * (1.0 - config.WANDER_INSET))
            hy = clamp(self.y + math.sin(angle) * offset, world.height * config.WANDER_INSET, world.height * (1.0 - config.WANDER_INSET))
            return world.create_house(hx, hy, owner=self)
        return None

    def _do_build_house(self, world: "World") -> None:
        house = self._house_target(world)
        if house is None:
            self._wander(world)
            return
        self.target = house
        if self.distance_to(house.x, house.y) >= config.BUILD_DISTANCE:
            self._steer_to(house.x, house.y)
            return

        self.vel[:] = 0.0
        if self.wood > 0 and not house.is_complete:
            self.wood -= house.add_wood(min(config.BUILD_WOOD_PER_TICK, self.wood))
        if house.is_complete or self.wood <= 0:
            self.target = None

    # --------------------------------------------------------------- movement

    def _move(self, world: "World") -> None:
        self.energy = max(0.0, self.energy - self.speed * config.MOVEMENT_ENERGY_COST)
        self.pos, self.vel = integrate(self.pos, self.vel, self.acc, self.max_speed, world.width, world.height)
        self.acc[:] = 0.0
        self._sync_xy()
