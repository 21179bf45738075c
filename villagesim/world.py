"""World state and the per-tick update."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar
import math
import random

from . import config
from .agents import Citizen, DeathCause, clamp
from .logger import log
from .organism import Organism
from .resources import BerryBush, Food, House, Wood
from .terrain import TerrainGrid

T = TypeVar("T")


@dataclass
class StepStats:
    tick: int
    citizens: int
    citizens_alive: int
    organisms_alive: int
    deaths_starvation: int
    deaths_boredom: int
    organism_deaths: int
    foods: int
    woods: int
    bushes: int
    houses: int
    houses_complete: int
    wood_carried: int
    avg_energy: float
    avg_fullness: float
    avg_boredom: float
    organism_energy: float


class World:
    def __init__(
        self,
        terrain: TerrainGrid,
        rng: random.Random,
        food_count: int = config.FOOD_COUNT,
        wood_count: int = config.WOOD_COUNT,
        bush_count: int = config.BERRY_BUSH_COUNT,
    ) -> None:
        self.terrain = terrain
        self.rng = rng
        self.food_count = food_count
        self.wood_count = wood_count
        self.bush_count = bush_count
        self.citizens: List[Citizen] = []
        self.organisms: List[Organism] = []
        self.foods: List[Food] = []
        self.woods: List[Wood] = []
        self.bushes: List[BerryBush] = []
        self.houses: List[House] = []
        self.tick = 0
        self.next_id = 1
        # requested extent; the terrain covers whole cells only
        self.extent = (terrain.width, terrain.height)

    @classmethod
    def create(
        cls,
        seed: Optional[int] = None,
        width: float = config.WORLD_WIDTH,
        height: float = config.WORLD_HEIGHT,
        cell_size: float = config.CELL_SIZE,
        ocean_threshold: float = config.OCEAN_THRESHOLD,
        citizens: int = config.INITIAL_CITIZENS,
        organisms: int = config.INITIAL_ORGANISMS,
        food_count: int = config.FOOD_COUNT,
        wood_count: int = config.WOOD_COUNT,
        bush_count: int = config.BERRY_BUSH_COUNT,
    ) -> "World":
        """Generate terrain and populate it."""
        if width <= 0 or height <= 0:
            raise ValueError(f"world size must be positive, got {width}x{height}")
        rng = random.Random(seed)
        if seed is None:
            seed = rng.randrange(2**31)
        terrain = cls._build_terrain(seed, width, height, cell_size, ocean_threshold)
        world = cls(terrain, rng, food_count=food_count, wood_count=wood_count, bush_count=bush_count)
        world.extent = (width, height)
        world.populate(citizens, organisms)
        return world

    @staticmethod
    def _build_terrain(
        seed: int, width: float, height: float, cell_size: float, ocean_threshold: float
    ) -> TerrainGrid:
        if cell_size < 1:
            raise ValueError(f"cell_size must be at least 1, got {cell_size}")
        cols = max(1, int(width // cell_size))
        rows = max(1, int(height // cell_size))
        return TerrainGrid.generate(seed, cols, rows, ocean_threshold=ocean_threshold, cell_size=cell_size)

    @property
    def width(self) -> float:
        return self.terrain.width

    @property
    def height(self) -> float:
        return self.terrain.height

    def populate(self, citizens: int, organisms: int) -> None:
        for _ in range(self.food_count):
            self.generate_food()
        for _ in range(self.wood_count):
            self.generate_wood()
        for _ in range(self.bush_count):
            self.spawn_berry_bush()
        for _ in range(citizens):
            self.spawn_citizen()
        for _ in range(organisms):
            self.spawn_organism()
        log.info(
            "World populated: %d citizens, %d organisms, %d food, %d wood, %d bushes (land %.1f%%)",
            len(self.citizens),
            len(self.organisms),
            len(self.foods),
            len(self.woods),
            len(self.bushes),
            self.terrain.land_fraction * 100.0,
        )

    def _take_id(self) -> int:
        agent_id = self.next_id
        self.next_id += 1
        return agent_id

    # ------------------------------------------------------------- factories

    def spawn_citizen(self, x: Optional[float] = None, y: Optional[float] = None, **overrides) -> Citizen:
        if x is None or y is None:
            x, y = self.terrain.find_land_position(self.rng)
        citizen = Citizen.random(self._take_id(), x, y, self.rng, **overrides)
        self.citizens.append(citizen)
        return citizen

    def spawn_organism(self, x: Optional[float] = None, y: Optional[float] = None, **overrides) -> Organism:
        if x is None or y is None:
            x, y = self.terrain.find_land_position(self.rng)
        organism = Organism(self._take_id(), x, y, **overrides)
        self.organisms.append(organism)
        return organism

    def generate_food(self) -> Food:
        x, y = self.terrain.find_land_position(self.rng)
        density = self.terrain.resource_at(x, y)
        nutrition = self.rng.uniform(*config.FOOD_NUTRITION_RANGE) * (0.5 + 0.5 * density)
        food = Food(x, y, nutrition)
        self.foods.append(food)
        return food

    def generate_wood(self) -> Wood:
        x, y = self.terrain.find_land_position(self.rng)
        wood = Wood(x, y, self.rng.randint(*config.WOOD_AMOUNT_RANGE))
        self.woods.append(wood)
        return wood

    def spawn_berry_bush(self) -> Optional[BerryBush]:
        """Place a bush on land away from the others; None when no spot was found."""
        if len(self.bushes) >= config.MAX_BERRY_BUSHES:
            return None
        spacing = config.BERRY_SIZE * config.BERRY_SPACING_FACTOR
        for _ in range(config.BERRY_SPAWN_ATTEMPTS):
            col = self.rng.randrange(self.terrain.cols)
            row = self.rng.randrange(self.terrain.rows)
            if not self.terrain.land[col, row]:
                continue
            x, y = self.terrain.cell_center(col, row)
            if self.nearest(self.bushes, x, y, spacing) is not None:
                continue
            bush = BerryBush(x, y)
            self.bushes.append(bush)
            return bush
        return None

    def create_house(self, x: float, y: float, owner: Optional[Citizen] = None) -> House:
        house = House(x, y)
        if owner is not None:
            house.set_owner(owner)
            owner.house = house
        self.houses.append(house)
        log.debug("House %d placed at (%.0f, %.0f)", house.id, x, y)
        return house

    # --------------------------------------------------------------- queries

    @staticmethod
    def contains(items: Iterable[object], obj: object) -> bool:
        return any(item is obj for item in items)

    @staticmethod
    def nearest(
        items: Sequence[T],
        x: float,
        y: float,
        radius: Optional[float] = None,
        predicate: Optional[Callable[[T], bool]] = None,
    ) -> Optional[T]:
        """Closest item to ``(x, y)`` within ``radius`` that passes ``predicate``."""
        best = None
        best_dist = math.inf if radius is None else radius
        for item in items:
            if predicate is not None and not predicate(item):
                continue
            dist = math.hypot(item.x - x, item.y - y)
            if dist < best_dist:
                best = item
                best_dist = dist
        return best

    # ---------------------------------------------------------------- update

    def regenerate(
        self,
        seed: Optional[int] = None,
        ocean_threshold: Optional[float] = None,
        cell_size: Optional[float] = None,
    ) -> None:
        """Rebuild the terrain and repopulate with the same head counts."""
        if seed is None:
            seed = self.rng.randrange(2**31)
        if ocean_threshold is None:
            ocean_threshold = config.OCEAN_THRESHOLD
        if cell_size is None:
            cell_size = self.terrain.cell_size
        ocean_threshold = clamp(ocean_threshold, config.OCEAN_THRESHOLD_MIN, config.OCEAN_THRESHOLD_MAX)
        cell_size = clamp(cell_size, config.CELL_SIZE_MIN, config.CELL_SIZE_MAX)

        citizens = len(self.citizens)
        organisms = len(self.organisms)
        width, height = self.extent
        self.terrain = self._build_terrain(seed, width, height, cell_size, ocean_threshold)
        self.citizens.clear()
        self.organisms.clear()
        self.foods.clear()
        self.woods.clear()
        self.bushes.clear()
        self.houses.clear()
        self.tick = 0
        log.info("Regenerated terrain (seed=%d, threshold=%.2f, cell=%s)", seed, ocean_threshold, cell_size)
        self.populate(citizens, organisms)

    def step(self) -> StepStats:
        self.tick += 1
        deaths_starvation = 0
        deaths_boredom = 0
        organism_deaths = 0

        for bush in self.bushes:
            bush.update()

        for citizen in self.citizens:
            was_dead = citizen.is_dead
            citizen.update(self)
            if citizen.is_dead and not was_dead:
                if citizen.death_cause is DeathCause.BOREDOM:
                    deaths_boredom += 1
                else:
                    deaths_starvation += 1

        for organism in self.organisms:
            was_dead = organism.is_dead
            organism.update(self)
            if organism.is_dead and not was_dead:
                organism_deaths += 1

        self._replenish()

        self.citizens = [c for c in self.citizens if not c.death_animation_done]
        self.organisms = [o for o in self.organisms if not o.death_animation_done]

        return self._collect_stats(deaths_starvation, deaths_boredom, organism_deaths)

    def _replenish(self) -> None:
        self.foods = [food for food in self.foods if not food.is_depleted()]
        while len(self.foods) < self.food_count:
            self.generate_food()

        felled = [wood for wood in self.woods if wood.is_depleted()]
        if felled:
            self.woods = [wood for wood in self.woods if not wood.is_depleted()]
            log.debug("Tick %d: %d wood piles exhausted", self.tick, len(felled))
        while len(self.woods) < self.wood_count:
            self.generate_wood()

        self.bushes = [bush for bush in self.bushes if not bush.is_depleted()]
        if self.rng.random() < config.BERRY_SPAWN_CHANCE:
            self.spawn_berry_bush()

    def _collect_stats(self, deaths_starvation: int, deaths_boredom: int, organism_deaths: int) -> StepStats:
        alive = [c for c in self.citizens if not c.is_dead]
        organisms = [o for o in self.organisms if not o.is_dead]
        count = len(alive)
        return StepStats(
            tick=self.tick,
            citizens=len(self.citizens),
            citizens_alive=count,
            organisms_alive=len(organisms),
            deaths_starvation=deaths_starvation,
            deaths_boredom=deaths_boredom,
            organism_deaths=organism_deaths,
            foods=len(self.foods),
            woods=len(self.woods),
            bushes=len(self.bushes),
            houses=len(self.houses),
            houses_complete=sum(1 for h in self.houses if h.is_complete),
            wood_carried=sum(c.wood for c in alive),
            avg_energy=sum(c.energy for c in alive) / count if count else 0.0,
            avg_fullness=sum(c.fullness for c in alive) / count if count else 0.0,
            avg_boredom=sum(c.boredom for c in alive) / count if count else 0.0,
            organism_energy=sum(o.energy for o in organisms) / len(organisms) if organisms else 0.0,
        )
