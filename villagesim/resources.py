"""Resource nodes the agents consume, collect and build with."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
import itertools

from . import config
from .logger import log


_house_ids = itertools.count(1)


@dataclass(eq=False)
class Food:
    x: float
    y: float
    nutrition: float
    size: float = config.FOOD_SIZE
    eaten: bool = False

    def eat(self) -> float:
        """Consume the whole item; later calls yield nothing."""
        if self.eaten:
            return 0.0
        self.eaten = True
        return self.nutrition

    def is_depleted(self) -> bool:
        return self.eaten


@dataclass(eq=False)
class Wood:
    x: float
    y: float
    amount: int
    size: float = config.WOOD_SIZE
    collect_progress: float = 0.0
    collector_id: Optional[int] = None

    @property
    def being_collected(self) -> bool:
        return self.collector_id is not None

    def try_claim(self, agent_id: int) -> bool:
        """Claim the pile for ``agent_id``; fails if someone else holds it."""
        if self.is_depleted():
            return False
        if self.collector_id is not None:
            return self.collector_id == agent_id
        self.collector_id = agent_id
        self.collect_progress = 0.0
        return True

    def start_collection(self, agent_id: int) -> bool:
        return self.try_claim(agent_id)

    def update_collection(self, progress: float) -> int:
        """Advance collection; returns the wood harvested when it completes."""
        if self.collector_id is None:
            return 0
        self.collect_progress += progress
        if self.collect_progress < config.COLLECTION_COMPLETE:
            return 0
        collected = min(self.amount, config.WOOD_HARVEST_MAX)
        self.amount -= collected
        self.cancel_collection()
        return collected

    def cancel_collection(self) -> None:
        self.collector_id = None
        self.collect_progress = 0.0

    def release(self, agent_id: int) -> None:
        if self.collector_id == agent_id:
            self.cancel_collection()

    def return_wood(self, amount: int) -> None:
        """Put back wood that a collector could not carry."""
        if amount < 0:
            raise ValueError(f"cannot return a negative amount of wood: {amount}")
        self.amount += amount

    def is_depleted(self) -> bool:
        return self.amount <= 0


@dataclass(eq=False)
class BerryBush:
    x: float
    y: float
    berries: float = config.BERRY_MAX
    size: float = config.BERRY_SIZE

    def update(self) -> None:
        if 0.0 < self.berries < config.BERRY_MAX:
            self.berries = min(config.BERRY_MAX, self.berries + config.BERRY_REGROW_RATE)

    def harvest(self, amount: float) -> float:
        harvested = max(0.0, min(amount, self.berries))
        self.berries -= harvested
        return harvested

    def is_depleted(self) -> bool:
        return self.berries <= 0.0


@dataclass(eq=False)
class House:
    x: float
    y: float
    wood_required: int = config.HOUSE_WOOD_REQUIRED
    size: float = config.HOUSE_SIZE
    wood_stored: int = 0
    construction_progress: float = 0.0
    is_complete: bool = False
    is_construction_site: bool = True
    # Non-owning; the world clears it when the owner dies before completion.
    owner: Optional[Any] = None
    id: int = field(default_factory=lambda: next(_house_ids))

    @property
    def wood_needed(self) -> int:
        return max(0, self.wood_required - self.wood_stored)

    def add_wood(self, amount: int) -> int:
        """Store up to ``amount`` wood and return how much was accepted."""
        if amount <= 0 or self.is_complete:
            return 0
        accepted = min(amount, self.wood_needed)
        self.wood_stored += accepted
        if self.is_construction_site and self.wood_stored >= config.HOUSE_SITE_WOOD:
            self.is_construction_site = False
        self._update_progress()
        return accepted

    def _update_progress(self) -> None:
        if self.wood_required <= 0:
            progress = 100.0
        else:
            progress = self.wood_stored / self.wood_required * 100.0
        self.construction_progress = max(self.construction_progress, min(100.0, progress))
        if self.construction_progress >= 100.0 and not self.is_complete:
            self.is_complete = True
            self.is_construction_site = False
            self.construction_progress = 100.0
            log.info("House %d at (%.0f, %.0f) completed", self.id, self.x, self.y)

    def set_owner(self, agent: Any) -> None:
        self.owner = agent

    def release_owner(self, agent: Any) -> None:
        if self.owner is agent:
            self.owner = None
