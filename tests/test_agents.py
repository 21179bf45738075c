import math

import numpy as np
import pytest

from villagesim import config
from villagesim.agents import (
    Behavior,
    Citizen,
    DeathCause,
    clamp,
    lerp_ratio,
    select_behavior,
)
from villagesim.resources import Food, Wood


def make_citizen(**kwargs):
    params = dict(id=1, x=50.0, y=50.0, energy=60.0, fullness=60.0, boredom=0.0)
    params.update(kwargs)
    return Citizen(**params)


def test_helpers():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert lerp_ratio(50, 0, 100) == 0.5
    assert lerp_ratio(150, 0, 100) == 1.0
    assert lerp_ratio(5, 10, 10) == 0.0


class TestSelectBehavior:
    def test_incumbent_kept_within_hysteresis(self):
        assert select_behavior("idle", {"idle": 10, "rest": 24}) == "idle"

    def test_clear_winner_switches(self):
        assert select_behavior("idle", {"idle": 10, "rest": 26}) == "rest"

    def test_best_challenger_wins(self):
        scores = {"idle": 10, "rest": 40, "seek_food": 60}
        assert select_behavior("idle", scores) == "seek_food"

    def test_unknown_current_takes_maximum(self):
        assert select_behavior("dead", {"idle": 10, "rest": 12}) == "rest"


class TestScores:
    def test_rest_forced_below_threshold(self):
        assert make_citizen(energy=5)._rest_score() == config.REST_SCORE_FORCED

    def test_exercise(self):
        assert make_citizen(energy=50, boredom=75)._exercise_score() == pytest.approx(45.0)
        assert make_citizen(energy=10, boredom=90)._exercise_score() == 0.0

    def test_seek_food_hungry_bonus(self):
        assert make_citizen(fullness=10)._seek_food_score() == pytest.approx(86.5)
        assert make_citizen(fullness=100)._seek_food_score() == 0.0

    def test_collect_wood(self):
        assert make_citizen()._collect_wood_score() == pytest.approx(65.0)
        assert make_citizen(wood=config.CITIZEN_WOOD_CAPACITY)._collect_wood_score() == 0.0
        assert make_citizen(fullness=10)._collect_wood_score() == pytest.approx(35.0)

    def test_build_house(self):
        assert make_citizen(wood=0)._build_house_score() == 0.0
        assert make_citizen(wood=10)._build_house_score() == pytest.approx(80.0)

    def test_all_motivations_present(self):
        scores = make_citizen().compute_motivations()
        assert set(scores) == {"rest", "exercise", "seek_food", "collect_wood", "build_house", "idle"}


def test_low_energy_forces_rest(empty_world):
    citizen = make_citizen(energy=5.0)
    citizen.vel[:] = (1.0, 0.5)
    citizen.update(empty_world)
    assert citizen.behavior is Behavior.RESTING
    assert citizen.forced_rest
    assert citizen.speed == 0.0
    assert citizen.energy > 5.0


def test_forced_rest_ends_above_exit_level(empty_world):
    citizen = make_citizen(energy=5.0)
    citizen.update(empty_world)
    for _ in range(2000):
        citizen.update(empty_world)
        if not citizen.forced_rest:
            break
    assert not citizen.forced_rest
    assert citizen.energy > config.REST_THRESHOLD * config.REST_EXIT_MULTIPLIER


def test_zero_energy_is_terminal(empty_world):
    citizen = make_citizen(energy=0.0)
    citizen.update(empty_world)
    assert citizen.is_dead
    assert citizen.death_cause is DeathCause.STARVATION
    position = (citizen.x, citizen.y)
    for _ in range(10):
        citizen.update(empty_world)
    assert citizen.behavior is Behavior.DEAD
    assert (citizen.x, citizen.y) == position
    assert citizen.death_timer == 10


def test_energy_running_out_kills_within_the_tick(empty_world):
    citizen = make_citizen(energy=0.005, fullness=0.0)
    citizen.update(empty_world)
    assert citizen.is_dead
    assert citizen.energy == 0.0


def test_boredom_death(empty_world):
    citizen = make_citizen(boredom=config.MAX_BOREDOM - 0.01)
    citizen.update(empty_world)
    assert citizen.is_dead
    assert citizen.death_cause is DeathCause.BOREDOM


def test_first_tick_decides(empty_world):
    citizen = make_citizen(fullness=5.0)
    citizen.update(empty_world)
    assert citizen.behavior is Behavior.SEEKING_FOOD
    assert citizen.motivation_scores


def test_hungry_citizen_eats_nearby_food(empty_world):
    food = Food(60.0, 50.0, nutrition=20.0)
    empty_world.foods.append(food)
    citizen = make_citizen(fullness=5.0)
    for _ in range(300):
        citizen.update(empty_world)
        if food.eaten:
            break
    assert food.eaten
    assert citizen.fullness > 20.0


def test_wood_is_gathered_and_conserved(empty_world):
    pile = Wood(55.0, 50.0, amount=5)
    empty_world.woods.append(pile)
    citizen = make_citizen()
    for _ in range(300):
        citizen.update(empty_world)
    assert pile.is_depleted()
    stored = sum(h.wood_stored for h in empty_world.houses)
    assert citizen.wood + stored == 5


def test_house_released_on_death(empty_world):
    citizen = make_citizen()
    house = empty_world.create_house(60.0, 60.0, owner=citizen)
    assert citizen.house is house
    assert house.owner is citizen
    citizen.die(DeathCause.STARVATION)
    assert house.owner is None
    assert citizen.house is None


def test_completed_house_keeps_owner(empty_world):
    citizen = make_citizen()
    house = empty_world.create_house(60.0, 60.0, owner=citizen)
    house.add_wood(house.wood_required)
    citizen.die(DeathCause.BOREDOM)
    assert house.owner is citizen


def test_wood_claim_released_on_death():
    citizen = make_citizen()
    pile = Wood(50.0, 50.0, amount=8)
    pile.try_claim(citizen.id)
    citizen.target = pile
    citizen.die(DeathCause.STARVATION)
    assert not pile.being_collected


def test_needs_stay_clamped(small_world):
    for _ in range(600):
        small_world.step()
        for c in small_world.citizens:
            assert 0.0 <= c.energy <= config.ENERGY_MAX
            assert 0.0 <= c.fullness <= config.FULLNESS_MAX
            assert 0.0 <= c.boredom <= c.max_boredom
            assert 0 <= c.wood <= c.wood_capacity
            if c.is_resting or c.is_dead:
                assert c.speed == 0.0


def test_history_is_bounded(empty_world):
    citizen = make_citizen(history_length=5)
    for _ in range(20):
        citizen.update(empty_world)
    assert len(citizen.history) == 5


def settled(citizen):
    """Keep the citizen on its current behaviour for the rest of the test."""
    citizen.decision_interval = 1000
    citizen._decision_clock = 0
    return citizen


def test_decisions_only_every_interval(empty_world, monkeypatch):
    citizen = make_citizen(fullness=5.0, decision_interval=5)
    decided_at = []
    decide = citizen.decide

    def recording_decide():
        decided_at.append(citizen.age)
        return decide()

    monkeypatch.setattr(citizen, "decide", recording_decide)
    citizen.update(empty_world)
    assert citizen.behavior is Behavior.SEEKING_FOOD
    citizen.fullness = 100.0
    for _ in range(4):
        citizen.update(empty_world)
        assert citizen.behavior is Behavior.SEEKING_FOOD
    citizen.update(empty_world)
    assert citizen.behavior is Behavior.COLLECTING_WOOD
    for _ in range(5):
        citizen.update(empty_world)
    assert decided_at == [1, 6, 11]


def test_exercise_orbits_and_costs_extra():
    citizen = make_citizen(boredom=80.0, behavior=Behavior.EXERCISING)
    citizen.age = 10
    citizen._do_exercise()
    angle = 10 * config.EXERCISE_ANGULAR_SPEED
    expected = [50.0 + math.cos(angle) * config.EXERCISE_RADIUS, 50.0 + math.sin(angle) * config.EXERCISE_RADIUS]
    np.testing.assert_allclose(citizen.target, expected)
    assert np.dot(citizen.acc, citizen.target - citizen.pos) > 0
    assert citizen.boredom == pytest.approx(80.0 - config.EXERCISE_BOREDOM_DECAY)
    assert citizen.energy == pytest.approx(60.0 - config.EXERCISE_ENERGY_COST)


def test_exercise_tick_versus_idle_tick(empty_world):
    exercising = settled(make_citizen(fullness=0.0, boredom=80.0, behavior=Behavior.EXERCISING))
    idle = settled(make_citizen(id=2, fullness=0.0, boredom=80.0))
    exercising.update(empty_world)
    idle.update(empty_world)
    assert idle.boredom == pytest.approx(80.0 + config.BOREDOM_INCREASE_RATE)
    assert exercising.boredom == pytest.approx(idle.boredom - config.EXERCISE_BOREDOM_DECAY)
    assert exercising.energy == pytest.approx(idle.energy - config.EXERCISE_ENERGY_COST)


def test_builder_with_enough_wood_places_a_house(empty_world):
    citizen = settled(make_citizen(wood=6, behavior=Behavior.CONSTRUCTING))
    citizen.update(empty_world)
    assert len(empty_world.houses) == 1
    house = empty_world.houses[0]
    assert house.owner is citizen
    assert citizen.house is house
    assert citizen.target is house
    assert citizen.wood + house.wood_stored == 6


def test_builder_without_wood_for_a_site_wanders(empty_world):
    citizen = settled(make_citizen(wood=config.NEW_HOUSE_MIN_WOOD - 1, behavior=Behavior.CONSTRUCTING))
    citizen.update(empty_world)
    assert empty_world.houses == []
    assert isinstance(citizen.target, np.ndarray)


def test_builder_delivers_one_wood_per_tick_in_range(empty_world):
    citizen = settled(make_citizen(wood=3, behavior=Behavior.CONSTRUCTING))
    house = empty_world.create_house(60.0, 50.0, owner=citizen)
    citizen.update(empty_world)
    assert citizen.wood == 2
    assert house.wood_stored == 1
    assert citizen.speed == 0.0
    citizen.update(empty_world)
    citizen.update(empty_world)
    assert citizen.wood == 0
    assert house.wood_stored == 3
    assert citizen.target is None


def test_builder_out_of_range_walks_first(empty_world):
    citizen = settled(make_citizen(wood=3, behavior=Behavior.CONSTRUCTING))
    house = empty_world.create_house(50.0 + config.BUILD_DISTANCE + 5.0, 50.0, owner=citizen)
    citizen.update(empty_world)
    assert citizen.wood == 3
    assert house.wood_stored == 0
    assert citizen.vel[0] > 0


def test_builder_claims_unowned_site(empty_world):
    citizen = settled(make_citizen(wood=3, behavior=Behavior.CONSTRUCTING))
    house = empty_world.create_house(60.0, 50.0)
    citizen.update(empty_world)
    assert house.owner is citizen
    assert citizen.house is house
    assert house.wood_stored == 1


def test_builder_lets_go_when_house_completes(empty_world):
    citizen = settled(make_citizen(wood=3, behavior=Behavior.CONSTRUCTING))
    house = empty_world.create_house(60.0, 50.0, owner=citizen)
    house.add_wood(house.wood_required - 1)
    citizen.update(empty_world)
    assert house.is_complete
    assert citizen.target is None
    assert citizen.wood == 2
    citizen.update(empty_world)
    assert citizen.wood == 2
    assert house.wood_stored == house.wood_required


def test_owner_of_complete_house_leaves_other_sites_alone(empty_world):
    citizen = settled(make_citizen(wood=3, behavior=Behavior.CONSTRUCTING))
    first = empty_world.create_house(60.0, 50.0, owner=citizen)
    first.add_wood(first.wood_required)
    second = empty_world.create_house(55.0, 55.0)
    citizen.update(empty_world)
    assert citizen.house is first
    assert second.owner is None
    assert second.wood_stored == 0
    assert citizen.wood == 3


def test_boundary_avoidance_turns_citizen_back(empty_world):
    citizen = settled(make_citizen(x=13.0))
    citizen.vel[:] = (-citizen.max_speed, 0.0)
    xs = []
    for _ in range(10):
        citizen.update(empty_world)
        xs.append(citizen.x)
    assert min(xs) > 10.0
    assert citizen.vel[0] > 0


def test_two_citizens_share_one_pile_in_turn(empty_world):
    pile = Wood(55.0, 50.0, amount=10)
    empty_world.woods.append(pile)
    first = settled(make_citizen(id=1, x=50.0, behavior=Behavior.COLLECTING_WOOD))
    second = settled(make_citizen(id=2, x=60.0, behavior=Behavior.COLLECTING_WOOD))
    first.update(empty_world)
    second.update(empty_world)
    assert pile.collector_id == 1
    assert second.target is not pile
    for _ in range(49):
        first.update(empty_world)
        assert pile.collector_id in (1, None)
        second.update(empty_world)
    assert first.wood == config.WOOD_HARVEST_MAX
    assert second.wood == 0
    assert pile.amount == 10 - config.WOOD_HARVEST_MAX


def test_wood_that_does_not_fit_stays_on_the_pile(empty_world):
    pile = Wood(55.0, 50.0, amount=10)
    empty_world.woods.append(pile)
    citizen = settled(make_citizen(wood=config.CITIZEN_WOOD_CAPACITY - 2, behavior=Behavior.COLLECTING_WOOD))
    for _ in range(60):
        citizen.update(empty_world)
    assert citizen.wood == citizen.wood_capacity
    assert pile.amount == 8
