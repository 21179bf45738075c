import numpy as np
import pytest
from gymnasium.utils.env_checker import check_env

from villagesim.forager_env import ForagerEnv
from villagesim.organism import STAY


def test_reset_observation():
    env = ForagerEnv()
    obs, info = env.reset(seed=0)
    assert obs.shape == (12,)
    assert obs.dtype == np.float32
    assert env.observation_space.contains(obs)
    assert info["energy"] == env.organism.energy
    env.close()


def test_reset_is_seeded():
    env = ForagerEnv()
    a, _ = env.reset(seed=3)
    b, _ = env.reset(seed=3)
    np.testing.assert_array_equal(a, b)


def test_step_reward_is_energy_change():
    env = ForagerEnv()
    env.reset(seed=1)
    before = env.organism.energy
    obs, reward, terminated, truncated, info = env.step(STAY)
    assert reward == pytest.approx(info["energy"] - before)
    assert not terminated
    assert not truncated
    assert env.observation_space.contains(obs)


def test_starvation_terminates():
    env = ForagerEnv()
    env.reset(seed=2)
    env.world.bushes.clear()
    env.organism.energy = 0.001
    _, _, terminated, truncated, _ = env.step(0)
    assert terminated
    assert not truncated


def test_truncates_at_max_steps():
    env = ForagerEnv(max_steps=3)
    env.reset(seed=4)
    results = [env.step(STAY) for _ in range(3)]
    assert [r[3] for r in results] == [False, False, True]


def test_invalid_action():
    env = ForagerEnv()
    env.reset(seed=0)
    with pytest.raises(ValueError):
        env.step(9)


def test_rgb_array_render():
    env = ForagerEnv(render_mode="rgb_array", render_scale=2)
    env.reset(seed=0)
    frame = env.render()
    terrain = env.world.terrain
    assert frame.shape == (terrain.rows * 2, terrain.cols * 2, 3)
    assert frame.dtype == np.uint8


def test_unknown_render_mode():
    with pytest.raises(ValueError):
        ForagerEnv(render_mode="ansi")


def test_passes_gymnasium_checker():
    check_env(ForagerEnv(), skip_render_check=True)


def test_action_into_ocean_keeps_position():
    env = ForagerEnv()
    env.reset(seed=5)
    org = env.organism
    terrain = env.world.terrain
    start = (org.x, org.y)
    col, row = terrain.cell_index(org.x + terrain.cell_size, org.y)
    terrain.land[col, row] = False
    east = 2
    env.step(east)
    assert (org.x, org.y) == start
    assert terrain.is_land_at(org.x, org.y)
