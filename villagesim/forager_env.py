import numpy as np
import gymnasium as gym
from gymnasium import spaces

from . import config
from .organism import DIRECTIONS, STAY
from .renderer import render_frame
from .world import World


class ForagerEnv(gym.Env):
    """
    One organism foraging on generated terrain:
    - each action moves one grid cell (8 directions) or stays put
    - between moves the organism grazes, harvests nearby berries and burns energy
    - reward is the energy change over the move, episode ends on starvation
    Observation: resource density of the 3x3 neighbourhood (ocean = -1),
                 energy ratio, unit vector toward the nearest berry bush
    Actions: 0..7 = N, NE, E, SE, S, SW, W, NW; 8 = stay
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 15}

    def __init__(
        self,
        render_mode=None,
        width=200,
        height=200,
        cell_size=config.CELL_SIZE,
        ocean_threshold=config.OCEAN_THRESHOLD,
        bush_count=config.BERRY_BUSH_COUNT,
        ticks_per_move=config.ORGANISM_MOVEMENT_INTERVAL,
        max_steps=500,
        render_scale=3,
    ):
        super().__init__()
        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"unsupported render_mode {render_mode!r}")
        self.render_mode = render_mode
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.ocean_threshold = ocean_threshold
        self.bush_count = bush_count
        self.ticks_per_move = max(1, int(ticks_per_move))
        self.max_steps = max_steps
        self.render_scale = render_scale

        self.action_space = spaces.Discrete(len(DIRECTIONS))

        # 9 neighbourhood densities, energy ratio, bush direction (dx, dy)
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(12,), dtype=np.float32
        )

        self.world = None
        self.organism = None
        self._steps = 0

        # Pygame
        self._screen = None
        self._clock = None

    def _get_obs(self):
        terrain = self.world.terrain
        org = self.organism
        cell = terrain.cell_size

        densities = []
        for dx, dy, _name in DIRECTIONS:
            x = org.x + dx * cell
            y = org.y + dy * cell
            densities.append(terrain.resource_at(x, y) if terrain.is_land_at(x, y) else -1.0)

        bush, dist = org.nearest_bush(self.world)
        if bush is not None and dist > 0:
            direction = [(bush.x - org.x) / dist, (bush.y - org.y) / dist]
        else:
            direction = [0.0, 0.0]

        energy_ratio = org.energy / org.max_energy if org.max_energy > 0 else 0.0
        return np.array(densities + [energy_ratio] + direction, dtype=np.float32)

    def _get_info(self):
        return {
            "energy": self.organism.energy,
            "moves": self.organism.move_count,
            "berries": self.organism.berries_collected,
            "bushes": len(self.world.bushes),
        }

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)

        world_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.world = World.create(
            seed=world_seed,
            width=self.width,
            height=self.height,
            cell_size=self.cell_size,
            ocean_threshold=self.ocean_threshold,
            citizens=0,
            organisms=1,
            food_count=0,
            wood_count=0,
            bush_count=self.bush_count,
        )
        self.organism = self.world.organisms[0]
        self._steps = 0

        if self.render_mode == "human":
            self.render()
        return self._get_obs(), self._get_info()

    def step(self, action):
        action = int(action)
        if not 0 <= action <= STAY:
            raise ValueError(f"action must be in [0, {STAY}], got {action}")

        org = self.organism
        before = org.energy
        org.step(self.world, action)

        for _ in range(self.ticks_per_move):
            self.world.tick += 1
            for bush in self.world.bushes:
                bush.update()
            org.tick_energy(self.world)
            if org.is_dead:
                break
        self._steps += 1

        reward = float(org.energy - before)
        terminated = org.is_dead
        truncated = not terminated and self._steps >= self.max_steps

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self):
        if self.world is None:
            return None
        frame = render_frame(self.world, scale=self.render_scale)
        if self.render_mode == "rgb_array":
            return frame
        if self.render_mode != "human":
            return None

        import pygame

        if self._screen is None:
            pygame.init()
            self._screen = pygame.display.set_mode((frame.shape[1], frame.shape[0]))
            pygame.display.set_caption("Forager RL")
            self._clock = pygame.time.Clock()

        # Handle window events (prevents "not responding")
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit()
                self._screen = None
                return None

        surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
        self._screen.blit(surface, (0, 0))
        pygame.display.flip()
        self._clock.tick(self.metadata["render_fps"])
        return None

    def close(self):
        if self._screen is not None:
            import pygame
            pygame.quit()
            self._screen = None
            self._clock = None
