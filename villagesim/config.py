"""Tuning constants for the village simulation."""

from __future__ import annotations

# World
WORLD_WIDTH = 500
WORLD_HEIGHT = 500
CELL_SIZE = 5
CELL_SIZE_MIN = 2
CELL_SIZE_MAX = 40

# Terrain generation
NOISE_SCALE = 0.05
RESOURCE_NOISE_SCALE = 0.1
OCEAN_THRESHOLD = 0.45
OCEAN_THRESHOLD_MIN = 0.2
OCEAN_THRESHOLD_MAX = 0.8
OCEAN_THRESHOLD_STEP = 0.05
NOISE_OCTAVES = 4
NOISE_FALLOFF = 0.5
TERRAIN_OCTAVE_WEIGHTS = (0.5, 0.25, 0.125, 0.0625)
TERRAIN_OCTAVE_OFFSETS = (0.0, 500.0, 1000.0, 2000.0)
RESOURCE_LAYERS = (
    # (frequency multiplier, offset, exponent, amplitude)
    (1.0, 3000.0, 1.5, 1.0),
    (3.0, 5000.0, 2.0, 1.2),
    (5.0, 7000.0, 3.0, 1.5),
)
SMOOTHING_ITERATIONS = 3
SMOOTHING_NEIGHBOR_LIMIT = 5
SMOOTHING_DEFAULT_RESOURCE = 0.3
LAND_SEARCH_ATTEMPTS = 50

# Boundaries (fractions of world extent)
WANDER_INSET = 0.15
AVOID_INSET = 0.12
CENTER_FORCE = 0.3

# Steering
ARRIVAL_RADIUS = 100.0
ARRIVAL_MIN_SPEED = 0.5
WANDER_DISTANCE = 100.0
WANDER_LAND_ATTEMPTS = 8

# Citizens
CITIZEN_SIZE = 10.0
CITIZEN_MAX_SPEED = 1.5
CITIZEN_MAX_FORCE = 0.2
CITIZEN_PERCEPTION = 150.0
CITIZEN_HISTORY_LENGTH = 50
CITIZEN_WOOD_CAPACITY = 10
ENERGY_MAX = 100.0
FULLNESS_MAX = 100.0
MAX_BOREDOM = 100.0
ENERGY_DECAY_RATE = 0.01
DIGESTION_RATE = 0.02
DIGESTION_EFFICIENCY = 0.8
REST_THRESHOLD = 10.0
REST_RECOVERY_RATE = 0.1
REST_DIGESTION_BONUS = 0.03
REST_DIGESTION_EFFICIENCY = 0.9
REST_EXIT_MULTIPLIER = 3.0
BOREDOM_INCREASE_RATE = 0.05
BOREDOM_MOVING_SPEED = 0.1
BOREDOM_DECAY_FACTOR = 0.1
MOVEMENT_ENERGY_COST = 0.02
INITIAL_ENERGY_RANGE = (40.0, 80.0)
INITIAL_FULLNESS_RANGE = (30.0, 70.0)
INITIAL_BOREDOM_RANGE = (0.0, 30.0)
DEATH_ANIMATION_TICKS = 60

# Decision making
DECISION_INTERVAL = 5
HYSTERESIS_BONUS = 10.0
CHANGE_THRESHOLD = 5.0
IDLE_SCORE = 10.0
REST_SCORE_FORCED = 100.0
REST_SCORE_MAX = 80.0
EXERCISE_MIN_ENERGY = 20.0
EXERCISE_BOREDOM_START = 50.0
EXERCISE_SCORE_MAX = 90.0
SEEK_FOOD_SCORE_MAX = 85.0
HUNGRY_FULLNESS = 20.0
HUNGRY_BONUS = 10.0
COLLECT_WOOD_SCORE_MIN = 10.0
COLLECT_WOOD_SCORE_MAX = 65.0
COLLECT_WOOD_HOUSE_BONUS = 20.0
COLLECT_WOOD_TIRED_PENALTY = 30.0
TIRED_ENERGY = 30.0
BUILD_HOUSE_BASE = 50.0
BUILD_HOUSE_WOOD_BONUS = 30.0
BUILD_HOUSE_PROGRESS_BONUS = 25.0

# Behaviors
EXERCISE_RADIUS = 30.0
EXERCISE_ANGULAR_SPEED = 0.05
EXERCISE_BOREDOM_DECAY = 0.2
EXERCISE_ENERGY_COST = 0.02
TARGET_REACHED_DISTANCE = 5.0
COLLECT_DISTANCE = 20.0
COLLECT_RATE = 2.0
BUILD_DISTANCE = 40.0
BUILD_WOOD_PER_TICK = 1
NEW_HOUSE_MIN_WOOD = 5
NEW_HOUSE_OFFSET = (30.0, 80.0)

# Resources
FOOD_SIZE = 8.0
FOOD_NUTRITION_RANGE = (10.0, 30.0)
FOOD_COUNT = 25
WOOD_SIZE = 15.0
WOOD_AMOUNT_RANGE = (5, 15)
WOOD_COUNT = 12
WOOD_HARVEST_MAX = 5
COLLECTION_COMPLETE = 100.0
HOUSE_SIZE = 40.0
HOUSE_WOOD_REQUIRED = 15
HOUSE_SITE_WOOD = 5
BERRY_SIZE = 8.0
BERRY_MAX = 1.0
BERRY_REGROW_RATE = 0.001
BERRY_HARVEST_DISTANCE = 15.0
BERRY_HARVEST_AMOUNT = 0.02
MAX_BERRY_BUSHES = 200
BERRY_SPAWN_CHANCE = 0.005
BERRY_SPAWN_ATTEMPTS = 20
BERRY_BUSH_COUNT = 10
BERRY_SPACING_FACTOR = 3.0

# Organism
ORGANISM_SIZE = 4.0
ORGANISM_MEMORY_DURATION = 20
ORGANISM_HISTORY_LENGTH = 10
ORGANISM_MOVEMENT_INTERVAL = 30
ORGANISM_START_ENERGY = 5.0
ORGANISM_MAX_ENERGY = 10.0
ORGANISM_ENERGY_LOSS = 0.005
ORGANISM_GRAZE_RATE = 0.004
BERRY_ENERGY = 0.5
EXPLORATION_CHANCE = 0.2
RECENT_VISIT_WEIGHT = 0.2
GAIN_WEIGHT = 10.0
LOSS_WEIGHT = 2.0
MIN_MOVE_WEIGHT = 0.1
MOMENTUM_BONUS = 1.5
STAY_WEIGHT = 0.5
STAY_POOR_FACTOR = 0.2
STAY_POOR_RESOURCE = 0.4
STAY_NEAR_BERRY_WEIGHT = 2.0
BERRY_ALIGNMENT_WEIGHT = 5.0
BERRY_CLOSE_BONUS = 5.0
BERRY_CLOSE_ALIGNMENT = 0.7

# Simulation driver
INITIAL_CITIZENS = 8
INITIAL_ORGANISMS = 1
LOG_EVERY = 100
