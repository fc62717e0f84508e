GRID_SIZE = 8
MIN_MATCH_LENGTH = 3

# Initial boards are re-rolled at most this many times before giving up on a matchless layout.
GENERATION_MAX_ITERATIONS = 100
# Safety valve for the resolution loop; real cascades end within a handful of steps.
CASCADE_MAX_DEPTH = 500
# Seconds a renderer should wait between cascade steps. The engine itself never sleeps.
CASCADE_STEP_DELAY = 0.3

DEFAULT_DIFFICULTY = "medium"

# Score needed to reach level index+1. The first entry is the level 1 floor.
LEVEL_THRESHOLDS = [0, 100, 250, 500, 1000, 2000, 4000, 8000]

# ============================================================================
# GEM CATALOG
# ============================================================================

# name -> (rarity, value); declaration order decides which kinds a difficulty unlocks.
GEM_TYPES = {
    "ruby":     ("common", 10),
    "emerald":  ("common", 15),
    "sapphire": ("uncommon", 20),
    "diamond":  ("rare", 50),
    "amethyst": ("uncommon", 25),
}

# ============================================================================
# DIFFICULTY
# ============================================================================
# id -> (gem_types, time_limit seconds, bonus_multiplier)
DIFFICULTY_LEVELS = {
    "easy":   (3, 120, 1.0),
    "medium": (4, 90, 1.5),
    "hard":   (5, 60, 2.0),
}

# ============================================================================
# SCORING
# ============================================================================
BASE_SCORE_MATCH3 = 30
BASE_SCORE_MATCH4 = 60
BASE_SCORE_MATCH5 = 120
COMBO_MULTIPLIERS = [1.0, 1.2, 1.5, 2.0, 2.5, 3.0, 4.0, 5.0]
RARITY_MULTIPLIERS = {
    "common": 1.0,
    "uncommon": 1.5,
    "rare": 2.0,
    "legendary": 3.0,
}

# ============================================================================
# ACHIEVEMENTS
# ============================================================================
ACHIEVEMENT_TYPES = ("matches", "gems_collected", "combo", "time_limit", "perfect_level")

# (id, name, type, requirement, reward)
ACHIEVEMENTS = [
    ("first_match", "First Match", "matches", 1, 10),
    ("gem_collector", "Gem Collector", "gems_collected", 100, 50),
    ("speed_demon", "Speed Demon", "time_limit", 30, 100),
    ("combo_master", "Combo Master", "combo", 5, 75),
    ("perfectionist", "Perfectionist", "perfect_level", 1, 150),
]
