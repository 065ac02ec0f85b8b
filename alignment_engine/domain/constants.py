"""Alignment scoring thresholds, weights and enums.

These values define the meaning of the stored alignment ledger. Changing any
of them changes how historical rows compare to new ones.
"""

from enum import Enum, IntEnum


class StateLevel(IntEnum):
    """Avatar state level derived from recent alignment."""

    DIMINISHED = 1
    STABLE = 2
    ALIGNED = 3


class PatternFlag(str, Enum):
    """Behavioral anti-patterns detected over rolling windows."""

    MIDWEEK_DRIFT = "MIDWEEK_DRIFT"
    EFFORT_INFLATION = "EFFORT_INFLATION"
    OVERCOMMITMENT = "OVERCOMMITMENT"
    STREAK_BREAK = "STREAK_BREAK"


class TaskCategory(str, Enum):
    CORE = "core"
    SUPPORT = "support"
    HABIT = "habit"


# Score weights (must sum to 1.0)
WEIGHT_CORE = 0.50
WEIGHT_SUPPORT = 0.20
WEIGHT_HABIT = 0.15
WEIGHT_EFFORT = 0.10
WEIGHT_REFLECTION = 0.05

# Effort is rated 1-10
EFFORT_MIN = 1
EFFORT_MAX = 10

# Streaks
STREAK_BREAK_SCORE = 50  # previous day below this resets the streak
STREAK_THRESHOLD_HIGH = 7  # streak > 7 -> 1.10
STREAK_THRESHOLD_LOW = 3  # streak > 3 -> 1.05
MULTIPLIER_HIGH = 1.10
MULTIPLIER_LOW = 1.05
MULTIPLIER_NONE = 1.00
MISSED_DAY_PENALTY = 0.10  # 10% off the last known score
STREAK_MILESTONES = (7, 14, 30, 60, 90)

# Drift and state
DRIFT_WINDOW_DAYS = 7  # today + 6 prior
STATE_STABLE_MIN = 45  # 7-day average below this -> Diminished
STATE_ALIGNED_MIN = 75  # 7-day average above this -> approaching Aligned
DRIFT_DANGER = -0.4
DRIFT_DAYS_TO_DIMINISH = 3  # today + 2 prior all below DRIFT_DANGER
ALIGNED_CONSECUTIVE_DAYS = 2  # prior days already Aligned before rising

# Pattern detection
PATTERN_WINDOW_DAYS = 30
MIDWEEK_DROP_THRESHOLD = 15  # Wednesday at least 15 points below Monday
MIDWEEK_WEEKS_CONSIDERED = 4
MIDWEEK_WEEKS_REQUIRED = 3
EFFORT_INFLATION_EFFORT_MIN = 8
EFFORT_INFLATION_COMPLETION_MAX = 50
EFFORT_INFLATION_DAYS_REQUIRED = 3
OVERCOMMIT_COMPLETION_MAX = 40
OVERCOMMIT_DAYS_REQUIRED = 5
LOG_WINDOW_DAYS = 7

# History read by a single recalculation
HISTORY_LIMIT = 7
