"""
Scheduling policy constants.

Default values for the step-based scheduler. Pure constants only: they are
collected into a SchedulerConfig at runtime and never read as globals by the
transition logic.
"""
from datetime import timedelta
from typing import Tuple

# Learning phase steps, in order. Step N of the learning phase waits
# LEARNING_STEPS[N - 1] before the card is due again.
DEFAULT_LEARNING_STEPS: Tuple[timedelta, ...] = (
    timedelta(minutes=1),
    timedelta(minutes=10),
)

# Review-phase interval (days) on graduating with Good / with Easy.
DEFAULT_GRADUATING_INTERVAL: int = 1
DEFAULT_EASY_INTERVAL: int = 4

# Ease factor is stored as a fixed-point integer, x100 (250 == 2.50).
DEFAULT_STARTING_EASE: int = 250
DEFAULT_MIN_EASE: int = 130
DEFAULT_MAX_EASE: int = 300

# Ease adjustments per grade, applied before clamping.
DEFAULT_AGAIN_EASE_DELTA: int = -20
DEFAULT_HARD_EASE_DELTA: int = -15
DEFAULT_GOOD_EASE_DELTA: int = 0
DEFAULT_EASY_EASE_DELTA: int = 15

# Review-phase interval multipliers.
DEFAULT_HARD_MULTIPLIER: float = 1.2
DEFAULT_EASY_BONUS: float = 1.3

# learning_step value at which a card counts as graduated (two steps + 1).
DEFAULT_GRADUATED_STEP: int = len(DEFAULT_LEARNING_STEPS) + 1

# Thresholds for the Young/Mature presentation label.
YOUNG_MAX_REPETITIONS: int = 4
YOUNG_MAX_INTERVAL: int = 14
