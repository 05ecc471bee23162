"""
Read-time labels derived from an SRSState. Pure functions, no scheduling.
"""

from datetime import timedelta
from typing import Union

from .constants import (
    DEFAULT_GRADUATED_STEP,
    YOUNG_MAX_INTERVAL,
    YOUNG_MAX_REPETITIONS,
)
from .models import MasteryLevel, SRSState
from .scheduler import round_half_up


def mastery_level(
    state: SRSState, graduated_step: int = DEFAULT_GRADUATED_STEP
) -> MasteryLevel:
    """
    Classify a card as New, Learning, Young or Mature.

    A card is Young until it has more than four repetitions and an interval
    above two weeks.
    """
    if state.learning_step == 0 and state.repetitions == 0:
        return MasteryLevel.New
    if state.learning_step < graduated_step:
        return MasteryLevel.Learning
    if (
        state.repetitions <= YOUNG_MAX_REPETITIONS
        or state.interval <= YOUNG_MAX_INTERVAL
    ):
        return MasteryLevel.Young
    return MasteryLevel.Mature


def _format_days(days: int) -> str:
    if days == 0:
        return "<1d"
    if days < 7:
        return f"{days}d"
    if days < 30:
        return f"{round_half_up(days / 7)}w"
    if days < 365:
        return f"{round_half_up(days / 30)}mo"
    return f"{days / 365:.1f}y"


def format_interval(value: Union[int, timedelta]) -> str:
    """
    Compact label for an interval: "1m", "10m", "3h", "4d", "2w", "3mo", "1.2y".

    Ints are whole days; timedeltas shorter than a day are shown in minutes
    or hours.
    """
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
        if seconds < 0:
            raise ValueError(f"Interval must not be negative, got {value}.")
        # Round before picking the unit so 59m40s reads "1h", not "60m".
        minutes = max(1, round_half_up(seconds / 60))
        if minutes < 60:
            return f"{minutes}m"
        hours = round_half_up(seconds / 3600)
        if hours < 24:
            return f"{hours}h"
        return _format_days(round_half_up(seconds / 86400))
    if value < 0:
        raise ValueError(f"Interval must not be negative, got {value}.")
    return _format_days(value)
