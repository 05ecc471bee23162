# srscore/scheduler.py

"""
Defines the BaseScheduler abstract class and the StepScheduler, a
learning-steps + ease-factor scheduler in the SM-2 family.
"""

import datetime
import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import (
    DEFAULT_AGAIN_EASE_DELTA,
    DEFAULT_EASY_BONUS,
    DEFAULT_EASY_EASE_DELTA,
    DEFAULT_EASY_INTERVAL,
    DEFAULT_GOOD_EASE_DELTA,
    DEFAULT_GRADUATING_INTERVAL,
    DEFAULT_HARD_EASE_DELTA,
    DEFAULT_HARD_MULTIPLIER,
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAX_EASE,
    DEFAULT_MIN_EASE,
    DEFAULT_STARTING_EASE,
)
from .exceptions import InvalidStateError
from .models import Grade, Learning, SRSState

logger = logging.getLogger(__name__)

_STEP_SHORTHAND = re.compile(r"^\s*(\d+)\s*([smhd])\s*$", re.IGNORECASE)
_STEP_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


class BaseScheduler(ABC):
    """
    Abstract base class for all schedulers in srscore.
    """

    @abstractmethod
    def compute_next_state(
        self, state: SRSState, grade: Any, now: datetime.datetime
    ) -> SRSState:
        """
        Computes the next SRS state of a card for a new grade.

        Args:
            state: The card's current SRS state.
            grade: The grade for this review (Grade, token or 1-4).
            now: The timestamp of the review.

        Returns:
            A new SRSState; the input is left untouched.

        Raises:
            InvalidGradeError: If the grade is not recognised.
            InvalidStateError: If the state is outside the policy's domain.
        """
        pass

    def new_state(self, now: Optional[datetime.datetime] = None) -> SRSState:
        """Initial state for a freshly created card."""
        return SRSState.new(now=now)


class SchedulerConfig(BaseModel):
    """Policy constants for the StepScheduler."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    learning_steps: Tuple[datetime.timedelta, ...] = DEFAULT_LEARNING_STEPS
    graduating_interval: int = Field(default=DEFAULT_GRADUATING_INTERVAL, ge=1)
    easy_interval: int = Field(default=DEFAULT_EASY_INTERVAL, ge=1)
    starting_ease: int = Field(default=DEFAULT_STARTING_EASE, ge=1)
    min_ease: int = Field(default=DEFAULT_MIN_EASE, ge=1)
    max_ease: int = Field(default=DEFAULT_MAX_EASE, ge=1)
    again_ease_delta: int = DEFAULT_AGAIN_EASE_DELTA
    hard_ease_delta: int = DEFAULT_HARD_EASE_DELTA
    good_ease_delta: int = DEFAULT_GOOD_EASE_DELTA
    easy_ease_delta: int = DEFAULT_EASY_EASE_DELTA
    hard_multiplier: float = Field(default=DEFAULT_HARD_MULTIPLIER, gt=0)
    easy_bonus: float = Field(default=DEFAULT_EASY_BONUS, gt=0)

    @field_validator("learning_steps", mode="before")
    @classmethod
    def expand_step_shorthand(cls, steps: Any) -> Any:
        """Accept "1m", "10m", "1h", "1d" style entries alongside timedeltas."""
        if not isinstance(steps, (list, tuple)):
            return steps
        expanded = []
        for step in steps:
            match = _STEP_SHORTHAND.match(step) if isinstance(step, str) else None
            if match:
                amount, unit = match.groups()
                step = datetime.timedelta(**{_STEP_UNITS[unit.lower()]: int(amount)})
            expanded.append(step)
        return tuple(expanded)

    @field_validator("learning_steps")
    @classmethod
    def check_learning_steps(
        cls, steps: Tuple[datetime.timedelta, ...]
    ) -> Tuple[datetime.timedelta, ...]:
        if not steps:
            raise ValueError("At least one learning step is required.")
        for step in steps:
            if step <= datetime.timedelta(0):
                raise ValueError(f"Learning step {step} must be positive.")
        return steps

    @model_validator(mode="after")
    def check_ease_band(self) -> "SchedulerConfig":
        if not self.min_ease <= self.starting_ease <= self.max_ease:
            raise ValueError(
                f"Ease band is inconsistent: need min_ease ({self.min_ease}) "
                f"<= starting_ease ({self.starting_ease}) "
                f"<= max_ease ({self.max_ease})."
            )
        return self

    @property
    def graduated_step(self) -> int:
        """learning_step value that marks a card as graduated."""
        return len(self.learning_steps) + 1

    @property
    def lapse_step(self) -> int:
        """learning_step a lapsed card re-enters at (the last learning step)."""
        return len(self.learning_steps)

    def ease_delta(self, grade: Grade) -> int:
        return {
            Grade.Again: self.again_ease_delta,
            Grade.Hard: self.hard_ease_delta,
            Grade.Good: self.good_ease_delta,
            Grade.Easy: self.easy_ease_delta,
        }[grade]

    def clamp_ease(self, ease_factor: int) -> int:
        return max(self.min_ease, min(ease_factor, self.max_ease))


class StepScheduler(BaseScheduler):
    """
    Learning-steps scheduler.

    New and lapsed cards climb through minute-based learning steps; once
    graduated, intervals grow geometrically by the card's ease factor.
    """

    def __init__(self, config: Optional[SchedulerConfig] = None):
        if config is None:
            config = SchedulerConfig()
        self.config = config

    def _ensure_utc(self, ts: datetime.datetime) -> datetime.datetime:
        """Assumes UTC for naive timestamps; aware ones keep their zone."""
        if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
            return ts.replace(tzinfo=datetime.timezone.utc)
        return ts

    # Due stamps are returned in UTC: same-zone datetimes compare by wall
    # clock, which misorders stamps inside a DST fall-back hour.

    def _after_step(self, now: datetime.datetime, step_index: int) -> datetime.datetime:
        delay = self.config.learning_steps[step_index]
        return now.astimezone(datetime.timezone.utc) + delay

    def _after_days(self, now: datetime.datetime, days: int) -> datetime.datetime:
        # Calendar days: aware arithmetic keeps the wall-clock time in now's zone.
        return (now + datetime.timedelta(days=days)).astimezone(datetime.timezone.utc)

    def _tally(self, state: SRSState, grade: Grade) -> Dict[str, int]:
        if grade.is_correct:
            return {"times_correct": state.times_correct + 1}
        return {"times_incorrect": state.times_incorrect + 1}

    def check_state(self, state: SRSState) -> None:
        """
        Raises InvalidStateError if the state lies outside this policy's domain.
        """
        config = self.config
        if not config.min_ease <= state.ease_factor <= config.max_ease:
            raise InvalidStateError(
                f"Invalid ease factor: {state.ease_factor}. "
                f"Must be {config.min_ease}-{config.max_ease}."
            )
        if state.learning_step >= config.graduated_step and state.interval < 1:
            raise InvalidStateError(
                f"Invalid interval: {state.interval}. "
                "A graduated card needs an interval of at least 1 day."
            )

    def _graduate(
        self,
        state: SRSState,
        grade: Grade,
        now: datetime.datetime,
        interval: int,
        ease_factor: int,
    ) -> SRSState:
        return state.evolve(
            learning_step=self.config.graduated_step,
            interval=interval,
            repetitions=1,
            ease_factor=ease_factor,
            next_review_at=self._after_days(now, interval),
            **self._tally(state, grade),
        )

    def _learning_transition(
        self, state: SRSState, step: int, grade: Grade, now: datetime.datetime
    ) -> SRSState:
        config = self.config
        if grade is Grade.Easy:
            return self._graduate(
                state,
                grade,
                now,
                interval=config.easy_interval,
                ease_factor=config.clamp_ease(
                    state.ease_factor + config.easy_ease_delta
                ),
            )
        if grade is Grade.Good and step >= config.lapse_step:
            return self._graduate(
                state,
                grade,
                now,
                interval=config.graduating_interval,
                ease_factor=state.ease_factor,
            )

        if grade is Grade.Again:
            new_step, delay_index = 1, 0
        elif grade is Grade.Hard:
            # Hard never advances the step, it only seeds a new card.
            new_step, delay_index = max(step, 1), 0
        else:
            new_step = step + 1
            delay_index = new_step - 1
        return state.evolve(
            learning_step=new_step,
            next_review_at=self._after_step(now, delay_index),
            **self._tally(state, grade),
        )

    def _review_transition(
        self, state: SRSState, grade: Grade, now: datetime.datetime
    ) -> SRSState:
        config = self.config
        ease_factor = config.clamp_ease(state.ease_factor + config.ease_delta(grade))

        if grade is Grade.Again:
            return state.evolve(
                ease_factor=ease_factor,
                repetitions=0,
                learning_step=config.lapse_step,
                next_review_at=self._after_step(now, config.lapse_step - 1),
                **self._tally(state, grade),
            )

        ef = state.ease_factor / 100
        if grade is Grade.Hard:
            raw_interval = state.interval * config.hard_multiplier
        elif grade is Grade.Good:
            raw_interval = state.interval * ef
        else:
            raw_interval = state.interval * ef * config.easy_bonus
        interval = max(1, round_half_up(raw_interval))

        return state.evolve(
            ease_factor=ease_factor,
            interval=interval,
            repetitions=state.repetitions + 1,
            next_review_at=self._after_days(now, interval),
            **self._tally(state, grade),
        )

    def compute_next_state(
        self, state: SRSState, grade: Any, now: datetime.datetime
    ) -> SRSState:
        """
        Applies one grade to the state, dispatching on the card's phase.
        """
        grade = Grade.parse(grade)
        self.check_state(state)
        now = self._ensure_utc(now)

        phase = state.phase_at(self.config.graduated_step)
        if isinstance(phase, Learning):
            new_state = self._learning_transition(state, phase.step, grade, now)
        else:
            new_state = self._review_transition(state, grade, now)

        logger.debug(
            f"Graded {grade.token}: step {state.learning_step}->{new_state.learning_step}, "
            f"interval {state.interval}->{new_state.interval}, "
            f"ease {state.ease_factor}->{new_state.ease_factor}, "
            f"due {new_state.next_review_at.isoformat()}"
        )
        return new_state

    def new_state(self, now: Optional[datetime.datetime] = None) -> SRSState:
        """Initial state for a freshly created card under this policy."""
        now = self._ensure_utc(now or datetime.datetime.now(datetime.timezone.utc))
        return SRSState.new(now=now, ease_factor=self.config.starting_ease)

    def preview(
        self, state: SRSState, now: Optional[datetime.datetime] = None
    ) -> Dict[Grade, datetime.timedelta]:
        """
        How far out each grade would schedule the card, measured from ``now``.
        """
        now = self._ensure_utc(
            now or datetime.datetime.now(datetime.timezone.utc)
        ).astimezone(datetime.timezone.utc)
        return {
            grade: self.compute_next_state(state, grade, now).next_review_at - now
            for grade in Grade
        }


def schedule(
    state: SRSState,
    grade: Any,
    now: Optional[datetime.datetime] = None,
    config: Optional[SchedulerConfig] = None,
) -> SRSState:
    """
    Compute a card's next SRS state for ``grade`` at ``now`` (default: current UTC time).
    """
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    return StepScheduler(config).compute_next_state(state, grade, now)
