"""
Value types exchanged between the scheduler and its callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_GRADUATED_STEP, DEFAULT_STARTING_EASE
from .exceptions import InvalidGradeError


class Grade(IntEnum):
    """
    The user's self-assessed recall quality for one review, ordered by quality.
    """

    Again = 1
    Hard = 2
    Good = 3
    Easy = 4

    @property
    def token(self) -> str:
        """Lower-case wire token, e.g. ``"good"``."""
        return self.name.lower()

    @property
    def is_correct(self) -> bool:
        return self is not Grade.Again

    @classmethod
    def parse(cls, value: Any) -> "Grade":
        """
        Coerce a Grade, a token ("again", "Hard", "3", ...) or an int 1-4 to a Grade.

        Raises:
            InvalidGradeError: If the value names no grade.
        """
        if isinstance(value, Grade):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            if 1 <= value <= 4:
                return cls(value)
        elif isinstance(value, str):
            token = value.strip().lower()
            if token.isdigit() and 1 <= int(token) <= 4:
                return cls(int(token))
            for grade in cls:
                if grade.token == token:
                    return grade
        raise InvalidGradeError(
            f"Invalid grade: {value!r}. Must be one of "
            "again, hard, good, easy (or 1-4)."
        )


@dataclass(frozen=True)
class Learning:
    """Phase variant: the card is working through its minute-based steps."""

    step: int


@dataclass(frozen=True)
class Review:
    """Phase variant: the card has graduated to day-based intervals."""

    pass


Phase = Union[Learning, Review]


class MasteryLevel(str, Enum):
    """User-facing maturity label derived from an SRSState."""

    New = "new"
    Learning = "learning"
    Young = "young"
    Mature = "mature"


class SRSState(BaseModel):
    """
    Spaced-repetition memory state of a single flashcard.

    Instances are immutable; every scheduling transition builds a new one.
    Policy-dependent invariants (ease band, Review-phase interval floor) are
    checked by the scheduler against its config.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ease_factor: int = Field(
        default=DEFAULT_STARTING_EASE,
        ge=1,
        description="Ease multiplier as fixed-point x100 (250 == 2.50).",
    )
    interval: int = Field(
        default=0,
        ge=0,
        description="Days until next review once in the Review phase.",
    )
    repetitions: int = Field(
        default=0,
        ge=0,
        description="Successful Review-phase completions since last lapse.",
    )
    learning_step: int = Field(
        default=0,
        ge=0,
        description="Position within the Learning phase; graduated at 3.",
    )
    next_review_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the card becomes due again.",
    )
    times_correct: int = Field(
        default=0,
        ge=0,
        description="Lifetime count of non-Again grades (reporting only).",
    )
    times_incorrect: int = Field(
        default=0,
        ge=0,
        description="Lifetime count of Again grades (reporting only).",
    )

    @classmethod
    def new(
        cls,
        now: Optional[datetime] = None,
        ease_factor: int = DEFAULT_STARTING_EASE,
    ) -> "SRSState":
        """State of a freshly created flashcard, due immediately."""
        return cls(
            ease_factor=ease_factor,
            next_review_at=now or datetime.now(timezone.utc),
        )

    def evolve(self, **changes: Any) -> "SRSState":
        """Return a validated copy with ``changes`` applied."""
        return type(self).model_validate({**self.model_dump(), **changes})

    def phase_at(self, graduated_step: int) -> Phase:
        if self.learning_step < graduated_step:
            return Learning(step=self.learning_step)
        return Review()

    @property
    def phase(self) -> Phase:
        """Phase under the default two-step learning policy."""
        return self.phase_at(DEFAULT_GRADUATED_STEP)

    @property
    def total_reviews(self) -> int:
        return self.times_correct + self.times_incorrect
