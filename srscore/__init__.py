"""srscore - a step-based spaced repetition scheduler."""

from .models import Grade, Learning, MasteryLevel, Phase, Review, SRSState
from .scheduler import BaseScheduler, SchedulerConfig, StepScheduler, schedule
from .config import load_scheduler_config
from .presentation import format_interval, mastery_level
from .review_processor import ReviewProcessor, grade_from_correct
from .repository import InMemoryStateRepository, StateRepository, StoredState

__all__ = [
    "Grade",
    "Learning",
    "Review",
    "Phase",
    "MasteryLevel",
    "SRSState",
    "BaseScheduler",
    "SchedulerConfig",
    "StepScheduler",
    "schedule",
    "load_scheduler_config",
    "format_interval",
    "mastery_level",
    "ReviewProcessor",
    "grade_from_correct",
    "InMemoryStateRepository",
    "StateRepository",
    "StoredState",
]
