import pytest
from datetime import datetime, timezone

from srscore.models import SRSState
from srscore.repository import InMemoryStateRepository
from srscore.scheduler import SchedulerConfig, StepScheduler

UTC = timezone.utc


@pytest.fixture
def review_ts() -> datetime:
    """
    Fixed UTC review timestamp shared by scheduling tests.

    Returns:
        datetime: 2024-01-01 10:00:00 UTC.
    """
    return datetime(2024, 1, 1, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def scheduler() -> StepScheduler:
    """Provides a StepScheduler with the default policy."""
    return StepScheduler(config=SchedulerConfig())


@pytest.fixture
def new_state(review_ts: datetime) -> SRSState:
    """State of a freshly created card, due at `review_ts`."""
    return SRSState.new(now=review_ts)


@pytest.fixture
def review_state(review_ts: datetime) -> SRSState:
    """
    A graduated card: ease 2.50, 10-day interval, 3 repetitions.
    """
    return SRSState(
        ease_factor=250,
        interval=10,
        repetitions=3,
        learning_step=3,
        next_review_at=review_ts,
        times_correct=5,
        times_incorrect=1,
    )


@pytest.fixture
def repository() -> InMemoryStateRepository:
    """An empty in-memory state repository."""
    return InMemoryStateRepository()
