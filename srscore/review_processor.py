"""
Caller-side review processing for srscore.

The ReviewProcessor wraps the pure scheduler with the load / schedule / save
cycle an application runs for every grading event:
1. Timestamp handling
2. Loading the card's stored state and version
3. Scheduler computation
4. Versioned save (rejects concurrent gradings of the same card)
5. Error logging
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from .exceptions import InvalidGradeError
from .models import Grade, SRSState
from .repository import CardId, StateRepository
from .scheduler import BaseScheduler, StepScheduler

# Initialize logger
logger = logging.getLogger(__name__)


def grade_from_correct(correct: bool) -> Grade:
    """
    Map a legacy correct/incorrect result onto a grade (Good / Again).

    Raises:
        InvalidGradeError: If ``correct`` is not a bool.
    """
    if not isinstance(correct, bool):
        raise InvalidGradeError(
            f"Invalid result: {correct!r}. Must be True or False."
        )
    return Grade.Good if correct else Grade.Again


class ReviewProcessor:
    """
    Processes review submissions against a state repository.
    """

    def __init__(
        self,
        repository: StateRepository,
        scheduler: Optional[BaseScheduler] = None,
    ):
        """
        Initialize the ReviewProcessor.

        Args:
            repository: Where card states are loaded from and saved to.
            scheduler: Scheduler computing next states (default StepScheduler).
        """
        self.repository = repository
        self.scheduler = scheduler or StepScheduler()

    def add_card(
        self, card_id: CardId, created_at: Optional[datetime] = None
    ) -> SRSState:
        """Store the initial state for a new card, due immediately."""
        ts = created_at or datetime.now(timezone.utc)
        state = self.scheduler.new_state(ts)
        return self.repository.add(card_id, state).state

    def process_review(
        self,
        card_id: CardId,
        grade: Any,
        reviewed_at: Optional[datetime] = None,
    ) -> SRSState:
        """
        Grade a stored card and persist its next state.

        Args:
            card_id: Identifier of the card being reviewed.
            grade: Grade, token ("again".."easy") or rating 1-4.
            reviewed_at: Review timestamp (defaults to current time).

        Returns:
            The card's new SRSState.

        Raises:
            InvalidGradeError: If the grade is not recognised.
            InvalidStateError: If the stored state is outside the policy.
            CardNotFoundError: If the card has no stored state.
            ConcurrentUpdateError: If the card was graded concurrently.
        """
        ts = reviewed_at or datetime.now(timezone.utc)
        grade = Grade.parse(grade)

        logger.debug(f"Processing review for card {card_id!r} with grade {grade.token}")

        try:
            stored = self.repository.get(card_id)
            new_state = self.scheduler.compute_next_state(stored.state, grade, ts)
            saved = self.repository.save(
                card_id, new_state, expected_version=stored.version
            )
        except Exception:
            logger.exception(f"Failed to process review for card {card_id!r}")
            raise

        logger.debug(
            f"Review processed for card {card_id!r}. "
            f"Next due: {saved.state.next_review_at.isoformat()}, "
            f"version {saved.version}"
        )
        return saved.state

    def process_result(
        self,
        card_id: CardId,
        correct: bool,
        reviewed_at: Optional[datetime] = None,
    ) -> SRSState:
        """Grade a card from a legacy correct/incorrect result."""
        return self.process_review(
            card_id, grade_from_correct(correct), reviewed_at=reviewed_at
        )
