"""
Storage seam for per-card SRS state.

The scheduler never touches storage; callers load a StoredState, schedule,
and save the result back with the version they loaded. A save against a
stale version fails, so at most one grading per card can win.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterator, Union

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import CardNotFoundError, ConcurrentUpdateError, DuplicateCardError
from .models import SRSState

logger = logging.getLogger(__name__)

CardId = Union[int, str]


class StoredState(BaseModel):
    """An SRSState as persisted, tagged with its optimistic-lock version."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    card_id: CardId
    state: SRSState
    version: int = Field(default=1, ge=1)


class StateRepository(ABC):
    """Abstract persistence for card SRS states."""

    @abstractmethod
    def get(self, card_id: CardId) -> StoredState:
        """
        Raises:
            CardNotFoundError: If no state is stored for the card.
        """
        pass

    @abstractmethod
    def add(self, card_id: CardId, state: SRSState) -> StoredState:
        """
        Raises:
            DuplicateCardError: If the card already has a stored state.
        """
        pass

    @abstractmethod
    def save(
        self, card_id: CardId, state: SRSState, expected_version: int
    ) -> StoredState:
        """
        Replace a card's state if it is still at ``expected_version``.

        Raises:
            CardNotFoundError: If no state is stored for the card.
            ConcurrentUpdateError: If the stored version has moved on.
        """
        pass

    @abstractmethod
    def delete(self, card_id: CardId) -> None:
        pass


class InMemoryStateRepository(StateRepository):
    """Thread-safe dict-backed repository."""

    def __init__(self) -> None:
        self._records: Dict[CardId, StoredState] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[StoredState]:
        with self._lock:
            return iter(list(self._records.values()))

    def get(self, card_id: CardId) -> StoredState:
        with self._lock:
            record = self._records.get(card_id)
        if record is None:
            raise CardNotFoundError(f"No SRS state stored for card {card_id!r}")
        return record

    def add(self, card_id: CardId, state: SRSState) -> StoredState:
        with self._lock:
            if card_id in self._records:
                raise DuplicateCardError(
                    f"Card {card_id!r} already has an SRS state"
                )
            record = StoredState(card_id=card_id, state=state)
            self._records[card_id] = record
        logger.debug(f"Added SRS state for card {card_id!r}")
        return record

    def save(
        self, card_id: CardId, state: SRSState, expected_version: int
    ) -> StoredState:
        with self._lock:
            current = self._records.get(card_id)
            if current is None:
                raise CardNotFoundError(
                    f"No SRS state stored for card {card_id!r}"
                )
            if current.version != expected_version:
                raise ConcurrentUpdateError(
                    f"Card {card_id!r} is at version {current.version}, "
                    f"expected {expected_version}"
                )
            record = StoredState(
                card_id=card_id, state=state, version=current.version + 1
            )
            self._records[card_id] = record
        logger.debug(
            f"Saved SRS state for card {card_id!r} at version {record.version}"
        )
        return record

    def delete(self, card_id: CardId) -> None:
        with self._lock:
            if self._records.pop(card_id, None) is None:
                raise CardNotFoundError(
                    f"No SRS state stored for card {card_id!r}"
                )
