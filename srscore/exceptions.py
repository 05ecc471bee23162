from typing import Optional


class SchedulingError(ValueError):
    """Base exception for invalid input handed to the scheduler."""

    pass


class InvalidGradeError(SchedulingError):
    """Raised for a grade token that is not again/hard/good/easy."""

    pass


class InvalidStateError(SchedulingError):
    """Raised when an SRS state lies outside the policy's valid domain."""

    pass


class ConfigError(ValueError):
    """Raised when a scheduling policy file cannot be read or is invalid."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class RepositoryError(Exception):
    """Base exception for state repository errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class CardNotFoundError(RepositoryError):
    """Raised when no SRS state is stored for a card."""

    pass


class DuplicateCardError(RepositoryError):
    """Raised when adding state for a card that already has one."""

    pass


class ConcurrentUpdateError(RepositoryError):
    """Indicates the stored state changed between load and save."""

    pass
