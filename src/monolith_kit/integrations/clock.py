"""Clock abstraction so generated content and timestamps are testable."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Clock(ABC):
    """Abstract current-time access for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time (timezone-aware)."""
        ...


class RealClock(Clock):
    """Production implementation using datetime.now()."""

    def now(self) -> datetime:
        return datetime.now(UTC)
