"""Retry policy with exponential backoff."""

from dataclasses import dataclass
from typing import Optional

from .exceptions import NetworkError, ServerError


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior with exponential backoff."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    backoff_factor: float = 2.0

    # Off by default: the delay keeps doubling
    max_delay: Optional[float] = None

    def calculate_delay(self, attempt: int) -> float:
        """Delay to wait after the failed 0-based attempt: 1, 2, 4, ... seconds."""
        delay = self.initial_delay * (self.backoff_factor ** attempt)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay

    def has_next_attempt(self, attempt: int) -> bool:
        return attempt < self.max_attempts - 1

    def is_retryable(self, failure: Exception) -> bool:
        """Only server errors and transport failures are worth another attempt."""
        return isinstance(failure, (ServerError, NetworkError))
