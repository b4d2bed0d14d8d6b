"""Re-submission policy for addresses that could not be reached.

Validation never retries on its own. A caller that wants to ride out a
server that is still starting up asks the policy whether a result is worth
retrying and how long to wait before each attempt.
"""

from dataclasses import dataclass
from typing import Iterator

from .diagnostics import ValidationResult


@dataclass
class RetryPolicy:
    """Exponential backoff between re-submissions."""
    max_retries: int = 0
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 30.0

    def delays(self) -> Iterator[float]:
        """Wait before each retry, capped at ``max_delay``."""
        delay = self.initial_delay
        for _ in range(self.max_retries):
            yield min(delay, self.max_delay)
            delay *= self.backoff_factor

    def should_retry(self, result: ValidationResult) -> bool:
        """Only transport failures are worth another attempt."""
        return (
            not result.valid
            and result.diagnostic is not None
            and result.diagnostic.is_retryable
        )
