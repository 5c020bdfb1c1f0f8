"""Backoff policy for retrying transient failures."""

import secrets
from dataclasses import dataclass
from enum import Enum

# 2**30 is already far beyond any sensible retry count
MAX_EXPONENT = 30

_rng = secrets.SystemRandom()


class Strategy(str, Enum):
    """How the delay between attempts grows."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    JITTERED = "jittered"

    @classmethod
    def parse(cls, value: str) -> "Strategy":
        """Parse a strategy name.

        Raises:
            ValueError: If the name is not linear, exponential, or jittered
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid retry backoff: {value} "
                "(must be linear, exponential, or jittered)"
            ) from None


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration.

    Delays are in seconds. ``max_retries`` counts retries, so an operation
    runs at most ``max_retries + 1`` times.
    """

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    strategy: Strategy = Strategy.LINEAR

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.max_delay < 0:
            raise ValueError(f"max_delay must be >= 0, got {self.max_delay}")

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the delay before the retry following ``attempt``.

        Args:
            attempt: Zero-based index of the attempt that just failed

        Returns:
            Delay in seconds, never more than ``max_delay``
        """
        attempt = max(attempt, 0)
        exponent = min(attempt, MAX_EXPONENT)

        if self.strategy is Strategy.LINEAR:
            delay = self.initial_delay * (attempt + 1)
        elif self.strategy is Strategy.EXPONENTIAL:
            delay = self.initial_delay * (1 << exponent)
        elif self.strategy is Strategy.JITTERED:
            base = self.initial_delay * (1 << exponent)
            # random() is in [0, 1), so jitter stays below half the base
            delay = base + _rng.random() * (base / 2)
        else:
            delay = self.initial_delay

        return min(delay, self.max_delay)
