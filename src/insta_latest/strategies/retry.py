"""Exponential backoff policy for the static fetch loop."""
import random
from dataclasses import dataclass
from typing import Callable

SleepFn = Callable[[float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with exponential backoff.

    - max_attempts counts the initial attempt (3 => 1 try + 2 retries).
    - the delay after failed attempt n is base_delay_seconds * 2**(n-1)
      plus uniform jitter in [0, jitter_seconds).
    - timeout_seconds bounds each individual request.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 2.0
    jitter_seconds: float = 1.0
    timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must be >= 0")
        if self.jitter_seconds < 0:
            raise ValueError("jitter_seconds must be >= 0")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

    def backoff(self, failed_attempt: int, rng=random) -> float:
        exponent = max(0, int(failed_attempt) - 1)
        delay = self.base_delay_seconds * (2 ** exponent)
        if self.jitter_seconds > 0:
            delay += rng.random() * self.jitter_seconds
        return delay

    def worst_case_seconds(self) -> float:
        """Upper bound on the time one fetch loop can block."""
        waits = sum(
            self.base_delay_seconds * (2 ** (n - 1)) + self.jitter_seconds
            for n in range(1, self.max_attempts)
        )
        return self.max_attempts * self.timeout_seconds + waits
