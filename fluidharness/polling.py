"""
Bounded polling for eventually-consistent reads.

The indexed store (subgraph) lags behind the chain. Readers query once,
then retry at a fixed interval a bounded number of times. There is no
exponential backoff and no wall-clock deadline beyond the retries.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from fluidharness.logging import get_logger

T = TypeVar("T")

logger = get_logger("polling")


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for indexing polls: one immediate attempt plus max_retries."""

    max_retries: int = 3
    interval: float = 10.0  # seconds between attempts

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.interval < 0:
            raise ValueError(f"interval must be non-negative, got {self.interval}")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


@dataclass
class PollResult(Generic[T]):
    """Outcome of a poll."""

    value: T | None
    attempts: int
    last_error: Exception | None = None

    @property
    def found(self) -> bool:
        return self.value is not None


def poll(
    fetch: Callable[[], T | None],
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "resource",
    accept: Callable[[T], bool] | None = None,
) -> PollResult[T]:
    """
    Poll until fetch() returns an acceptable value or the retries run out.

    A fetch that raises counts as "not yet visible": the error is logged and
    the next attempt proceeds. Absence after all attempts is returned, not
    raised; the caller decides how severe it is.

    Args:
        fetch: Lookup returning the value or None when absent
        policy: Retry policy (default: 3 retries, 10 seconds apart)
        sleep: Sleep function, injectable for tests
        description: Human-readable name used in log lines
        accept: Optional predicate a non-None value must satisfy

    Returns:
        PollResult with the value (or None) and the number of lookups made
    """
    policy = policy or RetryPolicy()
    last_error: Exception | None = None

    for attempt in range(policy.max_attempts):
        if attempt > 0:
            logger.info(
                "Waiting %.0fs for %s to be indexed (retry %d/%d)",
                policy.interval,
                description,
                attempt,
                policy.max_retries,
            )
            sleep(policy.interval)

        try:
            value = fetch()
        except Exception as e:
            logger.warning("Lookup of %s failed: %s", description, e)
            last_error = e
            continue

        if value is not None and (accept is None or accept(value)):
            return PollResult(value=value, attempts=attempt + 1, last_error=last_error)

    return PollResult(value=None, attempts=policy.max_attempts, last_error=last_error)
