"""Fixed backoff schedule for tool invocations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class RetryAttempt:
    """One entry of a retry schedule: the attempt number and the wait before it."""

    number: int
    delay: float


@dataclass(frozen=True)
class RetrySchedule:
    """A finite sequence of attempts with a fixed wait before every retry.

    ``RetrySchedule(delays=(0.5, 1.0))`` yields attempt 1 immediately, attempt 2
    after 0.5s and attempt 3 after a further 1.0s.
    """

    delays: Tuple[float, ...] = (0.5, 1.0)

    def __post_init__(self) -> None:
        if any(d < 0 for d in self.delays):
            raise ValueError("Retry delays must not be negative.")

    @property
    def attempts(self) -> int:
        return len(self.delays) + 1

    def __iter__(self) -> Iterator[RetryAttempt]:
        yield RetryAttempt(number=1, delay=0.0)
        for index, delay in enumerate(self.delays, start=2):
            yield RetryAttempt(number=index, delay=delay)


DEFAULT_RETRY_SCHEDULE = RetrySchedule()
