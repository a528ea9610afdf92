from __future__ import annotations

import time
from typing import Callable, Optional, Tuple, TypeVar

A = TypeVar("A")
R = TypeVar("R")


def throttle(
    previous: Optional[float],
    operation: Callable[[A], R],
    arg: A,
    min_interval: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[R, float]:
    """
    Call `operation(arg)` no sooner than `min_interval` seconds after `previous`.

    previous:
        Clock reading returned by the previous call, or None for the first
        call of a sequence (never delayed).

    Returns (result, finished_at). `finished_at` is read after the operation
    returns, so the next wait is measured from the end of this call.
    """
    if previous is not None:
        remaining = min_interval - (clock() - previous)
        if remaining > 0:
            sleep(remaining)

    result = operation(arg)
    return result, clock()


class Throttle:
    """
    Minimum-interval pacing for a blocking operation.

    The only state is the clock reading taken when the last call finished.

        pace = Throttle(3.0)
        raw = pace(client.fetch, link)   # first call runs immediately
        raw = pace(client.fetch, other)  # waits until 3s after the first ended
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self.last_call: Optional[float] = None
        self._clock = clock
        self._sleep = sleep

    def __call__(self, operation: Callable[[A], R], arg: A) -> R:
        result, self.last_call = throttle(
            self.last_call,
            operation,
            arg,
            self.min_interval,
            clock=self._clock,
            sleep=self._sleep,
        )
        return result
