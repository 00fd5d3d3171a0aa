"""Bounded, fixed-interval polling."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from core.domain.models import PollPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PollResult(Generic[T]):
    """Outcome of a poll: the first truthy value (if any) and attempts used."""

    value: T | None
    attempts: int

    @property
    def exhausted(self) -> bool:
        return not self.value


def poll_until(
    policy: PollPolicy,
    probe: Callable[[], T | None],
    *,
    sleep: Callable[[float], None] = time.sleep,
    on_attempt: Callable[[int, int], None] | None = None,
) -> PollResult[T]:
    """Call `probe` until it returns something truthy or the bound is hit.

    Sleeps `policy.interval_seconds` between attempts, never after the last.
    Exhaustion is returned, not raised; errors from `probe` propagate.
    """

    value: T | None = None
    for attempt in range(1, policy.max_attempts + 1):
        value = probe()
        if value:
            logger.debug("poll satisfied after %d attempt(s)", attempt)
            return PollResult(value=value, attempts=attempt)
        if on_attempt:
            on_attempt(attempt, policy.max_attempts)
        if attempt < policy.max_attempts:
            sleep(policy.interval_seconds)

    logger.debug("poll exhausted after %d attempt(s)", policy.max_attempts)
    return PollResult(value=None, attempts=policy.max_attempts)
