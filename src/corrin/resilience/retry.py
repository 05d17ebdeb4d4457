from __future__ import annotations
import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, TypeVar

from corrin.core.errors import ProviderTransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResiliencePolicy:
    def __init__(self, max_retries=2, base_delay=0.5, max_delay=8.0, total_timeout=60.0):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.total_timeout = total_timeout

    def compute_backoff(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 1)) + random.random() * 0.1)


def should_retry(exc: BaseException) -> bool:
    # Transport failures only: backend rejections, missing credentials and cancels surface as-is.
    return isinstance(exc, ProviderTransientError)


async def call_with_retries(fn: Callable[[], Awaitable[T]], policy: ResiliencePolicy) -> T:
    """
    Await fn() until it succeeds, retrying transient provider errors with backoff.
    Each attempt is a fresh call; the last error is re-raised unchanged.
    """
    start = time.monotonic()
    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn()
        except Exception as e:
            if (not should_retry(e) or attempt > policy.max_retries
                    or (time.monotonic() - start) > policy.total_timeout):
                raise
            delay = policy.compute_backoff(attempt)
            logger.info("Attempt %d failed (%s); retrying in %.2fs", attempt, e, delay)
            await asyncio.sleep(delay)
