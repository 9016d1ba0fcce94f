"""
Helpers for work that is allowed to fail: a bounded retry combinator and a
wrapper that turns any failure into a logged, discarded result.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]
DelayFn = Callable[[int], float]


def linear_backoff(step: float) -> DelayFn:
    """Delay before retry n (1-based) is n * step."""
    return lambda attempt: step * attempt


def constant_delay(delay: float) -> DelayFn:
    return lambda attempt: delay


def backoff_schedule(attempts: int, delay: DelayFn) -> list[float]:
    return [delay(attempt) for attempt in range(1, attempts + 1)]


async def retry(
    operation: Callable[[], Awaitable[bool]],
    *,
    attempts: int,
    delay: DelayFn,
    sleep: Sleep = asyncio.sleep,
    description: str = "operation",
) -> bool:
    """
    Call `operation` until it reports success or `attempts` calls were made.
    An exception counts as a failed attempt. Sleeps delay(n) after failed attempt n,
    except after the last one.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, attempts + 1):
        try:
            if await operation():
                return True
        except Exception as e:
            logger.debug("%s failed on attempt %d/%d: %s", description, attempt, attempts, e)
        if attempt < attempts:
            await sleep(delay(attempt))

    logger.debug("%s gave up after %d attempts", description, attempts)
    return False


@dataclass(frozen=True)
class NonCriticalResult:
    name: str
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None


class NonCriticalOperation:
    """
    Wraps work whose failure must never reach the caller.

    `run()` awaits it and returns a NonCriticalResult. `schedule()` starts it as a
    background task and returns immediately; the task itself never raises.
    """

    def __init__(self, name: str, factory: Callable[[], Awaitable[Any]]):
        self.name = name
        self._factory = factory

    async def run(self) -> NonCriticalResult:
        try:
            value = await self._factory()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Non-critical operation %s failed: %s", self.name, e)
            return NonCriticalResult(name=self.name, ok=False, error=e)
        return NonCriticalResult(name=self.name, ok=True, value=value)

    def schedule(self) -> "asyncio.Task[NonCriticalResult]":
        return asyncio.get_running_loop().create_task(self.run(), name=self.name)
