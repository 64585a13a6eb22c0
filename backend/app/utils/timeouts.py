from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    attempts: int,
    delay: float,
    *,
    timeout: float | None = None,
) -> T:
    """Await ``func`` up to ``attempts`` times, bounding each try by ``timeout``."""

    last_exc: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            if timeout is None:
                return await func()
            return await asyncio.wait_for(func(), timeout)
        except Exception as exc:
            last_exc = exc
            logger.warning("attempt %s/%s failed: %s", attempt, attempts, exc)
            if attempt < attempts:
                await asyncio.sleep(delay)
    if last_exc is None:
        raise RuntimeError("retry_async called with no attempts")
    raise last_exc
