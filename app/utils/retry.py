"""Retry helper for blocking store calls run off the event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from app.core.exceptions import NegotiationEngineError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_retry(
    func: Callable[..., T],
    *args: Any,
    operation: str,
    max_retries: int = 3,
    base_backoff_seconds: float = 0.25,
    **kwargs: Any,
) -> T:
    """Run ``func`` in a worker thread, retrying retryable engine errors.

    The first attempt is followed by at most ``max_retries`` retries with
    exponential backoff. Non-retryable errors propagate immediately; the last
    retryable error propagates once retries are exhausted.
    """
    for attempt in range(max_retries + 1):
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except NegotiationEngineError as exc:
            if not exc.retryable or attempt >= max_retries:
                raise
            delay = max(0.0, base_backoff_seconds) * (2**attempt)
            logger.warning(
                "retry.scheduled",
                extra={
                    "event": "retry.scheduled",
                    "operation": operation,
                    "retry_count": attempt + 1,
                    "delay_seconds": delay,
                },
            )
            if delay > 0:
                await asyncio.sleep(delay)
    raise AssertionError("unreachable")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_backoff_seconds: float = 0.25

    async def run(self, func: Callable[..., T], *args: Any, operation: str, **kwargs: Any) -> T:
        return await call_with_retry(
            func,
            *args,
            operation=operation,
            max_retries=self.max_retries,
            base_backoff_seconds=self.base_backoff_seconds,
            **kwargs,
        )
