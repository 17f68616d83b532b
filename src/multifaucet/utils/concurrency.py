"""Concurrency helpers for batched upstream queries.

Provides a gather that tolerates partial failure so one slow or broken
endpoint never sinks a whole batch.
"""

import asyncio
import logging
from typing import Awaitable, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_settled(
    aws: Iterable[Awaitable[T]],
    labels: Optional[Iterable[str]] = None,
) -> list[T]:
    """Run awaitables concurrently and keep only the successful results.

    Failures are logged and dropped; result order follows input order.

    Args:
        aws: Awaitables to run
        labels: Optional description per awaitable, used in log lines

    Returns:
        Results of the awaitables that completed without raising
    """
    aws = list(aws)
    names = list(labels) if labels is not None else [str(i) for i in range(len(aws))]

    results = await asyncio.gather(*aws, return_exceptions=True)

    settled: list[T] = []
    for name, result in zip(names, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.warning("Dropping failed query %s: %s", name, result)
            continue
        settled.append(result)
    return settled
