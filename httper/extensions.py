"""
httper Extensions - helpers for running many requests at once.

* :func:`gather`       - await many response futures / stages concurrently
* :func:`gather_json`  - send many builders and decode every body as JSON

Each request is an independent exchange over the client's shared pool. With
``return_exceptions=False`` the first failure cancels the requests still
pending and is raised; otherwise failures are returned in place.

Examples
--------
>>> async with httper.HttperClient() as client:
...     users = await gather_json(
...         [client.get(f"https://api.example.com/users/{i}") for i in range(50)],
...         type_=User,
...         max_concurrency=10,
...     )
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Sequence
from typing import Any

import anyio

from ._builders import RequestBuilder
from ._exceptions import HttperError

logger = logging.getLogger("httper")


async def gather(
    awaitables: Sequence[Awaitable[Any]],
    *,
    max_concurrency: int = 10,
    return_exceptions: bool = False,
) -> list[Any]:
    """Await ``awaitables`` concurrently, at most ``max_concurrency`` at a time.

    Parameters
    ----------
    awaitables:
        Response futures or their stages (``future.json(...)``,
        ``future.bytes()`` ...).
    max_concurrency:
        Maximum in-flight requests (default ``10``).
    return_exceptions:
        If ``True``, :class:`~httper.HttperError` failures are returned
        inline rather than raised.

    Returns
    -------
    list[Any]
        One result per awaitable, in input order.
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")
    if not awaitables:
        return []

    results: list[Any] = [None] * len(awaitables)
    failures: list[HttperError] = []
    limiter = anyio.CapacityLimiter(max_concurrency)

    async with anyio.create_task_group() as tg:

        async def run(index: int, awaitable: Awaitable[Any]) -> None:
            async with limiter:
                try:
                    results[index] = await awaitable
                except HttperError as exc:
                    logger.debug("Request %d of %d failed: %r", index, len(awaitables), exc)
                    if return_exceptions:
                        results[index] = exc
                        return
                    failures.append(exc)
                    tg.cancel_scope.cancel()

        for index, awaitable in enumerate(awaitables):
            tg.start_soon(run, index, awaitable)

    # Stages cancelled before they started were never awaited.
    for awaitable in awaitables:
        if inspect.iscoroutine(awaitable) and inspect.getcoroutinestate(awaitable) == inspect.CORO_CREATED:
            awaitable.close()

    if failures:
        raise failures[0]
    return results


async def gather_json(
    builders: Sequence[RequestBuilder],
    *,
    type_: Any = None,
    max_concurrency: int = 10,
    return_exceptions: bool = False,
) -> list[Any]:
    """Send every builder and decode each response body as JSON into ``type_``."""
    return await gather(
        [builder.send().json(type_) for builder in builders],
        max_concurrency=max_concurrency,
        return_exceptions=return_exceptions,
    )
