"""Race an awaitable against a single owned timer.

The timer is cancelled as soon as the operation settles. When the timer wins,
the operation is abandoned rather than cancelled and travels on the raised
``LinkTimeoutError`` so the caller can release whatever it was acquiring.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Optional, TypeVar

from .link_errors import LinkTimeoutError

T = TypeVar("T")


async def race_timeout(
    operation: Awaitable[T],
    timeout_ms: float,
    message: str,
    *,
    port: Optional[int] = None,
) -> T:
    """Return the operation's result unless ``timeout_ms`` elapses first.

    Args:
        operation: Coroutine or future to await.
        timeout_ms: Budget in milliseconds; non-positive budgets expire on the
            next loop iteration.
        message: Text of the ``LinkTimeoutError`` raised on expiry.
        port: Port recorded on the timeout error.

    Returns:
        Whatever the operation resolves to. Its own exceptions propagate.

    Raises:
        LinkTimeoutError: If the timer fires first.
    """
    loop = asyncio.get_running_loop()
    task: "asyncio.Future[T]" = asyncio.ensure_future(operation)
    expired: "asyncio.Future[None]" = loop.create_future()
    handle = loop.call_later(max(timeout_ms, 0) / 1000.0, _expire, expired)
    try:
        await asyncio.wait({task, expired}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        handle.cancel()
        task.cancel()
        raise
    if task.done():
        handle.cancel()
        return task.result()
    raise LinkTimeoutError(message, port=port, context="timeout", abandoned=task)


def dispose_abandoned(task: "Optional[asyncio.Future[Any]]") -> None:
    """Cancel an operation that lost its race.

    If it still manages to finish with a ``(reader, writer)`` pair, the
    transport is aborted so a late connection is never left open.
    """
    if task is None:
        return
    task.cancel()
    task.add_done_callback(_release_late_result)


def _release_late_result(task: "asyncio.Future[Any]") -> None:
    if task.cancelled() or task.exception() is not None:
        return
    result = task.result()
    if isinstance(result, tuple) and len(result) == 2:
        writer = result[1]
        if isinstance(writer, asyncio.StreamWriter):
            writer.transport.abort()


def _expire(expired: "asyncio.Future[Any]") -> None:
    if not expired.done():
        expired.set_result(None)


__all__ = ["dispose_abandoned", "race_timeout"]
