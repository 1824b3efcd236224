"""Fail-fast fan-out used by every concurrent ledger read."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable


async def gather_fail_fast(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; the first failure cancels the rest.

    Results come back in argument order. The exception of the awaitable
    that failed first is re-raised unchanged once every sibling has been
    cancelled and has finished. Cancelling the caller cancels every child.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    finished: list[asyncio.Future[Any]] = []
    for task in tasks:
        task.add_done_callback(finished.append)

    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    failures = [
        task.exception()
        for task in finished
        if not task.cancelled() and task.exception() is not None
    ]
    if failures:
        raise failures[0]  # type: ignore[misc]
    return [task.result() for task in tasks]
