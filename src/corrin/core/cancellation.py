from __future__ import annotations
import asyncio
import inspect
from typing import Awaitable, Optional, TypeVar

from .errors import ProviderCancelledError

T = TypeVar("T")


async def run_cancellable(aw: Awaitable[T], signal: Optional[asyncio.Event] = None) -> T:
    """
    Await `aw`, aborting it if `signal` is set first.
    Signal-driven aborts raise ProviderCancelledError; cancellation of the
    calling task itself propagates as asyncio.CancelledError.
    """
    if signal is None:
        return await aw

    if signal.is_set():
        if inspect.iscoroutine(aw):
            aw.close()
        raise ProviderCancelledError("Request cancelled")

    task = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    # Let the aborted call unwind its transport before reporting.
    await asyncio.gather(task, return_exceptions=True)
    raise ProviderCancelledError("Request cancelled")
