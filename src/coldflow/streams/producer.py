"""
Producer procedures that push values through an emit callback.

The procedure runs in its own task and hands over one value at a time: each
``await emit(value)`` parks the producer until the consuming run asks for the
next value, so nothing is ever buffered beyond the value in flight.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, TypeVar

from coldflow.streams.callbacks import invoke, opened

T = TypeVar('T')

logger = logging.getLogger(__name__)


class Emitter(Generic[T]):
    """Rendezvous between a producer procedure and the consuming run."""

    def __init__(self):
        self._slot: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = False

    async def emit(self, value: T) -> None:
        """Hand ``value`` downstream and wait until it has been consumed."""
        if self._closed:
            raise RuntimeError("emit() called after the consuming run was closed")

        accepted = asyncio.get_running_loop().create_future()
        await self._slot.put((value, accepted))
        await accepted

    async def __call__(self, value: T) -> None:
        await self.emit(value)

    async def emit_all(self, source) -> None:
        """Emit every value of a Stream, async iterable or iterable."""
        async with opened(source) as iterator:
            async for value in iterator:
                await self.emit(value)

    def close(self) -> None:
        self._closed = True


async def produce(procedure: Callable[[Emitter], Awaitable[Any]]) -> AsyncIterator[Any]:
    """
    Run ``procedure(emitter)`` and yield whatever it emits.

    Closing the generator cancels the procedure at its current suspension
    point. An exception raised by the procedure propagates from here.
    """
    emitter = Emitter()
    task = asyncio.ensure_future(invoke(procedure, emitter))
    getter = None

    try:
        while True:
            getter = asyncio.ensure_future(emitter._slot.get())
            done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)

            if getter in done:
                value, accepted = getter.result()
                getter = None
                yield value
                if not accepted.done():
                    accepted.set_result(None)
                continue

            # Procedure returned or raised without emitting again
            task.result()
            return
    finally:
        emitter.close()
        if getter is not None:
            getter.cancel()
        if not task.done():
            task.cancel()
            await asyncio.wait({task})
            if not task.cancelled() and task.exception() is not None:
                logger.warning(f"Producer raised while being cancelled: {task.exception()!r}")
