"""Helpers shared by stages, producers and runs."""

import inspect
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Iterator


async def invoke(func: Callable, *args) -> Any:
    """Call a plain or coroutine function and return its result."""
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _iterate_sync(iterator: Iterator) -> AsyncIterator:
    for item in iterator:
        yield item


@asynccontextmanager
async def opened(source):
    """
    Open an async iterator over ``source`` and close it on exit.

    ``source`` may be a Stream, any async iterable or a plain iterable.
    """
    if hasattr(source, '__aiter__'):
        iterator = source.__aiter__()
    else:
        iterator = _iterate_sync(iter(source))

    try:
        yield iterator
    finally:
        aclose = getattr(iterator, 'aclose', None)
        if aclose is not None:
            await aclose()
