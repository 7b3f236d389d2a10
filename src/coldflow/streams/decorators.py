"""Decorators for declaring producers."""

import functools
import inspect
from typing import Callable

from coldflow.streams.stream import Stream


def cold_stream(func: Callable) -> Callable[..., Stream]:
    """
    Turn a producer function into a function returning a cold Stream.

    ``func`` is either an async generator function or a coroutine function
    whose first argument is the emitter. Calling the decorated function only
    builds the stream; ``func`` runs once per run.

    Example:
        @cold_stream
        async def factorials(n):
            value = 1
            for i in range(1, n + 1):
                await asyncio.sleep(0.1)
                value *= i
                yield value

        await factorials(5).to_list()
    """
    if inspect.isasyncgenfunction(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Stream:
            return Stream(lambda: func(*args, **kwargs))
    else:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Stream:
            return Stream.from_producer(lambda emit: func(emit, *args, **kwargs))

    return wrapper
