"""
Terminal drivers.

Each driver starts exactly one run of the stream it is given and decides how
the values are consumed. Drivers that stop early (``first``, ``single``)
cancel the run so the producer does no further work.
"""

from typing import Any, Callable, KeysView, List, Optional, TypeVar

from coldflow.streams.callbacks import invoke
from coldflow.streams.errors import EmptyStreamError, MultipleValuesError
from coldflow.streams.run import Run

T = TypeVar('T')
U = TypeVar('U')

_NOTHING = object()


async def collect(stream, on_value: Optional[Callable[[T], Any]] = None) -> None:
    """Drive every value through ``on_value`` until the stream completes."""
    await Run(stream, on_value).execute()


async def first(stream, predicate: Optional[Callable[[T], bool]] = None) -> T:
    """
    Return the first value (matching ``predicate`` if given).

    Raises:
        EmptyStreamError: The stream completed without a (matching) value
    """
    found = _NOTHING

    async def accept(value):
        nonlocal found
        if predicate is None or await invoke(predicate, value):
            found = value
            active.cancel()

    active = Run(stream, accept)
    await active.execute()

    if found is _NOTHING:
        if predicate is None:
            raise EmptyStreamError("Stream is empty")
        raise EmptyStreamError("Stream contains no value matching the predicate")
    return found


async def last(stream) -> T:
    """
    Return the last value once the stream completes.

    Raises:
        EmptyStreamError: The stream completed without a value
    """
    latest = _NOTHING

    def accept(value):
        nonlocal latest
        latest = value

    await Run(stream, accept).execute()

    if latest is _NOTHING:
        raise EmptyStreamError("Stream is empty")
    return latest


async def single(stream) -> T:
    """
    Return the only value of the stream.

    Raises:
        EmptyStreamError: The stream completed without a value
        MultipleValuesError: A second value arrived
    """
    only = _NOTHING

    def accept(value):
        nonlocal only
        if only is not _NOTHING:
            raise MultipleValuesError("Stream has more than one element")
        only = value

    await Run(stream, accept).execute()

    if only is _NOTHING:
        raise EmptyStreamError("Stream is empty")
    return only


async def to_list(stream) -> List[T]:
    """Collect all values into a list."""
    values: List[T] = []
    await Run(stream, values.append).execute()
    return values


async def to_set(stream) -> KeysView:
    """
    Collect distinct values.

    Returns a set-like view that keeps values in first-seen order.
    """
    seen = {}
    await Run(stream, lambda value: seen.setdefault(value, None)).execute()
    return seen.keys()


async def fold(stream, initial: U, accumulator: Callable[[U, T], U]) -> U:
    """Reduce all values with ``accumulator(acc, value)`` starting from ``initial``."""
    result = initial

    async def accept(value):
        nonlocal result
        result = await invoke(accumulator, result, value)

    await Run(stream, accept).execute()
    return result


async def reduce(stream, operation: Callable[[T, T], T]) -> T:
    """
    Reduce all values with ``operation(acc, value)`` starting from the first.

    Raises:
        EmptyStreamError: The stream completed without a value
    """
    result = _NOTHING

    async def accept(value):
        nonlocal result
        if result is _NOTHING:
            result = value
        else:
            result = await invoke(operation, result, value)

    await Run(stream, accept).execute()

    if result is _NOTHING:
        raise EmptyStreamError("Empty stream can't be reduced")
    return result


async def count(stream, predicate: Optional[Callable[[T], bool]] = None) -> int:
    """Count values (matching ``predicate`` if given)."""
    total = 0

    async def accept(value):
        nonlocal total
        if predicate is None or await invoke(predicate, value):
            total += 1

    await Run(stream, accept).execute()
    return total


def launch(stream, on_value: Optional[Callable[[T], Any]] = None, scope=None) -> Run[T]:
    """
    Start a run in a background task and return it without waiting.

    Every launch re-runs the producer from scratch. Await ``run.join()`` to
    wait for it or call ``run.cancel()`` to stop it.

    Example:
        async with asyncio.TaskGroup() as group:
            stream.launch(print, scope=group)
            stream.launch(print, scope=group)
    """
    return Run(stream, on_value).start(scope)
