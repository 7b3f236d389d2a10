"""
Stream operators for transformation.

Every operator turns an upstream async iterator into a downstream one. State
lives inside ``apply`` so one operator instance can serve any number of runs,
and every operator closes its upstream when it stops, which is how early
termination travels back to the producer.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import aclosing
from typing import (
    Any, AsyncIterator, Callable, NamedTuple, Optional, Tuple, Type, TypeVar
)

from coldflow.streams.callbacks import invoke, opened
from coldflow.streams.producer import produce

T = TypeVar('T')
U = TypeVar('U')

_NOTHING = object()


class IndexedValue(NamedTuple):
    """A value paired with its zero-based emission index."""
    index: int
    value: Any


class StreamOperator(ABC):
    """Base class for stream operators."""

    @abstractmethod
    def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[Any]:
        """Apply operator to iterator."""
        pass


class MapOperator(StreamOperator):
    """Map each element to a new value."""

    def __init__(self, func: Callable[[T], U]):
        self.func = func

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[U]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                yield await invoke(self.func, item)


class MapNotNoneOperator(StreamOperator):
    """Map each element and drop ``None`` results."""

    def __init__(self, func: Callable[[T], Optional[U]]):
        self.func = func

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[U]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                result = await invoke(self.func, item)
                if result is not None:
                    yield result


class FilterOperator(StreamOperator):
    """Filter elements by predicate."""

    def __init__(self, predicate: Callable[[T], bool], keep: bool = True):
        self.predicate = predicate
        self.keep = keep

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                if bool(await invoke(self.predicate, item)) == self.keep:
                    yield item


class InstanceFilterOperator(StreamOperator):
    """Keep only values of the given kinds."""

    def __init__(self, kinds: Tuple[Type, ...]):
        if not kinds:
            raise TypeError("filter_is_instance() needs at least one type")
        self.kinds = kinds

    async def apply(self, iterator: AsyncIterator[Any]) -> AsyncIterator[Any]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                if isinstance(item, self.kinds):
                    yield item


class TakeOperator(StreamOperator):
    """Take first n elements."""

    def __init__(self, n: int):
        self.n = n

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        async with aclosing(iterator) as upstream:
            if self.n <= 0:
                return

            taken = 0
            async for item in upstream:
                yield item
                taken += 1
                # Stop before pulling item n + 1
                if taken >= self.n:
                    break


class TakeWhileOperator(StreamOperator):
    """Take elements while predicate is true."""

    def __init__(self, predicate: Callable[[T], bool]):
        self.predicate = predicate

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                if not await invoke(self.predicate, item):
                    break
                yield item


class DropOperator(StreamOperator):
    """Skip first n elements."""

    def __init__(self, n: int):
        self.n = n

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        skipped = 0
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                if skipped < self.n:
                    skipped += 1
                    continue
                yield item


class DropWhileOperator(StreamOperator):
    """Drop elements while predicate is true."""

    def __init__(self, predicate: Callable[[T], bool]):
        self.predicate = predicate

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        dropping = True
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                if dropping and await invoke(self.predicate, item):
                    continue
                dropping = False
                yield item


class TransformOperator(StreamOperator):
    """Emit zero, one or many values per element through an emitter."""

    def __init__(self, func: Callable[[Any, T], Any]):
        self.func = func

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[Any]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                outputs = produce(lambda emit, item=item: self.func(emit, item))
                async with aclosing(outputs):
                    async for output in outputs:
                        yield output


class FlatMapOperator(StreamOperator):
    """Map each element to multiple elements."""

    def __init__(self, func: Callable[[T], Any]):
        self.func = func

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[Any]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                result = await invoke(self.func, item)
                async with opened(result) as inner:
                    async for output in inner:
                        yield output


class WithIndexOperator(StreamOperator):
    """Pair each element with its position."""

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[IndexedValue]:
        index = 0
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                yield IndexedValue(index, item)
                index += 1


class DistinctUntilChangedOperator(StreamOperator):
    """Suppress elements equal to the one emitted just before."""

    def __init__(self, key_func: Optional[Callable[[T], Any]] = None):
        self.key_func = key_func or (lambda x: x)

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        previous = _NOTHING
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                key = await invoke(self.key_func, item)
                if previous is not _NOTHING and key == previous:
                    continue
                previous = key
                yield item


class OnEachOperator(StreamOperator):
    """Run an action on each element and pass it through."""

    def __init__(self, action: Callable[[T], Any]):
        self.action = action

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        async with aclosing(iterator) as upstream:
            async for item in upstream:
                await invoke(self.action, item)
                yield item


class OnStartOperator(StreamOperator):
    """Run an action before the first element is requested."""

    def __init__(self, action: Callable[[], Any]):
        self.action = action

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        async with aclosing(iterator) as upstream:
            await invoke(self.action)
            async for item in upstream:
                yield item


class OnCompletionOperator(StreamOperator):
    """
    Run an action once the stage finishes.

    Like ``on_start`` the action belongs to a stage that has been pulled at
    least once; a stage closed before its first pull (for example under
    ``take(0)``) never started and runs neither hook.

    The action receives ``None`` on normal completion, the exception on
    failure and an ``asyncio.CancelledError`` when the run was cancelled or
    stopped early downstream.
    """

    def __init__(self, action: Callable[[Optional[BaseException]], Any]):
        self.action = action

    async def apply(self, iterator: AsyncIterator[T]) -> AsyncIterator[T]:
        try:
            async with aclosing(iterator) as upstream:
                async for item in upstream:
                    yield item
        except GeneratorExit:
            await invoke(self.action, asyncio.CancelledError())
            raise
        except BaseException as exc:
            await invoke(self.action, exc)
            raise
        await invoke(self.action, None)
