"""
Cold, cooperatively scheduled streams.
"""

import inspect
from typing import (
    Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable, List,
    Optional, Type, TypeVar, Union, TYPE_CHECKING
)

from coldflow.streams.operators import (
    StreamOperator, MapOperator, MapNotNoneOperator, FilterOperator,
    InstanceFilterOperator, TakeOperator, TakeWhileOperator, DropOperator,
    DropWhileOperator, TransformOperator, FlatMapOperator, WithIndexOperator,
    DistinctUntilChangedOperator, OnEachOperator, OnStartOperator,
    OnCompletionOperator, IndexedValue,
)
from coldflow.streams.producer import Emitter, produce

if TYPE_CHECKING:
    from coldflow.streams.run import Run

T = TypeVar('T')
U = TypeVar('U')


class Stream(AsyncIterable[T]):
    """
    A lazy description of how to produce a sequence of values.

    Nothing runs until a terminal operator (``collect``, ``to_list``,
    ``first``, ``launch`` ...) starts a run. Every run calls the source again,
    so a stream can be collected any number of times.
    """

    def __init__(self, source: Callable[[], AsyncIterator[T]]):
        """
        Initialize stream.

        Args:
            source: Callable returning a fresh async iterator for each run
        """
        if not callable(source):
            raise TypeError("Source must be a callable returning an async iterator")

        self._source = source
        self._operators: List[StreamOperator] = []

    def _open(self) -> AsyncIterator[T]:
        """Create iterator with all operators applied."""
        iterator = self._source()

        # Apply operators in sequence
        for op in self._operators:
            iterator = op.apply(iterator)

        return iterator

    def __aiter__(self) -> AsyncIterator[T]:
        return self._open()

    def _then(self, operator: StreamOperator) -> 'Stream':
        new_stream = Stream(self._source)
        new_stream._operators = self._operators.copy()
        new_stream._operators.append(operator)
        return new_stream

    # Transformation operators

    def map(self, func: Callable[[T], U]) -> 'Stream[U]':
        """Apply function to each element."""
        return self._then(MapOperator(func))

    def map_not_none(self, func: Callable[[T], Optional[U]]) -> 'Stream[U]':
        """Apply function to each element, dropping ``None`` results."""
        return self._then(MapNotNoneOperator(func))

    def filter(self, predicate: Callable[[T], bool]) -> 'Stream[T]':
        """Keep only elements matching predicate."""
        return self._then(FilterOperator(predicate))

    def filter_not(self, predicate: Callable[[T], bool]) -> 'Stream[T]':
        """Drop elements matching predicate."""
        return self._then(FilterOperator(predicate, keep=False))

    def filter_not_none(self) -> 'Stream[T]':
        """Drop ``None`` elements."""
        return self._then(FilterOperator(lambda item: item is not None))

    def filter_is_instance(self, *kinds: Type[U]) -> 'Stream[U]':
        """Keep only elements that are instances of one of ``kinds``."""
        return self._then(InstanceFilterOperator(kinds))

    def take(self, n: int) -> 'Stream[T]':
        """Take first n elements, then stop the producer."""
        return self._then(TakeOperator(n))

    def take_while(self, predicate: Callable[[T], bool]) -> 'Stream[T]':
        """Take elements until predicate first fails, then stop the producer."""
        return self._then(TakeWhileOperator(predicate))

    def drop(self, n: int) -> 'Stream[T]':
        """Skip first n elements."""
        return self._then(DropOperator(n))

    def drop_while(self, predicate: Callable[[T], bool]) -> 'Stream[T]':
        """Skip elements while predicate holds."""
        return self._then(DropWhileOperator(predicate))

    def transform(self, func: Callable[[Emitter, T], Awaitable[Any]]) -> 'Stream[Any]':
        """
        Emit any number of values per element.

        ``func(emit, value)`` is a coroutine function; every ``await emit(x)``
        sends ``x`` downstream.

        Example:
            async def twice(emit, value):
                await emit(f"Initial Value {value}")
                await emit(f"Modified Value {value * 2}")

            stream.transform(twice)
        """
        return self._then(TransformOperator(func))

    def flat_map(self, func: Callable[[T], Union[Iterable[U], AsyncIterable[U]]]) -> 'Stream[U]':
        """Map each element to an iterable, async iterable or stream and flatten."""
        return self._then(FlatMapOperator(func))

    def with_index(self) -> 'Stream[IndexedValue]':
        """Pair each element with its zero-based index."""
        return self._then(WithIndexOperator())

    def distinct_until_changed(self, key: Optional[Callable[[T], Any]] = None) -> 'Stream[T]':
        """Suppress elements equal to their immediate predecessor."""
        return self._then(DistinctUntilChangedOperator(key))

    def on_each(self, action: Callable[[T], Any]) -> 'Stream[T]':
        """Run action on each element before passing it on."""
        return self._then(OnEachOperator(action))

    def on_start(self, action: Callable[[], Any]) -> 'Stream[T]':
        """Run action when a run starts pulling from this stream."""
        return self._then(OnStartOperator(action))

    def on_completion(self, action: Callable[[Optional[BaseException]], Any]) -> 'Stream[T]':
        """Run action with the completion cause (``None`` when successful)."""
        return self._then(OnCompletionOperator(action))

    # Terminal operators

    async def collect(self, on_value: Optional[Callable[[T], Any]] = None) -> None:
        """Run the stream, passing every element to ``on_value``."""
        from coldflow.streams import terminal
        await terminal.collect(self, on_value)

    async def first(self, predicate: Optional[Callable[[T], bool]] = None) -> T:
        """Get first (matching) element and stop the producer."""
        from coldflow.streams import terminal
        return await terminal.first(self, predicate)

    async def last(self) -> T:
        """Get last element."""
        from coldflow.streams import terminal
        return await terminal.last(self)

    async def single(self) -> T:
        """Get the only element."""
        from coldflow.streams import terminal
        return await terminal.single(self)

    async def to_list(self) -> List[T]:
        """Collect all elements into a list."""
        from coldflow.streams import terminal
        return await terminal.to_list(self)

    async def to_set(self):
        """Collect distinct elements in first-seen order."""
        from coldflow.streams import terminal
        return await terminal.to_set(self)

    async def fold(self, initial: U, accumulator: Callable[[U, T], U]) -> U:
        """Reduce stream to single value starting from ``initial``."""
        from coldflow.streams import terminal
        return await terminal.fold(self, initial, accumulator)

    async def reduce(self, operation: Callable[[T, T], T]) -> T:
        """Reduce stream to single value starting from the first element."""
        from coldflow.streams import terminal
        return await terminal.reduce(self, operation)

    async def count(self, predicate: Optional[Callable[[T], bool]] = None) -> int:
        """Count (matching) elements."""
        from coldflow.streams import terminal
        return await terminal.count(self, predicate)

    def launch(self, on_value: Optional[Callable[[T], Any]] = None, scope=None) -> 'Run':
        """Start a run in the background and return its handle."""
        from coldflow.streams import terminal
        return terminal.launch(self, on_value, scope)

    # Factory methods

    @classmethod
    def from_values(cls, items: Iterable[T]) -> 'Stream[T]':
        """Create stream emitting each item in order."""
        async def values():
            for item in items:
                yield item
        return cls(values)

    @classmethod
    def of(cls, *values: T) -> 'Stream[T]':
        """Create stream of the given values."""
        return cls.from_values(values)

    @classmethod
    def empty(cls) -> 'Stream[Any]':
        """Create stream that completes without emitting."""
        return cls.from_values(())

    @classmethod
    def range(cls, *args) -> 'Stream[int]':
        """Create stream of integers."""
        return cls.from_values(range(*args))

    @classmethod
    def from_producer(cls, procedure: Callable) -> 'Stream[Any]':
        """
        Create stream from a producer procedure.

        Args:
            procedure: Either an async generator function taking no
                arguments, or a coroutine function taking an ``Emitter``
                and awaiting ``emit(value)`` for each value.

        Example:
            async def numbers(emit):
                await emit(1)
                await asyncio.sleep(0.1)
                await emit(2)

            Stream.from_producer(numbers)
        """
        if inspect.isasyncgenfunction(procedure):
            return cls(procedure)
        return cls(lambda: produce(procedure))
