#!/usr/bin/env python3
"""
Tests for stream builders and cold start behavior.
"""

import asyncio
import unittest

from coldflow import Stream, cold_stream


class TestStreamBuilders(unittest.IsolatedAsyncioTestCase):
    """Test building streams from values and producers."""

    async def test_from_values_round_trip(self):
        """Collecting a value stream returns the original sequence."""
        for values in ([], [1], [1, 2, 3, 4, 5, 6, 7], ["a", None, "a"]):
            self.assertEqual(await Stream.from_values(values).to_list(), values)

    async def test_of_empty_and_range(self):
        """Test the convenience builders."""
        self.assertEqual(await Stream.of(10, 20, 30).to_list(), [10, 20, 30])
        self.assertEqual(await Stream.empty().to_list(), [])
        self.assertEqual(await Stream.range(1, 4).to_list(), [1, 2, 3])

    async def test_from_values_is_cold(self):
        """Building a value stream does not iterate its source."""
        pulled = []

        def source():
            for i in range(3):
                pulled.append(i)
                yield i

        stream = Stream.from_values(source()).map(lambda v: v * 2)
        self.assertEqual(pulled, [])

        self.assertEqual(await stream.to_list(), [0, 2, 4])
        self.assertEqual(pulled, [0, 1, 2])

    async def test_from_producer_is_cold(self):
        """Building and chaining a producer stream runs nothing."""
        events = []

        async def producer(emit):
            events.append("started")
            await emit(1)

        stream = Stream.from_producer(producer).map(lambda v: v + 1).filter(bool)
        await asyncio.sleep(0.01)
        self.assertEqual(events, [])

        self.assertEqual(await stream.to_list(), [2])
        self.assertEqual(events, ["started"])

    async def test_async_generator_producer(self):
        """Async generator functions are accepted as producers."""
        events = []

        async def numbers():
            events.append("started")
            for i in range(3):
                await asyncio.sleep(0)
                yield i

        stream = Stream.from_producer(numbers)
        self.assertEqual(events, [])
        self.assertEqual(await stream.to_list(), [0, 1, 2])
        self.assertEqual(events, ["started"])

    async def test_producer_alternates_with_consumer(self):
        """The producer waits for the consumer after every emission."""
        events = []

        async def producer(emit):
            for i in range(3):
                events.append(f"emit {i}")
                await emit(i)
                events.append(f"resumed {i}")

        await Stream.from_producer(producer).collect(lambda v: events.append(f"recv {v}"))

        self.assertEqual(events, [
            "emit 0", "recv 0", "resumed 0",
            "emit 1", "recv 1", "resumed 1",
            "emit 2", "recv 2", "resumed 2",
        ])

    async def test_producer_with_delays(self):
        """Producers may suspend between emissions."""
        async def factorials(emit):
            factorial = 1
            for i in range(1, 6):
                await asyncio.sleep(0.001)
                factorial *= i
                await emit(factorial)

        self.assertEqual(await Stream.from_producer(factorials).to_list(), [1, 2, 6, 24, 120])

    async def test_emit_all(self):
        """emit_all forwards streams, async iterables and iterables."""
        first_stream = Stream.of(1)
        second_stream = Stream.of(10, 20, 30)

        async def letters():
            yield "x"

        async def producer(emit):
            await emit("Start Emitting Second Flow here")
            await emit.emit_all(second_stream)
            await emit("Start Emitting First Flow here")
            await emit.emit_all(first_stream)
            await emit.emit_all(letters())
            await emit.emit_all(["y", "z"])

        self.assertEqual(await Stream.from_producer(producer).to_list(), [
            "Start Emitting Second Flow here", 10, 20, 30,
            "Start Emitting First Flow here", 1, "x", "y", "z",
        ])

    async def test_stream_is_rerunnable(self):
        """Every run starts the producer from scratch."""
        starts = []

        async def producer(emit):
            starts.append(len(starts))
            await emit.emit_all([1, 2])

        stream = Stream.from_producer(producer).drop_while(lambda v: v < 2)
        self.assertEqual(await stream.to_list(), [2])
        self.assertEqual(await stream.to_list(), [2])
        self.assertEqual(starts, [0, 1])

    async def test_chaining_does_not_mutate(self):
        """Stages return new streams and leave the receiver unchanged."""
        base = Stream.of(1, 2, 3)
        doubled = base.map(lambda v: v * 2)

        self.assertEqual(await base.to_list(), [1, 2, 3])
        self.assertEqual(await doubled.to_list(), [2, 4, 6])

    async def test_async_iteration(self):
        """Streams can be consumed with async for."""
        values = [v async for v in Stream.of(1, 2, 3).map(str)]
        self.assertEqual(values, ["1", "2", "3"])

    def test_source_must_be_callable(self):
        """Test stream source validation."""
        with self.assertRaises(TypeError):
            Stream([1, 2, 3])


class TestColdStreamDecorator(unittest.IsolatedAsyncioTestCase):
    """Test declaring producers with @cold_stream."""

    async def test_async_generator_function(self):
        """Decorated async generators build a new stream per call."""
        calls = []

        @cold_stream
        async def countdown(start):
            calls.append(start)
            for i in range(start, 0, -1):
                yield i

        stream = countdown(3)
        self.assertEqual(calls, [])
        self.assertEqual(await stream.to_list(), [3, 2, 1])
        self.assertEqual(await stream.to_list(), [3, 2, 1])
        self.assertEqual(calls, [3, 3])

    async def test_emitter_function(self):
        """Decorated emitter functions receive the emitter first."""
        @cold_stream
        async def multiples(emit, base, count):
            for i in range(1, count + 1):
                await emit(base * i)

        self.assertEqual(await multiples(2, 3).to_list(), [2, 4, 6])
        self.assertEqual(multiples.__name__, "multiples")


if __name__ == '__main__':
    unittest.main()
