#!/usr/bin/env python3
"""
Basic usage examples for coldflow.
"""

import asyncio
import logging

from coldflow import (
    Stream,
    EmptyStreamError,
    MultipleValuesError,
    current_millis,
    log_elapsed,
)
from coldflow.profiler import profile_run


async def example_builders():
    """Example: Building streams."""
    print("\n=== Builders ===")

    await Stream.of(1).collect(lambda v: print(f"first stream: {v}"))
    second = Stream.of(10, 20, 30)
    await second.collect(lambda v: print(f"second stream: {v}"))
    await Stream.from_values([1, 2, 3, 4, 5, 6, 7]).collect(lambda v: print(f"from_values: {v}"))

    async def mixed(emit):
        await asyncio.sleep(0.1)
        await emit("Start emitting second stream here")
        await emit.emit_all(second)
        await asyncio.sleep(0.1)
        await emit("Start emitting first stream here")
        await emit.emit_all(Stream.of(1))

    await Stream.from_producer(mixed).collect(lambda v: print(f"from_producer: {v}"))


async def example_operators():
    """Example: Intermediate operators."""
    print("\n=== Operators ===")

    table = await Stream.range(1, 11).map(lambda i: i * 2).to_list()
    print(f"map (table of 2): {table}")

    doubled = Stream.of(1, None, 2, None, 3, None).map_not_none(lambda v: v and v * 2)
    print(f"map_not_none: {await doubled.to_list()}")

    numbers = Stream.range(1, 21)
    print(f"filter: {await numbers.filter(lambda v: v % 2 == 0).to_list()}")
    print(f"filter_not: {await numbers.filter_not(lambda v: v % 2 == 0).to_list()}")
    print(f"filter_not_none: {await Stream.of(1, 2, None, 4, None, 6).filter_not_none().to_list()}")

    mixed = Stream.of(1, "Emitting 1", 2, "Emitting 2")
    print(f"filter_is_instance(str): {await mixed.filter_is_instance(str).to_list()}")
    print(f"filter_is_instance(int): {await mixed.filter_is_instance(int).to_list()}")

    eight = Stream.range(1, 9)
    print(f"take(5): {await eight.take(5).to_list()}")
    print(f"take_while(< 5): {await eight.take_while(lambda v: v < 5).to_list()}")
    print(f"drop(5): {await eight.drop(5).to_list()}")
    print(f"drop_while(< 5): {await eight.drop_while(lambda v: v < 5).to_list()}")

    async def initial_and_modified(emit, value):
        await emit(f"Initial Value {value}")
        await emit(f"Modified Value {value * 2}")

    print(f"transform: {await Stream.of(1, 2, 3).transform(initial_and_modified).to_list()}")

    async for indexed in Stream.of("a", "b", "c").with_index():
        print(f"with_index {indexed.index} with_value {indexed.value}")

    repeated = Stream.of(1, 1, 2, 1, 2, 3, 4, 5, 1).distinct_until_changed()
    print(f"distinct_until_changed: {await repeated.to_list()}")


async def example_terminal_operators():
    """Example: Terminal operators."""
    print("\n=== Terminal Operators ===")

    async def one_two(emit):
        print("Emitting 1")
        await emit(1)
        print("Emitting 2")
        await emit(2)
        await emit(2)

    stream = Stream.from_producer(one_two)
    print(f"first: {await stream.first()}")
    print(f"first(> 1): {await stream.first(lambda v: v > 1)}")
    print(f"last: {await stream.last()}")
    print(f"to_list: {await stream.to_list()}")
    print(f"to_set: {set(await stream.to_set())}")
    print(f"fold: {await Stream.range(1, 6).fold(2, lambda acc, v: acc * v)}")
    print(f"single: {await Stream.of(1).single()}")

    try:
        await stream.single()
    except MultipleValuesError as e:
        print(f"single on two values: {e.kind} ({e})")

    try:
        await Stream.empty().single()
    except EmptyStreamError as e:
        print(f"single on no values: {e.kind} ({e})")


async def example_launch():
    """Example: Launching runs concurrently."""
    print("\n=== Launch ===")
    start_time = current_millis()

    async def ticks(emit):
        await asyncio.sleep(0.1)
        await emit(1)
        await asyncio.sleep(0.1)
        await emit(2)

    stream = Stream.from_producer(ticks)
    async with asyncio.TaskGroup() as group:
        stream.launch(lambda v: log_elapsed(start_time, f"Received {v} with launch - A"), scope=group)
        stream.launch(lambda v: log_elapsed(start_time, f"Received {v} with launch - B"), scope=group)

    await stream.collect(lambda v: log_elapsed(start_time, f"Received {v} in sequential collect - 1"))
    await stream.collect(lambda v: log_elapsed(start_time, f"Received {v} in sequential collect - 2"))


async def example_profiling():
    """Example: Profiling a run."""
    print("\n=== Profiling ===")

    @profile_run()
    def factorials():
        async def produce(emit):
            factorial = 1
            for i in range(1, 6):
                await asyncio.sleep(0.05)
                factorial *= i
                await emit(factorial)
        return Stream.from_producer(produce)

    print(f"Factorials: {await factorials()}")


async def main():
    await example_builders()
    await example_operators()
    await example_terminal_operators()
    await example_launch()
    await example_profiling()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
