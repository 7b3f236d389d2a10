#!/usr/bin/env python3
"""
Returning values: single item vs list vs lazy iterator vs cold stream.

Each variant computes the factorials of 1..5 and prints when every result
becomes available:

- Single value: blocks until the final value is ready.
- List: all intermediate values, but only after the whole list is built.
- Generator: lazy, yet every ``time.sleep`` blocks the iterating thread.
- Stream: lazy and non-blocking; ``asyncio.sleep`` lets other tasks run.
"""

import asyncio
import time

from coldflow import Stream, cold_stream, current_millis, log_elapsed


def factorial_single(num: int) -> int:
    factorial = 1
    for i in range(1, num + 1):
        time.sleep(0.01)  # blocks the thread
        factorial *= i
    return factorial


def factorial_list(num: int) -> list:
    results = []
    factorial = 1
    for i in range(1, num + 1):
        time.sleep(0.01)  # blocks the thread
        factorial *= i
        results.append(factorial)
    return results


def factorial_generator(num: int):
    factorial = 1
    for i in range(1, num + 1):
        time.sleep(0.2)  # blocks the thread while iterating
        factorial *= i
        yield factorial


@cold_stream
async def factorial_stream(num: int):
    factorial = 1
    for i in range(1, num + 1):
        await asyncio.sleep(0.1)
        factorial *= i
        yield factorial


def run_single_example():
    print("--- Single item (blocking) ---")
    start_time = current_millis()
    log_elapsed(start_time, f"Result {factorial_single(5)}")
    print("Single-item example finished (work completed before returning).")


def run_list_example():
    print("--- List (blocking; results available only at the end) ---")
    start_time = current_millis()
    for value in factorial_list(5):
        log_elapsed(start_time, f"Result {value}")
    print("List example finished (list was fully computed before iteration started).")


def run_generator_example():
    print("--- Generator (lazy, but still blocking during iteration) ---")
    start_time = current_millis()
    for value in factorial_generator(5):
        log_elapsed(start_time, f"Result {value}")
    print("Generator example finished (values produced during iteration).")


async def run_stream_example():
    print("--- Stream (non-blocking & cancellable) ---")
    start_time = current_millis()

    print("Collect directly (this suspends until the stream completes):")
    await factorial_stream(5).collect(lambda value: log_elapsed(start_time, f"Result {value}"))
    log_elapsed(start_time, "Direct collect finished")

    print("Launch in the background (the caller keeps going):")
    run = factorial_stream(5).launch(lambda value: log_elapsed(start_time, f"Launched result {value}"))
    log_elapsed(start_time, "Launch returned immediately")
    await run.join()
    log_elapsed(start_time, "Launched run joined")

    print("Stream description without a terminal operator does nothing:")
    Stream.from_values([1, 2]).on_each(lambda v: print(f"Never printed {v}"))


def main():
    print("=== Returning Values Demo (single vs list vs generator vs stream) ===")
    run_single_example()
    print()
    run_list_example()
    print()
    run_generator_example()
    print()
    asyncio.run(run_stream_example())
    print()
    print("=== Done ===")


if __name__ == "__main__":
    main()
