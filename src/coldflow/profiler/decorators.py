"""Decorators for easy profiling."""

import functools
from typing import Any, Callable, Optional

from coldflow.config import config
from coldflow.profiler.profiler import StreamProfiler
from coldflow.streams.callbacks import invoke


def profile_run(print_summary: Optional[bool] = None,
                track_memory: Optional[bool] = None) -> Callable:
    """
    Decorator to profile the stream returned by a function.

    The wrapped function collects the stream into a list and returns it; the
    report of that run is stored on ``wrapper.last_report``.

    Args:
        print_summary: Print summary to console (defaults to config)
        track_memory: Sample process memory at each emission

    Example:
        @profile_run()
        def factorials():
            return Stream.from_producer(produce_factorials)

        values = await factorials()
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            profiler = StreamProfiler(track_memory=track_memory)
            stream = await invoke(func, *args, **kwargs)

            try:
                return await profiler.attach(stream).to_list()
            finally:
                report = profiler.report()
                wrapper.last_report = report

                show = config.profile_summary if print_summary is None else print_summary
                if show:
                    print(report.summary)

        wrapper.last_report = None
        return wrapper

    return decorator
