"""Run profiler for timing and memory of stream emissions."""

from coldflow.profiler.profiler import (
    StreamProfiler,
    RunReport,
)
from coldflow.profiler.decorators import (
    profile_run,
)

__all__ = [
    "StreamProfiler",
    "RunReport",
    "profile_run",
]
