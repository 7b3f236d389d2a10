"""
Run profiler: timing and memory of each emission.

Features:
- Delay until the first emission
- Inter-emission interval statistics
- Peak process memory while the run was active
- Outcome of the run (completed, failed, cancelled)
"""

import json
import asyncio
import logging
import time
import psutil
import numpy as np
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, asdict

from coldflow.config import config

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Profiling report for one run."""
    timestamp: str
    duration: float
    emissions: int
    first_emission_delay: Optional[float]
    mean_interval: float
    p95_interval: float
    max_interval: float
    peak_memory: int
    outcome: str
    emission_timeline: List[Tuple[float, int]]
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return asdict(self)

    def save(self, path: str) -> None:
        """Save report to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class StreamProfiler:
    """Record when a stream emits and how much memory the process holds."""

    def __init__(self, track_memory: Optional[bool] = None):
        self.track_memory = config.profile_memory if track_memory is None else track_memory
        self._process = psutil.Process()
        self._reset()

    def _reset(self) -> None:
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._timeline: List[Tuple[float, int]] = []
        self._outcome = "pending"

    def _memory(self) -> int:
        if not self.track_memory:
            return 0
        return self._process.memory_info().rss

    def _started(self) -> None:
        self._reset()
        self._start_time = time.perf_counter()
        self._outcome = "running"

    def _emitted(self, value: Any) -> None:
        self._timeline.append((time.perf_counter() - self._start_time, self._memory()))

    def _finished(self, cause: Optional[BaseException]) -> None:
        self._end_time = time.perf_counter()
        if cause is None:
            self._outcome = "completed"
        elif isinstance(cause, asyncio.CancelledError):
            self._outcome = "cancelled"
        else:
            self._outcome = "failed"
        logger.info(self.report().summary)

    def attach(self, stream):
        """
        Wrap ``stream`` so each run is recorded.

        The profiler keeps the measurements of the most recent run.
        """
        return (stream
                .on_start(self._started)
                .on_each(self._emitted)
                .on_completion(self._finished))

    def report(self) -> RunReport:
        """Build report for the most recent run."""
        if self._start_time is None:
            raise RuntimeError("No run has been profiled yet")

        end_time = self._end_time if self._end_time is not None else time.perf_counter()
        duration = end_time - self._start_time

        times = np.array([t for t, _ in self._timeline], dtype=float)
        intervals = np.diff(times) if len(times) > 1 else np.array([], dtype=float)

        if len(intervals):
            mean_interval = float(np.mean(intervals))
            p95_interval = float(np.percentile(intervals, 95))
            max_interval = float(np.max(intervals))
        else:
            mean_interval = p95_interval = max_interval = 0.0

        first_delay = float(times[0]) if len(times) else None
        peak_memory = max((m for _, m in self._timeline), default=self._memory())

        summary = self._generate_summary(duration, len(times), first_delay,
                                         mean_interval, peak_memory)

        return RunReport(
            timestamp=datetime.now().isoformat(),
            duration=duration,
            emissions=len(times),
            first_emission_delay=first_delay,
            mean_interval=mean_interval,
            p95_interval=p95_interval,
            max_interval=max_interval,
            peak_memory=peak_memory,
            outcome=self._outcome,
            emission_timeline=list(self._timeline),
            summary=summary
        )

    def _generate_summary(self, duration: float, emissions: int,
                          first_delay: Optional[float], mean_interval: float,
                          peak_memory: int) -> str:
        """Generate human-readable summary."""
        summary_parts = [
            f"Run Profile ({self._outcome})",
            f"Duration: {duration * 1000:.1f}ms",
            f"Emissions: {emissions}",
        ]

        if first_delay is not None:
            summary_parts.append(f"First emission after: {first_delay * 1000:.1f}ms")
        if emissions > 1:
            summary_parts.append(f"Mean interval: {mean_interval * 1000:.1f}ms")
        if self.track_memory:
            summary_parts.append(f"Peak Memory: {peak_memory / (1024 * 1024):.1f}MB")

        return "\n".join(summary_parts)
