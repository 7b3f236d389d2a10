"""Wall-clock helpers for timing stream demos."""

import time

from coldflow.config import config


def current_millis() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def elapsed_millis(start_time: int) -> int:
    """Milliseconds passed since ``start_time``."""
    return current_millis() - start_time


def log_elapsed(start_time: int, message: str) -> None:
    """
    Print ``message`` annotated with the time passed since ``start_time``.

    Args:
        start_time: Reference point from :func:`current_millis`
        message: Text to print after the elapsed time

    Example:
        start = current_millis()
        await stream.collect(lambda v: log_elapsed(start, f"Result {v}"))
    """
    print(config.elapsed_format.format(elapsed=elapsed_millis(start_time), message=message))
