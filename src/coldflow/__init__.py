"""
coldflow: cold, cancellable async streams for asyncio.

A Stream describes how to produce values and does nothing until a terminal
operator runs it. Stages such as ``map``, ``filter`` and ``take`` build new
streams; terminal operators such as ``collect``, ``to_list`` and ``first``
start a run in which producer and consumer take turns.
"""

from coldflow.config import FlowConfig
from coldflow.timing import current_millis, elapsed_millis, log_elapsed
from coldflow.streams import (
    Stream,
    Emitter,
    IndexedValue,
    Run,
    RunState,
    run,
    cancel,
    collect,
    first,
    last,
    single,
    to_list,
    to_set,
    fold,
    reduce,
    count,
    launch,
    cold_stream,
    StreamError,
    ProducerError,
    EmptyStreamError,
    MultipleValuesError,
)

__version__ = "0.1.0"
__license__ = "Apache-2.0"

__all__ = [
    "FlowConfig",
    "current_millis",
    "elapsed_millis",
    "log_elapsed",
    "Stream",
    "Emitter",
    "IndexedValue",
    "Run",
    "RunState",
    "run",
    "cancel",
    "collect",
    "first",
    "last",
    "single",
    "to_list",
    "to_set",
    "fold",
    "reduce",
    "count",
    "launch",
    "cold_stream",
    "StreamError",
    "ProducerError",
    "EmptyStreamError",
    "MultipleValuesError",
]
