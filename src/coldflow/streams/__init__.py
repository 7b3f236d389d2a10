"""Cold streams: builders, stages, runs and terminal drivers."""

from coldflow.streams.errors import (
    StreamError,
    ProducerError,
    EmptyStreamError,
    MultipleValuesError,
)
from coldflow.streams.producer import Emitter
from coldflow.streams.operators import (
    StreamOperator,
    IndexedValue,
)
from coldflow.streams.stream import Stream
from coldflow.streams.run import Run, RunState, run, cancel
from coldflow.streams.terminal import (
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
)
from coldflow.streams.decorators import cold_stream

__all__ = [
    "StreamError",
    "ProducerError",
    "EmptyStreamError",
    "MultipleValuesError",
    "Emitter",
    "StreamOperator",
    "IndexedValue",
    "Stream",
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
]
