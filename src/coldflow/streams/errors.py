"""
Errors raised by stream runs and terminal drivers.
"""


class StreamError(Exception):
    """Base class for stream failures."""

    kind = "stream"


class ProducerError(StreamError):
    """A producer procedure or a stage callback raised."""

    kind = "producer"


class EmptyStreamError(StreamError, LookupError):
    """A terminal driver needed at least one value and none arrived."""

    kind = "empty"


class MultipleValuesError(StreamError, ValueError):
    """A terminal driver needed at most one value and a second arrived."""

    kind = "multiple"
