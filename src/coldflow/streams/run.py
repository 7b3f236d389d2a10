"""Active collection of a stream."""

import asyncio
import itertools
import logging
from contextlib import aclosing
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from coldflow.config import config
from coldflow.streams.callbacks import invoke
from coldflow.streams.errors import ProducerError, StreamError

T = TypeVar('T')

logger = logging.getLogger(__name__)

_run_ids = itertools.count(1)


class RunState(Enum):
    """Lifecycle of a run."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Run(Generic[T]):
    """
    One execution of a stream.

    The producer and ``on_value`` alternate strictly: the producer stays
    suspended while ``on_value`` handles a value. Exactly one of
    ``on_complete`` and ``on_error`` is called once the run ends.
    """

    def __init__(self,
                 stream,
                 on_value: Optional[Callable[[T], Any]] = None,
                 on_complete: Optional[Callable[[], Any]] = None,
                 on_error: Optional[Callable[[BaseException], Any]] = None):
        """
        Initialize run.

        Args:
            stream: Stream to consume
            on_value: Called with every value, in emission order
            on_complete: Called once after the last value
            on_error: Called once with the failure or cancellation. When
                omitted, failures are raised from :meth:`execute`.
        """
        self.id = next(_run_ids)
        self.stream = stream
        self.on_value = on_value
        self.on_complete = on_complete
        self.on_error = on_error

        self.state = RunState.PENDING
        self.emitted = 0
        self.error: Optional[BaseException] = None
        self._cancel_requested = False
        self._interrupting = False
        self._driver: Optional[asyncio.Task] = None
        self._task: Optional[asyncio.Task] = None
        self._joined = False
        self._late_report: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"Run(id={self.id}, state={self.state.value}, emitted={self.emitted})"

    @property
    def done(self) -> bool:
        return self.state in (RunState.COMPLETED, RunState.FAILED, RunState.CANCELLED)

    @property
    def cancelled(self) -> bool:
        return self.state == RunState.CANCELLED

    async def execute(self) -> None:
        """Drive the stream until it completes, fails or is cancelled."""
        if self.state != RunState.PENDING:
            raise RuntimeError(f"Run {self.id} has already been started")

        self.state = RunState.RUNNING
        self._driver = asyncio.current_task()
        logger.debug(f"Run {self.id} started")

        try:
            async with aclosing(self.stream._open()) as iterator:
                while not self._cancel_requested:
                    try:
                        value = await iterator.__anext__()
                    except StopAsyncIteration:
                        break
                    except StreamError:
                        raise
                    except Exception as e:
                        raise ProducerError(f"{type(e).__name__}: {e}") from e

                    if self._cancel_requested:
                        break
                    self.emitted += 1
                    if self.on_value is not None:
                        await invoke(self.on_value, value)
        except asyncio.CancelledError as e:
            await self._cancelled(e)
            # Cancellation issued by cancel() ends the run quietly
            if self._interrupting and self._driver.uncancel() == 0:
                return
            raise
        except Exception as e:
            self.state = RunState.FAILED
            self.error = e
            logger.warning(f"Run {self.id} failed after {self.emitted} values: {e!r}")
            if self.on_error is None:
                raise
            await invoke(self.on_error, e)
            return

        if self._cancel_requested:
            await self._cancelled(asyncio.CancelledError())
            return

        self.state = RunState.COMPLETED
        logger.debug(f"Run {self.id} completed with {self.emitted} values")
        if self.on_complete is not None:
            await invoke(self.on_complete)

    async def _cancelled(self, error: asyncio.CancelledError) -> None:
        self.state = RunState.CANCELLED
        self.error = error
        logger.debug(f"Run {self.id} cancelled after {self.emitted} values")
        if self.on_error is not None:
            await invoke(self.on_error, error)

    def cancel(self) -> None:
        """
        Request cooperative cancellation.

        Inside ``on_value``, or before the run has started, the run stops
        before asking for another value. From any other task the task
        driving the run is interrupted at its current suspension point.
        Either way the run then reports an ``asyncio.CancelledError`` to
        ``on_error`` and :meth:`execute` returns normally.
        """
        if self.done or self._cancel_requested:
            return
        self._cancel_requested = True

        driver = self._driver
        if driver is None or driver.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if driver is not current:
            self._interrupting = True
            driver.cancel()

    # Launched runs

    def start(self, scope=None) -> 'Run[T]':
        """
        Execute in a new task on ``scope`` without waiting for it.

        Args:
            scope: Anything with ``create_task`` (an ``asyncio.TaskGroup``
                or an event loop). Defaults to the running loop.
        """
        if self._task is not None:
            raise RuntimeError(f"Run {self.id} has already been launched")

        scope = scope or asyncio.get_running_loop()
        self._task = scope.create_task(self.execute(), name=config.task_name(self.id))
        self._task.add_done_callback(self._task_done)
        return self

    def _task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            if self.state == RunState.PENDING:
                # Task cancelled from outside before its first step
                self._late_report = task.get_loop().create_task(
                    self._cancelled(asyncio.CancelledError()))
            return

        error = task.exception()
        if error is not None and not self._joined and config.log_failed_launches:
            logger.error(f"Launched run {self.id} failed: {error!r}")

    async def join(self) -> None:
        """
        Wait for a launched run to finish.

        Returns quietly when the run was cancelled and raises the failure of
        a run that had no ``on_error`` callback.
        """
        if self._task is None:
            raise RuntimeError(f"Run {self.id} was not launched")

        self._joined = True
        await asyncio.wait({self._task})
        if self._late_report is not None:
            await self._late_report
        if not self._task.cancelled() and self._task.exception() is not None:
            raise self._task.exception()


async def run(stream,
              on_value: Optional[Callable[[T], Any]] = None,
              on_complete: Optional[Callable[[], Any]] = None,
              on_error: Optional[Callable[[BaseException], Any]] = None) -> Run[T]:
    """Execute ``stream`` once and return the finished run."""
    active = Run(stream, on_value, on_complete, on_error)
    await active.execute()
    return active


def cancel(active: Run) -> None:
    """Request cooperative cancellation of ``active``."""
    active.cancel()
