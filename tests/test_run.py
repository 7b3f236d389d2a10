#!/usr/bin/env python3
"""
Tests for runs: callbacks, errors and cooperative cancellation.
"""

import asyncio
import unittest

from coldflow import Stream, Run, RunState, ProducerError, run, cancel


class TestRunCallbacks(unittest.IsolatedAsyncioTestCase):
    """Test value, completion and error callbacks."""

    async def test_completion(self):
        """Values arrive in order, then on_complete runs once."""
        events = []
        active = await run(
            Stream.of(1, 2, 3),
            on_value=lambda v: events.append(("value", v)),
            on_complete=lambda: events.append(("complete",)),
            on_error=lambda e: events.append(("error", e)),
        )

        self.assertEqual(events, [("value", 1), ("value", 2), ("value", 3), ("complete",)])
        self.assertEqual(active.state, RunState.COMPLETED)
        self.assertEqual(active.emitted, 3)
        self.assertIsNone(active.error)

    async def test_producer_error_goes_to_on_error(self):
        """A failing producer reports once through on_error."""
        events = []

        async def broken(emit):
            await emit(1)
            raise ValueError("boom")

        active = await run(
            Stream.from_producer(broken),
            on_value=lambda v: events.append(("value", v)),
            on_complete=lambda: events.append(("complete",)),
            on_error=lambda e: events.append(("error", type(e), type(e.__cause__))),
        )

        self.assertEqual(events, [("value", 1), ("error", ProducerError, ValueError)])
        self.assertEqual(active.state, RunState.FAILED)
        self.assertIsInstance(active.error, ProducerError)
        self.assertEqual(active.error.kind, "producer")

    async def test_error_without_handler_is_raised(self):
        """Without on_error the failure reaches the caller."""
        async def broken():
            raise KeyError("missing")
            yield

        with self.assertRaises(ProducerError) as cm:
            await run(Stream.from_producer(broken))
        self.assertIsInstance(cm.exception.__cause__, KeyError)

    async def test_on_value_error_is_not_wrapped(self):
        """Errors raised by the consumer itself pass through unchanged."""
        released = []

        async def producer(emit):
            try:
                await emit.emit_all([1, 2, 3])
            finally:
                released.append(True)

        def reject(value):
            if value == 2:
                raise KeyError(value)

        with self.assertRaises(KeyError):
            await run(Stream.from_producer(producer), on_value=reject)
        self.assertEqual(released, [True])

    async def test_run_only_once(self):
        """A run cannot be executed twice."""
        active = Run(Stream.of(1))
        await active.execute()

        with self.assertRaises(RuntimeError):
            await active.execute()

    async def test_failure_is_logged(self):
        """Failed runs log a warning."""
        with self.assertLogs('coldflow.streams.run', level='WARNING') as logs:
            await run(Stream.of(0).map(lambda v: 1 / v), on_error=lambda e: None)

        self.assertTrue(any("failed" in line for line in logs.output))


class TestRunCancellation(unittest.IsolatedAsyncioTestCase):
    """Test cooperative cancellation."""

    async def test_cancel_from_on_value(self):
        """Cancelling inside on_value stops before the next value."""
        events = []
        produced = []

        async def producer(emit):
            for i in range(10):
                produced.append(i)
                await emit(i)

        def on_value(value):
            events.append(value)
            if value == 2:
                cancel(active)

        active = Run(
            Stream.from_producer(producer),
            on_value=on_value,
            on_complete=lambda: events.append("complete"),
            on_error=lambda e: events.append(type(e)),
        )
        await active.execute()

        self.assertEqual(events, [0, 1, 2, asyncio.CancelledError])
        self.assertEqual(produced, [0, 1, 2])
        self.assertEqual(active.state, RunState.CANCELLED)
        self.assertEqual(active.emitted, 3)

    async def test_cancel_before_execute(self):
        """A run cancelled before it starts does no producer work."""
        produced = []

        async def producer(emit):
            produced.append(True)
            await emit(1)

        errors = []
        active = Run(Stream.from_producer(producer), on_error=errors.append)
        active.cancel()
        await active.execute()

        self.assertEqual(produced, [])
        self.assertEqual(active.state, RunState.CANCELLED)
        self.assertEqual(len(errors), 1)

    async def test_cancel_executing_run_from_another_task(self):
        """cancel() from another task interrupts a directly executed run."""
        received, released, errors = [], [], []
        first_value = asyncio.Event()

        async def endless(emit):
            try:
                i = 0
                while True:
                    await asyncio.sleep(0.05)
                    await emit(i)
                    i += 1
            finally:
                released.append(True)

        def on_value(value):
            received.append(value)
            first_value.set()

        active = Run(Stream.from_producer(endless), on_value=on_value, on_error=errors.append)
        task = asyncio.ensure_future(active.execute())
        await first_value.wait()
        await asyncio.sleep(0.02)
        cancel(active)
        await task

        self.assertFalse(task.cancelled())
        self.assertEqual(received, [0])
        self.assertEqual(released, [True])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], asyncio.CancelledError)
        self.assertEqual(active.state, RunState.CANCELLED)
        self.assertEqual(active.emitted, 1)

    async def test_cancel_twice_reports_once(self):
        """Repeated cancel requests report a single cancellation."""
        errors = []
        started = asyncio.Event()

        async def producer(emit):
            started.set()
            await asyncio.sleep(10)
            await emit(1)

        active = Run(Stream.from_producer(producer), on_error=errors.append)
        task = asyncio.ensure_future(active.execute())
        await started.wait()
        active.cancel()
        active.cancel()
        await task

        self.assertEqual(len(errors), 1)
        self.assertEqual(active.state, RunState.CANCELLED)

    async def test_task_cancellation_reports_and_propagates(self):
        """Cancelling the driving task reports to on_error and re-raises."""
        errors = []
        started = asyncio.Event()

        async def producer(emit):
            started.set()
            await asyncio.sleep(10)
            await emit(1)

        active = Run(Stream.from_producer(producer), on_error=errors.append)
        task = asyncio.ensure_future(active.execute())
        await started.wait()
        task.cancel()

        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], asyncio.CancelledError)
        self.assertEqual(active.state, RunState.CANCELLED)

    async def test_timeout_composed_externally(self):
        """A timeout cancels the run and releases the producer."""
        released = []

        async def slow(emit):
            try:
                await emit(1)
                await asyncio.sleep(10)
                await emit(2)
            finally:
                released.append(True)

        received = []
        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(Stream.from_producer(slow).collect(received.append), 0.05)

        self.assertEqual(received, [1])
        self.assertEqual(released, [True])

    async def test_cancel_after_completion_is_noop(self):
        """Cancelling a finished run changes nothing."""
        active = await run(Stream.of(1))
        active.cancel()
        self.assertEqual(active.state, RunState.COMPLETED)


if __name__ == '__main__':
    unittest.main()
