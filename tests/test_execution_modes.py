from __future__ import annotations

import importlib.util
import unittest
from unittest import mock


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for execution mode tests")
class ExecutionModeTests(unittest.TestCase):
    def _source(self):
        from pararray import ParallelArray

        return ParallelArray([1, 2, 3])

    def test_parallel_mode_always_declines(self) -> None:
        from pararray.buffer import Buffer
        from pararray.modes import ExecutionStatus, parallel
        from pararray.shape import IndexInfo

        source = self._source()
        outcomes = [
            parallel.build(IndexInfo([3]).initialize(0), lambda i: i, Buffer.allocate(3)),
            parallel.map(source, lambda x, i, s: x, Buffer.allocate(3)),
            parallel.reduce(source, lambda a, b: a + b, None),
            parallel.scatter(source, [0, 1, 2], None, None, Buffer.allocate(3)),
            parallel.filter(source, [1, 1, 1], Buffer.allocate(0)),
        ]
        self.assertTrue(all(o.status is ExecutionStatus.DECLINED for o in outcomes))

    def test_sequential_mode_reports_success(self) -> None:
        from pararray.modes import ExecutionStatus, sequential

        outcome = sequential.reduce(self._source(), lambda a, b: a + b, None)
        self.assertIs(outcome.status, ExecutionStatus.SUCCEEDED)
        self.assertTrue(outcome.succeeded)
        self.assertEqual(outcome.unwrap(), 6)

    def test_sequential_mode_captures_failure(self) -> None:
        from pararray.modes import ExecutionStatus, sequential

        def fail(a, b):
            raise ValueError("bad reduction")

        outcome = sequential.reduce(self._source(), fail, None)
        self.assertIs(outcome.status, ExecutionStatus.FAILED)
        self.assertIsInstance(outcome.error, ValueError)
        with self.assertRaisesRegex(ValueError, "bad reduction"):
            outcome.unwrap()

    def test_fallback_retries_declined_work_sequentially(self) -> None:
        from pararray.modes import ExecutionStatus, fallback

        with self.assertLogs("pararray.modes", level="DEBUG") as logs:
            outcome = fallback.reduce(self._source(), lambda a, b: a * b, None)
        self.assertIs(outcome.status, ExecutionStatus.SUCCEEDED)
        self.assertEqual(outcome.value, 6)
        self.assertTrue(any("par declined reduce" in line for line in logs.output))

    def test_fallback_does_not_retry_failures(self) -> None:
        from pararray.modes import Execution, ExecutionMode, ExecutionStatus, FallbackMode

        calls = []

        class Failing(ExecutionMode):
            name = "failing"

            def map(self, source, elemental_fn, buffer):
                calls.append("failing")
                return Execution(ExecutionStatus.FAILED, error=RuntimeError("x"))

        class Recording(ExecutionMode):
            name = "recording"

            def map(self, source, elemental_fn, buffer):
                calls.append("recording")
                return Execution(ExecutionStatus.SUCCEEDED)

        outcome = FallbackMode(Failing(), Recording()).map(None, None, None)
        self.assertIs(outcome.status, ExecutionStatus.FAILED)
        self.assertEqual(calls, ["failing"])

    def test_declined_unwrap(self) -> None:
        from pararray import ExecutionDeclinedError
        from pararray.modes import DECLINED

        with self.assertRaises(ExecutionDeclinedError):
            DECLINED.unwrap()

    def test_mode_lookup(self) -> None:
        from pararray import ArgumentError
        from pararray.modes import fallback, mode_by_name, parallel, sequential

        self.assertIs(mode_by_name("seq"), sequential)
        self.assertIs(mode_by_name("par"), parallel)
        self.assertIs(mode_by_name("fallback"), fallback)
        with self.assertRaises(ArgumentError):
            mode_by_name("gpu")

    def test_default_mode_can_be_configured(self) -> None:
        from pararray import ExecutionDeclinedError
        from pararray import modes

        with mock.patch.object(modes, "_DEFAULT_MODE_NAME", "par"):
            with self.assertRaises(ExecutionDeclinedError):
                self._source().map(lambda x, i, s: x)
        with mock.patch.object(modes, "_DEFAULT_MODE_NAME", "seq"):
            self.assertEqual(self._source().map(lambda x, i, s: -x).tolist(), [-1, -2, -3])


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for execution mode tests")
class DebugOptionsTests(unittest.TestCase):
    def _source(self):
        from pararray import ParallelArray

        return ParallelArray([1, 2, 3])

    def test_expected_bail_still_produces_a_result(self) -> None:
        out = self._source().map(lambda x, i, s: x + 1, {"mode": "par", "expect": "bail"})
        self.assertEqual(out.tolist(), [2, 3, 4])
        total = self._source().reduce(lambda a, b: a + b, {"mode": "par", "expect": "bail"})
        self.assertEqual(total, 6)

    def test_expected_success(self) -> None:
        from pararray import ParallelArray

        debug = {"mode": "seq", "expect": "success"}
        self.assertEqual(self._source().scan(lambda a, b: a + b, debug).tolist(), [1, 3, 6])
        self.assertEqual(self._source().filter([0, 1, 0], debug).tolist(), [2])
        self.assertEqual(self._source().scatter([2, 1, 0], None, None, 3, debug).tolist(), [3, 2, 1])
        self.assertEqual(ParallelArray(3, lambda i: i, debug).tolist(), [0, 1, 2])

    def test_status_mismatch(self) -> None:
        from pararray import DebugExpectationError

        with self.assertRaisesRegex(DebugExpectationError, "expected success for par execution, got bail"):
            self._source().map(lambda x, i, s: x, {"mode": "par", "expect": "success"})

    def test_failure_is_checked_and_reraised(self) -> None:
        from pararray import DebugExpectationError

        def fail(x, i, s):
            raise ValueError("elemental failure")

        with self.assertRaises(ValueError):
            self._source().map(fail, {"mode": "seq", "expect": "fail"})

        with self.assertRaises(DebugExpectationError) as ctx:
            self._source().map(fail, {"mode": "seq", "expect": "success"})
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_invalid_options(self) -> None:
        from pararray import ArgumentError

        with self.assertRaises(ArgumentError):
            self._source().map(lambda x, i, s: x, {"mode": "gpu", "expect": "success"})
        with self.assertRaises(ArgumentError):
            self._source().map(lambda x, i, s: x, {"mode": "seq", "expect": "maybe"})

    def test_non_mapping_options_are_ignored(self) -> None:
        self.assertEqual(self._source().map(lambda x, i, s: x, "fast").tolist(), [1, 2, 3])

    def test_options_can_be_disabled(self) -> None:
        from pararray import modes

        with mock.patch.object(modes, "_DEBUG_OPTIONS_ENABLED", False):
            out = self._source().map(lambda x, i, s: x, {"mode": "par", "expect": "success"})
        self.assertEqual(out.tolist(), [1, 2, 3])


if __name__ == "__main__":
    unittest.main()
