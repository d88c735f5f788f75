"""Interchangeable execution modes for the collective operations."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Final

from . import ops
from .buffer import Buffer
from .errors import ArgumentError, DebugExpectationError, ExecutionDeclinedError
from .shape import IndexInfo
from .view import ArrayView

logger = logging.getLogger(__name__)

_DEFAULT_MODE_NAME: Final[str] = os.environ.get("PARARRAY_EXECUTION_MODE", "fallback")
_DEBUG_OPTIONS_ENABLED: Final[bool] = os.environ.get("PARARRAY_DISABLE_DEBUG_OPTIONS", "0") != "1"


class ExecutionStatus(str, Enum):
    SUCCEEDED = "success"
    DECLINED = "bail"
    FAILED = "fail"


@dataclass(frozen=True)
class Execution:
    """Outcome of running one operation in one mode."""

    status: ExecutionStatus
    value: object = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ExecutionStatus.SUCCEEDED

    def unwrap(self):
        if self.status is ExecutionStatus.FAILED and self.error is not None:
            raise self.error
        if self.status is ExecutionStatus.DECLINED:
            raise ExecutionDeclinedError("operation was declined and nothing took over")
        return self.value


DECLINED: Final = Execution(ExecutionStatus.DECLINED)


def _attempt(operation: Callable, *args) -> Execution:
    try:
        value = operation(*args)
    except Exception as exc:
        return Execution(ExecutionStatus.FAILED, error=exc)
    return Execution(ExecutionStatus.SUCCEEDED, value=value)


class ExecutionMode:
    """Common signatures for build, map, reduce, scatter and filter."""

    name: ClassVar[str] = "abstract"

    def build(self, info: IndexInfo, elemental_fn: Callable, buffer: Buffer) -> Execution:
        raise NotImplementedError

    def map(self, source: ArrayView, elemental_fn: Callable, buffer: Buffer) -> Execution:
        raise NotImplementedError

    def reduce(self, source: ArrayView, elemental_fn: Callable, buffer: Buffer | None) -> Execution:
        raise NotImplementedError

    def scatter(
        self,
        source: ArrayView,
        targets: object,
        default: object,
        conflict_fn: Callable | None,
        buffer: Buffer,
    ) -> Execution:
        raise NotImplementedError

    def filter(self, source: ArrayView, predicates: object, buffer: Buffer) -> Execution:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class SequentialMode(ExecutionMode):
    name: ClassVar[str] = "seq"

    def build(self, info, elemental_fn, buffer):
        return _attempt(ops.build, info, elemental_fn, buffer)

    def map(self, source, elemental_fn, buffer):
        return _attempt(ops.map, source, elemental_fn, buffer)

    def reduce(self, source, elemental_fn, buffer):
        return _attempt(ops.reduce, source, elemental_fn, buffer)

    def scatter(self, source, targets, default, conflict_fn, buffer):
        return _attempt(ops.scatter, source, targets, default, conflict_fn, buffer)

    def filter(self, source, predicates, buffer):
        return _attempt(ops.filter, source, predicates, buffer)


class ParallelMode(ExecutionMode):
    """Slot for a data-parallel backend; declines every operation for now."""

    name: ClassVar[str] = "par"

    def build(self, info, elemental_fn, buffer):
        return DECLINED

    def map(self, source, elemental_fn, buffer):
        return DECLINED

    def reduce(self, source, elemental_fn, buffer):
        return DECLINED

    def scatter(self, source, targets, default, conflict_fn, buffer):
        return DECLINED

    def filter(self, source, predicates, buffer):
        return DECLINED


class FallbackMode(ExecutionMode):
    """Try the parallel mode and rerun sequentially when it declines."""

    name: ClassVar[str] = "fallback"

    def __init__(self, first: ExecutionMode, then: ExecutionMode) -> None:
        self.first = first
        self.then = then

    def _run(self, op_name: str, *args) -> Execution:
        outcome = getattr(self.first, op_name)(*args)
        if outcome.status is not ExecutionStatus.DECLINED:
            return outcome
        logger.debug("%s declined %s; retrying with %s", self.first.name, op_name, self.then.name)
        return getattr(self.then, op_name)(*args)

    def build(self, info, elemental_fn, buffer):
        return self._run("build", info, elemental_fn, buffer)

    def map(self, source, elemental_fn, buffer):
        return self._run("map", source, elemental_fn, buffer)

    def reduce(self, source, elemental_fn, buffer):
        return self._run("reduce", source, elemental_fn, buffer)

    def scatter(self, source, targets, default, conflict_fn, buffer):
        return self._run("scatter", source, targets, default, conflict_fn, buffer)

    def filter(self, source, predicates, buffer):
        return self._run("filter", source, predicates, buffer)


sequential: Final = SequentialMode()
parallel: Final = ParallelMode()
fallback: Final = FallbackMode(parallel, sequential)

_MODES_BY_NAME: Final[dict[str, ExecutionMode]] = {
    "seq": sequential,
    "sequential": sequential,
    "par": parallel,
    "parallel": parallel,
    "fallback": fallback,
}


def mode_by_name(name: str) -> ExecutionMode:
    try:
        return _MODES_BY_NAME[name]
    except KeyError:
        raise ArgumentError(
            f"unknown execution mode {name!r}; expected one of {', '.join(sorted(_MODES_BY_NAME))}"
        ) from None


def default_mode() -> ExecutionMode:
    return mode_by_name(_DEFAULT_MODE_NAME)


@dataclass(frozen=True)
class DebugOptions:
    """Force one mode and assert the status it reports.

    Given as ``{"mode": "par" | "seq", "expect": "success" | "bail" | "fail"}``.
    """

    mode: ExecutionMode
    expect: ExecutionStatus

    @classmethod
    def parse(cls, value: object) -> "DebugOptions | None":
        if not _DEBUG_OPTIONS_ENABLED or not isinstance(value, Mapping):
            return None

        mode_name = str(value.get("mode"))
        if mode_name not in ("par", "seq"):
            raise ArgumentError(f"debug option 'mode' must be 'par' or 'seq', got {mode_name!r}")
        try:
            expect = ExecutionStatus(str(value.get("expect")))
        except ValueError:
            raise ArgumentError(
                "debug option 'expect' must be 'success', 'bail' or 'fail', "
                f"got {value.get('expect')!r}"
            ) from None
        return cls(mode=mode_by_name(mode_name), expect=expect)

    def check(self, actual: Execution) -> None:
        if actual.status is not self.expect:
            raise DebugExpectationError(
                f"expected {self.expect.value} for {self.mode.name} execution, got {actual.status.value}"
            ) from actual.error


def run(op_name: str, debug_options: object, *args):
    """Run ``op_name`` and return its value, raising on failure.

    Without debug options the default mode runs. With them, the requested
    mode runs alone and its status is checked; an expected decline is
    completed by the sequential mode.
    """
    options = DebugOptions.parse(debug_options)
    if options is None:
        return getattr(default_mode(), op_name)(*args).unwrap()

    logger.debug("debug options force %s for %s, expecting %s",
                 options.mode.name, op_name, options.expect.value)
    outcome = getattr(options.mode, op_name)(*args)
    options.check(outcome)
    if outcome.status is ExecutionStatus.DECLINED:
        return getattr(sequential, op_name)(*args).unwrap()
    return outcome.unwrap()
