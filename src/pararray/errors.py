"""Structured error types for array construction and collective operations."""

from __future__ import annotations


class ParallelArrayError(Exception):
    """Base class for structured pararray errors."""


class ArgumentError(ParallelArrayError, TypeError):
    """Missing or wrongly typed argument to a constructor or method."""

    @classmethod
    def more_args_needed(cls, where: str, given: int = 0) -> "ArgumentError":
        return cls(f"{where} requires more than {given} argument{'' if given == 1 else 's'}")

    @classmethod
    def bad_arg(cls, where: str, value: object) -> "ArgumentError":
        return cls(f"invalid ParallelArray{where} argument of type {type(value).__name__}")


class ImmutableError(ParallelArrayError, TypeError):
    """Attempted mutation of a published array value or buffer."""


class EmptyReductionError(ParallelArrayError, ValueError):
    """reduce/scan over an empty outermost dimension."""


class OutOfBoundsError(ParallelArrayError, IndexError):
    """Scatter target index at or beyond the result length."""


class ScatterConflictError(ParallelArrayError, ValueError):
    """Two scatter writes hit the same slot and no conflict function was given."""


class AlreadyFlatError(ParallelArrayError, ValueError):
    """flatten on a one-dimensional array."""


class BadPartitionError(ParallelArrayError, ValueError):
    """partition size does not evenly divide the outermost dimension."""


class ShapeOverflowError(ParallelArrayError, OverflowError):
    """Product of the dimensions does not fit in an unsigned 32-bit integer."""


class DenseLayoutError(ParallelArrayError):
    """A backing buffer could not stay dense or still holds a hole at publication."""


class ExecutionDeclinedError(ParallelArrayError):
    """An execution mode declined to run an operation and nothing took over."""


class DebugExpectationError(ParallelArrayError):
    """Execution status differs from the one requested through debug options."""
