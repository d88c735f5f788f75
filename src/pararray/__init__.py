"""pararray public API."""

from .array import ParallelArray
from .errors import (
    AlreadyFlatError,
    ArgumentError,
    BadPartitionError,
    DebugExpectationError,
    DenseLayoutError,
    EmptyReductionError,
    ExecutionDeclinedError,
    ImmutableError,
    OutOfBoundsError,
    ParallelArrayError,
    ScatterConflictError,
    ShapeOverflowError,
)
from .modes import ExecutionStatus, fallback, parallel, sequential
from .shape import from_scalar, scalar_length, to_scalar
from .values import HOLE, UNDEFINED

__all__ = [
    "ParallelArray",
    "UNDEFINED",
    "HOLE",
    "scalar_length",
    "to_scalar",
    "from_scalar",
    "ExecutionStatus",
    "sequential",
    "parallel",
    "fallback",
    "ParallelArrayError",
    "ArgumentError",
    "ImmutableError",
    "EmptyReductionError",
    "OutOfBoundsError",
    "ScatterConflictError",
    "AlreadyFlatError",
    "BadPartitionError",
    "ShapeOverflowError",
    "DenseLayoutError",
    "ExecutionDeclinedError",
    "DebugExpectationError",
]
