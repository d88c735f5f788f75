"""Sequential algorithms behind the collective array operations.

The collective operations (``build``, ``map``, ``reduce``, ``scatter`` and
``filter``) write into a buffer the caller allocated; any execution mode
has to produce the same buffer contents as these.

build
    Comprehension form. ``elemental_fn`` receives the coordinates of every
    leaf as separate arguments, in ascending flat order.

map
    ``elemental_fn(element, index, source)`` over the outermost dimension.

reduce
    Left-to-right fold of the outermost dimension. With a scan buffer, slot
    ``i`` receives the reduction of ``[0, i]``. Only associative and
    commutative functions give results that do not depend on the mode.

scatter
    ``source[i]`` goes to slot ``targets[i]``; collisions are resolved by
    ``conflict_fn(new, previous)`` in ascending ``i`` order and unwritten
    slots receive ``default``. The result buffer may be longer than the
    source.

filter
    Keeps ``source[i]`` for every truthy ``predicates[i]``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .arraylike import ArrayLike, to_index_vector
from .buffer import Buffer
from .errors import (
    AlreadyFlatError,
    BadPartitionError,
    EmptyReductionError,
    OutOfBoundsError,
    ScatterConflictError,
)
from .shape import IndexInfo, scalar_length
from .values import UNDEFINED, invoke, is_missing, stringify, to_boolean, to_uint32
from .view import ArrayView


def build(info: IndexInfo, elemental_fn: Callable, buffer: Buffer) -> Buffer:
    length = info.scalar_length()
    for i in range(length):
        coords = info.from_scalar(i)
        buffer.store(i, invoke(elemental_fn, *coords))
    return buffer


def map(source: ArrayView, elemental_fn: Callable, buffer: Buffer) -> Buffer:
    reader = ArrayLike.wrap(source)
    for i in range(source.outermost_dimension()):
        elem = reader.element_at(i)
        buffer.store(i, invoke(elemental_fn, elem, i, source))
    return buffer


def reduce(source: ArrayView, elemental_fn: Callable, buffer: Buffer | None = None):
    length = source.outermost_dimension()
    if length == 0:
        raise EmptyReductionError("reduce of empty ParallelArray with no initial value")

    reader = ArrayLike.wrap(source)
    acc = reader.element_at(0)
    if buffer is not None:
        buffer.store(0, acc)

    for i in range(1, length):
        acc = invoke(elemental_fn, acc, reader.element_at(i))
        if buffer is not None:
            buffer.store(i, acc)
    return acc


def scatter(
    source: ArrayView,
    targets: object,
    default: object,
    conflict_fn: Callable | None,
    buffer: Buffer,
) -> Buffer:
    length = len(buffer)
    reader = ArrayLike.wrap(source)
    target_reader = ArrayLike.wrap(targets)

    # Entries past the end of the source have nothing to scatter.
    targets_length = min(target_reader.length(), source.outermost_dimension())

    for i in range(targets_length):
        target_index = to_uint32(target_reader.element_at(i))
        if target_index >= length:
            raise OutOfBoundsError(
                f"scatter target {target_index} at position {i} is out of bounds for length {length}"
            )

        elem = reader.element_at(i)
        if not buffer.is_hole(target_index):
            if conflict_fn is None:
                raise ScatterConflictError(f"conflict in scatter at target index {target_index}")
            elem = invoke(conflict_fn, elem, buffer.load(target_index))
        buffer.store(target_index, elem)

    buffer.fill_holes(default)
    return buffer


def filter(source: ArrayView, predicates: object, buffer: Buffer) -> Buffer:
    reader = ArrayLike.wrap(source)
    predicate_reader = ArrayLike.wrap(predicates)

    pos = 0
    for i in range(predicate_reader.length()):
        if not to_boolean(predicate_reader.element_at(i)):
            continue
        buffer.store(pos, reader.element_at(i))
        pos += 1
    return buffer


def flatten(source: ArrayView):
    shape = source.shape
    if len(shape) == 1:
        raise AlreadyFlatError("cannot flatten a one-dimensional ParallelArray")
    dims = (shape[0] * shape[1],) + shape[2:]
    scalar_length(dims)
    return source.spawn(source.buffer, source.offset, dims)


def partition(source: ArrayView, new_dimension: int):
    outer = source.outermost_dimension()
    if new_dimension == 0 or outer % new_dimension:
        raise BadPartitionError(
            f"partition size {new_dimension} does not evenly divide outermost dimension {outer}"
        )
    dims = (outer // new_dimension, new_dimension) + source.shape[1:]
    return source.spawn(source.buffer, source.offset, dims)


def get(source: ArrayView, coords_like: object) -> object:
    if source.is_one_dimensional():
        coords = ArrayLike.wrap(coords_like)
        # More than one coordinate cannot address a one-dimensional array.
        if coords.length() > 1:
            return UNDEFINED
        index = to_uint32(coords.element_at(0))
        return source.element_from_only_dimension(index)

    info = IndexInfo.for_array(source, 0)
    info.indices = to_index_vector(coords_like)
    if len(info.indices) > len(info.dimensions):
        return UNDEFINED
    if not info.indices:
        return source
    return source.element(info)


def _render(source: ArrayView, info: IndexInfo, use_locale: bool, out: list[str]) -> None:
    d = len(info.indices) + 1

    if d < len(info.dimensions):
        out.append("<")
        length = info.dimensions[d - 1]
        info.indices.append(0)
        for i in range(length):
            info.indices[d - 1] = i
            _render(source, info, use_locale, out)
            if i + 1 != length:
                out.append(",")
        info.indices.pop()
        out.append(">")
        return

    if d == 1:
        start = source.offset
        length = info.dimensions[0]
    else:
        start = source.offset + info.to_scalar()
        length = info.partial_products[d - 2]

    buffer = source.buffer
    items: Sequence[object] = buffer.slice(start, start + length) if buffer is not None else ()
    out.append("<")
    out.append(",".join("" if is_missing(item) else stringify(item, use_locale) for item in items))
    out.append(">")


def to_string(source: ArrayView, use_locale: bool = False) -> str:
    out: list[str] = []
    _render(source, IndexInfo.for_array(source, 0), use_locale, out)
    return "".join(out)
