"""Public ParallelArray value type."""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Final

import jax.numpy as jnp

from . import modes, ops
from .arraylike import ArrayLike, is_indexable, to_index_vector
from .buffer import Buffer
from .errors import ArgumentError, EmptyReductionError, ImmutableError
from .shape import IndexInfo, scalar_length
from .values import UNDEFINED, as_jax_array, is_typed_array, to_uint32
from .view import ArrayView

_MISSING: Final = object()


def _callable_arg(value: object, where: str) -> Callable:
    if value is _MISSING:
        raise ArgumentError.more_args_needed(f"ParallelArray.{where}")
    if not callable(value):
        raise ArgumentError(f"ParallelArray.{where}: {type(value).__name__} object is not callable")
    return value


def _indexable_arg(value: object, where: str) -> object:
    if value is _MISSING:
        raise ArgumentError.more_args_needed(f"ParallelArray.{where}")
    if not is_indexable(value):
        raise ArgumentError.bad_arg(f".prototype.{where}", value)
    return value


class ParallelArray(ArrayView):
    """Immutable multidimensional array with data-parallel collective methods.

    ``ParallelArray()`` is empty, ``ParallelArray(values)`` copies any
    indexable into a one-dimensional array, and ``ParallelArray(dims, fn)``
    builds every leaf with ``fn(*coords)``; ``dims`` is a length or a
    dimension vector.
    """

    __slots__ = ()

    def __init__(
        self,
        source: object = _MISSING,
        elemental_fn: object = _MISSING,
        debug_options: object = None,
    ) -> None:
        if source is _MISSING:
            super().__init__(None, 0, (0,))
            return

        if elemental_fn is _MISSING:
            if not is_indexable(source):
                raise ArgumentError.bad_arg("", source)
            reader = ArrayLike.wrap(source)
            length = reader.length()
            scalar_length((length,))
            super().__init__(Buffer.copy_of(reader), 0, (length,))
            return

        if is_indexable(source):
            dims = to_index_vector(source)
        else:
            dims = [to_uint32(source)]
        if not dims:
            raise ArgumentError("ParallelArray dimension vector must not be empty")
        info = IndexInfo(dims).initialize(0)
        fn = _callable_arg(elemental_fn, "constructor")

        buffer = Buffer.allocate(info.scalar_length())
        modes.run("build", debug_options, info, fn, buffer)
        super().__init__(buffer, 0, info.dimensions)

    @classmethod
    def from_jax(cls, array) -> "ParallelArray":
        """Copy a JAX (or numpy) array, keeping its full shape."""
        arr = as_jax_array(array)
        shape = tuple(int(d) for d in arr.shape) or (1,)
        scalar_length(shape)
        return cls.create(Buffer.copy_of(jnp.ravel(arr).tolist()), 0, shape)

    # Read-only indexed properties.

    @property
    def length(self) -> int:
        return self.outermost_dimension()

    def __len__(self) -> int:
        return self.outermost_dimension()

    def keys(self) -> range:
        return range(self.outermost_dimension())

    def __iter__(self):
        reader = ArrayLike.wrap(self)
        for i in self.keys():
            yield reader.element_at(i)

    def __getitem__(self, key):
        if isinstance(key, tuple):
            return self.get(key)
        if isinstance(key, bool):
            return UNDEFINED
        try:
            index = operator.index(key)
        except TypeError:
            return UNDEFINED
        if index < 0:
            return UNDEFINED
        return ArrayLike.wrap(self).element_at(index)

    def __setitem__(self, key, value) -> None:
        raise ImmutableError(f"cannot assign index {key!r} of a ParallelArray")

    def __delitem__(self, key) -> None:
        raise ImmutableError(f"cannot delete index {key!r} of a ParallelArray")

    # Collective operations.

    def map(self, fn: object = _MISSING, debug_options: object = None) -> "ParallelArray":
        fn = _callable_arg(fn, "map")
        buffer = Buffer.allocate(self.outermost_dimension())
        modes.run("map", debug_options, self, fn, buffer)
        return self.create(buffer, 0, (len(buffer),))

    def reduce(self, fn: object = _MISSING, debug_options: object = None):
        if fn is _MISSING:
            raise ArgumentError.more_args_needed("ParallelArray.reduce")
        if self.outermost_dimension() == 0:
            raise EmptyReductionError("reduce of empty ParallelArray with no initial value")
        fn = _callable_arg(fn, "reduce")
        return modes.run("reduce", debug_options, self, fn, None)

    def scan(self, fn: object = _MISSING, debug_options: object = None) -> "ParallelArray":
        if fn is _MISSING:
            raise ArgumentError.more_args_needed("ParallelArray.scan")
        if self.outermost_dimension() == 0:
            raise EmptyReductionError("scan of empty ParallelArray with no initial value")
        buffer = Buffer.allocate(self.outermost_dimension())
        fn = _callable_arg(fn, "scan")
        modes.run("reduce", debug_options, self, fn, buffer)
        return self.create(buffer, 0, (len(buffer),))

    def scatter(
        self,
        targets: object = _MISSING,
        default: object = UNDEFINED,
        conflict_fn: object = None,
        length: object = None,
        debug_options: object = None,
    ) -> "ParallelArray":
        targets = _indexable_arg(targets, "scatter")
        if conflict_fn is UNDEFINED:
            conflict_fn = None
        if conflict_fn is not None:
            conflict_fn = _callable_arg(conflict_fn, "scatter")
        result_length = self.outermost_dimension() if length is None else to_uint32(length)

        buffer = Buffer.allocate(result_length)
        modes.run("scatter", debug_options, self, targets, default, conflict_fn, buffer)
        return self.create(buffer, 0, (len(buffer),))

    def filter(self, predicates: object = _MISSING, debug_options: object = None) -> "ParallelArray":
        predicates = _indexable_arg(predicates, "filter")
        buffer = Buffer.allocate(0)
        modes.run("filter", debug_options, self, predicates, buffer)
        return self.create(buffer, 0, (len(buffer),))

    # Shape transforms and element access.

    def flatten(self) -> "ParallelArray":
        return ops.flatten(self)

    def partition(self, new_dimension: object = _MISSING) -> "ParallelArray":
        if new_dimension is _MISSING:
            raise ArgumentError.more_args_needed("ParallelArray.partition")
        return ops.partition(self, to_uint32(new_dimension))

    def get(self, coords: object = _MISSING):
        coords = _indexable_arg(coords, "get")
        return ops.get(self, coords)

    # Conversions.

    def to_string(self) -> str:
        return ops.to_string(self, use_locale=False)

    def to_locale_string(self) -> str:
        return ops.to_string(self, use_locale=True)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"ParallelArray({self.to_string()}, shape={self.shape})"

    def tolist(self) -> list:
        if self.is_one_dimensional():
            return [_tolist_leaf(elem) for elem in self]
        return [elem.tolist() if isinstance(elem, ParallelArray) else elem for elem in self]

    def to_jax(self):
        """Numeric leaves as a ``jax.Array`` with this array's shape."""
        leaves = [_tolist_leaf(leaf) for leaf in self.leaves()]
        return jnp.reshape(jnp.asarray(leaves), self.shape)


def _tolist_leaf(value: object) -> object:
    if isinstance(value, ParallelArray):
        return value.tolist()
    if is_typed_array(value):
        return value.tolist()
    return value

