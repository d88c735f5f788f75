"""Uniform length/element reads over array values and external sequences."""

from __future__ import annotations

from collections.abc import Mapping

from .errors import ArgumentError
from .shape import IndexInfo
from .values import HOLE, UNDEFINED, is_typed_array, scalar_of, to_uint32
from .view import ArrayView


def is_indexable(value: object) -> bool:
    if isinstance(value, (ArrayView, list, tuple, Mapping)):
        return True
    if isinstance(value, (str, bytes)):
        return False
    if is_typed_array(value):
        return value.ndim > 0
    return hasattr(value, "__getitem__") and (hasattr(value, "__len__") or hasattr(value, "length"))


def length_of(value: object) -> int:
    if isinstance(value, ArrayView):
        return value.outermost_dimension()
    if isinstance(value, Mapping):
        if "length" in value:
            return to_uint32(value["length"])
        return len(value)
    if is_typed_array(value):
        return int(value.shape[0]) if value.ndim > 0 else 0
    if hasattr(value, "__len__"):
        return len(value)
    if hasattr(value, "length"):
        return to_uint32(value.length)
    raise ArgumentError(f"{type(value).__name__} value has no length")


def _dense_element(value: object, index: int) -> object:
    if isinstance(value, (list, tuple)) and index < len(value):
        return value[index]
    return HOLE


def _typed_element(value: object, index: int) -> object:
    if is_typed_array(value) and value.ndim > 0 and index < value.shape[0]:
        return scalar_of(value[index])
    return HOLE


def _generic_element(value: object, index: int) -> object:
    if isinstance(value, Mapping):
        return value.get(index, UNDEFINED)
    if is_typed_array(value):
        return UNDEFINED
    try:
        return value[index]
    except (IndexError, KeyError):
        return UNDEFINED


def element_of(value: object, index: int) -> object:
    """Read element ``index`` of an external array-like value.

    The dense and typed-array paths are tried first; a hole from either
    moves on to the next path.
    """
    for read in (_dense_element, _typed_element):
        elem = read(value, index)
        if elem is not HOLE:
            return elem
    elem = _generic_element(value, index)
    return UNDEFINED if elem is HOLE else elem


class ArrayLike:
    """Read-only ``length()``/``element_at(i)`` facade over one value."""

    __slots__ = ("value", "_array", "_info")

    def __init__(self, value: object) -> None:
        self.value = value
        self._array: ArrayView | None = None
        self._info: IndexInfo | None = None
        if isinstance(value, ArrayView):
            self._array = value
            if not value.is_one_dimensional():
                self._info = IndexInfo.for_array(value, 1)

    @classmethod
    def wrap(cls, value: object) -> "ArrayLike":
        if isinstance(value, cls):
            return value
        return cls(value)

    def length(self) -> int:
        return length_of(self.value)

    def element_at(self, index: int) -> object:
        array = self._array
        if array is not None:
            if self._info is None:
                return array.element_from_only_dimension(index)
            self._info.indices[0] = index
            return array.element(self._info)
        return element_of(self.value, index)

    def __iter__(self):
        for i in range(self.length()):
            yield self.element_at(i)


def to_index_vector(value: object) -> list[int]:
    reader = ArrayLike.wrap(value)
    return [to_uint32(elem) for elem in reader]
