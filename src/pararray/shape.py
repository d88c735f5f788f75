"""Conversions between shapes, coordinate vectors and flat buffer offsets."""

from __future__ import annotations

import os
from collections.abc import Sequence
from functools import lru_cache
from typing import Final

from .errors import ShapeOverflowError

UINT32_MAX: Final[int] = 2**32 - 1
_SHAPE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("PARARRAY_SHAPE_CACHE_MAX", "256")))


def scalar_length(shape: Sequence[int]) -> int:
    length = 1
    for dim in shape:
        length *= int(dim)
    if length > UINT32_MAX:
        raise ShapeOverflowError(
            f"shape {tuple(shape)} has {length} elements, more than {UINT32_MAX}"
        )
    return length


@lru_cache(maxsize=_SHAPE_CACHE_MAX)
def _partial_products(shape: tuple[int, ...]) -> tuple[int, ...]:
    products = [1] * len(shape)
    for d in range(len(shape) - 2, -1, -1):
        products[d] = products[d + 1] * shape[d + 1]
    return tuple(products)


def partial_products(shape: Sequence[int]) -> tuple[int, ...]:
    """Row length at every nesting level; the last entry is always 1."""
    return _partial_products(tuple(int(d) for d in shape))


def to_scalar(shape: Sequence[int], coords: Sequence[int]) -> int:
    if len(shape) == 1:
        return int(coords[0]) if coords else 0
    products = partial_products(shape)
    if len(coords) > len(products):
        raise ValueError(f"{len(coords)} coordinates given for a {len(shape)}-dimensional shape")
    return sum(int(c) * p for c, p in zip(coords, products))


def from_scalar(shape: Sequence[int], flat_index: int) -> list[int]:
    if len(shape) == 1:
        return [flat_index]
    coords = []
    for product in partial_products(shape):
        coords.append(flat_index // product)
        flat_index %= product
    return coords


class IndexInfo:
    """Dimensions, their partial products and a (partially) bound index vector.

    ``indices`` addresses a leaf when fully bound and a sub-array view when
    it holds fewer entries than there are dimensions.
    """

    def __init__(self, dimensions: Sequence[int] = ()) -> None:
        self.dimensions: list[int] = [int(d) for d in dimensions]
        self.partial_products: tuple[int, ...] = ()
        self.indices: list[int] = []
        self._space = 0

    @classmethod
    def for_array(cls, array, space: int) -> "IndexInfo":
        info = cls(array.shape)
        info.initialize(space)
        return info

    def initialize(self, space: int) -> "IndexInfo":
        if space > len(self.dimensions):
            raise ValueError("cannot bind more indices than there are dimensions")
        self.partial_products = partial_products(self.dimensions)
        self.indices = [0] * space
        self._space = len(self.dimensions)
        return self

    def is_initialized(self) -> bool:
        return (
            len(self.dimensions) > 0
            and self._space >= len(self.dimensions)
            and len(self.partial_products) == len(self.dimensions)
        )

    def scalar_length(self) -> int:
        return scalar_length(self.dimensions)

    def to_scalar(self) -> int:
        return sum(i * p for i, p in zip(self.indices, self.partial_products))

    def from_scalar(self, index: int) -> list[int]:
        self.indices = from_scalar(self.dimensions, index)
        return self.indices
