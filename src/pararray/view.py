"""Array values as (buffer, offset, shape) windows over a shared buffer."""

from __future__ import annotations

from collections.abc import Sequence

from .buffer import Buffer
from .errors import ImmutableError
from .shape import IndexInfo, scalar_length, to_scalar
from .values import UNDEFINED


class ArrayView:
    """Immutable logical view over a published :class:`Buffer`.

    Bounds are not validated when a view is created; reads that land past
    the view's extent yield ``UNDEFINED``.
    """

    __slots__ = ("_buffer", "_offset", "_shape")

    def __init__(self, buffer: Buffer | None, offset: int, shape: Sequence[int]) -> None:
        if buffer is not None:
            buffer.freeze()
        object.__setattr__(self, "_buffer", buffer)
        object.__setattr__(self, "_offset", int(offset))
        object.__setattr__(self, "_shape", tuple(int(d) for d in shape))

    @classmethod
    def create(cls, buffer: Buffer | None, offset: int, shape: Sequence[int]):
        view = cls.__new__(cls)
        ArrayView.__init__(view, buffer, offset, shape)
        return view

    def spawn(self, buffer: Buffer | None, offset: int, shape: Sequence[int]):
        return type(self).create(buffer, offset, shape)

    def __setattr__(self, name: str, value: object) -> None:
        raise ImmutableError(f"cannot set attribute {name!r} of an array value")

    def __delattr__(self, name: str) -> None:
        raise ImmutableError(f"cannot delete attribute {name!r} of an array value")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    @property
    def buffer(self) -> Buffer | None:
        return self._buffer

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    def outermost_dimension(self) -> int:
        return self._shape[0]

    def is_one_dimensional(self) -> bool:
        return len(self._shape) == 1

    def _load(self, index: int) -> object:
        if self._buffer is None:
            return UNDEFINED
        return self._buffer.load(index)

    def element_from_only_dimension(self, index: int) -> object:
        if index >= self._shape[0]:
            return UNDEFINED
        return self._load(self._offset + index)

    def element(self, info: IndexInfo) -> object:
        """Leaf or sub-array addressed by the indices bound in ``info``."""
        d = len(info.indices)
        ndims = len(info.dimensions)
        base = self._offset
        end = base + info.scalar_length()

        if d == ndims:
            index = base + info.to_scalar()
            if index >= end:
                return UNDEFINED
            return self._load(index)

        row_length = info.partial_products[d - 1]
        offset = base + info.to_scalar()
        if offset + row_length > end:
            return UNDEFINED
        return self.spawn(self._buffer, offset, info.dimensions[d:])

    def subview(self, coords: Sequence[int]):
        d = len(coords)
        if not 0 < d < len(self._shape):
            raise ValueError(f"subview needs between 1 and {len(self._shape) - 1} coordinates")
        shape = self._shape[d:]
        offset = self._offset + to_scalar(self._shape, coords)
        if offset + scalar_length(shape) > self._offset + scalar_length(self._shape):
            return UNDEFINED
        return self.spawn(self._buffer, offset, shape)

    def leaf(self, coords: Sequence[int]) -> object:
        if len(coords) != len(self._shape):
            raise ValueError(f"leaf needs exactly {len(self._shape)} coordinates")
        index = to_scalar(self._shape, coords)
        if index >= scalar_length(self._shape):
            return UNDEFINED
        return self._load(self._offset + index)

    def leaves(self) -> tuple[object, ...]:
        """Every scalar element of the view in row-major order."""
        if self._buffer is None:
            return ()
        return self._buffer.slice(self._offset, self._offset + scalar_length(self._shape))
