"""Flat backing store shared by every view of an array value."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import DenseLayoutError, ImmutableError
from .values import HOLE, UNDEFINED


class Buffer:
    """Dense, 0-indexed sequence of element values.

    A buffer is privately writable while the operation that allocated it
    runs and becomes read-only once :meth:`freeze` publishes it.
    """

    __slots__ = ("_items", "_frozen")

    def __init__(self, items: Iterable[object] = ()) -> None:
        self._items: list[object] | tuple[object, ...] = list(items)
        self._frozen = False

    @classmethod
    def allocate(cls, length: int) -> "Buffer":
        return cls([HOLE] * length)

    @classmethod
    def copy_of(cls, items: Iterable[object]) -> "Buffer":
        return cls(items)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"Buffer({len(self._items)} items, {state})"

    def _check_writable(self) -> None:
        if self._frozen:
            raise ImmutableError("cannot write to a published buffer")

    def load(self, index: int) -> object:
        if 0 <= index < len(self._items):
            return self._items[index]
        return UNDEFINED

    def is_hole(self, index: int) -> bool:
        return self._items[index] is HOLE

    def store(self, index: int, value: object) -> None:
        self._check_writable()
        if index == len(self._items):
            self._items.append(value)
        elif 0 <= index < len(self._items):
            self._items[index] = value
        else:
            raise DenseLayoutError(
                f"cannot write slot {index} of a {len(self._items)}-slot buffer and stay dense"
            )

    def fill_holes(self, default: object) -> None:
        self._check_writable()
        for i, item in enumerate(self._items):
            if item is HOLE:
                self._items[i] = default

    def freeze(self) -> "Buffer":
        if self._frozen:
            return self
        if any(item is HOLE for item in self._items):
            raise DenseLayoutError("buffer still holds unwritten slots")
        self._items = tuple(self._items)
        self._frozen = True
        return self

    def slice(self, start: int, stop: int) -> tuple[object, ...]:
        return tuple(self._items[start:stop])
