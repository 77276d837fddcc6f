"""
Sequence - owned, contiguous, resizable container.

A Sequence preallocates backing storage and tracks its length separately
from its capacity. Only the first ``len(seq)`` slots hold live elements;
nothing ever reads the slots past that.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Iterator, List, Optional, TypeVar

import pyarrow as pa

from .catpy import Functor
from ..config import SequenceSettings, get_settings
from ..exceptions import AllocationError, SequenceIndexError, TypeMismatchError

T = TypeVar("T")
U = TypeVar("U")


def _check_capacity(capacity: Any, settings: SequenceSettings) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise AllocationError(f"capacity must be an integer, got {capacity!r}")
    if capacity < 0:
        raise AllocationError(f"cannot allocate negative capacity {capacity}")
    if settings.max_capacity is not None and capacity > settings.max_capacity:
        raise AllocationError(
            f"capacity {capacity} exceeds max_capacity {settings.max_capacity}"
        )
    return capacity


class Sequence(Functor[T]):
    """
    Ordered, homogeneous collection with explicit length and capacity.

    Each stage operator builds a fresh Sequence for its output, so a
    sequence is never shared between two stages.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a container.
    ::: This is stateful.

    Example:
        seq = Sequence.create(4, element_type=int)
        seq.append(1)
        seq.append(2)
        len(seq)   # 2
        seq.capacity  # 4
    """

    __hash__ = None  # mutable

    def __init__(self, capacity: Optional[int] = None, element_type: Optional[type] = None):
        settings = get_settings()
        if capacity is None:
            capacity = settings.initial_capacity
        capacity = _check_capacity(capacity, settings)
        try:
            self._storage: List[Any] = [None] * capacity
        except (MemoryError, OverflowError) as e:
            raise AllocationError(f"cannot allocate {capacity} slots") from e
        self._length = 0
        self._element_type = element_type

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def create(cls, capacity: Optional[int] = None, element_type: Optional[type] = None) -> "Sequence[T]":
        """Create an empty sequence with ``capacity`` preallocated slots."""
        return cls(capacity, element_type)

    @classmethod
    def from_iterable(cls, items: Iterable[T], element_type: Optional[type] = None) -> "Sequence[T]":
        """Create a sequence holding ``items`` in iteration order."""
        values = list(items)
        seq = cls(len(values), element_type)
        for item in values:
            seq.append(item)
        return seq

    @classmethod
    def from_arrow(cls, array: Any, element_type: Optional[type] = None) -> "Sequence[Any]":
        """Create a sequence from a pyarrow Array or ChunkedArray."""
        if not isinstance(array, (pa.Array, pa.ChunkedArray)):
            raise TypeMismatchError(
                f"expected a pyarrow Array or ChunkedArray, got {type(array).__name__}"
            )
        return cls.from_iterable(array.to_pylist(), element_type)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def length(self) -> int:
        """Number of live elements."""
        return self._length

    def __len__(self) -> int:
        return self._length

    @property
    def capacity(self) -> int:
        """Number of allocated slots, always >= length."""
        return len(self._storage)

    @property
    def element_type(self) -> Optional[type]:
        return self._element_type

    def get(self, index: int) -> T:
        """Element at ``index``; raises SequenceIndexError outside [0, length)."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise SequenceIndexError(f"sequence indices must be integers, not {type(index).__name__}")
        if index < 0 or index >= self._length:
            raise SequenceIndexError(
                f"index {index} out of range for sequence of length {self._length}"
            )
        return self._storage[index]

    def __getitem__(self, index: int) -> T:
        return self.get(index)

    def __iter__(self) -> Iterator[T]:
        for i in range(self._length):
            yield self._storage[i]

    def to_list(self) -> List[T]:
        """Copy of the live elements as a list."""
        return self._storage[:self._length]

    def copy(self) -> "Sequence[T]":
        """Independent sequence with the same elements and element type."""
        return Sequence.from_iterable(self, self._element_type)

    def to_arrow(self, type: Optional[pa.DataType] = None) -> pa.Array:
        """Convert the live elements to a pyarrow Array."""
        try:
            return pa.array(self.to_list(), type=type)
        except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
            raise TypeMismatchError(f"cannot convert sequence to arrow: {e}") from e

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def append(self, value: T) -> None:
        """Append ``value``, growing storage when full (amortized O(1))."""
        if self._element_type is not None and not isinstance(value, self._element_type):
            raise TypeMismatchError(
                f"expected {self._element_type.__name__}, got {type(value).__name__}"
            )
        if self._length == len(self._storage):
            self._grow()
        self._storage[self._length] = value
        self._length += 1

    def _grow(self) -> None:
        settings = get_settings()
        current = len(self._storage)
        new_capacity = max(current + 1, math.ceil(current * settings.growth_factor))
        if settings.max_capacity is not None:
            if current >= settings.max_capacity:
                raise AllocationError(
                    f"sequence is full at max_capacity {settings.max_capacity}"
                )
            new_capacity = min(new_capacity, settings.max_capacity)
        try:
            self._storage.extend([None] * (new_capacity - current))
        except (MemoryError, OverflowError) as e:
            raise AllocationError(f"cannot grow sequence to {new_capacity} slots") from e

    # -------------------------------------------------------------------------
    # Functor
    # -------------------------------------------------------------------------

    def fmap(self, f: Callable[[T], U]) -> "Sequence[U]":
        """Map ``f`` over the elements into a new sequence."""
        from .stages import map_seq
        return map_seq(self, f)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sequence):
            return self.to_list() == other.to_list()
        return NotImplemented

    def __repr__(self) -> str:
        return f"Sequence({self.to_list()!r})"
