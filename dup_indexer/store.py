"""
Append-only value arena backing the indexer.

Values live in fixed-size slabs. Growing the arena appends a new slab and never
moves a value that is already stored, so lookup keys that alias a stored value
(or a buffer owned by it) stay valid for the lifetime of the arena.
"""

from __future__ import annotations

import sys
from typing import Any, Iterator

from loguru import logger


DEFAULT_SLAB_SIZE = 64


class SlabStore:
    """Ordered store of values addressed by their dense position."""

    def __init__(self, slab_size: int = DEFAULT_SLAB_SIZE) -> None:
        if slab_size < 1:
            raise ValueError(f"slab_size must be positive, got {slab_size}.")
        self._slab_size = slab_size
        self._slabs: list[list[Any]] = []
        self._size = 0

    @property
    def slab_size(self) -> int:
        return self._slab_size

    @property
    def capacity(self) -> int:
        """Number of slots allocated so far, used or not."""
        return len(self._slabs) * self._slab_size

    def __len__(self) -> int:
        return self._size

    def reserve(self, total: int) -> None:
        """Ensure there is room for at least `total` values without growing."""
        if total < 0:
            raise ValueError(f"Cannot reserve a negative number of slots ({total}).")
        if total > sys.maxsize:
            raise MemoryError(f"Cannot allocate {total} slots; limit is {sys.maxsize}.")
        missing = -(-total // self._slab_size) - len(self._slabs)
        if missing > 0:
            self._grow(missing)

    def _grow(self, slabs: int) -> None:
        if self.capacity + slabs * self._slab_size > sys.maxsize:
            raise MemoryError("Value arena exceeded the addressable identifier range.")
        self._slabs.extend([None] * self._slab_size for _ in range(slabs))
        logger.debug(
            "Value arena grown to {} slabs ({} slots)", len(self._slabs), self.capacity
        )

    def append(self, value: Any) -> int:
        position = self._size
        if position == self.capacity:
            self._grow(1)
        slab, offset = divmod(position, self._slab_size)
        self._slabs[slab][offset] = value
        self._size = position + 1
        return position

    def __getitem__(self, position: int) -> Any:
        # Identifiers are never negative, so no Python-style wraparound.
        if not 0 <= position < self._size:
            raise IndexError(
                f"Identifier {position} out of range for store of length {self._size}"
            )
        slab, offset = divmod(position, self._slab_size)
        return self._slabs[slab][offset]

    def __iter__(self) -> Iterator[Any]:
        remaining = self._size
        for slab in self._slabs:
            if remaining <= 0:
                return
            yield from slab[: min(remaining, self._slab_size)]
            remaining -= self._slab_size

    def to_list(self) -> list[Any]:
        return list(self)
