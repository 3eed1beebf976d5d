"""
Value-interning index that hands out dense identifiers in first-seen order.

`DupIndexer` stores each distinct value once and returns the same identifier
for every later insertion of an equal value. Values live in a `SlabStore`,
which never relocates a stored value; the lookup table maps a key derived by
the indexer's `KeyStrategy` to the identifier. Keys alias the stored value or
shallowly duplicate it, so the store stays the only owner of each value.

The indexer is single-threaded. Callers that intern from several threads must
guard the whole structure with their own lock.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Hashable, Iterator, Optional

from loguru import logger

from .errors import ConsumedIndexerError
from .keys import IDENTITY_KEYS, IdentityKeys, KeyStrategy, is_trivially_copyable, key_strategy_for
from .store import DEFAULT_SLAB_SIZE, SlabStore


class DupIndexer:
    """
    Append-only interning table.

    Parameters
    ----------
    keys:
        Strategy used to derive lookup keys. When omitted, the strategy is
        inferred from the first inserted value and then kept.
    slab_size:
        Number of slots added to the store each time it grows.
    """

    def __init__(
        self, keys: Optional[KeyStrategy] = None, *, slab_size: int = DEFAULT_SLAB_SIZE
    ) -> None:
        self._keys = keys
        self._store: Optional[SlabStore] = SlabStore(slab_size)
        self._lookup: Optional[dict[Hashable, int]] = {}

    @classmethod
    def new(cls, keys: Optional[KeyStrategy] = None) -> "DupIndexer":
        return cls(keys)

    @classmethod
    def with_capacity(
        cls, capacity: int, keys: Optional[KeyStrategy] = None
    ) -> "DupIndexer":
        """Create an indexer with room for at least `capacity` distinct values."""
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}.")
        indexer = cls(keys)
        indexer._open_store().reserve(capacity)
        return indexer

    @property
    def keys(self) -> Optional[KeyStrategy]:
        return self._keys

    @property
    def consumed(self) -> bool:
        return self._store is None

    def _open_store(self) -> SlabStore:
        if self._store is None:
            raise ConsumedIndexerError("Indexer has already been consumed.")
        return self._store

    def _strategy_for(self, value: Any) -> KeyStrategy:
        if self._keys is not None:
            return self._keys
        return key_strategy_for(value)

    def _adopt(self, keys: KeyStrategy, value: Any) -> None:
        # Only fixed once a value has actually been stored.
        if self._keys is None:
            self._keys = keys
            logger.debug("Inferred key strategy {!r} from {}", keys, type(value).__name__)

    def _append(self, stored: Any, key: Hashable) -> int:
        store = self._open_store()
        # Store and lookup stay the same size even if the key cannot be hashed.
        hash(key)
        identifier = store.append(stored)
        self._lookup[key] = identifier
        return identifier

    def insert(self, value: Any) -> int:
        """
        Insert a value if no equal value is stored yet and return its identifier.

        On a hit the passed value is not retained. On a miss the value is sealed
        by the key strategy, stored, and a key aliasing the stored object is
        registered.
        """
        self._open_store()
        return self._insert(value, self._strategy_for(value))

    def _insert(self, value: Any, keys: KeyStrategy) -> int:
        identifier = self._lookup.get(keys.key(value))
        if identifier is not None:
            return identifier
        stored = keys.seal(value)
        identifier = self._append(stored, keys.key(stored))
        self._adopt(keys, value)
        return identifier

    def insert_ref(self, view: Any) -> int:
        """
        Insert by borrowed view, materializing an owned value only on a miss.

        Useful when most insertions are repeats: probing with a view (a
        `memoryview`, an array slice, a tuple for a list indexer) avoids
        building a throwaway owned value.
        """
        self._open_store()
        keys = self._strategy_for(view)
        identifier = self._lookup.get(keys.key(view))
        if identifier is not None:
            return identifier
        return self._insert(keys.to_owned(view), keys)

    def insert_copy(self, value: Any) -> int:
        """
        Insert an immutable scalar-like value that serves as its own key.

        Only `None`, `bool`, numbers, `str`, `bytes`, numpy scalars and tuples
        or frozensets of those are accepted.
        """
        self._open_store()
        if not is_trivially_copyable(value):
            raise TypeError(
                f"insert_copy() requires a trivially copyable value, got {type(value).__name__}."
            )
        if self._keys is None:
            self._keys = IDENTITY_KEYS
        elif not isinstance(self._keys, IdentityKeys):
            raise TypeError(
                f"insert_copy() cannot be mixed with {self._keys!r}; use insert() instead."
            )
        identifier = self._lookup.get(value)
        if identifier is not None:
            return identifier
        return self._append(value, value)

    def __len__(self) -> int:
        return len(self._open_store())

    def len(self) -> int:
        return len(self)

    def is_empty(self) -> bool:
        return len(self) == 0

    def capacity(self) -> int:
        """Slots available before the store has to grow."""
        return self._open_store().capacity

    def __getitem__(self, identifier: int) -> Any:
        return self._open_store()[identifier]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.as_view())

    def as_view(self) -> "IndexerView":
        """Read-only view over the stored values in identifier order."""
        self._open_store()
        return IndexerView(self)

    def _release(self) -> SlabStore:
        store = self._open_store()
        self._store = None
        self._lookup = None
        logger.debug("Indexer consumed with {} distinct values", len(store))
        return store

    def into_list(self) -> list[Any]:
        """Return the distinct values in first-seen order and end the indexer."""
        return self._release().to_list()

    def into_iter(self) -> Iterator[Any]:
        """Return a one-shot iterator over the distinct values and end the indexer."""
        return iter(self._release())

    def __repr__(self) -> str:
        if self._store is None:
            return f"{type(self).__name__}(<consumed>)"
        entries = ", ".join(
            f"{identifier}: {value!r}" for identifier, value in enumerate(self._store)
        )
        return f"{type(self).__name__}({{{entries}}})"


class IndexerView(Sequence):
    """
    Live, read-only sequence over an indexer's stored values.

    Negative positions count from the end, as for any sequence; the indexer
    itself only accepts identifiers it handed out.
    """

    def __init__(self, indexer: DupIndexer) -> None:
        self._indexer = indexer

    def __len__(self) -> int:
        return len(self._indexer)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self._indexer[i] for i in range(*index.indices(len(self)))]
        if index < 0:
            index += len(self)
        return self._indexer[index]

    def __iter__(self) -> Iterator[Any]:
        store = self._indexer._open_store()
        return iter(store)

    def __repr__(self) -> str:
        return f"IndexerView({list(self)!r})"
