"""
Key strategies turn a value into something the lookup table can hash.

A strategy is the explicit duplication capability of a value type. It must
produce a key whose equality and hash agree with the value's own equality,
without deep-copying the value's content. Keys either alias the stored object
(or a buffer it owns) or are shallow duplicates that share element references
and never own them.
"""

from __future__ import annotations

import hashlib
from typing import Any, Callable, Hashable

import numpy as np


class KeyStrategy:
    """Base strategy: hashable values are their own lookup key."""

    def key(self, value: Any) -> Hashable:
        return value

    def seal(self, value: Any) -> Any:
        """Prepare a value for storage; the returned object is what gets stored."""
        return value

    def to_owned(self, view: Any) -> Any:
        """Materialize an owned value from a borrowed view."""
        return view

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class IdentityKeys(KeyStrategy):
    """
    Keys are the stored objects themselves.

    A read-only `memoryview` over `bytes` hashes and compares like the bytes it
    exposes, so it probes the table without building a `bytes` object. Writable
    buffers (`bytearray`, views over one) can change after the probe, so they
    are copied into `bytes` for the key and for storage.
    """

    def key(self, value: Any) -> Hashable:
        if isinstance(value, bytearray):
            return bytes(value)
        if isinstance(value, memoryview) and not _is_hashable_view(value):
            return value.tobytes()
        return value

    def seal(self, value: Any) -> Any:
        return self.to_owned(value)

    def to_owned(self, view: Any) -> Any:
        if isinstance(view, (memoryview, bytearray)):
            return bytes(view)
        return view


def _is_hashable_view(view: memoryview) -> bool:
    # memoryview.__hash__ also hashes the exporting object.
    return view.readonly and view.format in ("B", "b", "c") and isinstance(view.obj, bytes)


class ShallowKeys(KeyStrategy):
    """
    Keys for unhashable containers (`list`, `set`, `dict`).

    The key is an immutable shallow duplicate sharing the container's element
    references. Elements must be hashable; nesting is not flattened.
    """

    def __init__(self, owned_type: Callable[[Any], Any] = list) -> None:
        self.owned_type = owned_type

    def key(self, value: Any) -> Hashable:
        if isinstance(value, dict):
            return frozenset(value.items())
        if isinstance(value, (set, frozenset)):
            return frozenset(value)
        return tuple(value)

    def to_owned(self, view: Any) -> Any:
        return self.owned_type(view)

    def __repr__(self) -> str:
        return f"ShallowKeys(owned_type={getattr(self.owned_type, '__name__', self.owned_type)})"


class ArrayKey:
    """
    Lookup key over the raw bytes of a numpy array.

    Holds a read-only byte view of the array's buffer, not a copy. The hash is
    a digest of that buffer, taken once.
    """

    __slots__ = ("dtype", "shape", "buffer", "_hash")

    def __init__(self, array: np.ndarray) -> None:
        flat = array.reshape(-1).view(np.uint8)
        flat.flags.writeable = False
        self.dtype = array.dtype.str
        self.shape = array.shape
        self.buffer = memoryview(flat)
        digest = hashlib.blake2b(self.buffer, digest_size=8).digest()
        self._hash = hash((self.dtype, self.shape, digest))

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArrayKey):
            return NotImplemented
        return (
            self._hash == other._hash
            and self.dtype == other.dtype
            and self.shape == other.shape
            and self.buffer == other.buffer
        )

    def __repr__(self) -> str:
        return f"ArrayKey(dtype={self.dtype!r}, shape={self.shape}, nbytes={self.buffer.nbytes})"


class ArrayKeys(KeyStrategy):
    """
    Keys for `numpy.ndarray` values, compared by dtype, shape and raw bytes.

    Stored arrays are sealed read-only so their buffer can never change
    underneath the key. Arrays that do not own their data (views into a larger
    array) or are not C-contiguous are copied once, when stored, since the
    caller could otherwise still write through the base array.
    """

    def key(self, value: Any) -> Hashable:
        array = np.asarray(value)
        if array.dtype.hasobject:
            raise TypeError("Object arrays cannot be keyed by their buffer.")
        if not array.flags.c_contiguous:
            array = np.ascontiguousarray(array).reshape(array.shape)
        return ArrayKey(array)

    def seal(self, value: Any) -> Any:
        array = np.asarray(value)
        if not (array.flags.c_contiguous and array.flags.owndata):
            array = np.array(array, order="C", copy=True)
        array.flags.writeable = False
        return array

    def to_owned(self, view: Any) -> Any:
        return np.array(view, copy=True)


IDENTITY_KEYS = IdentityKeys()
ARRAY_KEYS = ArrayKeys()


def key_strategy_for(value: Any) -> KeyStrategy:
    """Pick a key strategy based on the type of a sample value."""
    if isinstance(value, np.ndarray):
        return ARRAY_KEYS
    if isinstance(value, (list, set, dict)):
        return ShallowKeys(type(value))
    return IDENTITY_KEYS


_TRIVIAL_ATOMS = (type(None), bool, int, float, complex, str, bytes)


def is_trivially_copyable(value: Any) -> bool:
    """Return True for immutable values that need no key derivation at all."""
    if isinstance(value, _TRIVIAL_ATOMS):
        return True
    if isinstance(value, np.generic):
        return not isinstance(value, np.void)
    if isinstance(value, (tuple, frozenset)):
        return all(is_trivially_copyable(item) for item in value)
    return False
