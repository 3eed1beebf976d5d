import numpy as np
import pytest

from dup_indexer.keys import (
    ARRAY_KEYS,
    IDENTITY_KEYS,
    ArrayKey,
    ArrayKeys,
    ShallowKeys,
    is_trivially_copyable,
    key_strategy_for,
)


def test_key_strategy_for_picks_by_type():
    assert key_strategy_for("foo") is IDENTITY_KEYS
    assert key_strategy_for(np.zeros(2)) is ARRAY_KEYS
    assert isinstance(key_strategy_for([1]), ShallowKeys)
    assert key_strategy_for({1}).owned_type is set
    assert key_strategy_for({"a": 1}).owned_type is dict


def test_identity_keys_alias_the_value():
    value = ("a", "b")

    assert IDENTITY_KEYS.key(value) is value
    assert IDENTITY_KEYS.seal(value) is value
    assert IDENTITY_KEYS.to_owned(bytearray(b"ab")) == b"ab"


def test_shallow_keys_share_elements():
    element = ("shared",)
    keys = ShallowKeys(list)

    key = keys.key([element, 1])

    assert key == (element, 1)
    assert key[0] is element
    assert keys.key({"a": 1, "b": 2}) == frozenset({("a", 1), ("b", 2)})
    assert keys.key({1, 2}) == frozenset({1, 2})


def test_array_key_aliases_buffer():
    array = np.arange(4, dtype=np.int32)
    array.flags.writeable = False

    key = ArrayKeys().key(array)

    assert isinstance(key, ArrayKey)
    assert key.dtype == array.dtype.str
    assert key.shape == (4,)
    assert key.buffer.readonly
    assert np.shares_memory(np.frombuffer(key.buffer, dtype=np.uint8), array)


def test_array_keys_work_as_dict_keys_for_writable_views():
    rows = np.array([[1, 2], [3, 4]])
    keys = ArrayKeys()
    lookup = {keys.key(rows[0]): 0}

    assert lookup[keys.key(np.array([1, 2]))] == 0
    assert keys.key(rows[1]) not in lookup
    assert rows.flags.writeable


def test_array_seal_copies_views_of_another_array():
    rows = np.array([[1, 2], [3, 4]])
    keys = ArrayKeys()

    sealed = keys.seal(rows[0])

    assert not np.shares_memory(sealed, rows)
    assert not sealed.flags.writeable
    assert rows.flags.writeable


def test_array_seal_keeps_arrays_that_own_their_data():
    array = np.array([[1, 2], [3, 4]])

    assert ArrayKeys().seal(array) is array
    assert not array.flags.writeable


def test_identity_keys_copy_writable_buffers():
    writable = bytearray(b"ab")

    assert IDENTITY_KEYS.key(writable) == b"ab"
    assert type(IDENTITY_KEYS.key(writable)) is bytes
    assert IDENTITY_KEYS.key(memoryview(writable)) == b"ab"
    assert hash(IDENTITY_KEYS.key(memoryview(writable))) == hash(b"ab")
    assert IDENTITY_KEYS.seal(writable) == b"ab"


def test_identity_keys_alias_read_only_byte_views():
    view = memoryview(b"abcd")[1:3]

    assert IDENTITY_KEYS.key(view) is view
    assert hash(view) == hash(b"bc")


def test_array_keys_compare_by_dtype_shape_and_bytes():
    keys = ArrayKeys()

    assert keys.key(np.array([1.0, 2.0])) == keys.key(np.array([1.0, 2.0]))
    assert hash(keys.key(np.array([1.0, 2.0]))) == hash(keys.key(np.array([1.0, 2.0])))
    assert keys.key(np.array([1.0, 2.0])) != keys.key(np.array([1, 2]))
    assert keys.key(np.zeros((2, 2))) != keys.key(np.zeros(4))
    assert keys.key(np.asarray(np.float64(3.0))) == keys.key(np.array(3.0))


def test_array_keys_reject_object_arrays():
    with pytest.raises(TypeError):
        ArrayKeys().key(np.array(["a", None], dtype=object))


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, True),
        (3, True),
        (2.5, True),
        ("text", True),
        (b"raw", True),
        (np.int16(4), True),
        ((1, ("a", b"b")), True),
        (frozenset({1, 2}), True),
        ([1], False),
        ((1, [2]), False),
        (np.zeros(2), False),
        (object(), False),
    ],
)
def test_is_trivially_copyable(value, expected):
    assert is_trivially_copyable(value) is expected
