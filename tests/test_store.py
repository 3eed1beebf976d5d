import pytest

from dup_indexer.store import SlabStore


def test_append_and_read_across_slabs():
    store = SlabStore(slab_size=3)

    positions = [store.append(value) for value in "abcdefg"]

    assert positions == list(range(7))
    assert len(store) == 7
    assert store.capacity == 9
    assert store[4] == "e"
    assert list(store) == list("abcdefg")
    assert store.to_list() == list("abcdefg")


def test_growth_does_not_move_stored_values():
    store = SlabStore(slab_size=2)
    first = ["payload"]
    store.append(first)
    slab = store._slabs[0]

    for idx in range(10):
        store.append(idx)

    assert store._slabs[0] is slab
    assert store[0] is first


def test_reserve_rounds_up_to_whole_slabs():
    store = SlabStore(slab_size=4)

    store.reserve(5)
    assert store.capacity == 8
    store.reserve(2)
    assert store.capacity == 8
    assert len(store) == 0


def test_invalid_arguments():
    with pytest.raises(ValueError):
        SlabStore(slab_size=0)
    with pytest.raises(ValueError):
        SlabStore().reserve(-1)


def test_out_of_range_positions():
    store = SlabStore(slab_size=2)
    store.append("only")

    with pytest.raises(IndexError):
        store[1]
    with pytest.raises(IndexError):
        store[-1]
