import pytest

from persistkit import DuplicateKeyError, InMemoryStore, NotFoundError


def test_identities_increase_monotonically():
    store = InMemoryStore()
    assert [store.next_identity() for _ in range(3)] == [1, 2, 3]
    assert InMemoryStore(start=10).next_identity() == 10


def test_crud_round_and_missing_rows():
    store = InMemoryStore()
    store.insert(2, {"name": "b"})
    store.insert(1, {"name": "a"})
    assert store.read_all() == [(1, {"name": "a"}), (2, {"name": "b"})]

    store.update(1, {"name": "z"})
    assert store.read(1) == {"name": "z"}

    store.delete(2)
    assert store.read(2) is None
    assert len(store) == 1

    with pytest.raises(NotFoundError):
        store.update(2, {"name": "b"})
    with pytest.raises(NotFoundError):
        store.delete(2)
    with pytest.raises(DuplicateKeyError):
        store.insert(1, {"name": "again"})


def test_reads_return_copies():
    store = InMemoryStore()
    store.insert(1, {"name": "a"})
    store.read(1)["name"] = "mutated"
    assert store.read(1) == {"name": "a"}
