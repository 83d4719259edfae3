import pytest

from persistkit import Customer, CrudRepository, CustomerRepository, InMemoryStore, PersistenceContext


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def repository(store):
    return CustomerRepository(PersistenceContext(store))


def test_save_then_find_all(repository):
    repository.save(Customer("test", "test"))

    customers = repository.find_all()

    assert len(customers) == 1
    assert customers[0].id == 1


def test_find_by_last_name(repository):
    repository.save_all(
        [Customer("Jack", "Bauer"), Customer("Chloe", "O'Brian"), Customer("Kim", "Bauer")]
    )

    bauers = repository.find_by_last_name("Bauer")

    assert [c.first_name for c in bauers] == ["Jack", "Kim"]
    assert repository.find_by_last_name("Palmer") == []


def test_save_detached_entity_merges(repository, store):
    customer = repository.save(Customer("first", "last"))
    repository.context.flush()
    repository.context.detach(customer)
    customer.update_name("new first", "new last")

    managed = repository.save(customer)

    assert managed is not customer
    assert repository.find_by_id(customer.id) is managed
    assert repository.context.flush().updated == [customer.id]
    assert store.read(customer.id) == {"first_name": "new first", "last_name": "new last"}


def test_count_exists_and_delete(repository, store):
    first, second = repository.save_all([Customer("a", "a"), Customer("b", "b")])
    assert repository.count() == 2
    assert repository.exists_by_id(first.id)
    assert not repository.exists_by_id(99)

    repository.delete(first)
    assert repository.count() == 1

    repository.delete_by_id(second.id)
    assert repository.count() == 0
    assert store.read_all() == []

    with pytest.raises(LookupError):
        repository.delete_by_id(second.id)


def test_delete_accepts_detached_entity(repository, store):
    customer = repository.save(Customer("a", "a"))
    repository.context.flush()
    repository.context.detach(customer)

    repository.delete(customer)
    repository.context.flush()

    assert store.read_all() == []


def test_delete_all(repository, store):
    repository.save_all([Customer("a", "a"), Customer("b", "b")])
    repository.delete_all()
    repository.context.flush()
    assert store.read_all() == []


def test_generic_repository_requires_model(store):
    with pytest.raises(TypeError):
        CrudRepository(PersistenceContext(store))
    assert CrudRepository(PersistenceContext(store), Customer).find_all() == []


def test_save_of_unknown_identity_does_not_lose_entities(repository, store):
    repository.save(Customer("a", "a", id=1))
    repository.save(Customer("b", "b"))

    assert repository.count() == 2
    assert sorted(row["first_name"] for _, row in store.read_all()) == ["a", "b"]
