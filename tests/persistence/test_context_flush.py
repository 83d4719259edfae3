import pytest

from persistkit import (
    Customer,
    FlushError,
    InMemoryStore,
    InvalidStateError,
    NotFoundError,
    PersistenceContext,
    StoreError,
)
from persistkit.core import IntegerField, Model, StringField


class RecordingStore(InMemoryStore):
    def __init__(self):
        super().__init__()
        self.calls = []

    def insert(self, identity, fields):
        self.calls.append(("insert", identity))
        super().insert(identity, fields)

    def update(self, identity, fields):
        self.calls.append(("update", identity))
        super().update(identity, fields)

    def delete(self, identity):
        self.calls.append(("delete", identity))
        super().delete(identity)


class FailingStore(RecordingStore):
    def __init__(self, fail_on):
        super().__init__()
        self.fail_on = fail_on

    def insert(self, identity, fields):
        if ("insert", identity) == self.fail_on:
            raise StoreError("disk full")
        super().insert(identity, fields)


class Product(Model):
    name = StringField(nullable=False)
    stock = IntegerField(default=0)


def test_flush_orders_inserts_updates_deletes():
    store = RecordingStore()
    context = PersistenceContext(store)
    first, second, third = Customer("a", "a"), Customer("b", "b"), Customer("c", "c")
    for customer in (first, second, third):
        context.persist(customer)
    context.flush()
    store.calls.clear()

    context.remove(first)
    second.update_name("b2", "b2")
    fourth = Customer("d", "d")
    context.persist(fourth)
    fifth = Customer("e", "e")
    context.persist(fifth)
    third.update_name("c2", "c2")

    result = context.flush()

    assert store.calls == [
        ("insert", fourth.id),
        ("insert", fifth.id),
        ("update", second.id),
        ("update", third.id),
        ("delete", first.id),
    ]
    assert result.inserted == [4, 5]
    assert result.updated == [2, 3]
    assert result.deleted == [1]
    assert result.total == 5


def test_flush_failure_is_fail_fast_and_keeps_applied_writes():
    store = FailingStore(fail_on=("insert", 2))
    context = PersistenceContext(store)
    first, second, third = Customer("a", "a"), Customer("b", "b"), Customer("c", "c")
    for customer in (first, second, third):
        context.persist(customer)

    with pytest.raises(FlushError) as excinfo:
        context.flush()

    error = excinfo.value
    assert error.operation == "insert"
    assert error.model is Customer
    assert error.identity == 2
    assert isinstance(error.__cause__, StoreError)
    assert [identity for identity, _ in store.read_all()] == [1]

    store.fail_on = None
    result = context.flush()
    assert result.inserted == [2, 3]
    assert [identity for identity, _ in store.read_all()] == [1, 2, 3]


def test_flush_reports_missing_row_on_update():
    store = InMemoryStore()
    context = PersistenceContext(store)
    customer = Customer("a", "a")
    context.persist(customer)
    context.flush()

    store.delete(customer.id)
    customer.update_name("b", "b")

    with pytest.raises(FlushError) as excinfo:
        context.flush()
    assert excinfo.value.operation == "update"
    assert isinstance(excinfo.value.__cause__, NotFoundError)


def test_context_manager_flushes_on_success():
    store = InMemoryStore()
    with PersistenceContext(store) as context:
        customer = Customer("a", "a")
        context.persist(customer)

    assert context.closed
    assert store.read(customer.id) == {"first_name": "a", "last_name": "a"}


def test_context_manager_abandons_on_error():
    store = InMemoryStore()
    with pytest.raises(RuntimeError):
        with PersistenceContext(store) as context:
            context.persist(Customer("a", "a"))
            raise RuntimeError("boom")

    assert context.closed
    assert store.read_all() == []


def test_closed_context_rejects_operations():
    context = PersistenceContext(InMemoryStore())
    context.close()
    with pytest.raises(InvalidStateError):
        context.persist(Customer("a", "a"))
    with pytest.raises(InvalidStateError):
        context.flush()


def test_clear_detaches_everything():
    store = InMemoryStore()
    context = PersistenceContext(store)
    customer = Customer("a", "a")
    context.persist(customer)

    context.clear()

    assert not context.contains(customer)
    assert context.flush().total == 0
    assert store.read_all() == []


def test_find_returns_tracked_or_loaded_instance():
    store = InMemoryStore()
    store.insert(store.next_identity(), {"first_name": "a", "last_name": "b"})
    context = PersistenceContext(store)

    loaded = context.find(Customer, 1)

    assert loaded.to_dict() == {"id": 1, "first_name": "a", "last_name": "b"}
    assert context.contains(loaded)
    assert context.find(Customer, 1) is loaded
    assert context.find(Customer, 99) is None
    assert context.flush().total == 0

    loaded.update_name("c", "d")
    assert context.flush().updated == [1]

    context.remove(loaded)
    assert context.find(Customer, 1) is None


def test_find_all_flushes_pending_work_first():
    store = InMemoryStore()
    context = PersistenceContext(store)
    customer = Customer("a", "a")
    context.persist(customer)

    found = context.find_all(Customer)

    assert found == [customer]
    assert store.read(customer.id) is not None


def test_models_can_use_separate_stores():
    customers, products = InMemoryStore(), InMemoryStore()
    context = PersistenceContext(customers, stores={Product: products})
    customer = Customer("a", "a")
    product = Product(name="widget", stock=3)
    context.persist(customer)
    context.persist(product)

    context.flush()

    assert customer.id == 1
    assert product.id == 1
    assert customers.read(1) == {"first_name": "a", "last_name": "a"}
    assert products.read(1) == {"name": "widget", "stock": 3}
    assert context.contains(customer)
    assert context.contains(product)


def test_context_requires_a_store():
    with pytest.raises(ValueError):
        PersistenceContext()


def test_missing_store_for_model_is_reported():
    context = PersistenceContext(stores={Product: InMemoryStore()})
    with pytest.raises(InvalidStateError):
        context.persist(Customer("a", "a"))


def test_deletes_follow_removal_order():
    store = RecordingStore()
    context = PersistenceContext(store)
    first, second = Customer("a", "a"), Customer("b", "b")
    context.persist(first)
    context.persist(second)
    context.flush()
    store.calls.clear()

    context.remove(second)
    context.remove(first)
    result = context.flush()

    assert result.deleted == [second.id, first.id]
    assert store.calls == [("delete", second.id), ("delete", first.id)]


class ReusingStore(InMemoryStore):
    def next_identity(self):
        return 7


def test_identity_tracked_by_another_instance_is_rejected():
    store = ReusingStore()
    context = PersistenceContext(store)
    first = Customer("a", "a")
    context.persist(first)

    with pytest.raises(InvalidStateError):
        context.persist(Customer("b", "b"))

    assert context.identity_map.get(Customer, 7).instance is first
    assert context.flush().inserted == [7]
    assert store.read(7) == {"first_name": "a", "last_name": "a"}
