import pytest

from persistkit import Customer
from persistkit.persistence import EntityEntry, EntityState, IdentityMap, UnitOfWork


def managed(instance, **kwargs):
    entry = EntityEntry(instance=instance, state=EntityState.MANAGED, **kwargs)
    entry.refresh_snapshot()
    return entry


def test_entry_for_matches_exact_instance_only():
    identity_map = IdentityMap()
    customer = Customer("a", "b", id=1)
    identity_map.add(managed(customer))

    assert customer in identity_map
    assert Customer("a", "b", id=1) not in identity_map
    assert Customer("a", "b") not in identity_map
    assert identity_map.get(Customer, 1).instance is customer


def test_add_requires_identity():
    with pytest.raises(ValueError):
        IdentityMap().add(managed(Customer("a", "b")))


def test_values_keep_tracking_order():
    identity_map = IdentityMap()
    for identity in (3, 1, 2):
        identity_map.add(managed(Customer("a", "b", id=identity)))
    assert [entry.instance.id for entry in identity_map.values()] == [3, 1, 2]


def test_entry_detects_dirty_values():
    entry = managed(Customer("a", "b", id=1))
    assert not entry.is_dirty()
    entry.instance.update_name("c", "b")
    assert entry.is_dirty()
    entry.refresh_snapshot()
    assert not entry.is_dirty()


def test_unit_of_work_collects_only_managed_existing_dirty_entries():
    clean = managed(Customer("a", "b", id=1))
    dirty = managed(Customer("a", "b", id=2))
    dirty.instance.update_name("x", "y")
    fresh = managed(Customer("a", "b", id=3), is_new=True)
    fresh.instance.update_name("x", "y")
    removed = managed(Customer("a", "b", id=4))
    removed.instance.update_name("x", "y")
    removed.state = EntityState.REMOVED

    uow = UnitOfWork()
    assert uow.collect_dirty([clean, dirty, fresh, removed]) == [dirty]


def test_unit_of_work_discard_drops_pending_flags():
    uow = UnitOfWork()
    entry = managed(Customer("a", "b", id=1))
    uow.register_new(entry)
    uow.register_deleted(entry)
    assert uow.has_pending()
    uow.discard(entry.key)
    assert not uow.has_pending()
