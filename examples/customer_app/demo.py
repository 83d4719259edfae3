"""
Customer example walking one entity through every lifecycle state.
"""

from __future__ import annotations

from typing import Any, Dict, List

from persistkit import Customer, PersistenceContext, SQLiteStore
from persistkit.adapters import ConnectionConfig


def bootstrap_store(dsn: str = "sqlite:///:memory:") -> SQLiteStore:
    """
    Open a SQLite-backed customer table.
    """

    return SQLiteStore(Customer, connection_config=ConnectionConfig(url=dsn))


def read_rows(store: SQLiteStore) -> List[Dict[str, Any]]:
    """
    Read the table directly, bypassing any persistence context.
    """

    return [{"id": identity, **fields} for identity, fields in store.read_all()]


def walk_lifecycle(store: SQLiteStore) -> List[Dict[str, Any]]:
    """
    Record the table contents after each step of a persist / rename / detach /
    merge / remove sequence.
    """

    steps: List[Dict[str, Any]] = []

    def record(label: str, context: PersistenceContext, customer: Customer) -> None:
        steps.append(
            {
                "step": label,
                "state": context.state_of(customer).value,
                "rows": read_rows(store),
            }
        )

    with PersistenceContext(store) as context:
        customer = Customer("first", "last")
        record("new", context, customer)

        context.persist(customer)
        record("persisted", context, customer)

        context.flush()
        record("flushed", context, customer)

        customer.update_name("new first", "new last")
        context.flush()
        record("renamed", context, customer)

        context.detach(customer)
        customer.update_name("detached first", "detached last")
        context.flush()
        record("detached", context, customer)

        managed = context.merge(customer)
        context.flush()
        record("merged", context, managed)

        context.remove(managed)
        record("removed", context, managed)

        context.flush()
        record("deleted", context, managed)

    return steps


def run_demo(dsn: str = "sqlite:///:memory:") -> List[Dict[str, Any]]:
    store = bootstrap_store(dsn)
    try:
        return walk_lifecycle(store)
    finally:
        store.close()


if __name__ == "__main__":
    for entry in run_demo("sqlite:///customer_demo.db"):
        print(f"{entry['step']:<10} {entry['state']:<10} {entry['rows']}")
