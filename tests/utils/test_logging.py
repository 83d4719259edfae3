import logging

import pytest

from persistkit import Customer, FlushError, InMemoryStore, PersistenceContext, StoreError
from persistkit.utils.logging import get_correlation_id, get_logger, set_correlation_id, time_call


def test_correlation_id_round_trip():
    token = set_correlation_id("test-token")
    assert token == "test-token"
    assert get_correlation_id() == "test-token"


def test_time_call_logs_duration(caplog):
    logger = get_logger("tests.logging")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("unit-test", logger, threshold_ms=0):
        pass
    messages = [record.message for record in caplog.records if record.name == logger.name]
    assert any("unit-test took" in message for message in messages)


def test_store_writes_are_timed(caplog):
    caplog.set_level(logging.DEBUG, logger="persistkit.persistence.context")
    context = PersistenceContext(InMemoryStore(), slow_write_ms=0)
    context.persist(Customer("a", "b"))
    context.flush()

    warnings = [
        record for record in caplog.records
        if record.name == "persistkit.persistence.context" and record.levelno == logging.WARNING
    ]
    assert any("store.insert took" in record.message for record in warnings)
    assert warnings[0].operation == "insert"


def test_flush_failure_is_logged(caplog):
    class BrokenStore(InMemoryStore):
        def insert(self, identity, fields):
            raise StoreError("read-only")

    caplog.set_level(logging.ERROR, logger="persistkit.persistence.context")
    context = PersistenceContext(BrokenStore())
    context.persist(Customer("a", "b"))
    with pytest.raises(FlushError):
        context.flush()

    assert any("Flush failed during insert" in record.message for record in caplog.records)
