from examples.customer_app import bootstrap_store, run_demo, walk_lifecycle


def test_walk_lifecycle_records_each_state(tmp_path):
    store = bootstrap_store(dsn=f"sqlite:///{tmp_path / 'customer_example.db'}")
    try:
        steps = walk_lifecycle(store)
    finally:
        store.close()

    by_step = {entry["step"]: entry for entry in steps}
    assert [entry["step"] for entry in steps] == [
        "new",
        "persisted",
        "flushed",
        "renamed",
        "detached",
        "merged",
        "removed",
        "deleted",
    ]
    assert by_step["new"]["state"] == "transient"
    assert by_step["persisted"]["rows"] == []
    assert by_step["flushed"]["rows"] == [{"id": 1, "first_name": "first", "last_name": "last"}]
    assert by_step["renamed"]["rows"][0]["first_name"] == "new first"
    assert by_step["detached"]["state"] == "detached"
    assert by_step["detached"]["rows"][0]["first_name"] == "new first"
    assert by_step["merged"]["state"] == "managed"
    assert by_step["merged"]["rows"][0]["first_name"] == "detached first"
    assert by_step["removed"]["state"] == "removed"
    assert len(by_step["removed"]["rows"]) == 1
    assert by_step["deleted"]["rows"] == []


def test_run_demo_ends_with_empty_table():
    steps = run_demo()
    assert steps[-1]["rows"] == []
    assert steps[-1]["state"] == "detached"
