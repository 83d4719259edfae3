from .demo import (  # noqa: F401
    bootstrap_store,
    read_rows,
    run_demo,
    walk_lifecycle,
)

__all__ = [
    "bootstrap_store",
    "read_rows",
    "walk_lifecycle",
    "run_demo",
]
