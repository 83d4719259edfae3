"""
Naming utilities for persistkit tables.
"""

import re


_FIRST_CAP_RE = re.compile("(.)([A-Z][a-z]+)")
_ALL_CAP_RE = re.compile("([a-z0-9])([A-Z])")

SEQUENCE_SUFFIX = "_seq"


def camel_to_snake(name: str) -> str:
    """
    Convert ``CamelCase`` entity names to ``snake_case`` table names.
    """
    step1 = _FIRST_CAP_RE.sub(r"\1_\2", name)
    return _ALL_CAP_RE.sub(r"\1_\2", step1).lower()


def sequence_table_name(table_name: str) -> str:
    """
    Name of the single-row table that hands out identities for ``table_name``.
    """
    return f"{table_name}{SEQUENCE_SUFFIX}"
