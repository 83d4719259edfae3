"""
SQLite table store: one entity table plus a single-row sequence table.
"""

from __future__ import annotations

import sqlite3
from typing import Any, List, Mapping, Optional, Tuple, Type

from ..adapters.base import AdapterExecutionError, ConnectionConfig, DatabaseAdapter
from ..adapters.sqlite import SQLiteAdapter
from ..core.model import Model
from ..utils import get_logger, sequence_table_name
from .base import DuplicateKeyError, NotFoundError, Row, StoreError


class SQLiteStore:
    """
    Store backed by a SQLite table laid out from a model's fields.

    Identities come from ``<table>_seq`` rather than ``AUTOINCREMENT`` so they
    can be reserved at persist time, before any row exists.
    """

    def __init__(
        self,
        model: Type[Model],
        adapter: Optional[DatabaseAdapter] = None,
        *,
        connection_config: Optional[ConnectionConfig] = None,
    ) -> None:
        self.model = model
        self.adapter = adapter or SQLiteAdapter()
        self.dialect = self.adapter.dialect
        self.connection_config = connection_config or ConnectionConfig(url="sqlite:///:memory:")
        self.logger = get_logger("stores.sqlite")

        pk_field = model._meta.primary_key
        if pk_field is None:
            raise StoreError(f"Model '{model.__name__}' lacks a primary key.")
        self._pk_column = pk_field.column_name()
        self._fields = model._meta.value_fields()
        self._table = self.dialect.format_table(model._meta.table_name)
        self._sequence_table = self.dialect.format_table(sequence_table_name(model._meta.table_name))

        if not getattr(self.adapter, "connected", False):
            self.adapter.connect(self.connection_config)
        self.create_schema()

    # ------------------------------------------------------------------ #
    # Schema
    # ------------------------------------------------------------------ #
    def create_schema(self) -> None:
        columns = [f"{self.dialect.quote_identifier(self._pk_column)} INTEGER PRIMARY KEY"]
        for field_obj in self._fields:
            columns.append(
                self.dialect.render_column_definition(
                    field_obj.column_name(), field_obj.db_type or "TEXT", nullable=field_obj.nullable
                )
            )
        self.adapter.execute(f"CREATE TABLE IF NOT EXISTS {self._table} ({', '.join(columns)})")
        self.adapter.execute(
            f"CREATE TABLE IF NOT EXISTS {self._sequence_table} (next_val INTEGER NOT NULL)"
        )
        row = self.adapter.execute(f"SELECT COUNT(*) FROM {self._sequence_table}").fetchone()
        if row[0] == 0:
            self.adapter.execute(f"INSERT INTO {self._sequence_table} (next_val) VALUES (1)")
        self._commit()

    # ------------------------------------------------------------------ #
    # Store protocol
    # ------------------------------------------------------------------ #
    def next_identity(self) -> int:
        self.adapter.execute(f"UPDATE {self._sequence_table} SET next_val = next_val + 1")
        row = self.adapter.execute(f"SELECT next_val - 1 FROM {self._sequence_table}").fetchone()
        self._commit()
        return int(row[0])

    def insert(self, identity: Any, fields: Mapping[str, Any]) -> None:
        columns = [self._pk_column] + [f.column_name() for f in self._fields]
        params = [identity] + [fields.get(f.require_name()) for f in self._fields]
        placeholders = ", ".join(self.dialect.parameter_placeholder() for _ in columns)
        columns_sql = ", ".join(self.dialect.quote_identifier(c) for c in columns)
        sql = f"INSERT INTO {self._table} ({columns_sql}) VALUES ({placeholders})"
        try:
            self.adapter.execute(sql, params)
        except AdapterExecutionError as exc:
            if isinstance(exc.__cause__, sqlite3.IntegrityError) and self.read(identity) is not None:
                raise DuplicateKeyError(identity) from exc
            raise
        self._commit()

    def update(self, identity: Any, fields: Mapping[str, Any]) -> None:
        set_clauses = []
        params = []
        for field_obj in self._fields:
            set_clauses.append(
                f"{self.dialect.quote_identifier(field_obj.column_name())} = {self.dialect.parameter_placeholder()}"
            )
            params.append(fields.get(field_obj.require_name()))
        params.append(identity)
        sql = f"UPDATE {self._table} SET {', '.join(set_clauses)} WHERE {self._pk_clause()}"
        cursor = self.adapter.execute(sql, params)
        if cursor.rowcount == 0:
            raise NotFoundError(identity)
        self._commit()

    def delete(self, identity: Any) -> None:
        cursor = self.adapter.execute(f"DELETE FROM {self._table} WHERE {self._pk_clause()}", (identity,))
        if cursor.rowcount == 0:
            raise NotFoundError(identity)
        self._commit()

    def read(self, identity: Any) -> Optional[Row]:
        sql = f"SELECT {self._select_list()} FROM {self._table} WHERE {self._pk_clause()}"
        row = self.adapter.execute(sql, (identity,)).fetchone()
        if row is None:
            return None
        return self._row_to_fields(row)

    def read_all(self) -> List[Tuple[Any, Row]]:
        pk = self.dialect.quote_identifier(self._pk_column)
        sql = f"SELECT {pk}, {self._select_list()} FROM {self._table} ORDER BY {pk}"
        rows = self.adapter.execute(sql).fetchall()
        return [(row[0], self._row_to_fields(row)) for row in rows]

    def find_by(self, field_name: str, value: Any) -> List[Tuple[Any, Row]]:
        column = self.model._meta.get_field(field_name).column_name()
        pk = self.dialect.quote_identifier(self._pk_column)
        sql = (
            f"SELECT {pk}, {self._select_list()} FROM {self._table} "
            f"WHERE {self.dialect.quote_identifier(column)} = {self.dialect.parameter_placeholder()} "
            f"ORDER BY {pk}"
        )
        rows = self.adapter.execute(sql, (value,)).fetchall()
        return [(row[0], self._row_to_fields(row)) for row in rows]

    def close(self) -> None:
        self.adapter.close()

    # ------------------------------------------------------------------ #
    def _pk_clause(self) -> str:
        return f"{self.dialect.quote_identifier(self._pk_column)} = {self.dialect.parameter_placeholder()}"

    def _select_list(self) -> str:
        return ", ".join(self.dialect.quote_identifier(f.column_name()) for f in self._fields)

    def _row_to_fields(self, row: Any) -> Row:
        return {f.require_name(): row[f.column_name()] for f in self._fields}

    def _commit(self) -> None:
        if not self.connection_config.autocommit:
            self.adapter.commit()
