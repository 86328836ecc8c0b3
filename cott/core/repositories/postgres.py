"""
Postgres Database Tester Repository

Drives a standalone Postgres server through the benchmark lifecycle using
plain DDL and multi-row parameterised inserts.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Sequence

from cott.connectors.postgres_connection import PostgresConnection
from cott.core.data_generator import COLUMN_KINDS, GeneratedRow, ValueKind
from cott.core.repositories.base import DatabaseTesterRepository

logger = logging.getLogger(__name__)

# asyncpg encodes the parameter count as int16.
MAX_BIND_PARAMS = 32767

# Postgres column types that must be sent as Decimal rather than int.
_NUMERIC_TYPES = {"NUMERIC", "DECIMAL"}


def quote_ident(name: str) -> str:
    """Quote a Postgres identifier."""
    name = str(name or "").strip()
    if not name:
        raise ValueError("identifier must not be empty")
    return '"' + name.replace('"', '""') + '"'


def build_insert_query(table: str, columns: Sequence[str], row_count: int) -> str:
    """
    Build ``INSERT INTO t (c1, c2) VALUES ($1, $2), ($3, $4), ...``.
    """
    if not columns:
        raise ValueError("insert requires at least one column")
    if row_count < 1:
        raise ValueError("insert requires at least one row")
    if row_count * len(columns) > MAX_BIND_PARAMS:
        raise ValueError(
            f"insert of {row_count} rows x {len(columns)} columns exceeds "
            f"{MAX_BIND_PARAMS} bind parameters"
        )

    width = len(columns)
    values = []
    for r in range(row_count):
        base = r * width
        placeholders = ", ".join(f"${base + i + 1}" for i in range(width))
        values.append(f"({placeholders})")

    column_list = ", ".join(quote_ident(c) for c in columns)
    return f"INSERT INTO {quote_ident(table)} ({column_list}) VALUES {', '.join(values)}"


def convert_value(kind: ValueKind | None, value: Any, sql_type: str = "") -> Any:
    """Convert a generated value to what asyncpg expects for its column."""
    if kind == ValueKind.TIMESTAMP:
        # DATE columns take a date; datetime is a date subclass but keeps the time part.
        if isinstance(value, datetime):
            return value.date() if sql_type == "DATE" else value
        return value
    if kind == ValueKind.INTEGER:
        return Decimal(value) if sql_type in _NUMERIC_TYPES else int(value)
    if kind == ValueKind.BOOLEAN:
        return bool(value)
    if kind in (ValueKind.FLOAT32, ValueKind.FLOAT64):
        return float(value)
    return value


class PostgresDatabaseTesterRepository(DatabaseTesterRepository):
    """Postgres backend for the database benchmark."""

    max_insert_rows = MAX_BIND_PARAMS // len(COLUMN_KINDS)

    def __init__(
        self,
        port: int,
        host: str,
        user: str,
        password: str,
        column_types: Dict[str, str] | None = None,
    ):
        self.port = port
        self.host = host
        self.user = user
        self.password = password
        self.connection: PostgresConnection | None = None
        # Column name -> SQL type, filled by create_table().
        self._column_types: Dict[str, str] = dict(column_types or {})

    def _require_connection(self) -> PostgresConnection:
        if self.connection is None:
            raise RuntimeError("repository is not open")
        return self.connection

    async def open(self) -> None:
        # Lazy: the first ping() establishes the connection.
        self.connection = PostgresConnection(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
        )

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.close()

    async def ping(self) -> None:
        result = await self._require_connection().fetch_val("SELECT 1")
        if result != 1:
            raise RuntimeError(f"unexpected ping result: {result!r}")

    async def drop_database(self, name: str) -> None:
        await self._require_connection().execute(f"DROP DATABASE {quote_ident(name)}")

    async def create_database(self, name: str) -> None:
        await self._require_connection().execute(f"CREATE DATABASE {quote_ident(name)}")

    async def switch_database(self, name: str) -> None:
        await self._require_connection().use_database(name)
        logger.debug("Switched to database %r", self.connection.database)

    async def create_table(self, name: str, column_definitions: List[str]) -> None:
        if not column_definitions:
            raise ValueError("table requires at least one column")
        for definition in column_definitions:
            parts = definition.split()
            if len(parts) >= 2:
                self._column_types[parts[0]] = parts[1].upper()
        await self._require_connection().execute(
            f"CREATE TABLE {quote_ident(name)} ({', '.join(column_definitions)})"
        )

    async def truncate_table(self, name: str) -> None:
        await self._require_connection().execute(f"TRUNCATE TABLE {quote_ident(name)}")

    async def drop_table(self, name: str) -> None:
        await self._require_connection().execute(f"DROP TABLE {quote_ident(name)}")

    def build_args(
        self, columns: Sequence[str], rows: Sequence[GeneratedRow]
    ) -> List[Any]:
        args: List[Any] = []
        for row in rows:
            for column in columns:
                args.append(
                    convert_value(
                        COLUMN_KINDS.get(column),
                        row[column],
                        self._column_types.get(column, ""),
                    )
                )
        return args

    async def insert(
        self, table: str, columns: Sequence[str], rows: Sequence[GeneratedRow]
    ) -> None:
        if not rows:
            return
        query = build_insert_query(table, columns, len(rows))
        await self._require_connection().execute(query, *self.build_args(columns, rows))

    async def select_by_id(self, table: str, row_id: int) -> None:
        await self._require_connection().fetch_all(
            f"SELECT * FROM {quote_ident(table)} WHERE id = $1", row_id
        )

    async def select_by_conditions(self, table: str, conditions: str) -> None:
        await self._require_connection().fetch_all(
            f"SELECT * FROM {quote_ident(table)} WHERE {conditions}"
        )
