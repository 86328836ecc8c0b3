"""
Postgres Connection Manager

Manages the single asyncpg connection a benchmark run drives, with lazy
connect and database switching.
"""

import logging
from typing import Optional, Any, List

import asyncpg

from cott.config import settings

logger = logging.getLogger(__name__)


class PostgresConnection:
    """
    One asyncpg connection, opened on first use.

    Postgres cannot change database on an open connection, so switching
    database closes the current connection and the next query reconnects.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        command_timeout: Optional[float] = None,
    ):
        """
        Initialize Postgres connection settings. No I/O happens here.

        Args:
            host: Database host
            port: Database port
            user: Username
            password: Password
            database: Database name (defaults to POSTGRES_DEFAULT_DATABASE)
            connect_timeout: Connect timeout in seconds
            command_timeout: Command timeout in seconds
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database or settings.POSTGRES_DEFAULT_DATABASE
        self.connect_timeout = (
            connect_timeout
            if connect_timeout is not None
            else settings.POSTGRES_CONNECT_TIMEOUT
        )
        self.command_timeout = (
            command_timeout
            if command_timeout is not None
            else settings.POSTGRES_COMMAND_TIMEOUT
        )

        self._conn: Optional[asyncpg.Connection] = None

        logger.info(
            f"Postgres connection configured: {user}@{host}:{port}/{self.database}"
        )

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and not self._conn.is_closed()

    async def connect(self) -> asyncpg.Connection:
        """Return the open connection, connecting if needed."""
        if self.is_connected:
            return self._conn

        logger.debug(f"Connecting to Postgres database {self.database}...")
        self._conn = await asyncpg.connect(
            host=self.host,
            port=self.port,
            database=self.database,
            user=self.user,
            password=self.password,
            timeout=self.connect_timeout,
            command_timeout=self.command_timeout,
        )
        logger.debug(f"Connected to Postgres database {self.database}")
        return self._conn

    async def use_database(self, database: str) -> None:
        """Point the connection at another database, reconnecting."""
        await self.close()
        self.database = database or settings.POSTGRES_DEFAULT_DATABASE
        await self.connect()

    async def execute(self, query: str, *args, timeout: Optional[float] = None) -> str:
        """
        Execute a query that doesn't return results (DDL, INSERT, ...).

        Returns:
            Status string (e.g., "INSERT 0 1")
        """
        conn = await self.connect()
        return await conn.execute(query, *args, timeout=timeout)

    async def fetch_all(
        self, query: str, *args, timeout: Optional[float] = None
    ) -> List[asyncpg.Record]:
        conn = await self.connect()
        return await conn.fetch(query, *args, timeout=timeout)

    async def fetch_val(self, query: str, *args, timeout: Optional[float] = None) -> Any:
        conn = await self.connect()
        return await conn.fetchval(query, *args, timeout=timeout)

    async def close(self):
        """Close the connection if open."""
        if self._conn is not None:
            conn, self._conn = self._conn, None
            if not conn.is_closed():
                logger.debug("Closing Postgres connection...")
                await conn.close()
