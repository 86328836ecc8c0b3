"""
Base Database Tester Repository

Abstract interface every backend under test implements so the benchmark can
drive it without knowing its dialect or driver.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from cott.core.data_generator import GeneratedRow


class DatabaseTesterRepository(ABC):
    """
    Lifecycle and data operations the benchmark times.

    Every method may raise; the benchmark records the failure against the
    step that called it. Read methods are exercised for timing only and their
    results are not inspected.
    """

    # Largest number of rows a single insert() call accepts.
    max_insert_rows: int = 1000

    @abstractmethod
    async def open(self) -> None:
        """Prepare the connection to the backend."""

    @abstractmethod
    async def close(self) -> None:
        """Release the connection to the backend."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise unless the backend answers."""

    @abstractmethod
    async def drop_database(self, name: str) -> None:
        pass

    @abstractmethod
    async def create_database(self, name: str) -> None:
        pass

    @abstractmethod
    async def switch_database(self, name: str) -> None:
        """
        Make ``name`` the current database.

        An empty name returns to the backend's default database.
        """

    @abstractmethod
    async def create_table(self, name: str, column_definitions: List[str]) -> None:
        pass

    @abstractmethod
    async def truncate_table(self, name: str) -> None:
        pass

    @abstractmethod
    async def drop_table(self, name: str) -> None:
        pass

    @abstractmethod
    async def insert(
        self, table: str, columns: Sequence[str], rows: Sequence[GeneratedRow]
    ) -> None:
        """Insert ``rows`` into ``table`` in one statement."""

    @abstractmethod
    async def select_by_id(self, table: str, row_id: int) -> None:
        pass

    @abstractmethod
    async def select_by_conditions(self, table: str, conditions: str) -> None:
        """Select rows matching a raw predicate expression."""
