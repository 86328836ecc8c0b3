"""
Shared pytest fixtures.

Provides in-memory stand-ins for a database backend, the row generator and
asyncio.sleep so the benchmark can be exercised without a database.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from cott.core.data_generator import GeneratedRow, RowGenerator
from cott.core.repositories.base import DatabaseTesterRepository
from cott.models import ComponentType, TestCase, TestCaseResultsAccumulator

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)

# method name -> exception to raise, or callable(*args) returning one (or None)
FailureSpec = Dict[str, Any]


class FakeRepository(DatabaseTesterRepository):
    """Records every call; fails on demand."""

    def __init__(
        self,
        fail_on: Optional[FailureSpec] = None,
        ping_failures: int = 0,
        always_fail_ping: bool = False,
        max_insert_rows: int = 1000,
    ):
        self.fail_on: FailureSpec = dict(fail_on or {})
        self.ping_failures = ping_failures
        self.always_fail_ping = always_fail_ping
        self.max_insert_rows = max_insert_rows
        self.calls: List[tuple] = []
        self.inserted_batches: List[int] = []
        self.pings = 0

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        failure = self.fail_on.get(method)
        if callable(failure) and not isinstance(failure, BaseException):
            failure = failure(*args)
        if failure is not None:
            raise failure

    def methods(self) -> List[str]:
        return [c[0] for c in self.calls]

    async def open(self) -> None:
        self._record("open")

    async def close(self) -> None:
        self._record("close")

    async def ping(self) -> None:
        self.pings += 1
        if self.always_fail_ping or self.pings <= self.ping_failures:
            raise ConnectionError("connection refused")
        self._record("ping")

    async def drop_database(self, name: str) -> None:
        self._record("drop_database", name)

    async def create_database(self, name: str) -> None:
        self._record("create_database", name)

    async def switch_database(self, name: str) -> None:
        self._record("switch_database", name)

    async def create_table(self, name: str, column_definitions: List[str]) -> None:
        self._record("create_table", name, list(column_definitions))

    async def truncate_table(self, name: str) -> None:
        self._record("truncate_table", name)

    async def drop_table(self, name: str) -> None:
        self._record("drop_table", name)

    async def insert(
        self, table: str, columns: Sequence[str], rows: Sequence[GeneratedRow]
    ) -> None:
        self._record("insert", table, len(rows))
        self.inserted_batches.append(len(rows))

    async def select_by_id(self, table: str, row_id: int) -> None:
        self._record("select_by_id", table, row_id)

    async def select_by_conditions(self, table: str, conditions: str) -> None:
        self._record("select_by_conditions", table, conditions)


class FastRowGenerator(RowGenerator):
    """Repeats one real row; generating millions of distinct rows is too slow for unit tests."""

    def __init__(self):
        super().__init__(seed=1, clock=lambda: FIXED_NOW)
        self._row = self.generate_row()
        self.requested: List[int] = []

    def generate(self, count: int) -> List[GeneratedRow]:
        self.requested.append(count)
        return [self._row] * count


class FakeSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def make_repository() -> Callable[..., FakeRepository]:
    return FakeRepository


@pytest.fixture
def fake_repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def fast_generator() -> FastRowGenerator:
    return FastRowGenerator()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def postgres_case() -> TestCase:
    return TestCase(
        component_type=ComponentType.POSTGRES,
        image="postgres:16",
        port=5432,
        env_vars={"POSTGRES_USER": "cott", "POSTGRES_PASSWORD": "secret"},
    )


@pytest.fixture
def results(postgres_case: TestCase) -> TestCaseResultsAccumulator:
    return TestCaseResultsAccumulator(test_case=postgres_case)
