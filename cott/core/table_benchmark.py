"""
Table Benchmark

Creates the benchmark table, then sweeps insert/select/truncate cycles over
row counts growing tenfold from 1 to SWEEP_MAX_ROWS, and finally drops the table.

Metric labels per sweep step, with N the step's row count:
- ``NxInsertEmptyTable``: bulk load of N rows into the empty table
- ``selectByIdNxTable`` / ``selectByConditionsNxTable``: reads on the loaded table
- ``MxInsertNxTable``: insert of M = 1000, 100, 10, 1 rows into the loaded
  table (only for N >= FULL_TABLE_INSERT_MIN_ROWS)
- ``truncateNxTable``

Any failed step ends the whole sweep, and the table is left in place.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence

from cott.config import settings
from cott.core.data_generator import COLUMN_NAMES, RowGenerator, table_column_definitions
from cott.core.errors import StepFailedError
from cott.core.repositories.base import DatabaseTesterRepository
from cott.core.step_timer import StepTimer

logger = logging.getLogger(__name__)

SELECT_CONDITIONS = (
    "f1>1 AND f2>1 AND f3 AND f5>0.5 AND f6>0.5 AND f7>1 AND f8>1 "
    "AND f9>1 AND f10>1 AND f11>1"
)

FULL_TABLE_INSERT_MAX_ROWS = 1000


def geometric_sizes(start: int, stop: int, factor: int = 10) -> Iterator[int]:
    """Yield start, start*factor, ... while <= stop."""
    size = start
    while size <= stop:
        yield size
        size *= factor


def descending_sizes(start: int, factor: int = 10) -> Iterator[int]:
    """Yield start, start//factor, ... down to 1."""
    size = start
    while size >= 1:
        yield size
        size //= factor


def insert_batches(data_count: int, batch_size: int) -> List[int]:
    """
    Row counts of the insert calls used to load ``data_count`` rows.

    Counts above ``batch_size`` are loaded as ``data_count // batch_size`` full
    batches; the remainder is not inserted (1500 rows load as one batch of 1000).
    """
    if data_count > batch_size:
        return [batch_size] * (data_count // batch_size)
    return [data_count]


class TableBenchmark:
    """Runs the table lifecycle and scaling sweep against one repository."""

    def __init__(
        self,
        repository: DatabaseTesterRepository,
        timer: StepTimer,
        generator: Optional[RowGenerator] = None,
        table_name: Optional[str] = None,
        columns: Sequence[str] = COLUMN_NAMES,
        batch_size: Optional[int] = None,
        max_rows: Optional[int] = None,
        full_table_insert_min_rows: Optional[int] = None,
    ):
        self.repository = repository
        self.timer = timer
        self.generator = generator or RowGenerator(seed=settings.GENERATOR_SEED)
        self.table_name = table_name or settings.BENCHMARK_TABLE_NAME
        self.columns = list(columns)
        batch_size = batch_size or settings.INSERT_BATCH_SIZE
        self.batch_size = min(batch_size, repository.max_insert_rows)
        self.max_rows = max_rows or settings.SWEEP_MAX_ROWS
        self.full_table_insert_min_rows = (
            full_table_insert_min_rows
            if full_table_insert_min_rows is not None
            else settings.FULL_TABLE_INSERT_MIN_ROWS
        )

    async def run(self) -> None:
        """
        Create the table, sweep, then drop it.

        Raises:
            StepFailedError: on the first failed step
        """
        await self.timer.run(
            "createTable",
            lambda: self.repository.create_table(
                self.table_name, table_column_definitions()
            ),
        )
        await self.timer.run(
            "truncateEmptyTable",
            lambda: self.repository.truncate_table(self.table_name),
        )

        await self.sweep()

        await self.timer.run(
            "dropTable", lambda: self.repository.drop_table(self.table_name)
        )

    async def sweep(self) -> None:
        for data_count in geometric_sizes(1, self.max_rows):
            await self.run_step(data_count)

    async def insert_generated(self, count: int) -> None:
        await self.repository.insert(
            self.table_name, self.columns, self.generator.generate(count)
        )

    async def insert_rows(self, data_count: int) -> None:
        for batch in insert_batches(data_count, self.batch_size):
            await self.insert_generated(batch)

    async def run_step(self, data_count: int) -> None:
        prefix = f"{data_count}x"
        table = self.table_name
        logger.info("Running %s table step", prefix)

        await self.timer.run(
            f"{prefix}InsertEmptyTable", lambda: self.insert_rows(data_count)
        )
        await self.timer.run(
            f"selectById{prefix}Table",
            lambda: self.repository.select_by_id(table, data_count // 2),
        )
        await self.timer.run(
            f"selectByConditions{prefix}Table",
            lambda: self.repository.select_by_conditions(table, SELECT_CONDITIONS),
        )

        if data_count >= self.full_table_insert_min_rows:
            for insert_size in descending_sizes(FULL_TABLE_INSERT_MAX_ROWS):
                await self.timer.run(
                    f"{insert_size}xInsert{prefix}Table",
                    lambda: self.insert_generated(insert_size),
                )

        await self.timer.run(
            f"truncate{prefix}Table", lambda: self.repository.truncate_table(table)
        )


async def run_table_benchmark(benchmark: TableBenchmark) -> bool:
    """Run ``benchmark``; a failed step is already recorded, so report it as False."""
    try:
        await benchmark.run()
    except StepFailedError as e:
        logger.info("Table benchmark stopped at %s", e.label)
        return False
    return True
