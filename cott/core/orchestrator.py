"""
Case Orchestrator

Runs one test case end to end:

    select backend -> open -> await ready -> drop stale database
    -> create database -> switch database -> table benchmark
    -> switch back -> drop database -> close

Configuration errors are raised before any backend call. Every other failure is
recorded in the results accumulator and stops the run where it happened; no
cleanup is attempted after a failed step.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from cott.config import settings
from cott.core.data_generator import RowGenerator
from cott.core.errors import ConfigurationError, ConnectionNotEstablishedError, StepFailedError
from cott.core.repositories import create_repository
from cott.core.repositories.base import DatabaseTesterRepository
from cott.core.step_timer import StepPolicy, StepTimer
from cott.core.table_benchmark import TableBenchmark, run_table_benchmark
from cott.models import TestCase, TestCaseResultsAccumulator

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[TestCase], DatabaseTesterRepository]
Sleep = Callable[[float], Awaitable[None]]


async def await_ready(
    repository: DatabaseTesterRepository,
    attempts: int,
    interval_seconds: float,
    sleep: Optional[Sleep] = None,
    slack_seconds: Optional[float] = None,
) -> int:
    """
    Poll ``repository.ping()`` until it succeeds.

    The whole poll is bounded by ``attempts * interval_seconds + slack_seconds``;
    a ping that hangs is cut off at the remaining budget.

    Returns:
        Number of pings made (the last one succeeded)

    Raises:
        ConnectionNotEstablishedError: if all ``attempts`` pings failed or the
            budget ran out
    """
    sleep = sleep or asyncio.sleep
    if slack_seconds is None:
        slack_seconds = settings.READY_POLL_SLACK_SECONDS
    loop = asyncio.get_running_loop()
    deadline = loop.time() + attempts * interval_seconds + slack_seconds

    made = 0
    for attempt in range(1, attempts + 1):
        remaining = deadline - loop.time()
        if remaining <= 0:
            logger.debug("Ping budget exhausted after %d attempts", made)
            break
        made = attempt
        try:
            await asyncio.wait_for(repository.ping(), timeout=remaining)
        except Exception as e:
            logger.debug("Ping %d/%d failed: %s", attempt, attempts, e)
            await sleep(interval_seconds)
            continue
        return attempt
    raise ConnectionNotEstablishedError(made)


class CaseOrchestrator:
    """Drives a database backend through the benchmark lifecycle."""

    def __init__(
        self,
        database_name: Optional[str] = None,
        repository_factory: Optional[RepositoryFactory] = None,
        generator: Optional[RowGenerator] = None,
        ready_attempts: Optional[int] = None,
        ready_interval_seconds: Optional[float] = None,
        ready_failure_pause_seconds: Optional[float] = None,
        sweep_max_rows: Optional[int] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.database_name = database_name or settings.BENCHMARK_DATABASE_NAME
        self.repository_factory = repository_factory or create_repository
        self.generator = generator
        self.ready_attempts = ready_attempts or settings.READY_POLL_ATTEMPTS
        self.ready_interval_seconds = (
            ready_interval_seconds
            if ready_interval_seconds is not None
            else settings.READY_POLL_INTERVAL_SECONDS
        )
        self.ready_failure_pause_seconds = (
            ready_failure_pause_seconds
            if ready_failure_pause_seconds is not None
            else settings.READY_FAILURE_PAUSE_SECONDS
        )
        self.sweep_max_rows = sweep_max_rows
        self.sleep = sleep or asyncio.sleep

    async def run_case(self, results: TestCaseResultsAccumulator) -> None:
        """
        Run the test case held by ``results``.

        Step failures end the run quietly; they are visible only in
        ``results.errors``.

        Raises:
            ConfigurationError: if the case has no test case, an unknown component
                type or missing credentials
        """
        if results.test_case is None:
            raise ConfigurationError("results accumulator has no test case")

        repository = self.repository_factory(results.test_case)
        logger.info(
            "Running %s case on port %s",
            results.test_case.component_type.value or "<none>",
            results.test_case.port,
        )

        try:
            await self._run(repository, StepTimer(results), results)
        except StepFailedError as e:
            logger.info("Case stopped at step %s", e.label)

    async def _run(
        self,
        repository: DatabaseTesterRepository,
        timer: StepTimer,
        results: TestCaseResultsAccumulator,
    ) -> None:
        db = self.database_name

        await timer.run("openConnection", repository.open)

        ready = await timer.run(
            "startUp",
            lambda: await_ready(
                repository, self.ready_attempts, self.ready_interval_seconds, self.sleep
            ),
            StepPolicy.LOG_AND_CONTINUE,
        )
        if not ready:
            logger.debug("Couldn't ping database, continuing")
            await self.sleep(self.ready_failure_pause_seconds)

        # Leftovers from a previous run.
        await timer.run(
            "dropStaleDatabase",
            lambda: repository.drop_database(db),
            StepPolicy.BEST_EFFORT,
        )

        await timer.run("createDatabase", lambda: repository.create_database(db))
        await timer.run("switchDatabase", lambda: repository.switch_database(db))

        await run_table_benchmark(
            TableBenchmark(
                repository,
                timer,
                generator=self.generator,
                max_rows=self.sweep_max_rows,
            )
        )

        try:
            await repository.switch_database("")
        except Exception as e:
            logger.warning("Couldn't switch back to the default database: %s", e)
            results.add_error(str(e))
            return

        await timer.run("dropDatabase", lambda: repository.drop_database(db))
        await timer.run("closeConnection", repository.close)


async def run_case(
    test_case: TestCase,
    orchestrator: Optional[CaseOrchestrator] = None,
) -> TestCaseResultsAccumulator:
    """Run ``test_case`` and return its results."""
    results = TestCaseResultsAccumulator(test_case=test_case)
    await (orchestrator or CaseOrchestrator()).run_case(results)
    return results
