"""
Step Timer

Runs one named backend operation, measures its wall-clock duration and records
the outcome into the results accumulator.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable

from cott.core.errors import StepFailedError
from cott.models import TestCaseResultsAccumulator, UnitOfMeasure, UnitOfMeasurePrefix

logger = logging.getLogger(__name__)

DURATION_SUFFIX = "Duration"

Operation = Callable[[], Awaitable[Any]]


class StepPolicy(str, Enum):
    """What a failed step means for the caller."""

    # Record the error and raise StepFailedError.
    FATAL = "fatal"
    # Record the error and return False.
    LOG_AND_CONTINUE = "log_and_continue"
    # Log only; nothing reaches the accumulator.
    BEST_EFFORT = "best_effort"


class StepTimer:
    """
    Times steps against a single results accumulator.

    On success a ``<label>Duration`` metric is recorded in integer microseconds.
    On failure no metric is recorded; what happens next depends on the policy.
    """

    def __init__(self, results: TestCaseResultsAccumulator):
        self.results = results

    async def run(
        self,
        label: str,
        operation: Operation,
        policy: StepPolicy = StepPolicy.FATAL,
    ) -> bool:
        """
        Time ``operation`` under ``label``.

        Returns:
            True on success, False on a non-fatal failure.

        Raises:
            StepFailedError: if the operation fails under ``StepPolicy.FATAL``
        """
        start = time.perf_counter()
        try:
            await operation()
        except Exception as e:
            if policy == StepPolicy.BEST_EFFORT:
                logger.debug("Best-effort step %s failed: %s", label, e)
                return False

            logger.warning("Error on step execution %s: %s", label, e)
            self.results.add_error(f"{label}. {e}")
            if policy == StepPolicy.FATAL:
                raise StepFailedError(label, e) from e
            return False

        duration_us = int((time.perf_counter() - start) * 1_000_000)
        logger.debug("Step %s finished in %dus", label, duration_us)

        if policy != StepPolicy.BEST_EFFORT:
            self.results.add_metric(
                label + DURATION_SUFFIX,
                UnitOfMeasurePrefix.MICRO,
                UnitOfMeasure.SECOND,
                duration_us,
            )
        return True


async def time_step(
    operation: Operation,
    label: str,
    results: TestCaseResultsAccumulator,
    policy: StepPolicy = StepPolicy.FATAL,
) -> bool:
    """Functional shorthand for ``StepTimer(results).run(label, operation, policy)``."""
    return await StepTimer(results).run(label, operation, policy)
