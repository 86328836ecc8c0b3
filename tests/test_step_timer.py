"""Tests for step timing and failure policies."""

import json

import pytest

from cott.core import step_timer
from cott.core.errors import StepFailedError
from cott.core.step_timer import StepPolicy, StepTimer, time_step
from cott.models import TestCaseResultsAccumulator, UnitOfMeasure, UnitOfMeasurePrefix


async def _ok():
    return None


async def _boom():
    raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_success_records_one_duration_metric():
    results = TestCaseResultsAccumulator()

    assert await StepTimer(results).run("createDatabase", _ok) is True

    assert results.errors == []
    assert len(results.metrics) == 1
    metric = results.metrics[0]
    assert metric.name == "createDatabaseDuration"
    assert metric.prefix == UnitOfMeasurePrefix.MICRO
    assert metric.unit == UnitOfMeasure.SECOND
    assert type(metric.value) is int
    assert metric.value >= 0

    payload = json.loads(results.model_dump_json())
    assert type(payload["metrics"][0]["value"]) is int


@pytest.mark.asyncio
async def test_duration_is_reported_in_whole_microseconds(monkeypatch):
    ticks = iter([10.0, 10.0025004])
    monkeypatch.setattr(step_timer.time, "perf_counter", lambda: next(ticks))
    results = TestCaseResultsAccumulator()

    await StepTimer(results).run("openConnection", _ok)

    assert results.metrics[0].value == 2500


@pytest.mark.asyncio
async def test_fatal_failure_records_error_and_raises():
    results = TestCaseResultsAccumulator()

    with pytest.raises(StepFailedError) as exc_info:
        await StepTimer(results).run("createTable", _boom)

    assert exc_info.value.label == "createTable"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert results.errors == ["createTable. boom"]
    assert results.metrics == []


@pytest.mark.asyncio
async def test_log_and_continue_failure_records_error_and_returns_false():
    results = TestCaseResultsAccumulator()

    ok = await StepTimer(results).run("startUp", _boom, StepPolicy.LOG_AND_CONTINUE)

    assert ok is False
    assert results.errors == ["startUp. boom"]
    assert results.metrics == []


@pytest.mark.asyncio
async def test_best_effort_failure_records_nothing():
    results = TestCaseResultsAccumulator()

    ok = await StepTimer(results).run("dropStaleDatabase", _boom, StepPolicy.BEST_EFFORT)

    assert ok is False
    assert results.errors == []
    assert results.metrics == []


@pytest.mark.asyncio
async def test_best_effort_success_records_nothing():
    results = TestCaseResultsAccumulator()

    ok = await StepTimer(results).run("dropStaleDatabase", _ok, StepPolicy.BEST_EFFORT)

    assert ok is True
    assert results.metrics == []


@pytest.mark.asyncio
async def test_time_step_shorthand():
    results = TestCaseResultsAccumulator()

    assert await time_step(_ok, "ping", results) is True
    with pytest.raises(StepFailedError):
        await time_step(_boom, "ping", results)

    assert results.metric_names() == ["pingDuration"]
    assert results.errors == ["ping. boom"]
