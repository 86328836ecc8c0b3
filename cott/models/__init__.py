"""
Data Models

Pydantic models for test cases and their results.
"""

from cott.models.test_case import ComponentType, TestCase
from cott.models.results import (
    Metric,
    TestCaseResultsAccumulator,
    UnitOfMeasure,
    UnitOfMeasurePrefix,
)

__all__ = [
    "ComponentType",
    "TestCase",
    "Metric",
    "TestCaseResultsAccumulator",
    "UnitOfMeasure",
    "UnitOfMeasurePrefix",
]
