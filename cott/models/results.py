"""
Test Case Result Models

Defines the unit-tagged metric and the accumulator that collects metrics and
errors over a single benchmark run.
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from cott.models.test_case import TestCase


class UnitOfMeasurePrefix(str, Enum):
    """Magnitude prefix of a metric value."""

    NONE = ""
    NANO = "nano"
    MICRO = "micro"
    MILLI = "milli"
    KILO = "kilo"
    MEGA = "mega"


class UnitOfMeasure(str, Enum):
    """Base unit of a metric value."""

    SECOND = "second"
    BYTE = "byte"
    ROW = "row"


class Metric(BaseModel):
    """A single named measurement."""

    name: str = Field(..., description="Metric name")
    prefix: UnitOfMeasurePrefix = Field(..., description="Magnitude prefix")
    unit: UnitOfMeasure = Field(..., description="Base unit")
    value: Union[int, float] = Field(..., description="Measured value")


class TestCaseResultsAccumulator(BaseModel):
    """
    Results sink for one run.

    Metrics and errors keep insertion order. The benchmark only appends; reading,
    persisting and aggregating are left to the caller.
    """

    __test__ = False

    test_case: Optional[TestCase] = Field(None, description="Case being run")
    metrics: List[Metric] = Field(default_factory=list, description="Recorded metrics")
    errors: List[str] = Field(default_factory=list, description="Recorded errors")

    def add_metric(
        self,
        name: str,
        prefix: UnitOfMeasurePrefix,
        unit: UnitOfMeasure,
        value: Union[int, float],
    ) -> None:
        self.metrics.append(Metric(name=name, prefix=prefix, unit=unit, value=value))

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def metric_names(self) -> List[str]:
        return [m.name for m in self.metrics]
