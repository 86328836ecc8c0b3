"""
Benchmark error types.

Configuration errors are raised before any backend I/O and end the run.
Step failures are recorded in the results accumulator and end only the
current phase.
"""

from __future__ import annotations


class CottError(Exception):
    """Base class for benchmark errors."""


class ConfigurationError(CottError):
    """The test case cannot be run as configured."""


class MissingEnvVarError(ConfigurationError):
    def __init__(self, env_var_name: str):
        super().__init__("no required env var key")
        self.env_var_name = env_var_name


class UnknownComponentError(ConfigurationError):
    def __init__(self, component_type: object = None):
        super().__init__("unknown component for testing")
        self.component_type = component_type


class ConnectionNotEstablishedError(CottError):
    def __init__(self, attempts: int | None = None):
        super().__init__("connection was not established")
        self.attempts = attempts


class StepFailedError(CottError):
    """A timed step failed; the original exception is chained as ``__cause__``."""

    def __init__(self, label: str, error: BaseException):
        super().__init__(f"{label}. {error}")
        self.label = label
        self.error = error
