"""Component benchmark harness: timed lifecycle and scaling sweeps against a database."""

__version__ = "0.1.0"
