"""
Synthetic row data for the benchmark table.

Every generated row fills the eleven data columns of the benchmark table.
Each column carries a ``ValueKind`` tag so backend adapters can convert values
per column without inspecting them.
"""

from __future__ import annotations

import random
import struct
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

RowValue = Union[int, bool, float, datetime]
GeneratedRow = Dict[str, RowValue]

# Integer draws are taken from [0, INT_UPPER_BOUND).
INT_UPPER_BOUND = 255
BOOL_THRESHOLD = 128

# Largest float32 below 1.0.
FLOAT32_BELOW_ONE = struct.unpack("<f", struct.pack("<I", 0x3F7FFFFF))[0]


class ValueKind(str, Enum):
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class Column:
    name: str
    sql_type: str
    kind: ValueKind


ID_COLUMN_DEFINITION = "id BIGSERIAL PRIMARY KEY"

TABLE_COLUMNS: tuple[Column, ...] = (
    Column("f1", "BIGINT", ValueKind.INTEGER),
    Column("f2", "BIGSERIAL", ValueKind.INTEGER),
    Column("f3", "BOOLEAN", ValueKind.BOOLEAN),
    Column("f4", "DATE", ValueKind.TIMESTAMP),
    Column("f5", "FLOAT", ValueKind.FLOAT32),
    Column("f6", "REAL", ValueKind.FLOAT64),
    Column("f7", "INTEGER", ValueKind.INTEGER),
    Column("f8", "NUMERIC", ValueKind.INTEGER),
    Column("f9", "SMALLINT", ValueKind.INTEGER),
    Column("f10", "SMALLSERIAL", ValueKind.INTEGER),
    Column("f11", "SERIAL", ValueKind.INTEGER),
)

COLUMN_NAMES: List[str] = [c.name for c in TABLE_COLUMNS]
COLUMN_KINDS: Dict[str, ValueKind] = {c.name: c.kind for c in TABLE_COLUMNS}


def table_column_definitions() -> List[str]:
    """DDL fragments for the benchmark table, identity column first."""
    return [ID_COLUMN_DEFINITION] + [f"{c.name} {c.sql_type}" for c in TABLE_COLUMNS]


def _to_float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


class RowGenerator:
    """
    Produces rows of random values for the benchmark table.

    A seed makes the value stream reproducible; the timestamp column always
    uses the clock, so it reflects generation time.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.random = random.Random(seed)
        self.clock = clock

    def _int(self) -> int:
        return self.random.randrange(INT_UPPER_BOUND)

    def generate_row(self) -> GeneratedRow:
        return {
            "f1": self._int(),
            "f2": self._int(),
            "f3": self._int() > BOOL_THRESHOLD,
            "f4": self.clock(),
            # Rounding to float32 can reach 1.0.
            "f5": min(_to_float32(self.random.random()), FLOAT32_BELOW_ONE),
            "f6": self.random.random(),
            "f7": self._int(),
            "f8": self._int(),
            "f9": self._int(),
            "f10": self._int(),
            "f11": self._int(),
        }

    def generate(self, count: int) -> List[GeneratedRow]:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        return [self.generate_row() for _ in range(count)]
