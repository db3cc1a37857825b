"""
Value kinds understood by the mapping engine.

Every mapped field is assigned exactly one ValueKind when its record type is
derived. The kind decides how the field is bound as a parameter and how a
column value is read back.
"""
import datetime
import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import numpy as np


class ValueKind(enum.Enum):
    """Closed set of relational value categories.
    """
    STRING = 'string'
    LONG = 'long'
    INT = 'int'
    DECIMAL = 'decimal'
    DATETIME = 'datetime'
    BOOLEAN = 'boolean'
    DOUBLE = 'double'
    FLOAT = 'float'
    ENUM = 'enum'


@dataclass(frozen=True)
class Null:
    """SQL NULL tagged with the kind of the field it was written from.

    The kind is informational: executors bind every Null as a plain NULL
    (None) and leave the column type to the database.
    """
    kind: ValueKind

    def __repr__(self) -> str:
        return f'Null({self.kind.name})'


# exact lookups, so bool never resolves as int
annotation_kinds: dict[Any, ValueKind] = {
    str: ValueKind.STRING,
    int: ValueKind.LONG,
    np.int64: ValueKind.LONG,
    np.int32: ValueKind.INT,
    Decimal: ValueKind.DECIMAL,
    datetime.datetime: ValueKind.DATETIME,
    datetime.date: ValueKind.DATETIME,
    bool: ValueKind.BOOLEAN,
    float: ValueKind.DOUBLE,
    np.float64: ValueKind.DOUBLE,
    np.float32: ValueKind.FLOAT,
}


def resolve_kind(python_type: Any) -> ValueKind | None:
    """Resolve the ValueKind of an (unwrapped) annotation.

    Returns None when the type is not supported.
    """
    if isinstance(python_type, type) and issubclass(python_type, enum.Enum):
        return ValueKind.ENUM
    return annotation_kinds.get(python_type)
