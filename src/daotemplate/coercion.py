"""
Value coercion between record fields and column values.

write() converts a field value into the parameter bound for its column,
read() converts a column value back into the field's representation. Both
dispatch on the field's ValueKind. Absent values are written as a Null tagged
with the kind and read back as None.
"""
import datetime
import enum
import logging
from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import dateutil.parser
import numpy as np
import pandas as pd

from daotemplate.exceptions import CoercionError
from daotemplate.kinds import Null, ValueKind

if TYPE_CHECKING:
    from daotemplate.schema import FieldDescriptor

logger = logging.getLogger(__name__)

__all__ = ['write', 'read', 'read_value', 'is_absent', 'ordinal_of', 'convert_params']

INT32_MIN = -2**31
INT32_MAX = 2**31 - 1
INT64_MIN = -2**63
INT64_MAX = 2**63 - 1

TRUE_STRINGS = {'1', 't', 'true', 'y', 'yes', 'on'}
FALSE_STRINGS = {'0', 'f', 'false', 'n', 'no', 'off'}


def _unwrap(value: Any) -> Any:
    """Convert NumPy and pandas scalars to plain Python values."""
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if isinstance(value, np.datetime64):
        return None if np.isnat(value) else pd.Timestamp(value).to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    return value


def is_absent(value: Any) -> bool:
    """True for None and the NaN/NaT/NA markers pandas treats as missing.
    """
    if value is None:
        return True
    if isinstance(value, str | bytes | enum.Enum):
        return False
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def ordinal_of(member: enum.Enum) -> int:
    """Zero-based position of an enum member among its type's members.
    """
    return list(type(member)).index(member)


def _to_str(value: Any, python_type: Any = None) -> str:
    if isinstance(value, bytes):
        return value.decode()
    return value if isinstance(value, str) else str(value)


def _to_int(value: Any, python_type: Any = None) -> int:
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float | Decimal):
        if value != int(value):
            raise CoercionError(f'{value!r} is not an integral value')
        return int(value)
    if isinstance(value, str | bytes):
        return int(value)
    raise CoercionError(f'Cannot convert {type(value).__name__} {value!r} to an integer')


def _to_int64(value: Any, python_type: Any = None) -> int:
    number = _to_int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise CoercionError(f'{number} does not fit in a 64-bit integer')
    return number


def _to_int32(value: Any, python_type: Any = None) -> int:
    number = _to_int(value)
    if not INT32_MIN <= number <= INT32_MAX:
        raise CoercionError(f'{number} does not fit in a 32-bit integer')
    return number


def _to_decimal(value: Any, python_type: Any = None) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, int | str):
        return Decimal(value)
    raise CoercionError(f'Cannot convert {type(value).__name__} {value!r} to a decimal')


def _to_datetime(value: Any, python_type: Any = None) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return dateutil.parser.isoparse(value)
    raise CoercionError(f'Cannot convert {type(value).__name__} {value!r} to a datetime')


def _read_datetime(value: Any, python_type: Any = None) -> datetime.date:
    converted = _to_datetime(value)
    if python_type is datetime.date:
        return converted.date()
    return converted


def _to_bool(value: Any, python_type: Any = None) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float | Decimal):
        return bool(value)
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise CoercionError(f'Cannot convert {type(value).__name__} {value!r} to a boolean')


def _to_float(value: Any, python_type: Any = None) -> float:
    if isinstance(value, bool):
        raise CoercionError(f'Cannot convert bool {value!r} to a float')
    if isinstance(value, bytes):
        value = value.decode()
    return float(value)


def _to_float32(value: Any, python_type: Any = None) -> float:
    return float(np.float32(_to_float(value)))


def _write_enum(value: Any, python_type: Any = None) -> int:
    if not isinstance(value, enum.Enum):
        raise CoercionError(f'Cannot write {type(value).__name__} {value!r} as an enum ordinal')
    return ordinal_of(value)


def _read_enum(value: Any, python_type: Any = None) -> enum.Enum:
    ordinal = _to_int(value)
    members = list(python_type)
    if not 0 <= ordinal < len(members):
        raise CoercionError(f'Ordinal {ordinal} is out of range for {python_type.__name__} '
                            f'({len(members)} members)')
    return members[ordinal]


Converter = Callable[[Any, Any], Any]

_writers: dict[ValueKind, Converter] = {
    ValueKind.STRING: _to_str,
    ValueKind.LONG: _to_int64,
    ValueKind.INT: _to_int32,
    ValueKind.DECIMAL: _to_decimal,
    ValueKind.DATETIME: _to_datetime,
    ValueKind.BOOLEAN: _to_bool,
    ValueKind.DOUBLE: _to_float,
    ValueKind.FLOAT: _to_float32,
    ValueKind.ENUM: _write_enum,
}

_readers: dict[ValueKind, Converter] = {
    ValueKind.STRING: _to_str,
    ValueKind.LONG: _to_int64,
    ValueKind.INT: _to_int32,
    ValueKind.DECIMAL: _to_decimal,
    ValueKind.DATETIME: _read_datetime,
    ValueKind.BOOLEAN: _to_bool,
    ValueKind.DOUBLE: _to_float,
    ValueKind.FLOAT: _to_float32,
    ValueKind.ENUM: _read_enum,
}

if not set(_writers) == set(ValueKind) == set(_readers):
    raise RuntimeError('every ValueKind needs a reader and a writer')


def write(value: Any, kind: ValueKind) -> Any:
    """Convert a field value into the parameter bound for a column of `kind`.

    Absent values become Null(kind).

    Raises CoercionError when the value cannot be represented in the kind.
    """
    value = _unwrap(value)
    if is_absent(value):
        return Null(kind)
    try:
        return _writers[kind](value, None)
    except (TypeError, ValueError, ArithmeticError) as err:
        raise CoercionError(f'Cannot write {value!r} as {kind.name}: {err}') from err


def read_value(value: Any, kind: ValueKind, python_type: Any = None) -> Any:
    """Convert a column value into the representation of `kind`.

    SQL NULL (None) reads as None. `python_type` is the field's annotated
    type, needed for enums and date-only fields.
    """
    value = _unwrap(value)
    if is_absent(value):
        return None
    try:
        return _readers[kind](value, python_type)
    except (TypeError, ValueError, ArithmeticError) as err:
        raise CoercionError(f'Cannot read {value!r} as {kind.name}: {err}') from err


def read(value: Any, field: 'FieldDescriptor') -> Any:
    """Convert a column value into the representation of a mapped field.
    """
    try:
        return read_value(value, field.kind, field.python_type)
    except CoercionError as err:
        raise CoercionError(f'{field.name} ({field.column}): {err}') from err


def convert_value(value: Any) -> Any:
    """Convert a single parameter to what the DBAPI driver binds.

    Null becomes None, enum members become their ordinal.
    """
    if isinstance(value, Null):
        return None
    if isinstance(value, enum.Enum):
        return ordinal_of(value)
    value = _unwrap(value)
    if is_absent(value):
        return None
    return value


def convert_params(params: Sequence[Any] | None) -> tuple:
    """Convert a positional parameter sequence for binding.
    """
    if not params:
        return ()
    return tuple(convert_value(p) for p in params)
