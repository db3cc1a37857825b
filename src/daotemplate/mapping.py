"""
Row mappers.

Each mapper is a plain function of the entity metadata, one result row and
the row's column labels. DaoTemplate binds the metadata with
functools.partial and hands the result to the executor as its row mapper.
"""
from collections.abc import Sequence
from typing import Any

from daotemplate.coercion import read
from daotemplate.record import BaseRecord
from daotemplate.schema import EntityMetadata, FieldDescriptor

from libb import attrdict

__all__ = ['assign', 'map_full', 'map_by_label', 'map_values', 'map_dict']


def assign(record: Any, field: FieldDescriptor, value: Any) -> None:
    """Set one field from a column value.

    A NULL read into a non-nullable field leaves the field untouched.
    """
    converted = read(value, field)
    if converted is None and not field.nullable:
        return
    field.setter(record, converted)


def map_full(metadata: EntityMetadata, row: Sequence[Any],
             columns: Sequence[str] | None = None) -> Any:
    """Map a row whose columns are exactly the metadata's fields, in order.

    Column labels are not consulted.
    """
    record = metadata.record_type()
    for field, value in zip(metadata.fields, row):
        assign(record, field, value)
    return record


def map_by_label(metadata: EntityMetadata, row: Sequence[Any],
                 columns: Sequence[str]) -> Any:
    """Map a row of any column layout by matching labels to mapped columns.

    Unmatched columns go to `props` on BaseRecord instances and are dropped
    otherwise.
    """
    record = metadata.record_type()
    for label, value in zip(columns, row):
        label = label.upper()
        field = metadata.by_column.get(label)
        if field is not None:
            assign(record, field, value)
        elif isinstance(record, BaseRecord):
            record.props[label] = value
    return record


def map_values(metadata: EntityMetadata, row: Sequence[Any],
               columns: Sequence[str] | None = None) -> list[Any]:
    """Coerce a full row into field values without building a record.
    """
    return [read(value, field) for field, value in zip(metadata.fields, row)]


def map_dict(row: Sequence[Any], columns: Sequence[str]) -> attrdict:
    """Map a row to an attrdict keyed by upper-cased column label.
    """
    return attrdict(dict(zip((label.upper() for label in columns), row)))
