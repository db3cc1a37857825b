"""
Record type introspection.

A mapped record type is a dataclass whose fields all have defaults. Fields are
mapped to columns of one table:

    @table('T_USER')
    @dataclass
    class User:
        id: int | None = column(primary_key=True, default=None)
        name: str | None = column('USER_NAME', default=None)
        age: int = 0
        cache: dict = transient(default_factory=dict)

`derive` turns such a type into an immutable EntityMetadata: the ordered field
descriptors (primary key first), lookup tables by field name and by column
name, and the SQL strings every DaoTemplate operation reuses.
"""
import dataclasses
import logging
import types
import typing
from collections.abc import Callable, Iterable, Mapping
from dataclasses import MISSING, dataclass, field
from typing import Any

from daotemplate.exceptions import SchemaError
from daotemplate.kinds import ValueKind, resolve_kind
from daotemplate.sql import build_insert_sql, build_update_sql

logger = logging.getLogger(__name__)

__all__ = [
    'FieldDescriptor',
    'EntityMetadata',
    'table',
    'column',
    'transient',
    'derive',
    'build_metadata',
]

METADATA_KEY = 'daotemplate'


@dataclass(frozen=True)
class ColumnSpec:
    """Column options attached to a dataclass field by `column()`.
    """
    name: str | None = None
    primary_key: bool = False
    kind: ValueKind | None = None
    transient: bool = False


TRANSIENT = ColumnSpec(transient=True)


def table(name: str) -> Callable[[type], type]:
    """Class decorator overriding the table name of a record type.
    """
    def decorator(cls: type) -> type:
        cls.__tablename__ = name
        return cls
    return decorator


def column(name: str | None = None, *, primary_key: bool = False,
           kind: ValueKind | None = None, default: Any = MISSING,
           default_factory: Any = MISSING) -> Any:
    """Declare a mapped dataclass field with column options.

    Args:
        name: Column name, defaults to the upper-cased field name
        primary_key: Mark the field as the table's primary key
        kind: Explicit value kind, overriding the one inferred from the annotation
        default: Field default
        default_factory: Field default factory
    """
    spec = ColumnSpec(name=name, primary_key=primary_key, kind=kind)
    return field(default=default, default_factory=default_factory,
                 metadata={METADATA_KEY: spec})


def transient(*, default: Any = MISSING, default_factory: Any = MISSING) -> Any:
    """Declare a dataclass field that is excluded from mapping.
    """
    return field(default=default, default_factory=default_factory,
                 metadata={METADATA_KEY: TRANSIENT})


def attribute_getter(name: str) -> Callable[[Any], Any]:
    def getter(record: Any) -> Any:
        return getattr(record, name)
    return getter


def attribute_setter(name: str) -> Callable[[Any, Any], None]:
    def setter(record: Any, value: Any) -> None:
        setattr(record, name, value)
    return setter


@dataclass(frozen=True)
class FieldDescriptor:
    """One mapped attribute of a record type.

    `nullable` is False for bare annotations; a NULL column value is then
    never assigned and the field keeps its default.
    """
    name: str
    column: str
    kind: ValueKind
    primary_key: bool = False
    nullable: bool = True
    python_type: Any = None
    getter: Callable[[Any], Any] | None = field(default=None, compare=False, repr=False)
    setter: Callable[[Any, Any], None] | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class EntityMetadata:
    """Derived, read-only mapping of a record type onto one table.
    """
    record_type: type
    table: str
    fields: tuple[FieldDescriptor, ...]
    primary_key: FieldDescriptor | None
    by_name: Mapping[str, FieldDescriptor]
    by_column: Mapping[str, FieldDescriptor]
    insert_sql: str
    update_sql: str | None
    column_list: str
    update_fields: tuple[FieldDescriptor, ...] = ()

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(f.column for f in self.fields)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split `X | None` into (X, True). Bare annotations are not nullable.
    """
    if typing.get_origin(annotation) in {typing.Union, types.UnionType}:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        nullable = len(args) != len(typing.get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return annotation, nullable
    return annotation, False


def _describe(record_type: type, f: dataclasses.Field, annotation: Any,
              spec: ColumnSpec | None) -> FieldDescriptor:
    """Build the descriptor of a single dataclass field.
    """
    python_type, nullable = _unwrap_optional(annotation)
    kind = (spec.kind if spec else None) or resolve_kind(python_type)
    if kind is None:
        raise SchemaError(f'Type {annotation!r} of {record_type.__name__}.{f.name} '
                          f'is not supported')
    if kind is ValueKind.ENUM and resolve_kind(python_type) is not ValueKind.ENUM:
        raise SchemaError(f'{record_type.__name__}.{f.name} is declared as ENUM '
                          f'but annotated {annotation!r}')

    column_name = (spec.name if spec and spec.name else f.name).upper()
    return FieldDescriptor(
        name=f.name,
        column=column_name,
        kind=kind,
        primary_key=bool(spec and spec.primary_key),
        nullable=nullable,
        python_type=python_type,
        getter=attribute_getter(f.name),
        setter=attribute_setter(f.name),
        )


def build_metadata(record_type: type, table_name: str,
                   fields: Iterable[FieldDescriptor]) -> EntityMetadata:
    """Assemble EntityMetadata from an explicit field descriptor table.

    Positions the primary key first, validates uniqueness of field names,
    column names and the primary key, and builds the cached SQL strings.
    Descriptors without accessors get attribute accessors for their name.
    """
    by_name: dict[str, FieldDescriptor] = {}
    by_column: dict[str, FieldDescriptor] = {}
    ordered: list[FieldDescriptor] = []
    primary_key = None
    owner = getattr(record_type, '__name__', repr(record_type))

    for f in fields:
        f = dataclasses.replace(
            f,
            column=f.column.upper(),
            getter=f.getter or attribute_getter(f.name),
            setter=f.setter or attribute_setter(f.name),
            )
        if f.name in by_name:
            raise SchemaError(f'Field {f.name} is declared more than once on {owner}')
        if f.column in by_column:
            raise SchemaError(f'Column {f.column} is mapped by both '
                              f'{by_column[f.column].name} and {f.name} on {owner}')
        if f.primary_key:
            if primary_key is not None:
                raise SchemaError(f'{owner} declares more than one primary key: '
                                  f'{primary_key.name}, {f.name}')
            primary_key = f
            ordered.insert(0, f)
        else:
            ordered.append(f)
        by_name[f.name] = f
        by_column[f.column] = f

    if not ordered:
        raise SchemaError(f'{owner} has no mapped fields')

    table_name = table_name.upper()
    columns = [f.column for f in ordered]
    update_sql = None
    update_fields: tuple[FieldDescriptor, ...] = ()
    data_fields = [f for f in ordered if not f.primary_key]
    if primary_key is not None and data_fields:
        update_sql = build_update_sql(table_name, [f.column for f in data_fields],
                                      primary_key.column)
        update_fields = (*data_fields, primary_key)

    metadata = EntityMetadata(
        record_type=record_type,
        table=table_name,
        fields=tuple(ordered),
        primary_key=primary_key,
        by_name=types.MappingProxyType(by_name),
        by_column=types.MappingProxyType(by_column),
        insert_sql=build_insert_sql(table_name, columns),
        update_sql=update_sql,
        column_list=','.join(columns),
        update_fields=update_fields,
        )
    logger.debug(f'Derived {table_name} for {owner}: {len(ordered)} columns, '
                 f'primary key {primary_key.column if primary_key else None}')
    return metadata


def derive(record_type: Any) -> EntityMetadata:
    """Derive EntityMetadata from a dataclass record type.

    Raises SchemaError when the type is missing or not a mapped dataclass.
    """
    if not isinstance(record_type, type):
        raise SchemaError(f'Record type could not be determined, got {record_type!r}')
    if not dataclasses.is_dataclass(record_type):
        raise SchemaError(f'{record_type.__name__} is not a dataclass')
    if record_type.__dataclass_params__.frozen:
        raise SchemaError(f'{record_type.__name__} is frozen, mapped fields must be writable')

    try:
        hints = typing.get_type_hints(record_type)
    except NameError as err:
        raise SchemaError(f'Cannot resolve annotations of {record_type.__name__}: {err}') from err

    descriptors = []
    for f in dataclasses.fields(record_type):
        spec = f.metadata.get(METADATA_KEY)
        if spec is not None and spec.transient:
            continue
        if f.default is MISSING and f.default_factory is MISSING:
            raise SchemaError(f'{record_type.__name__}.{f.name} has no default, '
                              f'records must be constructible without arguments')
        descriptors.append(_describe(record_type, f, hints[f.name], spec))

    table_name = record_type.__dict__.get('__tablename__') or record_type.__name__
    return build_metadata(record_type, table_name, descriptors)
