"""
DaoTemplate: CRUD operations for one mapped record type over one table.

Usage:
    @dataclass
    class User:
        id: int | None = column(primary_key=True, default=None)
        name: str | None = None

    class UserDao(DaoTemplate[User]):
        def query_by_name(self, name):
            return self.query_by_property('NAME', name)

    dao = UserDao(cn)
    dao.add(User(id=1, name='Alice'))
    dao.query_by_id(1)

Metadata and the full INSERT/UPDATE statements are derived once, in the
constructor, and never change afterwards. Batched operations run one executor
batch call per chunk of `batch_size` items without coordinating the chunks:
when a later chunk fails, earlier chunks stay applied unless the caller runs
the operation inside a transaction.
"""
import logging
import typing
from collections.abc import Iterable, Sequence
from functools import partial
from typing import Any, Generic, TypeVar

import pandas as pd

from daotemplate.batch import BATCH_SIZE, chunk
from daotemplate.coercion import _unwrap, write
from daotemplate.exceptions import SchemaError, UnsupportedIdError
from daotemplate.exceptions import UnsupportedOperationError, ValidationError
from daotemplate.executor import Executor
from daotemplate.kinds import ValueKind
from daotemplate.mapping import map_by_label, map_dict, map_full, map_values
from daotemplate.schema import EntityMetadata, FieldDescriptor, derive
from daotemplate.sql import build_delete_sql, build_select_sql

from libb import attrdict

logger = logging.getLogger(__name__)

__all__ = ['DaoTemplate']

T = TypeVar('T')


class DaoTemplate(Generic[T]):
    """Generic data access object for a dataclass record type.

    The record type comes from the `record_type` argument or from the
    parameterization of a subclass (`class UserDao(DaoTemplate[User])`).
    """

    def __init__(self, executor: Executor, record_type: type[T] | None = None, *,
                 batch_size: int = BATCH_SIZE) -> None:
        if executor is None:
            raise ValidationError('executor cannot be None')
        if batch_size < 1:
            raise ValidationError(f'batch_size must be positive, got {batch_size}')
        self.executor = executor
        self.batch_size = batch_size
        self._metadata = derive(record_type or self._parameterized_type())
        self._full_mapper = partial(map_full, self._metadata)
        self._label_mapper = partial(map_by_label, self._metadata)

    def _parameterized_type(self) -> type:
        """Find T in the `DaoTemplate[T]` base of this instance's class.
        """
        for klass in type(self).__mro__:
            for base in klass.__dict__.get('__orig_bases__', ()):
                origin = typing.get_origin(base)
                if not (isinstance(origin, type) and issubclass(origin, DaoTemplate)):
                    continue
                args = typing.get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]
        raise SchemaError(f'{type(self).__name__} does not specify a record type, '
                          f'subclass DaoTemplate[RecordType] or pass record_type')

    @property
    def metadata(self) -> EntityMetadata:
        return self._metadata

    @property
    def table_name(self) -> str:
        return self._metadata.table

    @property
    def columns(self) -> tuple[str, ...]:
        return self._metadata.columns

    def _require_primary_key(self) -> FieldDescriptor:
        primary_key = self._metadata.primary_key
        if primary_key is None:
            raise UnsupportedOperationError(f'{self._metadata.table} has no primary key')
        return primary_key

    @staticmethod
    def _bind(record: Any, fields: Sequence[FieldDescriptor]) -> list[Any]:
        if record is None:
            raise ValidationError('record cannot be None')
        return [write(f.getter(record), f.kind) for f in fields]

    def _update_sql(self) -> str:
        self._require_primary_key()
        if self._metadata.update_sql is None:
            raise UnsupportedOperationError(f'{self._metadata.table} has no columns '
                                            f'besides its primary key to update')
        return self._metadata.update_sql

    def _execute_chunked(self, sql: str, items: Iterable[Any], binder) -> int:
        """Run `sql` once per item, one executor batch call per chunk.
        """
        total = 0
        batches = 0
        for group in chunk(items, self.batch_size):
            params = [binder(item) for item in group]
            counts = self.executor.execute_batch(sql, params, len(params))
            total += sum(counts)
            batches += 1
        logger.debug(f'{self._metadata.table}: {batches} batches, {total} rows affected')
        return total

    # inserts and updates

    def add(self, record: T) -> None:
        """Insert one record.
        """
        if record is None:
            raise ValidationError('record cannot be None')
        self.executor.execute(self._metadata.insert_sql,
                              self._bind(record, self._metadata.fields))

    def add_all(self, records: Iterable[T]) -> None:
        """Insert records in batches of `batch_size`.
        """
        if records is None:
            raise ValidationError('records cannot be None')
        self._execute_chunked(self._metadata.insert_sql, records,
                              partial(self._bind, fields=self._metadata.fields))

    def update(self, record: T) -> bool:
        """Update every non-key column of a record by primary key.

        Returns True when exactly one row was affected.
        """
        if record is None:
            raise ValidationError('record cannot be None')
        sql = self._update_sql()
        rc = self.executor.execute(sql, self._bind(record, self._metadata.update_fields))
        return rc == 1

    def update_all(self, records: Iterable[T]) -> int:
        """Update records in batches and return the total affected row count.
        """
        if records is None:
            raise ValidationError('records cannot be None')
        sql = self._update_sql()
        return self._execute_chunked(sql, records,
                                     partial(self._bind, fields=self._metadata.update_fields))

    # queries

    def query_by_id(self, id: Any) -> T | None:
        """Fetch the record with the given primary key, or None.

        When the key column is not actually unique only the first row is
        returned.
        """
        if id is None:
            raise ValidationError('id cannot be None')
        primary_key = self._require_primary_key()
        records = self.query_by_property(primary_key.column, id)
        return records[0] if records else None

    def query_all(self) -> list[T]:
        """Fetch every row of the table.
        """
        sql = build_select_sql(self._metadata.table, self._metadata.column_list)
        return self.executor.query(sql, (), self._full_mapper)

    def query_by_condition(self, condition: str, params: Sequence[Any] = ()) -> list[T]:
        """Fetch rows matching a WHERE condition, used verbatim.

        The caller aligns `params` with the placeholders in `condition`.
        """
        sql = build_select_sql(self._metadata.table, self._metadata.column_list, condition)
        return self.executor.query(sql, params, self._full_mapper)

    def query_by_property(self, column: str, value: Any) -> list[T]:
        """Fetch rows whose `column` equals `value`.
        """
        return self.query_by_condition(f'{column} = ?', [value])

    def query_by_sql(self, sql: str, params: Sequence[Any] = ()) -> list[T]:
        """Run an arbitrary query and map rows by column label.

        Columns may come in any order; see BaseRecord for unmatched columns.
        """
        return self.executor.query(sql, params, self._label_mapper)

    def query_maps(self, sql: str, params: Sequence[Any] = ()) -> list[attrdict]:
        """Run an arbitrary query and return rows keyed by upper-cased label.
        """
        return self.executor.query(sql, params, map_dict)

    def query_frame(self, condition: str | None = None,
                    params: Sequence[Any] = ()) -> pd.DataFrame:
        """Fetch mapped columns into a DataFrame with one column per field.
        """
        sql = build_select_sql(self._metadata.table, self._metadata.column_list, condition)
        rows = self.executor.query(sql, params, partial(map_values, self._metadata))
        names = [f.name for f in self._metadata.fields]
        df = pd.DataFrame.from_records(rows, columns=names)
        df.attrs['table'] = self._metadata.table
        df.attrs['columns'] = {f.name: f.column for f in self._metadata.fields}
        return df

    # deletes

    def delete_by_id(self, id: Any) -> bool:
        """Delete by primary key. Returns True when exactly one row was deleted.
        """
        if id is None:
            raise ValidationError('id cannot be None')
        primary_key = self._require_primary_key()
        sql = build_delete_sql(self._metadata.table, f'{primary_key.column}=?')
        return self.executor.execute(sql, [id]) == 1

    @staticmethod
    def _bind_id(id: Any) -> list[Any]:
        id = _unwrap(id)
        if id is None:
            raise ValidationError('id cannot be None')
        if isinstance(id, str):
            return [write(id, ValueKind.STRING)]
        if isinstance(id, int) and not isinstance(id, bool):
            return [write(id, ValueKind.LONG)]
        raise UnsupportedIdError(f'Unsupported id type {type(id).__name__}: {id!r}')

    def delete_by_ids(self, ids: Iterable[Any]) -> int:
        """Delete by primary keys in batches and return the deleted row count.

        Ids must be str or int.
        """
        if ids is None:
            raise ValidationError('ids cannot be None')
        primary_key = self._require_primary_key()
        sql = build_delete_sql(self._metadata.table, f'{primary_key.column}=?')
        return self._execute_chunked(sql, ids, self._bind_id)

    def delete_by_property(self, column: str, value: Any) -> int:
        """Delete rows whose `column` equals `value`.
        """
        if column is None:
            raise ValidationError('column cannot be None')
        sql = build_delete_sql(self._metadata.table, f'{column}=?')
        return self.executor.execute(sql, [value])

    def delete_by_condition(self, condition: str, params: Sequence[Any] = ()) -> int:
        """Delete rows matching a WHERE condition, used verbatim.
        """
        sql = build_delete_sql(self._metadata.table, condition)
        return self.executor.execute(sql, params)
