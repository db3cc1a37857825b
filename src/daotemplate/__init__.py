"""
Record mapping for single-table CRUD over PostgreSQL and SQLite.

Declare a dataclass record, derive a DaoTemplate for it, and run inserts,
updates, deletes and queries through any executor:

    @table('T_USER')
    @dataclass
    class User:
        id: int | None = column(primary_key=True, default=None)
        name: str | None = None

    cn = connect({'drivername': 'sqlite', 'database': ':memory:'})
    dao = DaoTemplate(cn, User)
    dao.add(User(id=1, name='Alice'))
"""
__version__ = '0.1.0'

from daotemplate.batch import BATCH_SIZE, chunk
from daotemplate.connection import ConnectionWrapper, connect
from daotemplate.exceptions import CoercionError, DatabaseError, IntegrityError
from daotemplate.exceptions import IntegrityViolationError, OperationalError
from daotemplate.exceptions import ProgrammingError, SchemaError
from daotemplate.exceptions import UniqueViolation, UnsupportedIdError
from daotemplate.exceptions import UnsupportedOperationError, ValidationError
from daotemplate.executor import Executor
from daotemplate.kinds import Null, ValueKind
from daotemplate.options import DatabaseOptions
from daotemplate.record import BaseRecord
from daotemplate.schema import EntityMetadata, FieldDescriptor, build_metadata
from daotemplate.schema import column, derive, table, transient
from daotemplate.template import DaoTemplate
from daotemplate.transaction import Transaction as transaction

__all__ = [
    'connect',
    'ConnectionWrapper',
    'transaction',
    'DatabaseOptions',
    'Executor',
    'DaoTemplate',
    'BaseRecord',
    'EntityMetadata',
    'FieldDescriptor',
    'ValueKind',
    'Null',
    'table',
    'column',
    'transient',
    'derive',
    'build_metadata',
    'chunk',
    'BATCH_SIZE',
    'DatabaseError',
    'SchemaError',
    'ValidationError',
    'UnsupportedOperationError',
    'CoercionError',
    'UnsupportedIdError',
    'IntegrityViolationError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
    'UniqueViolation',
]
