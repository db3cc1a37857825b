"""
Exception classes for record mapping and database operations.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Base class for all daotemplate errors.
    """


class SchemaError(DatabaseError):
    """Malformed or ambiguous record type.

    Raised while deriving metadata, never recovered.
    """


class ValidationError(DatabaseError):
    """Error in input validation.
    """


class UnsupportedOperationError(DatabaseError):
    """Key-based operation requested on a record type without a primary key.
    """


class CoercionError(DatabaseError):
    """Error converting a value between its field type and its column value.
    """


class UnsupportedIdError(CoercionError, ValidationError):
    """Id of a type that cannot be bound in a batched delete.
    """


class IntegrityViolationError(DatabaseError):
    """Database constraint violation error.
    """


IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    IntegrityViolationError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )

UniqueViolation = (
    psycopg.errors.UniqueViolation,
    sqlite3.IntegrityError,
    IntegrityViolationError,
    )
