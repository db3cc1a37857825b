"""
SQL statement generation and placeholder handling.

Statements are generated with `?` placeholders and upper-cased, unquoted
identifiers. The executor converts placeholders to the dialect's style right
before execution.
"""
import re
from collections.abc import Sequence

_TOKEN = re.compile(r"""'(?:[^']|'')*'|"(?:[^"]|"")*"|%s|%%|\?|%""")


def make_placeholders(count: int) -> str:
    """Comma-joined positional placeholders.
    """
    return ','.join(['?'] * count)


def build_insert_sql(table: str, columns: Sequence[str]) -> str:
    """Generate a full INSERT statement.

    Example:
        >>> build_insert_sql('USERS', ['ID', 'NAME'])
        'INSERT INTO USERS(ID,NAME) VALUES(?,?)'
    """
    return f"INSERT INTO {table}({','.join(columns)}) VALUES({make_placeholders(len(columns))})"


def build_update_sql(table: str, columns: Sequence[str], key: str) -> str:
    """Generate an UPDATE statement setting `columns` and filtering on `key`.

    Example:
        >>> build_update_sql('USERS', ['NAME', 'AGE'], 'ID')
        'UPDATE USERS SET NAME=?,AGE=? WHERE ID=?'
    """
    assignments = ','.join(f'{col}=?' for col in columns)
    return f'UPDATE {table} SET {assignments} WHERE {key}=?'


def build_select_sql(table: str, column_list: str, where: str | None = None) -> str:
    """Generate a SELECT statement over a prebuilt column list.

    The WHERE clause is used verbatim.
    """
    sql = f'SELECT {column_list} FROM {table}'
    if where:
        sql += f' WHERE {where}'
    return sql


def build_delete_sql(table: str, where: str) -> str:
    """Generate a DELETE statement. The WHERE clause is used verbatim.
    """
    return f'DELETE FROM {table} WHERE {where}'


def _to_pyformat(match: re.Match) -> str:
    text = match.group()
    if text == '?':
        return '%s'
    if text == '%':
        return '%%'
    if text.startswith("'"):
        return text.replace('%', '%%')
    return text


def _to_qmark(match: re.Match) -> str:
    text = match.group()
    return '?' if text == '%s' else text


def standardize_placeholders(sql: str, dialect: str = 'sqlite',
                             has_params: bool = True) -> str:
    """Convert placeholders between ? and %s based on dialect.

    Quoted literals and identifiers are left alone. For postgresql with bound
    parameters, literal percent signs are doubled so psycopg does not read
    them as placeholders.

    Parameters
        sql: SQL query string
        dialect: Database dialect
        has_params: Whether the statement will be executed with parameters

    Returns
        SQL with standardized placeholders
    """
    if not sql:
        return sql

    if dialect == 'sqlite':
        if '%s' not in sql:
            return sql
        return _TOKEN.sub(_to_qmark, sql)

    if dialect == 'postgresql':
        if not has_params:
            return sql
        return _TOKEN.sub(_to_pyformat, sql)

    return sql
