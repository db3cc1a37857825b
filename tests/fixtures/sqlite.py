import daotemplate as dt
import pytest

CREATE_ACCOUNT = """
CREATE TABLE T_ACCOUNT (
    ID INTEGER PRIMARY KEY,
    NAME TEXT UNIQUE,
    BALANCE DECIMAL(12,2),
    OPENED TIMESTAMP,
    ACTIVE BOOLEAN,
    RATE REAL,
    SCORE REAL,
    VISITS INTEGER,
    STATUS INTEGER
)
"""

CREATE_EVENT = """
CREATE TABLE T_EVENT (
    KIND TEXT,
    HAPPENED DATE,
    COUNT INTEGER
)
"""


@pytest.fixture
def sqlite_conn():
    """Create an in-memory SQLite database with the account and event tables"""
    conn = dt.connect({
        'drivername': 'sqlite',
        'database': ':memory:'
    })

    conn.execute(CREATE_ACCOUNT)
    conn.execute(CREATE_EVENT)

    yield conn
    conn.close()
