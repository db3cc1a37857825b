"""
Record types shared by unit and integration tests.

Account covers every value kind, Event has no primary key and non-nullable
fields, AccountSummary keeps unmapped columns in props, Tag maps only its key.
"""
import datetime
import enum
from dataclasses import dataclass
from decimal import Decimal

import numpy as np
import pytest
from daotemplate import BaseRecord, column, table, transient


class Status(enum.Enum):
    ACTIVE = 'A'
    SUSPENDED = 'S'
    CLOSED = 'C'


@table('T_ACCOUNT')
@dataclass
class Account:
    id: int | None = column(primary_key=True, default=None)
    name: str | None = None
    balance: Decimal | None = None
    opened: datetime.datetime | None = None
    active: bool | None = None
    rate: float | None = None
    score: np.float32 | None = None
    visits: np.int32 | None = None
    status: Status | None = None
    cache: dict = transient(default_factory=dict)


@table('T_EVENT')
@dataclass
class Event:
    kind: str = ''
    happened: datetime.date | None = None
    count: int = 0


@table('T_ACCOUNT')
@dataclass
class AccountSummary(BaseRecord):
    id: int | None = column(primary_key=True, default=None)
    name: str | None = None


@dataclass
class Tag:
    code: str | None = column(primary_key=True, default=None)


def make_accounts(count, start=1):
    """Accounts with ids start..start+count-1 and unique names."""
    return [Account(id=i, name=f'account-{i}', balance=Decimal('10.25'),
                    opened=datetime.datetime(2024, 1, 2, 3, 4, 5), active=True,
                    rate=0.5, score=np.float32(1.5), visits=np.int32(i),
                    status=Status.ACTIVE)
            for i in range(start, start + count)]


@pytest.fixture
def sample_account():
    return Account(
        id=1,
        name='Alice',
        balance=Decimal('1234.56'),
        opened=datetime.datetime(2024, 3, 15, 9, 30, 0),
        active=True,
        rate=0.125,
        score=np.float32(2.5),
        visits=np.int32(7),
        status=Status.SUSPENDED,
        )
