"""
Caller-scoped transactions.

DaoTemplate never opens transactions; batched operations commit chunk by
chunk on an autocommit connection. Wrap them in a Transaction when the whole
batch has to succeed or fail together:

    with Transaction(cn):
        dao.add_all(records)
"""
import logging
import threading
from typing import Any

logger = logging.getLogger(__name__)

_local = threading.local()


def _active() -> set[int]:
    if not hasattr(_local, 'connections'):
        _local.connections = set()
    return _local.connections


class Transaction:
    """Run the statements of a block in one transaction.

    Commits on clean exit and rolls back when the block raises. Nesting on
    the same connection within a thread raises RuntimeError.
    """

    def __init__(self, cn: Any) -> None:
        if id(cn) in _active():
            raise RuntimeError('Nested transactions are not supported')
        self.connection = cn

    def __enter__(self):
        cn = self.connection
        _active().add(id(cn))
        cn.in_transaction = True
        cn.strategy.disable_autocommit(cn.driver_connection)
        logger.debug(f'Began transaction on connection {id(cn)}')
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        cn = self.connection
        try:
            if exc_type is None:
                cn.commit()
                logger.debug(f'Committed transaction on connection {id(cn)}')
            else:
                cn.rollback()
                logger.warning(f'Rolled back transaction on connection {id(cn)}: {value!r}')
        finally:
            _active().discard(id(cn))
            cn.strategy.enable_autocommit(cn.driver_connection)
            cn.in_transaction = False
