import logging

import daotemplate as dt
import pytest

from libb import Setting

import config

logger = logging.getLogger(__name__)

CREATE_ACCOUNT = """
create table t_account (
    id bigint primary key,
    name varchar(255) unique,
    balance numeric(12, 2),
    opened timestamp,
    active boolean,
    rate double precision,
    score real,
    visits integer,
    status integer
)
"""

CREATE_EVENT = """
create table t_event (
    kind varchar(255),
    happened date,
    count integer
)
"""


@pytest.fixture(scope='session')
def psql_docker(request):
    """Session-scoped PostgreSQL container using testcontainers.

    Skips when testcontainers is not installed or docker is not reachable.
    """
    postgres = pytest.importorskip('testcontainers.postgres')

    container = postgres.PostgresContainer(
        image='postgres:16',
        username=config.postgresql.username,
        password=config.postgresql.password,
        dbname=config.postgresql.database,
    )

    try:
        container.start()
    except Exception as e:
        pytest.skip(f'PostgreSQL container unavailable: {e}')

    Setting.unlock()
    config.postgresql.hostname = container.get_container_host_ip()
    config.postgresql.port = int(container.get_exposed_port(5432))
    Setting.lock()

    logger.info(
        f'PostgreSQL container started at '
        f'{config.postgresql.hostname}:{config.postgresql.port}'
    )

    def finalizer():
        try:
            container.stop()
            logger.info('PostgreSQL container stopped')
        except Exception as e:
            logger.warning(f'Error stopping container: {e}')

    request.addfinalizer(finalizer)
    return container


def stage_test_tables(cn):
    cn.execute('drop table if exists t_account')
    cn.execute('drop table if exists t_event')
    cn.execute(CREATE_ACCOUNT)
    cn.execute(CREATE_EVENT)


@pytest.fixture
def psql_conn(psql_docker):
    """
    Connection fixture with function scope for clean tests.
    Each test gets a fresh connection with empty tables.
    """
    cn = dt.connect('postgresql', config=config)

    try:
        stage_test_tables(cn)
        yield cn
    finally:
        cn.close()
