from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Connection, Engine, event
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import URL, make_url
from sqlalchemy.pool import QueuePool
from sqlmodel import SQLModel, create_engine

from ..models import db as _db_models  # noqa: F401 - ensure models register with metadata
from .config import Settings, read_password
from .errors import PoolExhaustedError, store_errors


logger = logging.getLogger(__name__)


class ConnectionPool:
    """Bounded set of database connections shared by every request.

    Built once per application and handed to request handlers through
    FastAPI dependencies.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @contextmanager
    def acquire(self) -> Iterator[Connection]:
        """Check out a connection, blocking up to the pool timeout.

        The connection goes back to the pool when the block exits, on every
        path. Any transaction still open at that point is rolled back.
        Failures to connect or to give the connection back surface as
        ledger errors.
        """
        with store_errors():
            try:
                connection = self.engine.connect()
            except sa_exc.TimeoutError as exc:
                logger.warning("pool.exhausted", extra={"pool": self.status()})
                raise PoolExhaustedError(str(exc)) from exc
            with connection:
                yield connection

    def status(self) -> str:
        return self.engine.pool.status()

    def dispose(self) -> None:
        self.engine.dispose()


def build_database_url(settings: Settings) -> URL:
    if settings.database_url:
        return make_url(settings.database_url)
    return URL.create(
        "postgresql+psycopg",
        username=settings.db_user,
        password=read_password(settings.db_pass_path),
        host=settings.db_host,
        database=settings.db_name,
    )


def _use_immediate_transactions(engine: Engine) -> None:
    # SQLite ignores FOR UPDATE; BEGIN IMMEDIATE takes the write lock up front
    # so the locking read still serializes concurrent debits.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(connection: Connection) -> None:
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_for_url(url: URL, settings: Settings) -> Engine:
    connect_args: dict[str, Any] = {}
    if url.get_backend_name() == "sqlite":
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.statement_timeout_ms / 1000,
        }
    elif url.get_backend_name() == "postgresql":
        connect_args = {
            "options": (
                f"-c statement_timeout={settings.statement_timeout_ms} "
                f"-c idle_in_transaction_session_timeout={settings.idle_in_transaction_timeout_ms}"
            )
        }

    engine = create_engine(
        url,
        echo=False,
        connect_args=connect_args,
        poolclass=QueuePool,
        pool_size=settings.pool_size,
        max_overflow=settings.pool_max_overflow,
        pool_timeout=settings.pool_timeout,
    )
    if url.get_backend_name() == "sqlite":
        _use_immediate_transactions(engine)
    return engine


def create_pool(settings: Settings) -> ConnectionPool:
    url = build_database_url(settings)
    pool = ConnectionPool(create_engine_for_url(url, settings))
    logger.info(
        "pool.created",
        extra={
            "url": url.render_as_string(hide_password=True),
            "pool_size": settings.pool_size,
            "max_overflow": settings.pool_max_overflow,
        },
    )
    return pool


def init_db(pool: ConnectionPool) -> None:
    SQLModel.metadata.create_all(pool.engine)
