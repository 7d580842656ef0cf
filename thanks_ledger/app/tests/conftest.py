import os
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from ..core.config import Settings
from ..core.db import ConnectionPool, create_pool, init_db
from ..main import create_app
from ..models import UserModel


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        pool_size=20,
        pool_max_overflow=0,
        pool_timeout=30.0,
        statement_timeout_ms=30000,
        thanks_amount=1,
    )


@pytest.fixture
def pool(settings: Settings) -> Iterator[ConnectionPool]:
    pool = create_pool(settings)
    init_db(pool)
    yield pool
    pool.dispose()


@pytest.fixture
def add_user(pool: ConnectionPool) -> Callable[[str, int], None]:
    def _add_user(login: str, balance: int = 0) -> None:
        with Session(pool.engine) as session:
            session.add(UserModel(login=login, balance=balance))
            session.commit()

    return _add_user


@pytest.fixture
def balance_of(pool: ConnectionPool) -> Callable[[str], int]:
    def _balance_of(login: str) -> int:
        with Session(pool.engine) as session:
            user = session.get(UserModel, login)
            assert user is not None
            return user.balance

    return _balance_of


@pytest.fixture
def unreachable_pool(settings: Settings, tmp_path) -> Iterator[ConnectionPool]:
    missing = tmp_path / "missing" / "ledger.db"
    pool = create_pool(settings.model_copy(update={"database_url": f"sqlite:///{missing}"}))
    yield pool
    pool.dispose()


@pytest.fixture
def postgres_pool(settings: Settings) -> Iterator[ConnectionPool]:
    url = os.environ.get("DATABASE_URL", "")
    if not url.startswith("postgresql"):
        pytest.skip("needs a PostgreSQL DATABASE_URL")
    pool = create_pool(settings.model_copy(update={"database_url": url}))
    init_db(pool)
    yield pool
    pool.dispose()


@pytest.fixture
def client(settings: Settings, pool: ConnectionPool) -> Iterator[TestClient]:
    with TestClient(create_app(settings, pool)) as test_client:
        yield test_client
