from __future__ import annotations

import enum
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import exc as sa_exc


class ErrorKind(str, enum.Enum):
    ACCOUNT_NOT_FOUND = "account_not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    POOL_EXHAUSTED = "pool_exhausted"
    STORE_ERROR = "store_error"


class LedgerError(Exception):
    """Base for every failure a ledger operation can surface."""

    kind: ErrorKind


class AccountNotFoundError(LedgerError):
    """Raised when no account row matches the login."""

    kind = ErrorKind.ACCOUNT_NOT_FOUND


class InsufficientFundsError(LedgerError):
    """Raised when a debit would drop balance below zero."""

    kind = ErrorKind.INSUFFICIENT_FUNDS


class PoolExhaustedError(LedgerError):
    """Raised when no pooled connection frees up within the pool timeout."""

    kind = ErrorKind.POOL_EXHAUSTED


class StoreError(LedgerError):
    """Raised for any query or transport failure reported by the database."""

    kind = ErrorKind.STORE_ERROR


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate SQLAlchemy failures raised inside the block into ledger errors."""
    try:
        yield
    except sa_exc.TimeoutError as exc:
        raise PoolExhaustedError(str(exc)) from exc
    except sa_exc.SQLAlchemyError as exc:
        raise StoreError(str(exc)) from exc
