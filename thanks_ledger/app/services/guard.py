from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from sqlalchemy import Connection

from ..core.db import ConnectionPool
from ..core.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    StoreError,
    store_errors,
)
from ..models import DebitRequest, DebitResult
from .repository import AccountRepository


logger = logging.getLogger(__name__)

LockedHook = Callable[[str, int], None]


class DebitState(str, enum.Enum):
    IDLE = "idle"
    ROW_LOCKED = "row_locked"
    EVALUATED = "evaluated"
    APPLIED = "applied"
    REJECTED = "rejected"
    CLOSED = "closed"


class BalanceGuard:
    """Conditional debit under a pessimistic row lock.

    The balance is read with ``SELECT ... FOR UPDATE`` so a second debit on
    the same login waits in the database until the first transaction ends.
    Debits on different logins lock different rows and do not wait on each
    other (SQLite locks the whole database instead). No in-process lock is
    taken, so the guarantee holds across server processes sharing one
    database.

    ``on_locked`` runs after the locking read and before the update, while
    the lock is held. ``repository_factory`` builds the data access object
    for each transaction. Both exist for tests.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        on_locked: Optional[LockedHook] = None,
        repository_factory: Callable[[Connection], AccountRepository] = AccountRepository,
    ) -> None:
        self.pool = pool
        self.on_locked = on_locked
        self.repository_factory = repository_factory

    def debit(self, login: str, amount: int) -> DebitResult:
        request = DebitRequest(login=login, amount=amount)
        self._transition(request, DebitState.IDLE)
        try:
            with store_errors(), self.pool.acquire() as connection:
                # Leaving this block by exception rolls the transaction back.
                with connection.begin():
                    result = self._run(connection, request)
        except (AccountNotFoundError, InsufficientFundsError) as exc:
            self._transition(request, DebitState.REJECTED)
            logger.info(
                "debit.rejected",
                extra={"login": request.login, "amount": request.amount, "reason": exc.kind.value},
            )
            raise
        finally:
            self._transition(request, DebitState.CLOSED)

        logger.info(
            "debit.applied",
            extra={"login": result.login, "amount": result.amount, "balance": result.balance},
        )
        return result

    def _transition(self, request: DebitRequest, state: DebitState) -> None:
        logger.debug("debit.state", extra={"login": request.login, "state": state.value})

    def _run(self, connection: Connection, request: DebitRequest) -> DebitResult:
        repository = self.repository_factory(connection)

        balance = repository.lock_balance(request.login)
        if balance is None:
            raise AccountNotFoundError(f"Account {request.login!r} not found")
        self._transition(request, DebitState.ROW_LOCKED)

        if self.on_locked is not None:
            self.on_locked(request.login, balance)

        logger.debug(
            "debit.evaluated",
            extra={
                "login": request.login,
                "balance": balance,
                "amount": request.amount,
                "remaining": balance - request.amount,
            },
        )
        self._transition(request, DebitState.EVALUATED)
        if balance < request.amount:
            raise InsufficientFundsError(
                f"Insufficient funds: balance {balance} is below {request.amount}"
            )

        # The row lock is still held, so the balance read above is current.
        if repository.apply_debit(request.login, request.amount) != 1:
            raise StoreError(f"Debit of account {request.login!r} updated no row")
        self._transition(request, DebitState.APPLIED)

        return DebitResult(
            login=request.login,
            amount=request.amount,
            balance=balance - request.amount,
        )
