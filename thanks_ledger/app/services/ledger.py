from __future__ import annotations

import logging
from typing import Optional

from ..core.config import Settings
from ..core.db import ConnectionPool
from ..core.errors import store_errors
from ..models import DebitResult
from .guard import BalanceGuard
from .repository import AccountRepository


logger = logging.getLogger(__name__)


class LedgerService:
    def __init__(
        self,
        pool: ConnectionPool,
        settings: Settings,
        guard: Optional[BalanceGuard] = None,
    ) -> None:
        self.pool = pool
        self.settings = settings
        self.guard = guard or BalanceGuard(pool)

    def count_users(self) -> int:
        # Single read, no explicit transaction.
        with store_errors(), self.pool.acquire() as connection:
            users = AccountRepository(connection).count_users(self.settings.status_excluded_login)
        logger.info("status.counted", extra={"users": users})
        return users

    def thank(self, login: str) -> DebitResult:
        return self.guard.debit(login, self.settings.thanks_amount)
