from .guard import BalanceGuard
from .ledger import LedgerService
from .repository import AccountRepository

__all__ = [
    "AccountRepository",
    "BalanceGuard",
    "LedgerService",
]
