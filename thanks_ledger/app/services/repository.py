from __future__ import annotations

from typing import Optional

from sqlalchemy import Connection, func, update
from sqlmodel import select

from ..models import UserModel


class AccountRepository:
    """Thin data access layer around a pooled SQLAlchemy connection."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    # Balance ------------------------------------------------------------
    def lock_balance(self, login: str) -> Optional[int]:
        """Read the balance and hold the row lock until the transaction ends."""
        stmt = (
            select(UserModel.balance)
            .where(UserModel.login == login)
            .with_for_update()
        )
        return self.connection.execute(stmt).scalar_one_or_none()

    def apply_debit(self, login: str, amount: int) -> int:
        stmt = (
            update(UserModel)
            .where(UserModel.login == login)
            .values(balance=UserModel.balance - amount)
        )
        return self.connection.execute(stmt).rowcount

    # Users --------------------------------------------------------------
    def count_users(self, excluded_login: str) -> int:
        stmt = (
            select(func.count())
            .select_from(UserModel)
            .where(UserModel.login != excluded_login)
        )
        return self.connection.execute(stmt).scalar_one()
