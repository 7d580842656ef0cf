from sqlalchemy import BigInteger, CheckConstraint
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """Account row, keyed by login. Balance is in minor currency units."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("balance >= 0", name="users_balance_non_negative"),)

    login: str = Field(primary_key=True)
    balance: int = Field(default=0, ge=0, sa_type=BigInteger)
