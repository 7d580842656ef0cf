from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Thanks Ledger API"
    log_level: str = "INFO"

    # Overrides the URL assembled from the DB_* parts when set.
    database_url: Optional[str] = None
    db_name: str = "postgres"
    db_host: str = "db"
    db_user: str = "postgres"
    db_pass_path: str = "/run/secrets/db_password"
    create_schema: bool = False

    pool_size: int = Field(default=10, ge=1)
    pool_max_overflow: int = Field(default=0, ge=0)
    pool_timeout: float = Field(default=5.0, gt=0, description="Seconds to wait for a free connection")
    statement_timeout_ms: int = Field(default=5000, ge=0)
    idle_in_transaction_timeout_ms: int = Field(default=10000, ge=0)

    thanks_amount: int = Field(default=1, gt=0, description="Debit per thanks, in minor units")
    status_excluded_login: str = "hello world"

    host: str = "0.0.0.0"
    port: int = 8080

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def read_password(path: str) -> str:
    """Return the first line of the secret file, without its line ending."""
    with Path(path).open(encoding="utf-8") as handle:
        return handle.readline().rstrip("\r\n")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
