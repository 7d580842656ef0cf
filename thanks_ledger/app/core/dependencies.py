from fastapi import Depends, HTTPException, Request, status

from ..services import LedgerService
from .config import Settings
from .db import ConnectionPool


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pool(request: Request) -> ConnectionPool:
    return request.app.state.pool


def get_ledger_service(
    pool: ConnectionPool = Depends(get_pool),
    settings: Settings = Depends(get_app_settings),
) -> LedgerService:
    return LedgerService(pool, settings)


async def read_login(request: Request) -> str:
    """The whole raw request body is the login."""
    body = await request.body()
    try:
        login = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Login must be UTF-8 text",
        ) from exc
    if not login:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Login must not be empty",
        )
    return login
