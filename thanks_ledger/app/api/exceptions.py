from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..core.errors import (
    AccountNotFoundError,
    ErrorKind,
    InsufficientFundsError,
    LedgerError,
    PoolExhaustedError,
    StoreError,
)


logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INSUFFICIENT_FUNDS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.POOL_EXHAUSTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_CLASSES: tuple[type[LedgerError], ...] = (
    AccountNotFoundError,
    InsufficientFundsError,
    PoolExhaustedError,
    StoreError,
)


def status_code_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND[kind]


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = status_code_for(exc.kind)
    extra = {
        "method": request.method,
        "path": request.url.path,
        "kind": exc.kind.value,
        "status_code": status_code,
    }
    if status_code >= 500:
        logger.error("request.failed", extra={**extra, "error": str(exc)})
    else:
        logger.info("request.rejected", extra=extra)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    missing = (set(ErrorKind) - set(STATUS_BY_KIND)) | (set(ErrorKind) - {cls.kind for cls in ERROR_CLASSES})
    if missing:
        raise RuntimeError(f"Unmapped error kinds: {sorted(k.value for k in missing)}")

    for error_class in ERROR_CLASSES:
        app.add_exception_handler(error_class, ledger_error_handler)
