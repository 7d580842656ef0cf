from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..core.dependencies import get_ledger_service, read_login
from ..services import LedgerService


router = APIRouter(tags=["ledger"])

@router.get("/", response_class=PlainTextResponse)
@router.get("/status", response_class=PlainTextResponse)
def read_status(
    service: LedgerService = Depends(get_ledger_service),
) -> str:
    return f"{service.count_users()} users"

@router.post("/thanks", response_class=PlainTextResponse)
def thanks(
    login: str = Depends(read_login),
    service: LedgerService = Depends(get_ledger_service),
) -> str:
    result = service.thank(login)
    return f"{result.amount} thanks to user {result.login}"

__all__ = ["router"]
