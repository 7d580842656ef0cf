from pydantic import BaseModel, Field


class DebitRequest(BaseModel):
    login: str = Field(..., min_length=1, description="Login of the account to debit")
    amount: int = Field(..., gt=0, description="Amount in minor units (must be >= 1)")


class DebitResult(BaseModel):
    login: str
    amount: int
    balance: int = Field(..., ge=0, description="Balance left after the debit, in minor units")
