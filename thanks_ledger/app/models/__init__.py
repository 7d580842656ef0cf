from .db import User as UserModel
from .schemas import DebitRequest, DebitResult

__all__ = [
    "DebitRequest",
    "DebitResult",
    "UserModel",
]
