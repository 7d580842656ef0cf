import logging
import sys

import uvicorn

from .core.config import get_settings, read_password
from .main import create_app


logger = logging.getLogger("thanks_ledger")


def main() -> int:
    settings = get_settings()
    if not settings.database_url and not read_password(settings.db_pass_path):
        logger.error("db.password.empty", extra={"path": settings.db_pass_path})
        return 1
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
