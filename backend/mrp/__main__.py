"""
Server startup: ``python -m mrp`` or the ``mrp-server`` console script.

Exits non-zero only when the server cannot start (missing crypto primitive,
port already bound).
"""
import logging
import sys

import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from mrp.core.config import settings
from mrp.core.logging_config import configure_logging
from mrp.core.security import CryptoUnavailableError, ensure_crypto_available
from mrp.db.session import init_db

logger = logging.getLogger("mrp")


def main() -> None:
    configure_logging(settings.LOG_LEVEL)

    try:
        ensure_crypto_available()
    except CryptoUnavailableError:
        logger.critical("Password hashing is unavailable; refusing to start", exc_info=True)
        sys.exit(1)

    try:
        init_db()
    except SQLAlchemyError:
        # Requests will surface the outage as 500s; the server still starts
        logger.error("Could not prepare the database schema", exc_info=True)

    logger.info("MRP server running at http://localhost:%s", settings.PORT)
    # uvicorn exits with status 1 on bind failure
    uvicorn.run(
        "mrp.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )
    logger.info("MRP server stopped")


if __name__ == "__main__":
    main()
