# upleer/core/logging_config.py
"""
Centralized logging configuration for the application.

Keeps application logs at the configured level while quieting the HTTP
client, database driver and access-log loggers.
"""

import logging
from typing import Optional

from upleer.core.config import get_settings


def configure_logging(level: Optional[str] = None) -> str:
    """
    Configure logging for the application.

    - App code: LOG_LEVEL from settings (INFO by default)
    - HTTP clients (httpx, httpcore): WARNING only
    - Database (sqlalchemy, asyncpg): WARNING only
    - uvicorn access log: WARNING only, webhook handlers log their own summaries

    Returns the level name that was applied.
    """
    log_level = (level or get_settings().LOG_LEVEL or "INFO").upper()
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        log_level, numeric_level = "INFO", logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    for noisy in ("httpx", "httpcore", "sqlalchemy", "sqlalchemy.engine", "asyncpg", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("upleer").setLevel(numeric_level)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured at level: %s", log_level)
    return log_level
