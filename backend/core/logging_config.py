# backend/core/logging_config.py

import logging

from core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = None):
    """Configure root logging for the API process and workers"""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    if not settings.log_sql_queries:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
