"""Process logging for the recommendation API and its scripts.

Everything goes to one stderr stream handler. ``LEARNREC_LOG_LEVEL`` sets the
root level. ``LEARNREC_DEBUG_SQL=1`` echoes the SQL behind the catalog and
progress queries. ``LEARNREC_DEBUG_HTTP=1`` turns up uvicorn access logs.
Telemetry events are ordinary records on the ``learnrec.telemetry`` logger.
"""

import logging
import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure process logging from LEARNREC_* environment flags."""
    level = os.getenv("LEARNREC_LOG_LEVEL", "INFO").upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )

    if os.getenv("LEARNREC_DEBUG_SQL", "0") == "1":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    if os.getenv("LEARNREC_DEBUG_HTTP", "0") == "1":
        logging.getLogger("uvicorn.access").setLevel(logging.DEBUG)
