"""Centralized logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides the format, the level and how chatty third-party libraries may be.
"""

import logging
import sys

from .config import settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once for the server or a dashboard process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce verbosity from external libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
