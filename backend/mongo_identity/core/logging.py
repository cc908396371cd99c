"""
Logging setup for hosts embedding the identity stores.
"""
import logging
from typing import Optional

from mongo_identity.config import get_settings


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging with the project's log format.

    Args:
        level: Log level name; defaults to the LOG_LEVEL setting
    """
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
