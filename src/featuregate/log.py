"""Logging setup for applications embedding featuregate."""

import logging
from typing import Optional

from featuregate.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging, using settings.log_level when no level is given."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
