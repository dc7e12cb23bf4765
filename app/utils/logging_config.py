"""Process-wide logging setup."""

import logging
import os
from typing import Optional


def init_logging(service_name: str, level: Optional[str] = None) -> None:
    """Configure the root logger once for the whole service."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = (
        "%(asctime)s | "
        + service_name + " | "
        "%(levelname)s | "
        "%(name)s | "
        "%(message)s"
    )

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=log_format)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging initialized at {level_name}")
