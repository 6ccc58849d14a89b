#!/usr/bin/env python3

"""
Runtime configuration for aerodata.

Values are read once from the environment at import time.
"""

import logging
import os
from typing import Optional

# Database
DATABASE_PATH = os.getenv("AERODATA_DATABASE", "aerodata.db")

# Pagination Limits
DEFAULT_PAGE_SIZE = int(os.getenv("AERODATA_PAGE_SIZE", "50"))
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = int(os.getenv("AERODATA_MAX_PAGE_SIZE", "1000"))

# Logging
LOG_LEVEL = os.getenv("AERODATA_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def clamp_page_size(page_size: Optional[int]) -> int:
    """Bound a requested page size to the configured limits."""
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    return max(MIN_PAGE_SIZE, min(int(page_size), MAX_PAGE_SIZE))


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the configured log level and format to the root logger."""
    level_name = (level or LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
