"""
Logging configuration
"""

import logging
import sys
from typing import Optional

from ..config.settings import get_settings


def setup_logging(level: Optional[str] = None):
    """Configure root logging from settings (LOG_LEVEL, LOG_FORMAT)."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format=settings.log_format,
        stream=sys.stderr,
    )
