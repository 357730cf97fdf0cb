"""
Utility module
"""

from .logging_setup import setup_logging
from .query_debug import get_prepared_query

__all__ = ["setup_logging", "get_prepared_query"]
