"""
Exception hierarchy for the connection registry.
"""

from typing import Optional


class DBRegistryError(Exception):
    """Base exception for all registry errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(DBRegistryError):
    """Raised when a connection is set up or extended with invalid parameters."""

    pass


class DatabaseConnectionError(DBRegistryError):
    """Raised when opening a connection with one credential set fails."""

    def __init__(self, message: str, dsn: Optional[str] = None):
        self.dsn = dsn
        super().__init__(message)


class QueryError(DBRegistryError):
    """Raised when a query fails on an open connection."""

    def __init__(self, message: str, query: Optional[str] = None):
        self.query = query
        super().__init__(message)


class ProbeError(QueryError):
    """Raised when the liveness probe fails (connection severed)."""

    pass


class StatusQueryError(QueryError):
    """Raised when the replica status query fails while polling for lag."""

    pass


__all__ = [
    "DBRegistryError",
    "ConfigError",
    "DatabaseConnectionError",
    "QueryError",
    "ProbeError",
    "StatusQueryError",
]
