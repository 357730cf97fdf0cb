"""
dbregistry - named database connections with credential failover
"""

from .core import (
    ConnectionAttempt,
    ConnectionRegistry,
    ConnectionState,
    CredentialSet,
    get_connection_registry,
    is_replica_connection_ready,
    wait_for_replica,
)
from .core.connections import (
    DatabaseConnection,
    ErrorMode,
    MySQLConnection,
    PostgresConnection,
)
from .core.errors import (
    ConfigError,
    DatabaseConnectionError,
    DBRegistryError,
    ProbeError,
    QueryError,
    StatusQueryError,
)

__version__ = "1.0.0"

__all__ = [
    "ConnectionAttempt",
    "ConnectionRegistry",
    "ConnectionState",
    "CredentialSet",
    "DatabaseConnection",
    "ErrorMode",
    "MySQLConnection",
    "PostgresConnection",
    "get_connection_registry",
    "is_replica_connection_ready",
    "wait_for_replica",
    "ConfigError",
    "DatabaseConnectionError",
    "DBRegistryError",
    "ProbeError",
    "QueryError",
    "StatusQueryError",
]
