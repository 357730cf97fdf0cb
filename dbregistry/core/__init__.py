"""
Core module - named database connection management
"""

from .connection_registry import (
    ConnectionAttempt,
    ConnectionRegistry,
    ConnectionState,
    get_connection_registry,
)
from .credentials import CredentialSet
from .replica import is_replica_connection_ready, wait_for_replica

__all__ = [
    "ConnectionAttempt",
    "ConnectionRegistry",
    "ConnectionState",
    "CredentialSet",
    "get_connection_registry",
    "is_replica_connection_ready",
    "wait_for_replica",
]
