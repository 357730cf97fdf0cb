"""
Database connection module
"""

from typing import Dict, Type

from ..errors import ConfigError
from .base import DatabaseConnection, ErrorMode
from .mysql_connection import MySQLConnection
from .postgres_connection import PostgresConnection

CONNECTION_CLASSES: Dict[str, Type[DatabaseConnection]] = {
    "mysql": MySQLConnection,
    "pgsql": PostgresConnection,
}

# Alternate spellings accepted for the engine name
ENGINE_ALIASES = {
    "mariadb": "mysql",
    "postgres": "pgsql",
    "postgresql": "pgsql",
}


def normalize_engine(engine: str) -> str:
    engine = engine.strip().lower()
    return ENGINE_ALIASES.get(engine, engine)


def get_connection_class(
    engine: str, classes: Dict[str, Type[DatabaseConnection]] = None
) -> Type[DatabaseConnection]:
    """
    Look up the connection class for an engine

    Args:
        engine: Engine name (mysql, pgsql, or an alias)
        classes: Engine table to search (defaults to CONNECTION_CLASSES)

    Raises:
        ConfigError: No connection class for the engine
    """
    classes = CONNECTION_CLASSES if classes is None else classes
    key = normalize_engine(engine)
    if key not in classes:
        raise ConfigError(f"Unsupported database engine: {engine}")
    return classes[key]


__all__ = [
    "DatabaseConnection",
    "ErrorMode",
    "MySQLConnection",
    "PostgresConnection",
    "CONNECTION_CLASSES",
    "normalize_engine",
    "get_connection_class",
]
