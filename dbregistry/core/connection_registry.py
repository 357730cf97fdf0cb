"""
Named database connection registry
Lazily opens one connection per name and fails over across credential sets
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Type,
    Union,
)
import threading
import logging

from ..config.settings import Settings, get_settings
from .connections import (
    CONNECTION_CLASSES,
    DatabaseConnection,
    ErrorMode,
    get_connection_class,
    normalize_engine,
)
from .credentials import CredentialSet, coerce_credentials
from .errors import ConfigError, DatabaseConnectionError

logger = logging.getLogger(__name__)

CredentialsLike = Union[CredentialSet, Mapping[str, Any]]


class ConnectionState(Enum):
    """Lifecycle of a named connection"""

    UNREGISTERED = "unregistered"
    NO_CONNECTION = "no_connection"
    LIVE = "live"
    DEAD = "dead"  # liveness probe failed, reconnect pending


class ConnectionAttempt(NamedTuple):
    credentials: CredentialSet
    dsn: str
    error: Optional[DatabaseConnectionError]  # None when the attempt succeeded

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class _RegistryEntry:
    credentials: List[CredentialSet] = field(default_factory=list)
    connection: Optional[DatabaseConnection] = None
    error_mode: ErrorMode = ErrorMode.SILENT
    state: ConnectionState = ConnectionState.NO_CONNECTION
    attempts: List[ConnectionAttempt] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class ConnectionRegistry:
    """
    Connection registry - one lazily opened connection per name

    Features:
    - Lazy initialization (opened on first get_connection)
    - Liveness probe before reuse, automatic reconnect
    - Ordered fallback across credential sets
    - Thread safe
    """

    def __init__(
        self,
        connection_classes: Optional[Dict[str, Type[DatabaseConnection]]] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the registry

        Args:
            connection_classes: Extra engine -> connection class entries
            settings: Configuration (defaults to get_settings())
        """
        self._config = settings or get_settings()
        self._connection_classes: Dict[str, Type[DatabaseConnection]] = dict(
            CONNECTION_CLASSES
        )
        if connection_classes:
            for engine, cls in connection_classes.items():
                self._connection_classes[normalize_engine(engine)] = cls

        self._entries: Dict[str, _RegistryEntry] = {}
        self._lock = threading.RLock()

    # ==================== Registration ====================

    def setup(
        self,
        name: str,
        credentials: CredentialsLike,
        error_mode: Optional[Union[ErrorMode, str]] = None,
    ) -> bool:
        """
        Set up a named connection, replacing any previous one

        Args:
            name: Connection name
            credentials: CredentialSet or dict with host, username, password
                and optionally database, port, engine
            error_mode: Error mode for connections opened from now on
                (defaults to the configured DB_ERROR_MODE, silent)

        Returns:
            bool: True once set up

        Raises:
            ConfigError: Empty name, missing credential fields or unknown engine
        """
        if not name:
            raise ConfigError("A name must be specified")

        credential_set = self._validate_credentials(credentials)
        mode = ErrorMode.coerce(
            error_mode if error_mode is not None else self._config.db_error_mode
        )
        key = self._connection_key(name)

        with self._lock:
            previous = self._entries.get(key)
            self._entries[key] = _RegistryEntry(
                credentials=[credential_set], error_mode=mode
            )

        # The replaced entry may be mid-reconnect; wait for it outside self._lock
        if previous is not None:
            with previous.lock:
                self._reset(previous)

        logger.info(
            f"✅ Connection '{name}' set up: {credential_set.masked()} "
            f"(error mode: {mode.value})"
        )
        return True

    def add_connection_params(self, name: str, credentials: CredentialsLike) -> bool:
        """
        Append a fallback credential set, tried after all earlier ones fail

        Args:
            name: Connection name, previously passed to setup()
            credentials: CredentialSet or dict

        Returns:
            bool: True once appended

        Raises:
            ConfigError: Name not set up, missing credential fields or unknown engine
        """
        key = self._connection_key(name)
        if not self.is_connection_established(name):
            raise ConfigError(f"{name} not found in connections registry. Use setup()")

        credential_set = self._validate_credentials(credentials)
        with self._locked_entry(key) as entry:
            if entry is None:
                raise ConfigError(
                    f"{name} not found in connections registry. Use setup()"
                )
            entry.credentials.append(credential_set)
            position = len(entry.credentials)

        logger.info(
            f"✅ Fallback #{position} added to '{name}': "
            f"{credential_set.masked()}"
        )
        return True

    # ==================== Retrieval ====================

    def get_connection(self, name: str) -> Optional[DatabaseConnection]:
        """
        Get the connection set up under name, opening it on demand

        The cached connection is probed before reuse; a dead one is dropped
        and the credential sets are tried again in order.

        Args:
            name: Connection name

        Returns:
            Optional[DatabaseConnection]: The live connection, or None if the
            name is unknown or every credential set failed
        """
        with self._locked_entry(self._connection_key(name)) as entry:
            if entry is None or not entry.credentials:
                return None

            if entry.connection is not None and not entry.connection.is_healthy():
                logger.warning(f"⚠️ Connection '{name}' is not healthy, reconnecting")
                self._discard(entry)
                entry.state = ConnectionState.DEAD

            if entry.connection is None:
                entry.connection = self._establish(name, entry)
                if entry.connection is not None:
                    entry.state = ConnectionState.LIVE

            return entry.connection

    def is_connection_established(self, name: str) -> bool:
        """
        Whether name has a registry entry

        This does not probe the server; use get_connection() for a verified
        connection.
        """
        with self._lock:
            return self._connection_key(name) in self._entries

    def get_state(self, name: str) -> ConnectionState:
        with self._lock:
            entry = self._entries.get(self._connection_key(name))
        if entry is None:
            return ConnectionState.UNREGISTERED
        return entry.state

    def get_attempts(self, name: str) -> List[ConnectionAttempt]:
        """Attempts made by the latest (re)connect of name."""
        with self._lock:
            entry = self._entries.get(self._connection_key(name))
        if entry is None:
            return []
        return list(entry.attempts)

    # ==================== Invalidation ====================

    def clear_connection(self, connection_key: str) -> None:
        """
        Drop the connection and all credential sets of connection_key

        The entry itself is kept, so add_connection_params() can add
        credentials again. Unknown keys are ignored.
        """
        with self._locked_entry(connection_key) as entry:
            if entry is not None:
                self._reset(entry)

    def close_all(self):
        """Close every connection and forget all names"""
        logger.info("🔄 Closing all database connections...")

        with self._lock:
            entries = list(self._entries.items())
            self._entries.clear()

        for _, entry in entries:
            with entry.lock:
                self._discard(entry)

        logger.info("✅ All database connections closed")

    # ==================== Monitoring ====================

    def health_check(self) -> Dict[str, Any]:
        """
        Health of every named connection (no reconnect is attempted)

        Returns:
            Dict: name -> state, health and statistics
        """
        with self._lock:
            entries = list(self._entries.items())

        health = {}
        for key, entry in entries:
            with entry.lock:
                conn = entry.connection
                health[key] = {
                    "state": entry.state.value,
                    "healthy": conn.is_healthy() if conn is not None else False,
                    "connected": conn.connected if conn is not None else False,
                    "stats": conn.get_stats() if conn is not None else None,
                }
        return health

    def get_stats(self) -> Dict[str, Any]:
        """
        Registry statistics

        Returns:
            Dict: totals and per-name details
        """
        with self._lock:
            entries = list(self._entries.items())

        stats = {
            "total_connections": len(entries),
            "live_connections": 0,
            "connections": {},
        }

        for key, entry in entries:
            with entry.lock:
                if entry.connection is not None:
                    stats["live_connections"] += 1
                stats["connections"][key] = {
                    "state": entry.state.value,
                    "error_mode": entry.error_mode.value,
                    "credential_sets": [c.masked() for c in entry.credentials],
                    "connection": (
                        entry.connection.get_stats() if entry.connection else None
                    ),
                    "failed_attempts": sum(
                        1 for a in entry.attempts if not a.succeeded
                    ),
                }

        return stats

    # ==================== Internals ====================

    def _establish(
        self, name: str, entry: _RegistryEntry
    ) -> Optional[DatabaseConnection]:
        """Try each credential set in order; first success wins."""
        entry.attempts = []

        for index, credentials in enumerate(list(entry.credentials), start=1):
            conn_class = self._connection_class_for(credentials)
            conn = conn_class(
                credentials,
                error_mode=entry.error_mode,
                connect_timeout=self._config.db_connect_timeout,
            )

            if conn.connect():
                entry.attempts.append(ConnectionAttempt(credentials, conn.dsn, None))
                if index > 1:
                    logger.info(f"✅ '{name}' connected using fallback #{index}")
                return conn

            entry.attempts.append(
                ConnectionAttempt(credentials, conn.dsn, conn.last_error)
            )
            logger.warning(
                f"⚠️ '{name}' credential set #{index} ({conn.dsn}) failed, "
                f"trying next"
            )

        logger.error(
            f"❌ No connection could be established for '{name}' "
            f"({len(entry.attempts)} attempts)"
        )
        return None

    @contextmanager
    def _locked_entry(self, key: str) -> Iterator[Optional[_RegistryEntry]]:
        """
        Hold the lock of the entry currently registered under key

        Lock order is entry.lock, then self._lock. setup() may swap the
        entry while a caller waits on the old lock, so the lookup is
        repeated until the locked entry is still the registered one.
        Yields None when key is not registered.
        """
        while True:
            with self._lock:
                entry = self._entries.get(key)
            if entry is None:
                yield None
                return

            with entry.lock:
                with self._lock:
                    current = self._entries.get(key) is entry
                if current:
                    yield entry
                    return

    def _reset(self, entry: _RegistryEntry):
        self._discard(entry)
        entry.credentials.clear()
        entry.attempts.clear()
        entry.state = ConnectionState.NO_CONNECTION

    def _discard(self, entry: _RegistryEntry):
        if entry.connection is not None:
            entry.connection.disconnect()
            entry.connection = None

    def _validate_credentials(self, credentials: CredentialsLike) -> CredentialSet:
        credential_set = coerce_credentials(credentials)
        self._connection_class_for(credential_set)
        return credential_set

    def _connection_class_for(
        self, credentials: CredentialSet
    ) -> Type[DatabaseConnection]:
        engine = credentials.engine or self._config.db_engine
        return get_connection_class(engine, self._connection_classes)

    @staticmethod
    def _connection_key(name: str) -> str:
        return name


# ==================== Convenience ====================

_global_registry: Optional[ConnectionRegistry] = None
_global_lock = threading.Lock()


def get_connection_registry() -> ConnectionRegistry:
    """
    Get the process-wide registry

    Returns:
        ConnectionRegistry: Shared registry instance
    """
    global _global_registry
    if _global_registry is None:
        with _global_lock:
            if _global_registry is None:
                _global_registry = ConnectionRegistry()
    return _global_registry
