"""
Database connection abstract base class
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, Union
from datetime import datetime
import logging

from ...config.settings import get_settings
from ..credentials import CredentialSet
from ..errors import ConfigError, DatabaseConnectionError, ProbeError, QueryError

logger = logging.getLogger(__name__)


class ErrorMode(Enum):
    """How query() reports a failed statement"""

    SILENT = "silent"
    WARNING = "warning"
    EXCEPTION = "exception"

    @classmethod
    def coerce(cls, value: Union["ErrorMode", str]) -> "ErrorMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigError(f"Unknown error mode: {value!r}") from None


class DatabaseConnection(ABC):
    """A single driver connection opened from one credential set."""

    engine: str = ""
    dsn_prefix: str = ""
    default_port: Optional[int] = None
    driver_errors: Tuple[Type[BaseException], ...] = ()

    liveness_query: str = "SELECT 1"
    replica_status_query: str = ""
    replica_lag_field: str = ""

    def __init__(
        self,
        credentials: CredentialSet,
        error_mode: Union[ErrorMode, str] = ErrorMode.SILENT,
        connect_timeout: Optional[int] = None,
    ):
        """
        Initialize the connection (nothing is opened yet).

        Args:
            credentials: host/database/username/password to connect with
            error_mode: how query() reports failures
            connect_timeout: seconds to wait for the handshake
        """
        self.credentials = credentials
        self.connect_timeout = (
            connect_timeout
            if connect_timeout is not None
            else get_settings().db_connect_timeout
        )
        self._error_mode = ErrorMode.coerce(error_mode)
        self._client = None
        self._connected = False
        self._connection_time: Optional[datetime] = None
        self._error_count = 0
        self._last_error: Optional[DatabaseConnectionError] = None

    @abstractmethod
    def _open_client(self) -> Any:
        """
        Open the native driver connection.

        Returns:
            A DB-API connection whose cursors yield dict rows

        Raises:
            One of driver_errors on failure
        """
        pass

    @property
    def dsn(self) -> str:
        """Engine-qualified identifier, e.g. mysql:dbname=app;host=db1"""
        database = self.credentials.database or ""
        return f"{self.dsn_prefix}:dbname={database};host={self.credentials.host}"

    @property
    def port(self) -> Optional[int]:
        return self.credentials.port or self.default_port

    def connect(self) -> bool:
        """
        Open the connection

        Returns:
            bool: whether the connection was opened
        """
        logger.info(f"🔄 Connecting to {self.dsn} as {self.credentials.username}")
        try:
            self._client = self._open_client()
        except self.driver_errors as e:
            self._client = None
            self._connected = False
            self._last_error = DatabaseConnectionError(str(e), dsn=self.dsn)
            self.increment_error()
            logger.warning(f"⚠️ Connection to {self.dsn} failed: {e}")
            return False

        self._connected = True
        self._connection_time = datetime.now()
        self._last_error = None
        self.reset_error()
        logger.info(f"✅ Connected to {self.dsn}")
        return True

    def disconnect(self) -> bool:
        """
        Close the connection

        Returns:
            bool: whether the connection closed cleanly
        """
        client, self._client = self._client, None
        self._connected = False
        if client is None:
            return True
        try:
            client.close()
            logger.info(f"✅ Connection to {self.dsn} closed")
            return True
        except self.driver_errors as e:
            logger.warning(f"⚠️ Closing {self.dsn} failed: {e}")
            return False

    def reconnect(self) -> bool:
        logger.info(f"🔄 Reconnecting {self.dsn}")
        self.disconnect()
        return self.connect()

    def execute(
        self, sql: str, params: Optional[Union[tuple, dict]] = None
    ) -> List[Dict[str, Any]]:
        """
        Run a statement and return its rows, whatever the error mode.

        Args:
            sql: SQL statement
            params: driver parameters

        Returns:
            list: rows as dicts (empty for statements without a result set)

        Raises:
            QueryError: the connection is closed or the driver failed
        """
        if self._client is None:
            raise QueryError(f"Connection to {self.dsn} is not open", query=sql)

        cursor = None
        try:
            cursor = self._client.cursor()
            cursor.execute(sql, params)
            if not cursor.description:
                return []
            return list(cursor.fetchall())
        except self.driver_errors as e:
            self.increment_error()
            raise QueryError(str(e), query=sql) from e
        finally:
            if cursor is not None:
                try:
                    cursor.close()
                except self.driver_errors:
                    pass

    def query(
        self, sql: str, params: Optional[Union[tuple, dict]] = None
    ) -> Optional[List[Dict[str, Any]]]:
        """
        Run a statement, reporting failure according to the error mode.

        Returns:
            list: rows as dicts, or None on failure in silent/warning mode

        Raises:
            QueryError: on failure in exception mode
        """
        try:
            return self.execute(sql, params)
        except QueryError as e:
            if self._error_mode is ErrorMode.EXCEPTION:
                raise
            if self._error_mode is ErrorMode.WARNING:
                logger.warning(f"⚠️ Query failed on {self.dsn}: {e}\nSQL: {sql}")
            return None

    def ping(self) -> None:
        """Run the liveness query; raises ProbeError if the connection is severed."""
        try:
            self.execute(self.liveness_query)
        except QueryError as e:
            raise ProbeError(str(e), query=self.liveness_query) from e

    def is_healthy(self) -> bool:
        if self._client is None:
            return False
        try:
            self.ping()
        except ProbeError as e:
            logger.warning(f"⚠️ Liveness probe failed on {self.dsn}: {e}")
            return False
        self.reset_error()
        return True

    def set_error_mode(self, mode: Union[ErrorMode, str]) -> None:
        self._error_mode = ErrorMode.coerce(mode)

    @property
    def error_mode(self) -> ErrorMode:
        return self._error_mode

    def get_client(self) -> Any:
        """Native driver connection, or None when closed."""
        return self._client

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def connection_time(self) -> Optional[datetime]:
        return self._connection_time

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def last_error(self) -> Optional[DatabaseConnectionError]:
        """Failure of the last connect() call, None after a success."""
        return self._last_error

    def increment_error(self):
        self._error_count += 1

    def reset_error(self):
        self._error_count = 0

    def get_stats(self) -> Dict[str, Any]:
        """
        Connection statistics

        Returns:
            Dict: statistics without probing the server
        """
        return {
            "engine": self.engine,
            "dsn": self.dsn,
            "connected": self._connected,
            "connection_time": (
                self._connection_time.isoformat() if self._connection_time else None
            ),
            "error_count": self._error_count,
            "error_mode": self._error_mode.value,
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.dsn} connected={self._connected}>"
