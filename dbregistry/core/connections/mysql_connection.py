"""
MySQL connection
"""

from typing import Any, Optional, Union

import pymysql
from pymysql.cursors import DictCursor

from ...config.settings import get_settings
from ..credentials import CredentialSet
from ..errors import ConfigError
from .base import DatabaseConnection, ErrorMode

# MySQL 8.4 dropped SHOW SLAVE STATUS; 8.0.22+ and MariaDB 10.5+ accept both
REPLICA_STATUS_SYNTAX = {
    "slave": ("SHOW SLAVE STATUS", "Seconds_Behind_Master"),
    "replica": ("SHOW REPLICA STATUS", "Seconds_Behind_Source"),
}


class MySQLConnection(DatabaseConnection):
    """MySQL connection over pymysql"""

    engine = "mysql"
    dsn_prefix = "mysql"
    default_port = 3306
    driver_errors = (pymysql.err.Error,)

    replica_status_query = "SHOW SLAVE STATUS"
    replica_lag_field = "Seconds_Behind_Master"

    charset = "utf8mb4"

    def __init__(
        self,
        credentials: CredentialSet,
        error_mode: Union[ErrorMode, str] = ErrorMode.SILENT,
        connect_timeout: Optional[int] = None,
        replica_syntax: Optional[str] = None,
    ):
        """
        Initialize the connection (nothing is opened yet).

        Args:
            replica_syntax: "slave" or "replica" status statement
                (defaults to MYSQL_REPLICA_SYNTAX)
        """
        super().__init__(credentials, error_mode, connect_timeout)

        syntax = (replica_syntax or get_settings().mysql_replica_syntax).lower()
        if syntax not in REPLICA_STATUS_SYNTAX:
            raise ConfigError(
                f"Unknown MySQL replica syntax: {syntax} "
                f"(expected one of: {', '.join(REPLICA_STATUS_SYNTAX)})"
            )
        self.replica_status_query, self.replica_lag_field = REPLICA_STATUS_SYNTAX[
            syntax
        ]

    def _open_client(self) -> Any:
        return pymysql.connect(
            host=self.credentials.host,
            port=int(self.port),
            user=self.credentials.username,
            password=self.credentials.password,
            database=self.credentials.database,
            charset=self.charset,
            cursorclass=DictCursor,
            connect_timeout=self.connect_timeout,
            autocommit=True,
        )
