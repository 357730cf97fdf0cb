"""
PostgreSQL connection
"""

from typing import Any

import psycopg
from psycopg.rows import dict_row

from .base import DatabaseConnection


class PostgresConnection(DatabaseConnection):
    """
    PostgreSQL connection over psycopg.

    Replica lag is derived from the last replayed transaction; on a primary
    (not in recovery) the status query returns no rows.
    """

    engine = "pgsql"
    dsn_prefix = "pgsql"
    default_port = 5432
    driver_errors = (psycopg.Error,)

    replica_status_query = (
        "SELECT EXTRACT(EPOCH FROM now() - pg_last_xact_replay_timestamp()) "
        "AS seconds_behind WHERE pg_is_in_recovery()"
    )
    replica_lag_field = "seconds_behind"

    def _open_client(self) -> Any:
        return psycopg.connect(
            host=self.credentials.host,
            port=int(self.port),
            dbname=self.credentials.database,
            user=self.credentials.username,
            password=self.credentials.password,
            connect_timeout=self.connect_timeout,
            row_factory=dict_row,
            autocommit=True,
        )
