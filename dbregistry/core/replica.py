"""
Replica readiness polling

Checks once per second whether a replica has caught up with its source,
until the lag is under a threshold or a time budget is spent.
"""

from typing import Any, Optional, Tuple
import asyncio
import logging
import time

from ..config.settings import get_settings
from .connections import DatabaseConnection
from .errors import QueryError, StatusQueryError

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 1


def _resolve(
    connection: DatabaseConnection,
    max_seconds: Optional[int],
    lag_threshold: Optional[float],
    status_query: Optional[str],
    lag_field: Optional[str],
) -> Tuple[int, float, str, str]:
    settings = get_settings()
    return (
        settings.replica_max_seconds if max_seconds is None else max_seconds,
        settings.replica_lag_threshold if lag_threshold is None else lag_threshold,
        status_query or connection.replica_status_query,
        lag_field or connection.replica_lag_field,
    )


def _to_seconds(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def read_replica_lag(
    connection: DatabaseConnection, status_query: str, lag_field: str
) -> Optional[float]:
    """
    Run the status query and return the lag of the last row.

    Returns:
        Lag in seconds; 0 when the query returns no rows; None when the
        server reports no lag value (replication not running)

    Raises:
        StatusQueryError: The status query failed
    """
    try:
        rows = connection.execute(status_query)
    except QueryError as e:
        raise StatusQueryError(str(e), query=status_query) from e

    lag: Any = 0
    for row in rows:
        lag = row.get(lag_field)
    return _to_seconds(lag)


def _is_ready(lag: Optional[float], lag_threshold: float, require_lag: bool) -> bool:
    if lag is None:
        return not require_lag
    return lag <= lag_threshold


def is_replica_connection_ready(
    connection: DatabaseConnection,
    max_seconds: Optional[int] = None,
    lag_threshold: Optional[float] = None,
    *,
    status_query: Optional[str] = None,
    lag_field: Optional[str] = None,
    require_lag: bool = False,
) -> bool:
    """
    Wait for a replica to catch up with its source.

    Blocks the calling thread, checking once per second.

    Args:
        connection: Open connection to the replica
        max_seconds: How many seconds to keep checking (default 1200)
        lag_threshold: Lag, in seconds, at which the replica counts as ready
            (default 0)
        status_query: Override the engine's replica status query
        lag_field: Override the column holding the lag
        require_lag: Treat a NULL lag (replication stopped) as not ready.
            By default a NULL lag counts as caught up, like an empty status.

    Returns:
        bool: True once the replica is within the threshold, False when
        max_seconds elapsed first

    Raises:
        StatusQueryError: The status query failed (polling stops)
    """
    max_seconds, lag_threshold, status_query, lag_field = _resolve(
        connection, max_seconds, lag_threshold, status_query, lag_field
    )

    elapsed = 0
    while True:
        lag = read_replica_lag(connection, status_query, lag_field)
        is_ready = _is_ready(lag, lag_threshold, require_lag)
        if is_ready or elapsed >= max_seconds:
            break
        logger.debug(f"Replica {connection.dsn} lag {lag}s > {lag_threshold}s, waiting")
        time.sleep(POLL_INTERVAL_SECONDS)
        elapsed += POLL_INTERVAL_SECONDS

    if not is_ready:
        logger.warning(
            f"⚠️ Replica {connection.dsn} not ready after {elapsed}s (lag: {lag})"
        )
    return is_ready


async def wait_for_replica(
    connection: DatabaseConnection,
    max_seconds: Optional[int] = None,
    lag_threshold: Optional[float] = None,
    *,
    status_query: Optional[str] = None,
    lag_field: Optional[str] = None,
    require_lag: bool = False,
) -> bool:
    """
    Coroutine version of is_replica_connection_ready().

    The status query runs in a worker thread and the wait between checks
    yields to the event loop.
    """
    max_seconds, lag_threshold, status_query, lag_field = _resolve(
        connection, max_seconds, lag_threshold, status_query, lag_field
    )

    elapsed = 0
    while True:
        lag = await asyncio.to_thread(
            read_replica_lag, connection, status_query, lag_field
        )
        is_ready = _is_ready(lag, lag_threshold, require_lag)
        if is_ready or elapsed >= max_seconds:
            break
        await asyncio.sleep(POLL_INTERVAL_SECONDS)
        elapsed += POLL_INTERVAL_SECONDS

    if not is_ready:
        logger.warning(
            f"⚠️ Replica {connection.dsn} not ready after {elapsed}s (lag: {lag})"
        )
    return is_ready
