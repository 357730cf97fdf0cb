"""Unit tests for the DatabaseConnection base class, driven through the fake engine."""

import pytest

from dbregistry.core.connections import ErrorMode
from dbregistry.core.credentials import CredentialSet
from dbregistry.core.errors import ConfigError, ProbeError, QueryError


def _credentials(host: str = "a") -> CredentialSet:
    return CredentialSet(host=host, username="u", password="p", database="d")


def test_connect_and_execute(fake_connection_class, fake_server) -> None:
    fake_server.results["SELECT id FROM t"] = [{"id": 1}, {"id": 2}]
    conn = fake_connection_class(_credentials())

    assert conn.connect() is True
    assert conn.connected is True
    assert conn.connection_time is not None
    assert conn.execute("SELECT id FROM t") == [{"id": 1}, {"id": 2}]


def test_connect_failure_is_recorded(fake_connection_class, fake_server) -> None:
    fake_server.down_hosts.add("a")
    conn = fake_connection_class(_credentials())

    assert conn.connect() is False
    assert conn.connected is False
    assert conn.error_count == 1
    assert conn.last_error.dsn == "fake:dbname=d;host=a"
    assert "Can't connect" in conn.last_error.message


def test_execute_on_closed_connection_raises(fake_connection_class) -> None:
    conn = fake_connection_class(_credentials())
    with pytest.raises(QueryError, match="not open"):
        conn.execute("SELECT 1")


def test_execute_wraps_driver_error(fake_connection_class, fake_server) -> None:
    fake_server.failing_queries.add("SELEC 1")
    conn = fake_connection_class(_credentials())
    conn.connect()
    with pytest.raises(QueryError) as exc_info:
        conn.execute("SELEC 1")
    assert exc_info.value.query == "SELEC 1"
    assert conn.error_count == 1


@pytest.mark.parametrize("mode", [ErrorMode.SILENT, ErrorMode.WARNING])
def test_query_returns_none_when_not_raising(
    fake_connection_class, fake_server, mode
) -> None:
    fake_server.failing_queries.add("SELEC 1")
    conn = fake_connection_class(_credentials(), error_mode=mode)
    conn.connect()
    assert conn.query("SELEC 1") is None
    assert conn.query("SELECT 1") == [{"1": 1}]


def test_set_error_mode_switches_to_exception(fake_connection_class, fake_server) -> None:
    fake_server.failing_queries.add("SELEC 1")
    conn = fake_connection_class(_credentials())
    conn.connect()
    conn.set_error_mode("exception")
    with pytest.raises(QueryError):
        conn.query("SELEC 1")


def test_unknown_error_mode_rejected(fake_connection_class) -> None:
    with pytest.raises(ConfigError):
        fake_connection_class(_credentials(), error_mode="verbose")


def test_ping_and_health(fake_connection_class, fake_server) -> None:
    conn = fake_connection_class(_credentials())
    assert conn.is_healthy() is False

    conn.connect()
    conn.ping()
    assert conn.is_healthy() is True

    fake_server.down_hosts.add("a")
    with pytest.raises(ProbeError):
        conn.ping()
    assert conn.is_healthy() is False


def test_disconnect_and_reconnect(fake_connection_class, fake_server) -> None:
    conn = fake_connection_class(_credentials())
    conn.connect()
    client = conn.get_client()

    assert conn.disconnect() is True
    assert client.closed is True
    assert conn.get_client() is None
    assert conn.disconnect() is True

    assert conn.reconnect() is True
    assert conn.get_client() is not client
    assert fake_server.open_attempts == ["a", "a"]


def test_port_defaults_per_engine(fake_connection_class) -> None:
    assert fake_connection_class(_credentials()).port == 1
    explicit = CredentialSet(host="a", username="u", password="p", port=7)
    assert fake_connection_class(explicit).port == 7


def test_stats(fake_connection_class) -> None:
    conn = fake_connection_class(_credentials(), error_mode="exception")
    conn.connect()
    stats = conn.get_stats()
    assert stats["engine"] == "fake"
    assert stats["dsn"] == "fake:dbname=d;host=a"
    assert stats["connected"] is True
    assert stats["error_mode"] == "exception"
    assert "password" not in stats
