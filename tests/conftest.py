"""Shared fixtures: an in-memory "fake" engine behaving like a DB-API driver."""

from typing import Any

import pytest

from dbregistry.config.settings import Settings
from dbregistry.core.connection_registry import ConnectionRegistry
from dbregistry.core.connections import DatabaseConnection


class FakeDriverError(Exception):
    pass


class FakeServer:
    """Scriptable backend: hosts can be taken down, queries can fail."""

    def __init__(self) -> None:
        self.down_hosts: set[str] = set()
        self.failing_queries: set[str] = set()
        self.results: dict[str, list[dict[str, Any]]] = {}
        self.open_attempts: list[str] = []
        self.clients: list["FakeClient"] = []


class FakeCursor:
    def __init__(self, client: "FakeClient") -> None:
        self.client = client
        self.description = None
        self._rows: list[dict[str, Any]] = []

    def execute(self, sql: str, params: Any = None) -> None:
        server = self.client.server
        if self.client.closed or self.client.host in server.down_hosts:
            raise FakeDriverError("server has gone away")
        if sql in server.failing_queries:
            raise FakeDriverError(f"syntax error near {sql!r}")
        self._rows = list(server.results.get(sql, [{"1": 1}]))
        self.description = [(k,) for k in (self._rows[0] if self._rows else {"1": 1})]

    def fetchall(self) -> list[dict[str, Any]]:
        return self._rows

    def close(self) -> None:
        pass


class FakeClient:
    def __init__(self, server: FakeServer, host: str) -> None:
        self.server = server
        self.host = host
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True


class FakeConnection(DatabaseConnection):
    engine = "fake"
    dsn_prefix = "fake"
    default_port = 1
    driver_errors = (FakeDriverError,)
    replica_status_query = "SHOW FAKE REPLICA STATUS"
    replica_lag_field = "lag"

    server: FakeServer

    def _open_client(self) -> FakeClient:
        host = self.credentials.host
        self.server.open_attempts.append(host)
        if host in self.server.down_hosts:
            raise FakeDriverError(f"Can't connect to server on '{host}'")
        client = FakeClient(self.server, host)
        self.server.clients.append(client)
        return client


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def fake_connection_class(fake_server: FakeServer) -> type[FakeConnection]:
    return type("BoundFakeConnection", (FakeConnection,), {"server": fake_server})


@pytest.fixture
def settings() -> Settings:
    s = Settings()
    s.db_engine = "fake"
    s.db_error_mode = "silent"
    s.db_connect_timeout = 1
    return s


@pytest.fixture
def registry(
    fake_connection_class: type[FakeConnection], settings: Settings
) -> ConnectionRegistry:
    reg = ConnectionRegistry(
        connection_classes={"fake": fake_connection_class}, settings=settings
    )
    yield reg
    reg.close_all()
