"""
Credential sets used to open a named connection
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigError

REQUIRED_FIELDS = ("host", "username", "password")


@dataclass(frozen=True)
class CredentialSet:
    """
    Immutable host/database/username/password bundle for one connection attempt.

    Attributes:
        host: Database server host.
        username: Login user.
        password: Login password (may be an empty string, never None).
        database: Default database/schema to select.
        port: Server port; the engine default is used when omitted.
        engine: Engine name (mysql, pgsql); the registry default when omitted.
    """

    host: str
    username: str
    password: str
    database: Optional[str] = None
    port: Optional[int] = None
    engine: Optional[str] = None

    def __post_init__(self):
        missing = [name for name in REQUIRED_FIELDS if getattr(self, name) is None]
        if missing:
            raise ConfigError(
                f"Required field missing for connection params: {', '.join(missing)}"
            )

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]) -> "CredentialSet":
        """
        Build a credential set from a plain dict.

        Args:
            params: Mapping with host, username, password and optionally
                database, port, engine.

        Raises:
            ConfigError: When a required key is missing or port/engine is malformed.
        """
        missing = [name for name in REQUIRED_FIELDS if params.get(name) is None]
        if missing:
            raise ConfigError(
                f"Required field missing for connection params: {', '.join(missing)}"
            )

        port = params.get("port")
        if port is not None:
            try:
                port = int(port)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid port for connection params: {port!r}") from e

        engine = params.get("engine")
        if engine is not None and not isinstance(engine, str):
            raise ConfigError(f"Invalid engine for connection params: {engine!r}")

        return cls(
            host=params["host"],
            username=params["username"],
            password=params["password"],
            database=params.get("database"),
            port=port,
            engine=engine.lower() if engine else None,
        )

    def masked(self) -> Dict[str, Any]:
        """Dict form with the password hidden, safe for logs and stats."""
        data = asdict(self)
        data["password"] = "***"
        return data


def coerce_credentials(
    credentials: Union[CredentialSet, Mapping[str, Any]],
) -> CredentialSet:
    """Accept a CredentialSet or a mapping and return a CredentialSet."""
    if isinstance(credentials, CredentialSet):
        return credentials
    if isinstance(credentials, Mapping):
        return CredentialSet.from_mapping(credentials)
    raise ConfigError(
        f"Connection params must be a CredentialSet or a mapping, "
        f"got {type(credentials).__name__}"
    )
