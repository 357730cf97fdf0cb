"""
Package configuration settings
"""

import os
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv

# Load the .env file next to the project root, if any
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


def _get_env_var_as_int(name: str, default: str) -> int:
    """Read an integer environment variable, dropping inline comments."""
    value_str = os.getenv(name, default)
    cleaned_value = value_str.split("#")[0].strip()
    return int(cleaned_value)


class Settings:
    """Registry configuration"""

    def __init__(self):
        # Connection defaults
        self.db_engine: str = os.getenv("DB_ENGINE", "mysql").strip().lower()
        self.db_error_mode: str = (
            os.getenv("DB_ERROR_MODE", "silent").split("#")[0].strip().lower()
        )
        self.db_connect_timeout: int = _get_env_var_as_int("DB_CONNECT_TIMEOUT", "10")

        # "slave" (SHOW SLAVE STATUS) or "replica" (SHOW REPLICA STATUS, MySQL 8.4+)
        self.mysql_replica_syntax: str = (
            os.getenv("MYSQL_REPLICA_SYNTAX", "slave").split("#")[0].strip().lower()
        )

        # Replica readiness polling
        self.replica_max_seconds: int = _get_env_var_as_int(
            "REPLICA_MAX_SECONDS", "1200"
        )  # 20 minutes
        self.replica_lag_threshold: int = _get_env_var_as_int(
            "REPLICA_LAG_THRESHOLD", "0"
        )

        # Logging
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_format: str = os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
