"""Per-environment database credentials.

This module resolves MySQL settings from SSM Parameter Store and keeps
them for the life of the process. Entries are never invalidated; a
rotated credential needs a fresh process.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.constants import DEFAULT_DB_PORT, PARAMETER_NAMES
from core.errors import CsvRelayParameterError
from core.logging_config import get_logger
from core.types import DatabaseConfig

_LOGGER = get_logger(__name__)


def parameter_path(env: str, name: str) -> str:
    """Return the parameter path, for example ``/dev/MYSQL_HOST``."""
    return f"/{env}/{name}"


class DatabaseConfigCache:
    """Get-or-populate cache of database settings keyed by environment.

    Built once per process and passed into the consumer handler. There
    is no locking: concurrent misses for the same environment may both
    hit the parameter store and store equal values.
    """

    def __init__(self, ssm_client: Any, db_port: int = DEFAULT_DB_PORT) -> None:
        self._ssm_client = ssm_client
        self._db_port = db_port
        self._entries: dict[str, DatabaseConfig] = {}

    def get(self, env: str) -> DatabaseConfig:
        """Return cached settings for ``env``, fetching them on first use.

        Raises:
            CsvRelayParameterError: If any parameter lookup fails.
        """
        cached = self._entries.get(env)
        if cached is not None:
            return cached
        config = self._fetch(env)
        self._entries[env] = config
        _LOGGER.info("database_config_cached", env=env, host=config.host)
        return config

    def __contains__(self, env: object) -> bool:
        return env in self._entries

    def _fetch(self, env: str) -> DatabaseConfig:
        paths = [parameter_path(env, name) for name in PARAMETER_NAMES]
        with ThreadPoolExecutor(max_workers=len(paths)) as executor:
            host, user, password, database = executor.map(self._get_parameter, paths)
        return DatabaseConfig(
            host=host,
            user=user,
            password=password,
            database=database,
            port=self._db_port,
        )

    def _get_parameter(self, name: str) -> str:
        try:
            response = self._ssm_client.get_parameter(Name=name, WithDecryption=True)
        except (BotoCoreError, ClientError) as error:
            _LOGGER.error("parameter_fetch_failed", name=name, error=str(error))
            raise CsvRelayParameterError(
                f"Failed to fetch parameter {name}: {error}. "
                "Check the parameter exists and the function may decrypt it."
            ) from error
        return response["Parameter"]["Value"]
