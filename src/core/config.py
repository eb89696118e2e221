"""Runtime configuration model for csvrelay.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from typing import Mapping

from core.constants import DEFAULT_AWS_REGION, DEFAULT_DB_PORT, DEFAULT_LOG_LEVEL
from core.errors import CsvRelayConfigError


@dataclass(frozen=True)
class CsvRelayConfig:
    """Validated runtime configuration.

    Attributes:
        aws_region: AWS region for S3, SQS and SSM clients.
        aws_profile: Optional AWS profile for boto3 session initialization.
        queue_url: FIFO queue URL, required by both handlers.
        bucket_env_map: Explicit bucket name to environment mapping.
        db_port: MySQL port used with resolved database credentials.
        log_level: Minimum log level name.
    """

    aws_region: str
    aws_profile: str | None
    queue_url: str | None
    bucket_env_map: Mapping[str, str] = field(default_factory=dict)
    db_port: int = DEFAULT_DB_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "CsvRelayConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CsvRelayConfigError: If environment values are invalid.
        """
        return cls(
            aws_region=os.getenv("AWS_REGION") or DEFAULT_AWS_REGION,
            aws_profile=os.getenv("CSVRELAY_AWS_PROFILE"),
            queue_url=os.getenv("SQS_QUEUE_URL"),
            bucket_env_map=_parse_bucket_env_map(os.getenv("CSVRELAY_BUCKET_ENV_MAP", "")),
            db_port=_parse_db_port(os.getenv("CSVRELAY_DB_PORT", str(DEFAULT_DB_PORT))),
            log_level=_parse_log_level(os.getenv("CSVRELAY_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        )

    def require_queue_url(self) -> str:
        """Return the queue URL or fail when it is not configured.

        Raises:
            CsvRelayConfigError: If SQS_QUEUE_URL is unset.
        """
        if not self.queue_url:
            raise CsvRelayConfigError(
                "Missing SQS_QUEUE_URL: the FIFO queue URL is required. "
                "Set SQS_QUEUE_URL in the function environment."
            )
        return self.queue_url


def _parse_db_port(raw_value: str) -> int:
    """Parse the database port environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed port number.

    Raises:
        CsvRelayConfigError: If value is not a valid TCP port.
    """
    try:
        port = int(raw_value)
    except ValueError as error:
        raise CsvRelayConfigError(
            "Invalid CSVRELAY_DB_PORT value: "
            f"expected integer, got '{raw_value}'. "
            "Set CSVRELAY_DB_PORT to a numeric value."
        ) from error
    if not 0 < port < 65536:
        raise CsvRelayConfigError(
            f"Invalid CSVRELAY_DB_PORT value: {port} is outside 1-65535."
        )
    return port


def _parse_bucket_env_map(raw_value: str) -> dict[str, str]:
    """Parse ``bucket=env`` pairs separated by commas.

    Args:
        raw_value: Raw mapping string, possibly empty.

    Returns:
        Bucket name to environment mapping.

    Raises:
        CsvRelayConfigError: If an entry is not a ``bucket=env`` pair.
    """
    mapping: dict[str, str] = {}
    for entry in raw_value.split(","):
        if not entry.strip():
            continue
        bucket, separator, env = entry.partition("=")
        if not separator or not bucket.strip() or not env.strip():
            raise CsvRelayConfigError(
                f"Invalid CSVRELAY_BUCKET_ENV_MAP entry '{entry}': "
                "expected bucket=env. Fix the mapping and redeploy."
            )
        mapping[bucket.strip()] = env.strip()
    return mapping


def _parse_log_level(raw_value: str) -> str:
    """Validate the log level name."""
    level_name = raw_value.strip().upper()
    if not isinstance(logging.getLevelName(level_name), int):
        raise CsvRelayConfigError(
            f"Invalid CSVRELAY_LOG_LEVEL value '{raw_value}'. "
            "Use DEBUG, INFO, WARNING or ERROR."
        )
    return level_name
