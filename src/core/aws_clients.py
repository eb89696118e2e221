"""boto3 client construction.

This module encapsulates session creation for S3, SQS and SSM clients.
It is shared by the ingest and consume handlers.
"""

from __future__ import annotations

from typing import Any

from core.config import CsvRelayConfig
from core.errors import CsvRelayDependencyError


def create_client(service_name: str, config: CsvRelayConfig) -> Any:
    """Create a boto3 client for one AWS service.

    Args:
        service_name: boto3 service name such as ``s3`` or ``sqs``.
        config: Runtime config with region and optional profile.

    Returns:
        Boto3 client.

    Raises:
        CsvRelayDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise CsvRelayDependencyError(
            f"The {service_name} client requires boto3, but it is not installed. "
            "Install boto3 to run the csvrelay handlers."
        ) from error
    session = boto3.session.Session(**_build_session_kwargs(config))
    return session.client(service_name)


def _build_session_kwargs(config: CsvRelayConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config."""
    kwargs: dict[str, str] = {"region_name": config.aws_region}
    if config.aws_profile:
        kwargs["profile_name"] = config.aws_profile
    return kwargs
