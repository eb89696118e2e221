"""Lambda entry point for S3 upload notifications.

The process-wide runtime (config and AWS clients) is built once per
execution environment and passed explicitly into ``handle_upload``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import json
from typing import Any, Mapping

from core.aws_clients import create_client
from core.config import CsvRelayConfig
from core.constants import INGEST_FAILURE_BODY, INGEST_SUCCESS_BODY
from core.errors import CsvRelayError
from core.logging_config import configure_logging, get_logger
from core.responses import HandlerResponse, error, ok
from core.s3_event import parse_upload_event, resolve_environment
from ingest.pipeline import ingest_upload
from ingest.queue_publisher import QueuePublisher

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class IngestRuntime:
    """Dependencies shared by every ingestion invocation."""

    config: CsvRelayConfig
    s3_client: Any
    publisher: QueuePublisher


def build_ingest_runtime(config: CsvRelayConfig) -> IngestRuntime:
    """Create AWS clients and the queue publisher.

    Raises:
        CsvRelayConfigError: If the queue URL is not configured.
    """
    queue_url = config.require_queue_url()
    return IngestRuntime(
        config=config,
        s3_client=create_client("s3", config),
        publisher=QueuePublisher(create_client("sqs", config), queue_url),
    )


def handle_upload(event: Mapping[str, Any], runtime: IngestRuntime) -> HandlerResponse:
    """Process one upload notification.

    Args:
        event: S3 notification payload.
        runtime: Process-wide dependencies.

    Returns:
        ``200`` when every batch was sent, ``500`` otherwise.
    """
    _LOGGER.info("event_received", payload=json.dumps(event, default=str))
    try:
        location = parse_upload_event(event)
        env = resolve_environment(location.bucket, runtime.config)
        _LOGGER.info("processing_file", bucket=location.bucket, key=location.key, env=env)
        ingest_upload(location, env, runtime.s3_client, runtime.publisher)
    except CsvRelayError as failure:
        _LOGGER.error("file_processing_failed", error=str(failure), exc_info=True)
        return error(INGEST_FAILURE_BODY)
    return ok(INGEST_SUCCESS_BODY)


@lru_cache(maxsize=1)
def _process_runtime() -> IngestRuntime:
    config = CsvRelayConfig.from_env()
    configure_logging(config.log_level)
    return build_ingest_runtime(config)


def handler(event: Mapping[str, Any], context: Any) -> HandlerResponse:
    """AWS Lambda handler for the ingestion function."""
    try:
        runtime = _process_runtime()
    except CsvRelayError as failure:
        _LOGGER.error("runtime_setup_failed", error=str(failure))
        return error(INGEST_FAILURE_BODY)
    return handle_upload(event, runtime)
