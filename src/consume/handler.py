"""Lambda entry point for SQS deliveries.

The process-wide runtime holds the AWS clients and the database config
cache; it is built once per execution environment and passed into
``handle_messages``. The engine is created and disposed per invocation.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Mapping

from sqlalchemy.engine import Engine

from consume.database import create_engine_for
from consume.db_config import DatabaseConfigCache
from consume.message_deleter import MessageDeleter
from consume.messages import parse_queue_records, require_single_environment
from consume.pipeline import consume_records
from consume.record_processor import RecordProcessor
from core.aws_clients import create_client
from core.config import CsvRelayConfig
from core.constants import CONSUME_FAILURE_BODY, CONSUME_SUCCESS_BODY
from core.errors import CsvRelayError
from core.logging_config import configure_logging, get_logger
from core.responses import HandlerResponse, error, ok
from core.types import ConsumeReport, DatabaseConfig

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ConsumeRuntime:
    """Dependencies shared by every consumer invocation."""

    config_cache: DatabaseConfigCache
    deleter: MessageDeleter
    engine_factory: Callable[[DatabaseConfig], Engine] = create_engine_for


def build_consume_runtime(config: CsvRelayConfig) -> ConsumeRuntime:
    """Create AWS clients and the process-wide config cache.

    Raises:
        CsvRelayConfigError: If the queue URL is not configured.
    """
    queue_url = config.require_queue_url()
    return ConsumeRuntime(
        config_cache=DatabaseConfigCache(create_client("ssm", config), config.db_port),
        deleter=MessageDeleter(create_client("sqs", config), queue_url),
    )


def handle_messages(event: Mapping[str, Any], runtime: ConsumeRuntime) -> HandlerResponse:
    """Apply one SQS delivery to the users table.

    Args:
        event: SQS event payload.
        runtime: Process-wide dependencies.

    Returns:
        ``200`` when every record committed, ``500`` otherwise.
    """
    engine: Engine | None = None
    try:
        records = parse_queue_records(event)
        env = require_single_environment(records)
        engine = runtime.engine_factory(runtime.config_cache.get(env))
        report = consume_records(records, RecordProcessor(engine, runtime.deleter))
    except CsvRelayError as failure:
        _LOGGER.error("message_processing_failed", error=str(failure), exc_info=True)
        return error(CONSUME_FAILURE_BODY)
    finally:
        if engine is not None:
            engine.dispose()
    if not report.all_succeeded:
        return error(_failure_body(report))
    return ok(CONSUME_SUCCESS_BODY)


def _failure_body(report: ConsumeReport) -> str:
    """Describe a partial outcome, e.g. ``... : 1 failed, 0 skipped, 9 succeeded.``"""
    return (
        f"{CONSUME_FAILURE_BODY.rstrip('.')}: "
        f"{report.failed_count} failed, {report.skipped_count} skipped, "
        f"{report.succeeded_count} succeeded."
    )


@lru_cache(maxsize=1)
def _process_runtime() -> ConsumeRuntime:
    config = CsvRelayConfig.from_env()
    configure_logging(config.log_level)
    return build_consume_runtime(config)


def handler(event: Mapping[str, Any], context: Any) -> HandlerResponse:
    """AWS Lambda handler for the consumer function."""
    try:
        runtime = _process_runtime()
    except CsvRelayError as failure:
        _LOGGER.error("runtime_setup_failed", error=str(failure))
        return error(CONSUME_FAILURE_BODY)
    return handle_messages(event, runtime)
