"""csvrelay CLI entry points.
This module runs the ingestion and consumer handlers locally.
It maps argparse commands onto handler calls against real AWS services.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
from pathlib import Path
from typing import Any, Sequence

from consume.handler import build_consume_runtime, handle_messages
from core.config import CsvRelayConfig
from core.errors import CsvRelayError
from core.logging_config import configure_logging
from core.responses import HandlerResponse
from ingest.handler import build_ingest_runtime, handle_upload


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="csvrelay", description="csvrelay local runner")
    parser.add_argument("--queue-url", help="Override SQS_QUEUE_URL for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_consume_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the csvrelay CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code: 0 for a 200 response, 1 otherwise.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = CsvRelayConfig.from_env()
        if args.queue_url:
            config = _with_queue_url(config, args.queue_url)
        configure_logging(config.log_level)
        if args.command == "ingest":
            response = _run_ingest_command(config, args)
        elif args.command == "consume":
            response = _run_consume_command(config, args)
        else:
            parser.error(f"Unsupported command: {args.command}")
            return 2
    except CsvRelayError as error:
        print(f"error: {error}")
        return 1
    print(json.dumps(response))
    return 0 if response["statusCode"] == 200 else 1


def build_upload_event(bucket: str, key: str) -> dict[str, Any]:
    """Build a minimal S3 ObjectCreated notification."""
    return {"Records": [{"s3": {"bucket": {"name": bucket}, "object": {"key": key}}}]}


def _with_queue_url(config: CsvRelayConfig, queue_url: str) -> CsvRelayConfig:
    return replace(config, queue_url=queue_url)


def _add_ingest_command(subparsers: Any) -> None:
    ingest_parser = subparsers.add_parser("ingest", help="Publish an uploaded CSV to the queue")
    ingest_parser.add_argument("--bucket", required=True, help="Source bucket name")
    ingest_parser.add_argument("--key", required=True, help="Source object key")


def _add_consume_command(subparsers: Any) -> None:
    consume_parser = subparsers.add_parser("consume", help="Apply an SQS event file to MySQL")
    consume_parser.add_argument("--event", required=True, help="Path to an SQS event JSON file")


def _run_ingest_command(config: CsvRelayConfig, args: argparse.Namespace) -> HandlerResponse:
    """Handle ingest command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Handler response.
    """
    runtime = build_ingest_runtime(config)
    return handle_upload(build_upload_event(args.bucket, args.key), runtime)


def _run_consume_command(config: CsvRelayConfig, args: argparse.Namespace) -> HandlerResponse:
    """Handle consume command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Handler response.
    """
    event = json.loads(Path(args.event).read_text(encoding="utf-8"))
    runtime = build_consume_runtime(config)
    return handle_messages(event, runtime)
