"""Public surface for csvrelay.

This module provides a stable import path for the two Lambda handlers
and the typed models they exchange.
"""

from __future__ import annotations

from consume.db_config import DatabaseConfigCache
from consume.handler import ConsumeRuntime, build_consume_runtime, handle_messages
from consume.handler import handler as consume_handler
from consume.worker_pool import BoundedWorkerPool
from core.config import CsvRelayConfig
from core.types import ConsumeReport, DatabaseConfig, IngestSummary, RecordOutcome
from ingest.handler import IngestRuntime, build_ingest_runtime, handle_upload
from ingest.handler import handler as ingest_handler

__all__ = [
    "BoundedWorkerPool",
    "ConsumeReport",
    "ConsumeRuntime",
    "CsvRelayConfig",
    "DatabaseConfig",
    "DatabaseConfigCache",
    "IngestRuntime",
    "IngestSummary",
    "RecordOutcome",
    "build_consume_runtime",
    "build_ingest_runtime",
    "consume_handler",
    "handle_messages",
    "handle_upload",
    "ingest_handler",
]
