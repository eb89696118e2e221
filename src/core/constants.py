"""Core constants used across csvrelay modules.

This module centralizes fixed pipeline limits and wire-format literals.
Keeping values here avoids magic literals in handler logic.
"""

from __future__ import annotations

DEFAULT_AWS_REGION = "us-east-1"
DEFAULT_DB_PORT = 3306
DEFAULT_LOG_LEVEL = "INFO"
CHUNK_SIZE = 10
CONCURRENCY_LIMIT = 10
DB_POOL_SIZE = 10
MESSAGE_GROUP_ID = "CSVChunkGroup"
ENTRY_ID_PREFIX = "row"
DEDUP_ID_PREFIX = "dedup"
PARAMETER_NAMES = ("MYSQL_HOST", "MYSQL_USER", "MYSQL_PASSWORD", "MYSQL_DATABASE")
USERS_TABLE_NAME = "users"
MYSQL_DRIVER_NAME = "mysql+pymysql"
CSV_TEXT_ENCODING = "utf-8-sig"
INGEST_SUCCESS_BODY = "File processed and sent to SQS successfully."
INGEST_FAILURE_BODY = "Error processing file."
CONSUME_SUCCESS_BODY = "Messages processed successfully."
CONSUME_FAILURE_BODY = "Error processing messages."
