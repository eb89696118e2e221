"""Integration tests from S3 upload through the queue into the users table."""

from __future__ import annotations

import json

from sqlalchemy import select

from consume.db_config import DatabaseConfigCache
from consume.handler import ConsumeRuntime, handle_messages
from consume.message_deleter import MessageDeleter
from consume.users_table import users_table
from core.config import CsvRelayConfig
from fakes import sqs_event_from_batches
from fixture_paths import load_event, read_upload
from ingest.handler import IngestRuntime, handle_upload
from ingest.queue_publisher import QueuePublisher

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/rows.fifo"


def _ingest_runtime(s3_client, sqs_client) -> IngestRuntime:
    config = CsvRelayConfig(aws_region="us-east-1", aws_profile=None, queue_url=QUEUE_URL)
    return IngestRuntime(
        config=config,
        s3_client=s3_client,
        publisher=QueuePublisher(sqs_client, QUEUE_URL, clock_ms=lambda: 1700000000000),
    )


def _consume_runtime(ssm_client, sqs_client, engine) -> ConsumeRuntime:
    return ConsumeRuntime(
        config_cache=DatabaseConfigCache(ssm_client),
        deleter=MessageDeleter(sqs_client, QUEUE_URL),
        engine_factory=lambda config: engine,
    )


def test_two_row_upload_reaches_users_table(
    users_engine, s3_client, sqs_client, ssm_client
) -> None:
    """A two-row dev upload should become two users and two deleted messages."""
    s3_client.put("myapp-dev-data", "batch1.csv", read_upload("batch1.csv"))

    ingest_response = handle_upload(
        load_event("s3_upload.json"), _ingest_runtime(s3_client, sqs_client)
    )
    consume_response = handle_messages(
        sqs_event_from_batches(sqs_client.sent_batches),
        _consume_runtime(ssm_client, sqs_client, users_engine),
    )
    with users_engine.connect() as connection:
        names = sorted(connection.execute(select(users_table.c.name)).scalars())

    assert ingest_response["statusCode"] == 200
    assert [len(batch) for batch in sqs_client.sent_batches] == [2]
    assert sqs_client.sent_batches[0][0]["MessageGroupId"] == "CSVChunkGroup"
    assert {name for name, _ in ssm_client.calls} == {
        "/dev/MYSQL_HOST",
        "/dev/MYSQL_USER",
        "/dev/MYSQL_PASSWORD",
        "/dev/MYSQL_DATABASE",
    }
    assert names == ["Alice", "Bob"]
    assert len(sqs_client.deleted_handles) == 2
    assert consume_response == {"statusCode": 200, "body": "Messages processed successfully."}


def test_redelivered_upload_does_not_duplicate_users(
    users_engine, s3_client, sqs_client, ssm_client
) -> None:
    """Consuming the same rows twice should refresh updatedAt without new rows."""
    s3_client.put("myapp-dev-data", "batch1.csv", read_upload("batch1.csv"))
    handle_upload(load_event("s3_upload.json"), _ingest_runtime(s3_client, sqs_client))
    event = sqs_event_from_batches(sqs_client.sent_batches)
    runtime = _consume_runtime(ssm_client, sqs_client, users_engine)

    handle_messages(event, runtime)
    for record in event["Records"]:
        payload = json.loads(record["body"])
        payload["data"]["timestamp"] = "2025-05-05T05:05:05"
        record["body"] = json.dumps(payload)
    second_response = handle_messages(event, runtime)
    with users_engine.connect() as connection:
        rows = connection.execute(select(users_table)).mappings().all()

    assert second_response["statusCode"] == 200
    assert len(rows) == 2
    assert {row["updatedAt"].year for row in rows} == {2025}
    assert {row["createdAt"].year for row in rows} == {2024}
    assert len(ssm_client.calls) == 4
