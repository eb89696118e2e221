"""Unit tests for the consumer Lambda handler."""

from __future__ import annotations

import json

from sqlalchemy import select

from consume.db_config import DatabaseConfigCache
from consume.handler import ConsumeRuntime, handle_messages
from consume.message_deleter import MessageDeleter
from consume.users_table import users_table
from fixture_paths import load_event

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/rows.fifo"


class _EngineFactory:
    """Hands out the test engine and records the configs it was asked for."""

    def __init__(self, engine) -> None:
        self.engine = engine
        self.configs = []

    def __call__(self, config):
        self.configs.append(config)
        return self.engine


def _runtime(ssm_client, sqs_client, engine_factory) -> ConsumeRuntime:
    return ConsumeRuntime(
        config_cache=DatabaseConfigCache(ssm_client),
        deleter=MessageDeleter(sqs_client, QUEUE_URL),
        engine_factory=engine_factory,
    )


def _event(rows: list[dict[str, str]], env: str = "dev") -> dict:
    return {
        "Records": [
            {
                "messageId": f"m{index}",
                "receiptHandle": f"handle-m{index}",
                "body": json.dumps({"data": row, "env": env}),
            }
            for index, row in enumerate(rows)
        ]
    }


def _names(engine) -> list[str]:
    with engine.connect() as connection:
        return sorted(connection.execute(select(users_table.c.name)).scalars())


def test_handle_messages_processes_delivery(users_engine, ssm_client, sqs_client) -> None:
    """Every record should be upserted and deleted with a 200 response."""
    factory = _EngineFactory(users_engine)

    response = handle_messages(
        load_event("sqs_delivery.json"), _runtime(ssm_client, sqs_client, factory)
    )

    assert response == {"statusCode": 200, "body": "Messages processed successfully."}
    assert _names(users_engine) == ["Alice", "Bob"]
    assert sorted(sqs_client.deleted_handles) == ["handle-row-0", "handle-row-1"]
    assert factory.configs[0].host == "dev-db.internal"


def test_handle_messages_reuses_cached_config(users_engine, ssm_client, sqs_client) -> None:
    """A warm process should not query the parameter store again."""
    runtime = _runtime(ssm_client, sqs_client, _EngineFactory(users_engine))

    handle_messages(_event([{"name": "Alice"}]), runtime)
    handle_messages(_event([{"name": "Bob"}]), runtime)

    assert len(ssm_client.calls) == 4


def test_handle_messages_rejects_empty_delivery(users_engine, ssm_client, sqs_client) -> None:
    """An event without records should fail before any lookups."""
    runtime = _runtime(ssm_client, sqs_client, _EngineFactory(users_engine))

    response = handle_messages({"Records": []}, runtime)

    assert response == {"statusCode": 500, "body": "Error processing messages."}
    assert ssm_client.calls == []


def test_handle_messages_rejects_mixed_environments(users_engine, ssm_client, sqs_client) -> None:
    """Mixed-environment deliveries should fail without touching the database."""
    event = _event([{"name": "Alice"}])
    event["Records"].extend(_event([{"name": "Bob"}], env="prod")["Records"])
    factory = _EngineFactory(users_engine)

    response = handle_messages(event, _runtime(ssm_client, sqs_client, factory))

    assert response["statusCode"] == 500
    assert factory.configs == [] and _names(users_engine) == []


def test_handle_messages_keeps_sibling_commits_on_failure(
    users_engine, ssm_client, sqs_client
) -> None:
    """A failing record should not roll back its committed siblings."""
    event = _event([{"name": "Alice"}, {"id": "no-name"}, {"name": "Carol"}])

    runtime = _runtime(ssm_client, sqs_client, _EngineFactory(users_engine))

    response = handle_messages(event, runtime)

    assert response == {
        "statusCode": 500,
        "body": "Error processing messages: 1 failed, 0 skipped, 2 succeeded.",
    }
    assert _names(users_engine) == ["Alice", "Carol"]
    assert "handle-m1" not in sqs_client.deleted_handles


def test_handle_messages_skips_windows_after_failure(users_engine, ssm_client, sqs_client) -> None:
    """Records after a failed window should stay on the queue untouched."""
    rows = [{"name": f"user-{number}"} for number in range(15)]
    rows[3] = {"id": "broken"}

    runtime = _runtime(ssm_client, sqs_client, _EngineFactory(users_engine))

    response = handle_messages(_event(rows), runtime)

    assert response["body"] == "Error processing messages: 1 failed, 5 skipped, 9 succeeded."
    assert len(_names(users_engine)) == 9
    assert len(sqs_client.deleted_handles) == 9


def test_handle_messages_disposes_engine(ssm_client, sqs_client) -> None:
    """The per-invocation engine should be disposed even when records fail."""

    class _TrackingEngine:
        disposed = False

        def connect(self):
            raise RuntimeError("database unreachable")

        def dispose(self) -> None:
            self.disposed = True

    engine = _TrackingEngine()

    response = handle_messages(
        _event([{"name": "Alice"}]), _runtime(ssm_client, sqs_client, lambda config: engine)
    )

    assert response["statusCode"] == 500 and engine.disposed


def test_handle_messages_keeps_message_when_upsert_statement_fails(
    users_engine, ssm_client, sqs_client
) -> None:
    """A database error mid-window should keep that message and commit its siblings."""
    with users_engine.begin() as connection:
        connection.exec_driver_sql(
            "CREATE TRIGGER reject_bob BEFORE INSERT ON users WHEN NEW.name = 'Bob' "
            "BEGIN SELECT RAISE(ABORT, 'rejected'); END;"
        )
    runtime = _runtime(ssm_client, sqs_client, _EngineFactory(users_engine))
    event = _event([{"name": "Alice"}, {"name": "Bob"}, {"name": "Carol"}])

    response = handle_messages(event, runtime)

    assert response == {
        "statusCode": 500,
        "body": "Error processing messages: 1 failed, 0 skipped, 2 succeeded.",
    }
    assert _names(users_engine) == ["Alice", "Carol"]
    assert sorted(sqs_client.deleted_handles) == ["handle-m0", "handle-m2"]
