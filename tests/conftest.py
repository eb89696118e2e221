"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from fakes import FakeS3Client, FakeSqsClient, FakeSsmClient


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def users_engine(tmp_path: Path) -> Iterator[Engine]:
    """File-backed SQLite engine with the users table created."""
    from consume.users_table import metadata

    engine = create_engine(f"sqlite:///{tmp_path / 'users.db'}")
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def sqs_client() -> FakeSqsClient:
    return FakeSqsClient()


@pytest.fixture
def ssm_client() -> FakeSsmClient:
    return FakeSsmClient(
        {
            "/dev/MYSQL_HOST": "dev-db.internal",
            "/dev/MYSQL_USER": "relay",
            "/dev/MYSQL_PASSWORD": "dev-secret",
            "/dev/MYSQL_DATABASE": "app",
            "/prod/MYSQL_HOST": "prod-db.internal",
            "/prod/MYSQL_USER": "relay",
            "/prod/MYSQL_PASSWORD": "prod-secret",
            "/prod/MYSQL_DATABASE": "app",
        }
    )
