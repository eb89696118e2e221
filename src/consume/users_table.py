"""Users table definition.

``name`` carries the unique key that makes repeated upserts of the same
user touch only ``updatedAt``.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, MetaData, String, Table

from core.constants import USERS_TABLE_NAME

metadata = MetaData()

users_table = Table(
    USERS_TABLE_NAME,
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("createdAt", DateTime, nullable=False),
    Column("updatedAt", DateTime, nullable=False),
)
