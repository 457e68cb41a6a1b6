"""SQLAlchemy table definitions for update persistence."""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncEngine

metadata = MetaData()

updates = Table(
    "updates",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=True),
    Column("commit", Text, nullable=False),
    Column("manifest", JSONB, nullable=False),
    Column("channel", Text, nullable=True),
    Column("tainted", Boolean, nullable=False, server_default=false()),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
    # The idempotency guarantee rests on this constraint
    UniqueConstraint("commit", name="uq_updates_commit"),
    CheckConstraint('char_length("commit") > 0', name="ck_updates_commit_nonempty"),
)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the update tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
