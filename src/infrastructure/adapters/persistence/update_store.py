"""PostgreSQL update store.

Implements UpdateStoreProtocol over the ``updates`` table using SQLAlchemy's
async engine.

Idempotent create pattern:
    INSERT INTO updates (commit, manifest) VALUES (...)
    ON CONFLICT (commit) DO NOTHING
    RETURNING *

When the INSERT returns no row the commit already existed; the existing row
is read back in the same transaction. The unique constraint, not a prior
SELECT, decides who wins, so concurrent duplicates can never both insert.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.application.ports.update_store import UpdateStoreProtocol
from src.domain.errors.update import UpdateNotFoundError, UpdateStorageError
from src.domain.models.update_record import UpdatePatch, UpdateRecord
from src.infrastructure.adapters.persistence.schema import updates

logger = get_logger()


class PostgresUpdateStore(UpdateStoreProtocol):
    """SQL update store over the ``updates`` table.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._log = logger.bind(component="postgres_update_store")

    async def create_if_absent(
        self, commit: str, manifest: Any
    ) -> tuple[UpdateRecord, bool]:
        """Insert the record unless the commit exists, in one transaction."""
        try:
            async with self._session_factory() as session, session.begin():
                stmt = (
                    insert(updates)
                    .values(commit=commit, manifest=manifest)
                    .on_conflict_do_nothing(index_elements=[updates.c.commit])
                    .returning(*updates.c)
                )
                row = (await session.execute(stmt)).mappings().one_or_none()
                if row is not None:
                    return _to_record(row), True

                existing = (
                    (
                        await session.execute(
                            select(updates).where(updates.c.commit == commit)
                        )
                    )
                    .mappings()
                    .one()
                )
                return _to_record(existing), False
        except SQLAlchemyError as exc:
            self._log.error(
                "update_store_failed",
                operation="create_if_absent",
                commit=commit,
                error=str(exc),
            )
            raise UpdateStorageError("create_if_absent") from exc

    async def find_by_commit(self, commit: str) -> UpdateRecord | None:
        """Read one record by commit."""
        try:
            async with self._session_factory() as session:
                row = (
                    (
                        await session.execute(
                            select(updates).where(updates.c.commit == commit)
                        )
                    )
                    .mappings()
                    .one_or_none()
                )
                return None if row is None else _to_record(row)
        except SQLAlchemyError as exc:
            self._log.error(
                "update_store_failed",
                operation="find_by_commit",
                commit=commit,
                error=str(exc),
            )
            raise UpdateStorageError("find_by_commit") from exc

    async def update_by_commit(self, commit: str, patch: UpdatePatch) -> UpdateRecord:
        """Apply channel/tainted with UPDATE ... RETURNING."""
        if patch.is_empty():
            record = await self.find_by_commit(commit)
            if record is None:
                raise UpdateNotFoundError(commit)
            return record

        values: dict[str, Any] = {"updated_at": func.now()}
        if patch.channel is not None:
            values["channel"] = patch.channel
        if patch.tainted is not None:
            values["tainted"] = patch.tainted

        try:
            async with self._session_factory() as session, session.begin():
                stmt = (
                    update(updates)
                    .where(updates.c.commit == commit)
                    .values(**values)
                    .returning(*updates.c)
                )
                row = (await session.execute(stmt)).mappings().one_or_none()
        except SQLAlchemyError as exc:
            self._log.error(
                "update_store_failed",
                operation="update_by_commit",
                commit=commit,
                error=str(exc),
            )
            raise UpdateStorageError("update_by_commit") from exc

        if row is None:
            raise UpdateNotFoundError(commit)
        return _to_record(row)

    async def count(self) -> int:
        """Count stored records."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(func.count()).select_from(updates)
                )
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise UpdateStorageError("count") from exc


def _to_record(row: Any) -> UpdateRecord:
    """Map one SQL row to a domain update record."""
    return UpdateRecord(
        id=int(row["id"]),
        commit=str(row["commit"]),
        manifest=row["manifest"],
        channel=row["channel"],
        tainted=bool(row["tainted"]),
        created_at=_row_dt(row["created_at"]),
        updated_at=_row_dt(row["updated_at"]),
    )


def _row_dt(value: datetime) -> datetime:
    """Normalize a timestamp column to timezone-aware UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
