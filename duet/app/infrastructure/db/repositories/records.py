from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ....core.domain.models import Record, RecordKind
from ....core.errors import PersistenceError
from ....core.ports.repositories import RecordStore
from ..models import Records

_PATCHABLE = {"content", "read", "extra"}
_FILTERABLE = {"id", "kind", "sender", "receiver", "read"}


def _to_domain(row: Records) -> Record:
    return Record(
        id=row.id,
        kind=RecordKind(row.kind),
        sender=row.sender,
        receiver=row.receiver,
        content=row.content,
        extra=dict(row.extra or {}),
        read=row.read,
        created_at=row.created_at,
    )


class SqlRecordStore(RecordStore):
    """Record store over SQLAlchemy; one short-lived session per operation.

    The event router lives as long as the process, so it cannot hold a
    request-scoped session.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    async def create(self, record: Record) -> Record:  # type: ignore[override]
        try:
            async with self.sessionmaker() as session:
                session.add(
                    Records(
                        id=record.id,
                        kind=record.kind.value,
                        sender=record.sender,
                        receiver=record.receiver,
                        content=record.content,
                        extra=dict(record.extra),
                        read=record.read,
                        created_at=record.created_at,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to save {record.kind.value}") from e
        return record

    async def list_for(self, identity: Optional[str] = None, kind: RecordKind | None = None, limit: int = 200) -> list[Record]:  # type: ignore[override]
        stmt = select(Records)
        if identity is not None:
            stmt = stmt.where(or_(Records.sender == identity, Records.receiver == identity))
        if kind is not None:
            stmt = stmt.where(Records.kind == RecordKind(kind).value)
        stmt = stmt.order_by(Records.created_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        try:
            async with self.sessionmaker() as session:
                res = await session.execute(stmt)
                rows = res.scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError("failed to list records") from e
        return [_to_domain(r) for r in reversed(rows)]

    async def update_by_id(self, record_id: UUID, patch: dict[str, Any]) -> bool:  # type: ignore[override]
        unknown = set(patch) - _PATCHABLE
        if unknown:
            raise PersistenceError(f"fields not patchable: {', '.join(sorted(unknown))}")
        try:
            async with self.sessionmaker() as session:
                res = await session.execute(update(Records).where(Records.id == record_id).values(**patch))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to update record {record_id}") from e
        return bool(res.rowcount)

    async def count_matching(self, **filters: Any) -> int:  # type: ignore[override]
        unknown = set(filters) - _FILTERABLE
        if unknown:
            raise PersistenceError(f"fields not filterable: {', '.join(sorted(unknown))}")
        stmt = select(func.count()).select_from(Records)
        for name, value in filters.items():
            if isinstance(value, RecordKind):
                value = value.value
            stmt = stmt.where(getattr(Records, name) == value)
        try:
            async with self.sessionmaker() as session:
                res = await session.execute(stmt)
                return int(res.scalar_one())
        except SQLAlchemyError as e:
            raise PersistenceError("failed to count records") from e
