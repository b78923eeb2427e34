from __future__ import annotations

from asyncio import Lock
from dataclasses import replace
from typing import Any, Dict, Optional
from uuid import UUID

from ....core.domain.models import Record, RecordKind
from ....core.errors import PersistenceError
from ....core.ports.repositories import RecordStore

_PATCHABLE = {"content", "read", "extra"}


class InMemoryRecordStore(RecordStore):
    """Process-local record store for dev/test; lost on restart."""

    def __init__(self) -> None:
        self._records: Dict[UUID, Record] = {}
        self._lock = Lock()

    async def create(self, record: Record) -> Record:  # type: ignore[override]
        async with self._lock:
            if record.id in self._records:
                raise PersistenceError(f"record {record.id} already exists")
            self._records[record.id] = record
        return record

    async def list_for(self, identity: Optional[str] = None, kind: RecordKind | None = None, limit: int = 200) -> list[Record]:  # type: ignore[override]
        async with self._lock:
            rows = [
                r for r in self._records.values()
                if (identity is None or identity in (r.sender, r.receiver)) and (kind is None or r.kind == kind)
            ]
        rows.sort(key=lambda r: r.created_at)
        return rows[-limit:] if limit else rows

    async def update_by_id(self, record_id: UUID, patch: dict[str, Any]) -> bool:  # type: ignore[override]
        unknown = set(patch) - _PATCHABLE
        if unknown:
            raise PersistenceError(f"fields not patchable: {', '.join(sorted(unknown))}")
        async with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return False
            self._records[record_id] = replace(current, **patch)
        return True

    async def count_matching(self, **filters: Any) -> int:  # type: ignore[override]
        async with self._lock:
            return sum(1 for r in self._records.values() if all(getattr(r, k, None) == v for k, v in filters.items()))
