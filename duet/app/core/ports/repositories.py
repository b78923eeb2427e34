from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from ..domain.models import Record, RecordKind


class RecordStore(ABC):
    """Durable copy of every content record.

    Live delivery over the socket is only a notification; this store is the
    source of truth. Implementations raise ``PersistenceError`` on failure.
    """

    @abstractmethod
    async def create(self, record: Record) -> Record:
        raise NotImplementedError

    @abstractmethod
    async def list_for(self, identity: Optional[str] = None, kind: RecordKind | None = None, limit: int = 200) -> list[Record]:
        """Records sent or received by *identity* (all when None), oldest first; newest *limit* kept, 0 = no limit."""
        raise NotImplementedError

    @abstractmethod
    async def update_by_id(self, record_id: UUID, patch: dict[str, Any]) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def count_matching(self, **filters: Any) -> int:
        """Count records whose attributes equal every given filter value."""
        raise NotImplementedError
