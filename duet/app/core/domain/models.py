from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from .values import Content, Identity


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordKind(str, Enum):
    message = "message"
    letter = "letter"
    confession = "confession"
    quote = "quote"
    song = "song"
    memory = "memory"
    meme = "meme"


# Public-feed kinds have no single receiver; their live notifications go to everyone but the poster.
FEED_KINDS = frozenset({RecordKind.confession, RecordKind.quote, RecordKind.song, RecordKind.memory, RecordKind.meme})


@dataclass(slots=True)
class Record:
    id: UUID
    kind: RecordKind
    sender: str
    content: str
    created_at: datetime
    receiver: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)
    read: bool = False

    @staticmethod
    def create(kind: str, sender: str, content: str, receiver: str | None = None, extra: dict[str, Any] | None = None) -> "Record":
        return Record(
            id=uuid4(),
            kind=RecordKind(kind),
            sender=str(Identity(sender)),
            content=str(Content(content)),
            created_at=utcnow(),
            receiver=str(Identity(receiver)) if receiver is not None else None,
            extra=dict(extra or {}),
        )

    def to_payload(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": str(self.id),
            "kind": self.kind.value,
            "sender": self.sender,
            "receiver": self.receiver,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
            "read": self.read,
        }
        if self.extra:
            data.update({k: v for k, v in self.extra.items() if k not in data})
        return data
