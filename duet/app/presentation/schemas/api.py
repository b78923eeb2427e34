from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    detail: str


class PresenceOut(BaseModel):
    online: list[str]


class SignalStatusOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "running"
    service: str
    room: str
    connected_peers: int = Field(serialization_alias="connectedPeers")


class RecordOut(BaseModel):
    id: str
    kind: str
    sender: str
    receiver: Optional[str] = None
    content: str
    created_at: datetime
    read: bool
    extra: dict[str, Any] = Field(default_factory=dict)


class UnreadOut(BaseModel):
    identity: str
    count: int
