from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from ..domain.models import utcnow
from ..errors import SessionClosed


class SessionState(str, Enum):
    unidentified = "unidentified"
    identified = "identified"
    closed = "closed"


@dataclass(slots=True)
class ConnectionSession:
    """Per-connection state, owned by the transport for the socket's lifetime."""

    handle: str = field(default_factory=lambda: uuid4().hex)
    claimed_identity: Optional[str] = None
    state: SessionState = SessionState.unidentified
    connected_at: datetime = field(default_factory=utcnow)

    @property
    def is_identified(self) -> bool:
        return self.state == SessionState.identified

    @property
    def is_closed(self) -> bool:
        return self.state == SessionState.closed

    def identify(self, identity: str) -> None:
        # Re-announcing while identified is allowed; there is no way back from closed.
        if self.state == SessionState.closed:
            raise SessionClosed(f"session {self.handle} is closed")
        self.claimed_identity = identity
        self.state = SessionState.identified

    def close(self) -> None:
        self.state = SessionState.closed
