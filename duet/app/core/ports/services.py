from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable


class Transport(ABC):
    """Outbound side of the duplex connections, addressed by opaque handles."""

    @abstractmethod
    async def send(self, handle: str, payload: dict[str, Any]) -> bool:
        """Deliver to one handle. Returns False if the handle is gone; never raises."""
        raise NotImplementedError

    @abstractmethod
    async def broadcast(self, payload: dict[str, Any], exclude: Iterable[str] | None = None) -> int:
        """Deliver to every connected handle except *exclude*. Returns delivered count."""
        raise NotImplementedError

    @abstractmethod
    def join(self, room: str, handle: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def leave(self, room: str, handle: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def members(self, room: str) -> set[str]:
        raise NotImplementedError

    @abstractmethod
    async def broadcast_room(self, room: str, payload: dict[str, Any], exclude: Iterable[str] | None = None) -> int:
        raise NotImplementedError
