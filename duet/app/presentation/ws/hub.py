from __future__ import annotations

import contextlib
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, Set

from fastapi import WebSocket

from ...core.ports.services import Transport

logger = logging.getLogger(__name__)


class ConnectionHub(Transport):
    """In-process table of live sockets keyed by connection handle.

    A socket whose send fails is dropped from the table and its rooms; the
    receive loop that owns it runs the normal disconnect path afterwards.
    """

    def __init__(self, channel: str = "ws") -> None:
        self.channel = channel
        self._sockets: Dict[str, WebSocket] = {}
        self._rooms: Dict[str, Set[str]] = defaultdict(set)

    def add(self, handle: str, ws: WebSocket) -> None:
        self._sockets[handle] = ws
        logger.info("WS_REGISTER channel=%s handle=%s active=%s", self.channel, handle, len(self._sockets))

    def remove(self, handle: str) -> None:
        if self._sockets.pop(handle, None) is not None:
            logger.info("WS_UNREGISTER channel=%s handle=%s active=%s", self.channel, handle, len(self._sockets))
        for room in list(self._rooms):
            self.leave(room, handle)

    def handles(self) -> set[str]:
        return set(self._sockets)

    def __len__(self) -> int:
        return len(self._sockets)

    async def send(self, handle: str, payload: dict[str, Any]) -> bool:  # type: ignore[override]
        ws = self._sockets.get(handle)
        if ws is None:
            return False
        try:
            await ws.send_json(payload)
        except Exception as e:
            logger.warning("WS_SEND_FAIL channel=%s handle=%s type=%s err=%s", self.channel, handle, payload.get("type"), e)
            self.remove(handle)
            return False
        return True

    async def broadcast(self, payload: dict[str, Any], exclude: Iterable[str] | None = None) -> int:  # type: ignore[override]
        skip = set(exclude or ())
        sent = 0
        for handle in list(self._sockets):
            if handle in skip:
                continue
            if await self.send(handle, payload):
                sent += 1
        return sent

    def join(self, room: str, handle: str) -> None:  # type: ignore[override]
        self._rooms[room].add(handle)

    def leave(self, room: str, handle: str) -> None:  # type: ignore[override]
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(handle)
        if not members:
            self._rooms.pop(room, None)

    def members(self, room: str) -> set[str]:  # type: ignore[override]
        return set(self._rooms.get(room, ()))

    async def broadcast_room(self, room: str, payload: dict[str, Any], exclude: Iterable[str] | None = None) -> int:  # type: ignore[override]
        skip = set(exclude or ())
        sent = 0
        for handle in self.members(room):
            if handle in skip:
                continue
            if await self.send(handle, payload):
                sent += 1
        return sent

    async def close_all(self, code: int = 1001, reason: str = "server shutdown") -> None:
        for handle, ws in list(self._sockets.items()):
            with contextlib.suppress(Exception):
                await ws.close(code=code, reason=reason)
            self.remove(handle)
