from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from ...core.ports.services import Transport

logger = logging.getLogger(__name__)

# Relayed verbatim; clients conventionally send {offer}, {answer} or {candidate}.
SIGNAL_EVENTS = frozenset({"offer", "answer", "iceCandidate"})


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class Peer:
    handle: str
    room: str
    joined_at: int = field(default_factory=now_ms)


class SignalingRelay:
    """WebRTC signaling over one permanent room, without identities.

    Peers are addressed by connection handle. Offer/answer/ICE payloads are
    opaque: they are forwarded verbatim to every other room member, tagged
    with ``from``. Nothing here assumes exactly two members.
    """

    def __init__(self, transport: Transport, room: str) -> None:
        self.transport = transport
        self.room = room
        self._peers: dict[str, Peer] = {}

    async def on_connect(self, handle: str) -> None:
        self.transport.join(self.room, handle)
        self._peers[handle] = Peer(handle=handle, room=self.room)
        logger.info("SIGNAL_CONNECT peer=%s peers=%s", handle, len(self._peers))
        await self.transport.broadcast_room(
            self.room,
            {"type": "partnerOnline", "peerId": handle, "timestamp": now_ms()},
            exclude=[handle],
        )

    async def relay(self, handle: str, kind: str, data: dict[str, Any]) -> int:
        """Forward one signaling payload. Returns the number of peers reached."""
        if kind not in SIGNAL_EVENTS:
            raise ValueError(f"not a signaling event: {kind}")
        payload: dict[str, Any] = {k: v for k, v in data.items() if k != "type"}
        payload["type"] = kind
        payload["from"] = handle
        delivered = await self.transport.broadcast_room(self.room, payload, exclude=[handle])
        logger.info("SIGNAL_RELAY type=%s from=%s delivered=%s", kind, handle, delivered)
        return delivered

    async def heartbeat(self, handle: str) -> None:
        await self.transport.send(handle, {"type": "heartbeat-ack"})

    async def on_disconnect(self, handle: str) -> None:
        self._peers.pop(handle, None)
        self.transport.leave(self.room, handle)
        logger.info("SIGNAL_DISCONNECT peer=%s remaining=%s", handle, len(self._peers))
        await self.transport.broadcast_room(
            self.room,
            {"type": "partnerOffline", "peerId": handle, "timestamp": now_ms()},
            exclude=[handle],
        )

    def peer_count(self) -> int:
        return len(self._peers)

    def peers(self) -> list[Peer]:
        return list(self._peers.values())
