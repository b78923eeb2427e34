from __future__ import annotations

"""WebSocket WebRTC signaling channel: one permanent room, no identities.

Incoming (client -> server):
 - {"type":"offer", ...}, {"type":"answer", ...}, {"type":"iceCandidate", ...}  relayed verbatim to the other members
 - {"type":"heartbeat"}

Outgoing (server -> client):
 - partnerOnline / partnerOffline {peerId, timestamp}
 - offer / answer / iceCandidate {..., from}
 - heartbeat-ack
 - error {event, message}
"""

import logging
import uuid

from fastapi import APIRouter, Depends, WebSocket

from ...application.use_cases.signals import SIGNAL_EVENTS, SignalingRelay
from ...infrastructure.metrics import SIGNAL_EVENTS as SIGNAL_EVENTS_TOTAL, WS_ACTIVE, WS_CONNECTIONS
from ..api.deps.containers import get_signal_hub, get_signaling_relay
from .frames import malformed, parse_frame, receive_frame
from .hub import ConnectionHub

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws/signal")
async def ws_signal(
    websocket: WebSocket,
    hub: ConnectionHub = Depends(get_signal_hub),
    relay: SignalingRelay = Depends(get_signaling_relay),
):
    await websocket.accept()
    handle = uuid.uuid4().hex
    hub.add(handle, websocket)
    WS_CONNECTIONS.labels("signal").inc()
    WS_ACTIVE.labels("signal").inc()
    await relay.on_connect(handle)
    SIGNAL_EVENTS_TOTAL.labels("connect").inc()

    try:
        while True:
            try:
                raw = await receive_frame(websocket)
            except Exception as e:
                logger.info("WS_RECEIVE_FAIL channel=signal handle=%s err=%s", handle, e)
                break
            if raw is None:
                break
            if isinstance(raw, bytes):
                await hub.send(handle, malformed("Binary frames are not supported"))
                continue
            event, data = parse_frame(raw)
            if event is None:
                await hub.send(handle, malformed())
                continue
            if event in SIGNAL_EVENTS:
                await relay.relay(handle, event, data)
            elif event == "heartbeat":
                await relay.heartbeat(handle)
            else:
                await hub.send(handle, {"type": "error", "event": event, "message": "Unknown event"})
                continue
            SIGNAL_EVENTS_TOTAL.labels(event).inc()
    finally:
        hub.remove(handle)
        await relay.on_disconnect(handle)
        SIGNAL_EVENTS_TOTAL.labels("disconnect").inc()
        WS_ACTIVE.labels("signal").dec()
