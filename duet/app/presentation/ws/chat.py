from __future__ import annotations

"""WebSocket channel for presence, messages, letters, typing and feed notifications.

Each socket gets a ConnectionSession with an opaque handle. Frames are JSON
``{"type": <event>, ...}`` and are handled strictly in arrival order: the
next frame is not read until the previous handler has finished. Event
catalogue: see ``application.use_cases.events``.
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, WebSocket

from ...application.use_cases.events import EventRouter
from ...core.services.presence import PresenceRegistry
from ...core.services.session import ConnectionSession
from ...infrastructure.config import get_settings
from ...infrastructure.metrics import PRESENCE_ONLINE, ROUTED_EVENTS, WS_ACTIVE, WS_CONNECTIONS
from ..api.deps.containers import get_chat_hub, get_event_router, get_presence_registry
from .frames import malformed, parse_frame, receive_frame
from .hub import ConnectionHub

router = APIRouter()
logger = logging.getLogger(__name__)


async def _keepalive(hub: ConnectionHub, handle: str, interval: float) -> None:
    # Ends on the first failed send; the receive loop then runs the disconnect path.
    while True:
        await asyncio.sleep(interval)
        if not await hub.send(handle, {"type": "heartbeat"}):
            return


@router.websocket("/ws")
async def ws_chat(
    websocket: WebSocket,
    hub: ConnectionHub = Depends(get_chat_hub),
    events: EventRouter = Depends(get_event_router),
    registry: PresenceRegistry = Depends(get_presence_registry),
):
    settings = get_settings()
    await websocket.accept()
    session = ConnectionSession()
    hub.add(session.handle, websocket)
    WS_CONNECTIONS.labels("chat").inc()
    WS_ACTIVE.labels("chat").inc()
    await events.connect(session)

    keepalive: asyncio.Task | None = None
    if settings.WS_HEARTBEAT_SEC > 0:
        keepalive = asyncio.create_task(_keepalive(hub, session.handle, settings.WS_HEARTBEAT_SEC))

    try:
        while True:
            try:
                raw = await receive_frame(websocket)
            except Exception as e:
                logger.info("WS_RECEIVE_FAIL handle=%s err=%s", session.handle, e)
                break
            if raw is None:
                break
            if isinstance(raw, bytes):
                await hub.send(session.handle, malformed("Binary frames are not supported"))
                continue
            event, data = parse_frame(raw)
            if event is None:
                await hub.send(session.handle, malformed())
                continue
            outcome = await events.dispatch(session, event, data)
            ROUTED_EVENTS.labels(event if event in events.events else "unknown", outcome).inc()
            PRESENCE_ONLINE.set(len(registry))
    finally:
        if keepalive is not None:
            keepalive.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await keepalive
        hub.remove(session.handle)
        await events.disconnect(session)
        PRESENCE_ONLINE.set(len(registry))
        WS_ACTIVE.labels("chat").dec()
