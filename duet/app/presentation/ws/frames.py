from __future__ import annotations

import json
from typing import Any

from fastapi import WebSocket


def parse_frame(raw: str) -> tuple[str | None, dict[str, Any]]:
    """Split a text frame ``{"type": <event>, ...}`` into (event, payload).

    Returns ``(None, {})`` for anything that is not a JSON object with a
    string ``type``.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None, {}
    if not isinstance(data, dict):
        return None, {}
    event = data.get("type")
    if not isinstance(event, str) or not event:
        return None, {}
    return event, {k: v for k, v in data.items() if k != "type"}


def malformed(message: str = "Malformed frame") -> dict[str, Any]:
    return {"type": "error", "event": None, "message": message}


async def receive_frame(websocket: WebSocket) -> str | bytes | None:
    """Next client frame, as text or bytes. ``None`` once the client has disconnected."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        return None
    text = message.get("text")
    if text is not None:
        return text
    return message.get("bytes") or b""
