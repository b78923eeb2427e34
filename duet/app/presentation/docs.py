from __future__ import annotations

from typing import List


def get_openapi_tags() -> List[dict]:
    return [
        {"name": "presence", "description": "Who is online, signaling room status"},
        {"name": "messages", "description": "Stored conversation history"},
        {"name": "health", "description": "Health checks"},
    ]
