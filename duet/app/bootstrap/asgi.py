from __future__ import annotations

import uvicorn

from ..infrastructure.config import get_settings
from .main import create_app

app = create_app()


def run() -> None:
    # uvicorn handles SIGTERM/SIGINT and runs the lifespan shutdown (socket close) before exiting.
    settings = get_settings()
    uvicorn.run("app.bootstrap.asgi:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
