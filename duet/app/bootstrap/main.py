from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from ..infrastructure.config import get_settings
from ..infrastructure.db.session import create_schema
from ..infrastructure.logging import configure_logging
from ..presentation.api.deps.containers import get_chat_hub, get_db_engine, get_signal_hub
from ..presentation.api.routers import messages as messages_router
from ..presentation.api.routers import presence as presence_router
from ..presentation.docs import get_openapi_tags
from ..presentation.errors import setup_error_handlers
from ..presentation.ws import chat as ws_chat
from ..presentation.ws import signaling as ws_signaling

logger = logging.getLogger("app.bootstrap")

REQUEST_COUNT = Counter("app_requests_total", "Total HTTP requests", ["method", "path", "status"])
REQ_LATENCY = Histogram("app_request_latency_ms", "Request latency in ms", ["method", "path"])


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.RECORD_STORE_BACKEND.lower() == "sql":
        await create_schema(get_db_engine())
    logger.info("STARTUP app=%s env=%s signal_room=%s", settings.APP_NAME, settings.APP_ENV, settings.SIGNAL_ROOM)
    yield
    # Graceful shutdown: close every live socket before the listener goes away.
    logger.info("SHUTDOWN closing chat=%s signal=%s", len(get_chat_hub()), len(get_signal_hub()))
    await get_chat_hub().close_all()
    await get_signal_hub().close_all()
    if settings.RECORD_STORE_BACKEND.lower() == "sql":
        await get_db_engine().dispose()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL.upper())

    is_docs_enabled = settings.APP_ENV in {"dev", "test"}
    app = FastAPI(
        title=settings.APP_NAME,
        description="Presence-aware messaging and WebRTC signaling over WebSocket",
        version="0.1.0",
        docs_url="/docs" if is_docs_enabled else None,
        redoc_url="/redoc" if is_docs_enabled else None,
        openapi_url="/openapi.json" if is_docs_enabled else None,
        openapi_tags=get_openapi_tags(),
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_error_handlers(app)

    @app.middleware("http")
    async def request_id_timing_middleware(request, call_next):  # type: ignore[override]
        req_id = str(uuid.uuid4())
        start = time.perf_counter()
        request.state.request_id = req_id  # type: ignore[attr-defined]
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000.0
        path_label = request.url.path
        logging.getLogger("app.request").info(
            "request",
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": path_label,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        REQUEST_COUNT.labels(request.method, path_label, response.status_code).inc()
        REQ_LATENCY.labels(request.method, path_label).observe(duration_ms)
        response.headers.setdefault("X-Request-ID", req_id)
        response.headers.setdefault("Server-Timing", f"app;dur={duration_ms:.2f}")
        return response

    # Routers
    app.include_router(presence_router.router)
    app.include_router(messages_router.router)

    # WS
    app.include_router(ws_chat.router)
    app.include_router(ws_signaling.router)

    @app.get("/healthz", tags=["health"])
    async def healthz():
        return {"status": "ok"}

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app
