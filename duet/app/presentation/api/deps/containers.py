from __future__ import annotations

from functools import lru_cache

from ....application.use_cases.events import EventRouter
from ....application.use_cases.signals import SignalingRelay
from ....core.ports.repositories import RecordStore
from ....core.services.presence import PresenceRegistry
from ....infrastructure.config import get_settings
from ....infrastructure.db.repositories.memory import InMemoryRecordStore
from ....infrastructure.db.repositories.records import SqlRecordStore
from ....infrastructure.db.session import build_engine, build_sessionmaker
from ...ws.hub import ConnectionHub


# Process-wide singletons: presence is ephemeral and lives exactly as long as the process.

@lru_cache(maxsize=1)
def get_presence_registry() -> PresenceRegistry:
    return PresenceRegistry()


@lru_cache(maxsize=1)
def get_chat_hub() -> ConnectionHub:
    return ConnectionHub(channel="chat")


@lru_cache(maxsize=1)
def get_signal_hub() -> ConnectionHub:
    return ConnectionHub(channel="signal")


@lru_cache(maxsize=1)
def get_db_engine():
    return build_engine(get_settings().DATABASE_URL)


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    s = get_settings()
    # in-memory store for local/dev/testing; switch to SQL via env
    if s.RECORD_STORE_BACKEND.lower() == "sql":
        return SqlRecordStore(build_sessionmaker(get_db_engine()))
    return InMemoryRecordStore()


@lru_cache(maxsize=1)
def get_event_router() -> EventRouter:
    s = get_settings()
    return EventRouter(
        registry=get_presence_registry(),
        transport=get_chat_hub(),
        records=get_record_store(),
        allowed_identities=s.ALLOWED_IDENTITIES,
    )


@lru_cache(maxsize=1)
def get_signaling_relay() -> SignalingRelay:
    return SignalingRelay(transport=get_signal_hub(), room=get_settings().SIGNAL_ROOM)


def reset_containers() -> None:
    """Drop every cached singleton (tests, settings reload)."""
    for fn in (
        get_signaling_relay,
        get_event_router,
        get_record_store,
        get_db_engine,
        get_signal_hub,
        get_chat_hub,
        get_presence_registry,
    ):
        fn.cache_clear()
