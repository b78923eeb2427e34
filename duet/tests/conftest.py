import os, sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Same env defaults as the root conftest, for runs from inside duet/
os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('RECORD_STORE_BACKEND', 'memory')
os.environ.setdefault('WS_HEARTBEAT_SEC', '0')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from fakes import FakeTransport  # noqa: E402
from app.core.services.presence import PresenceRegistry  # noqa: E402
from app.infrastructure.config import get_settings  # noqa: E402
from app.infrastructure.db.repositories.memory import InMemoryRecordStore  # noqa: E402
from app.presentation.api.deps.containers import reset_containers  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_state():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    reset_containers()
    yield
    reset_containers()
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def registry() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture()
def records() -> InMemoryRecordStore:
    return InMemoryRecordStore()
