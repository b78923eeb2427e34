import os, sys

def _early_path():
    ROOT = os.path.abspath(os.path.dirname(__file__))
    PKG_ROOT = os.path.join(ROOT, 'duet')
    if PKG_ROOT not in sys.path:
        sys.path.insert(0, PKG_ROOT)
_early_path()

# Keep Settings() deterministic in tests: in-memory store, no server keepalive pings
os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('RECORD_STORE_BACKEND', 'memory')
os.environ.setdefault('WS_HEARTBEAT_SEC', '0')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

def pytest_configure():  # noqa: D401
    # Re-assert path very early in pytest lifecycle
    _early_path()
