from __future__ import annotations

from prometheus_client import Counter, Gauge

# Module-level singletons: importing twice (tests, reload) must not re-register collectors.
WS_ACTIVE = Gauge("ws_active", "Active WebSocket connections", ["channel"])
WS_CONNECTIONS = Counter("ws_connections_total", "Total WS connections opened", ["channel"])
ROUTED_EVENTS = Counter("ws_events_total", "Inbound events handled by the event router", ["event", "outcome"])
SIGNAL_EVENTS = Counter("signal_relay_events_total", "Signaling relay events", ["event"])
PRESENCE_ONLINE = Gauge("presence_online", "Identities currently present in the registry")
