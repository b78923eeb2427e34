from __future__ import annotations

from fastapi import APIRouter, Depends

from ....application.use_cases.signals import SignalingRelay
from ....core.services.presence import PresenceRegistry
from ....infrastructure.config import get_settings
from ...schemas.api import PresenceOut, SignalStatusOut
from ..deps.containers import get_presence_registry, get_signaling_relay

settings = get_settings()
api_prefix = settings.API_PREFIX.rstrip("/")
router = APIRouter(prefix=api_prefix, tags=["presence"])


@router.get("/presence", response_model=PresenceOut)
async def online_identities(registry: PresenceRegistry = Depends(get_presence_registry)) -> PresenceOut:
    return PresenceOut(online=sorted(registry.snapshot_keys()))


@router.get("/signal/status", response_model=SignalStatusOut)
async def signal_status(relay: SignalingRelay = Depends(get_signaling_relay)) -> SignalStatusOut:
    return SignalStatusOut(
        service=settings.SIGNAL_SERVICE_NAME,
        room=relay.room,
        connected_peers=relay.peer_count(),
    )
