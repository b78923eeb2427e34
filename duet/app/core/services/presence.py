from __future__ import annotations

import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Who is reachable right now: ``identity -> connection handle``.

    One handle per identity; a later claim silently replaces an earlier one.
    Every method is synchronous so each lookup or mutation is a single step
    on the event loop and needs no lock. Values are routing handles for the
    server only; clients only ever see :meth:`snapshot_keys`.
    """

    def __init__(self) -> None:
        self._handles: Dict[str, str] = {}

    def set_online(self, identity: str, handle: str) -> None:
        previous = self._handles.get(identity)
        self._handles[identity] = handle
        if previous is not None and previous != handle:
            logger.info("PRESENCE_REPLACE identity=%s old=%s new=%s", identity, previous, handle)
        else:
            logger.info("PRESENCE_ONLINE identity=%s handle=%s", identity, handle)

    def set_offline(self, identity: str, handle: str) -> bool:
        """Drop *identity* only while it still points at *handle*.

        A connection that lost its identity to a newer connection must not
        evict the newer one when it disconnects.
        """
        current = self._handles.get(identity)
        if current is None:
            return False
        if current != handle:
            logger.info("PRESENCE_STALE_OFFLINE identity=%s handle=%s current=%s", identity, handle, current)
            return False
        del self._handles[identity]
        logger.info("PRESENCE_OFFLINE identity=%s handle=%s", identity, handle)
        return True

    def resolve(self, identity: str) -> Optional[str]:
        return self._handles.get(identity)

    def snapshot_keys(self) -> set[str]:
        return set(self._handles)

    def __contains__(self, identity: object) -> bool:
        return identity in self._handles

    def __len__(self) -> int:
        return len(self._handles)
