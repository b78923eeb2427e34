from __future__ import annotations

"""Event router for the presence-aware messaging socket.

Inbound events (client -> server), JSON ``{"type": <event>, ...payload}``:
 - user-online {username}
 - send-message {sender, receiver, content}
 - send-letter {sender, receiver, content, title?}
 - typing / stop-typing {receiver}
 - mark-read {sender}
 - confession-posted / quote-posted / song-posted / memory-posted / meme-posted {...echo}
 - ping

Outbound (server -> client):
 - online-users {users} to everyone
 - receive-message / new-letter to the receiver, if online
 - message-sent / letter-sent or message-error / letter-error to the sender
 - user-typing / user-stop-typing {username} to the receiver
 - messages-read {reader, count} to whoever sent the messages
 - new-<kind> {from, data} to everyone except the poster
 - pong, error {event, message} to the origin

Targeted delivery is best-effort: an offline receiver is not an error, nothing
is queued, the record store holds the durable copy. Registry lookups happen
after the record store call returns, never across an ``await``.
"""

import logging
from functools import partial
from typing import Any, Awaitable, Callable, Iterable

from pydantic import ValidationError as PayloadError

from ...core.domain.models import FEED_KINDS, Record, RecordKind
from ...core.domain.values import Identity
from ...core.errors import PersistenceError, SessionClosed, ValidationError
from ...core.ports.repositories import RecordStore
from ...core.ports.services import Transport
from ...core.services.presence import PresenceRegistry
from ...core.services.session import ConnectionSession
from ..dto.events import FeedPostedInput, MarkReadInput, SendContentInput, SendLetterInput, TypingInput, UserOnlineInput

logger = logging.getLogger(__name__)

Handler = Callable[[ConnectionSession, dict[str, Any]], Awaitable[None]]


class EventRouter:
    def __init__(
        self,
        registry: PresenceRegistry,
        transport: Transport,
        records: RecordStore,
        allowed_identities: Iterable[str] = (),
    ) -> None:
        self.registry = registry
        self.transport = transport
        self.records = records
        self.allowed_identities = frozenset(allowed_identities)
        self._handlers: dict[str, Handler] = {
            "user-online": self.user_online,
            "send-message": self.send_message,
            "send-letter": self.send_letter,
            "typing": partial(self.typing_state, "user-typing"),
            "stop-typing": partial(self.typing_state, "user-stop-typing"),
            "mark-read": self.mark_read,
            "ping": self.ping,
        }
        for kind in FEED_KINDS:
            self._handlers[f"{kind.value}-posted"] = partial(self.feed_posted, kind)

    @property
    def events(self) -> frozenset[str]:
        return frozenset(self._handlers)

    # --- lifecycle ---

    async def connect(self, session: ConnectionSession) -> None:
        # Identity is unknown until user-online; nothing to register yet.
        logger.info("WS_CONNECT handle=%s", session.handle)

    async def disconnect(self, session: ConnectionSession) -> None:
        identity = session.claimed_identity
        session.close()
        if identity is not None:
            self.registry.set_offline(identity, session.handle)
        logger.info("WS_DISCONNECT handle=%s identity=%s", session.handle, identity)
        # Re-broadcast even when nothing changed (stale handle or never identified).
        await self.broadcast_presence()

    async def dispatch(self, session: ConnectionSession, event: str, data: dict[str, Any]) -> str:
        """Run the handler for *event*. Returns the outcome label: ok | error | unknown.

        Failures are reported to the originating connection only and never
        propagate: a bad event fails itself, not the connection.
        """
        handler = self._handlers.get(event)
        if handler is None:
            await self._error(session, event, "Unknown event")
            return "unknown"
        try:
            await handler(session, data)
        except PayloadError as e:
            await self._error(session, event, f"Invalid payload: {e.error_count()} error(s)")
            return "error"
        except (ValidationError, SessionClosed) as e:
            await self._error(session, event, str(e))
            return "error"
        except Exception:
            logger.exception("EVENT_ERROR handle=%s event=%s", session.handle, event)
            await self._error(session, event, "Internal error")
            return "error"
        return "ok"

    # --- presence ---

    async def user_online(self, session: ConnectionSession, data: dict[str, Any]) -> None:
        inp = UserOnlineInput.model_validate(data)
        identity = str(Identity(inp.username))
        if self.allowed_identities and identity not in self.allowed_identities:
            raise ValidationError(f"Unknown identity '{identity}'")
        previous = session.claimed_identity
        session.identify(identity)
        if previous is not None and previous != identity:
            # A connection holds one identity; release the one it is leaving.
            self.registry.set_offline(previous, session.handle)
        self.registry.set_online(identity, session.handle)
        await self.broadcast_presence()

    async def broadcast_presence(self) -> None:
        users = sorted(self.registry.snapshot_keys())
        await self.transport.broadcast({"type": "online-users", "users": users})

    # --- content ---

    async def send_message(self, session: ConnectionSession, data: dict[str, Any]) -> None:
        inp = SendContentInput.model_validate(data)
        await self._create_and_deliver(
            session,
            Record.create(RecordKind.message.value, self._sender(session, inp.sender), inp.content, receiver=inp.receiver),
            key="message",
            delivered="receive-message",
            confirmed="message-sent",
            failed="message-error",
        )

    async def send_letter(self, session: ConnectionSession, data: dict[str, Any]) -> None:
        inp = SendLetterInput.model_validate(data)
        extra = {"title": inp.title} if inp.title else None
        await self._create_and_deliver(
            session,
            Record.create(RecordKind.letter.value, self._sender(session, inp.sender), inp.content, receiver=inp.receiver, extra=extra),
            key="letter",
            delivered="new-letter",
            confirmed="letter-sent",
            failed="letter-error",
        )

    async def _create_and_deliver(
        self,
        session: ConnectionSession,
        record: Record,
        *,
        key: str,
        delivered: str,
        confirmed: str,
        failed: str,
    ) -> None:
        try:
            stored = await self.records.create(record)
        except PersistenceError as e:
            logger.warning("RECORD_STORE_FAIL handle=%s kind=%s err=%s", session.handle, record.kind.value, e)
            await self.transport.send(session.handle, {"type": failed, "error": str(e) or "Failed to save"})
            return
        payload = stored.to_payload()
        if stored.receiver is not None:
            await self.deliver(stored.receiver, {"type": delivered, key: payload})
        await self.transport.send(session.handle, {"type": confirmed, key: payload})

    async def deliver(self, identity: str, payload: dict[str, Any]) -> bool:
        """Targeted, best-effort delivery. False when *identity* is offline."""
        handle = self.registry.resolve(identity)
        if handle is None:
            logger.debug("DELIVER_DROP identity=%s type=%s reason=offline", identity, payload.get("type"))
            return False
        return await self.transport.send(handle, payload)

    # --- typing / receipts ---

    async def typing_state(self, outbound: str, session: ConnectionSession, data: dict[str, Any]) -> None:
        inp = TypingInput.model_validate(data)
        identity = self._require_identity(session)
        await self.deliver(inp.receiver, {"type": outbound, "username": identity})

    async def mark_read(self, session: ConnectionSession, data: dict[str, Any]) -> None:
        inp = MarkReadInput.model_validate(data)
        reader = self._require_identity(session)
        count = 0
        try:
            for r in await self.records.list_for(reader, kind=RecordKind.message, limit=0):
                if r.sender == inp.sender and r.receiver == reader and not r.read:
                    if await self.records.update_by_id(r.id, {"read": True}):
                        count += 1
        except PersistenceError as e:
            logger.warning("RECORD_STORE_FAIL handle=%s op=mark-read err=%s", session.handle, e)
            await self._error(session, "mark-read", str(e) or "Failed to update")
            return
        await self.deliver(inp.sender, {"type": "messages-read", "reader": reader, "count": count})

    # --- public feed ---

    async def feed_posted(self, kind: RecordKind, session: ConnectionSession, data: dict[str, Any]) -> None:
        inp = FeedPostedInput.model_validate(data)
        await self.transport.broadcast(
            {"type": f"new-{kind.value}", "from": session.claimed_identity, "data": inp.echo()},
            exclude=[session.handle],
        )

    async def ping(self, session: ConnectionSession, data: dict[str, Any]) -> None:
        await self.transport.send(session.handle, {"type": "pong"})

    # --- helpers ---

    def _require_identity(self, session: ConnectionSession) -> str:
        if not session.is_identified or session.claimed_identity is None:
            raise ValidationError("Announce identity with user-online first")
        return session.claimed_identity

    def _sender(self, session: ConnectionSession, sender: str) -> str:
        identity = self._require_identity(session)
        if sender != identity:
            raise ValidationError("Sender does not match connection identity")
        return identity

    async def _error(self, session: ConnectionSession, event: str, message: str) -> None:
        logger.info("EVENT_REJECTED handle=%s event=%s reason=%s", session.handle, event, message)
        await self.transport.send(session.handle, {"type": "error", "event": event, "message": message})
