from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ....core.domain.models import Record, RecordKind
from ....core.domain.values import Identity
from ....core.ports.repositories import RecordStore
from ....infrastructure.config import get_settings
from ...schemas.api import ErrorResponse, RecordOut, UnreadOut
from ..deps.containers import get_record_store

settings = get_settings()
api_prefix = settings.API_PREFIX.rstrip("/")
router = APIRouter(prefix=f"{api_prefix}/messages", tags=["messages"], responses={400: {"model": ErrorResponse}})


def _to_out(r: Record) -> RecordOut:
    return RecordOut(
        id=str(r.id),
        kind=r.kind.value,
        sender=r.sender,
        receiver=r.receiver,
        content=r.content,
        created_at=r.created_at,
        read=r.read,
        extra=r.extra,
    )


# Declared before /{user_a}/{user_b} so "unread" is not taken for an identity.
@router.get("/unread/{identity}", response_model=UnreadOut)
async def unread_count(identity: str, records: RecordStore = Depends(get_record_store)) -> UnreadOut:
    ident = str(Identity(identity))
    count = await records.count_matching(kind=RecordKind.message, receiver=ident, read=False)
    return UnreadOut(identity=ident, count=count)


@router.get("/{user_a}/{user_b}", response_model=list[RecordOut])
async def conversation(
    user_a: str,
    user_b: str,
    limit: int = Query(100, ge=1, le=500),
    records: RecordStore = Depends(get_record_store),
) -> list[RecordOut]:
    a, b = str(Identity(user_a)), str(Identity(user_b))
    rows = await records.list_for(a, kind=RecordKind.message, limit=0)
    pair = [r for r in rows if {r.sender, r.receiver} == {a, b}]
    return [_to_out(r) for r in pair[-limit:]]
