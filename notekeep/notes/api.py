# notekeep/notes/api.py
import asyncio

from fastapi import APIRouter, Depends, HTTPException
from starlette.responses import StreamingResponse

from notekeep.shared import sse
from notekeep.shared.auth import get_user
from notekeep.shared.http import ok
from notekeep.auth.models import Identity
from notekeep.notes.gateway import MutationGateway
from notekeep.notes.schemas import ColorIn, NoteFields, NoteOut, Snapshot
from notekeep.notes.service import get_gateway, get_subscriber
from notekeep.notes.store import NoteNotFound
from notekeep.notes.subscriber import CollectionSubscriber

router = APIRouter(prefix="/notes", tags=["Notes"])

@router.get("", response_model=Snapshot)
def list_notes(user: Identity = Depends(get_user), subscriber: CollectionSubscriber = Depends(get_subscriber)):
    return {"items": subscriber.snapshot(user.id)}

@router.get("/stream")
async def stream_notes(user: Identity = Depends(get_user), subscriber: CollectionSubscriber = Depends(get_subscriber)):
    q: asyncio.Queue = asyncio.Queue()

    def push(notes: list[NoteOut]):
        q.put_nowait([n.model_dump() for n in notes])

    unsubscribe = subscriber.subscribe(user.id, push)
    return StreamingResponse(sse.sse_stream(q, "snapshot", unsubscribe), media_type="text/event-stream")

@router.post("", status_code=202)
async def create_note(payload: NoteFields, user: Identity = Depends(get_user), gateway: MutationGateway = Depends(get_gateway)):
    note_id = await gateway.create(user.id, payload)
    return ok({"id": note_id})

@router.put("/{note_id}", status_code=202)
async def update_note(note_id: str, payload: NoteFields, user: Identity = Depends(get_user), gateway: MutationGateway = Depends(get_gateway)):
    try:
        await gateway.update(user.id, note_id, payload)
    except NoteNotFound:
        raise HTTPException(404, "Note not found")
    return ok({"id": note_id})

@router.patch("/{note_id}/color", status_code=202)
async def update_note_color(note_id: str, payload: ColorIn, user: Identity = Depends(get_user), gateway: MutationGateway = Depends(get_gateway)):
    try:
        await gateway.update_color(user.id, note_id, payload.color)
    except NoteNotFound:
        raise HTTPException(404, "Note not found")
    return ok({"id": note_id, "color": payload.color})

@router.delete("/{note_id}", status_code=204)
async def delete_note(note_id: str, user: Identity = Depends(get_user), gateway: MutationGateway = Depends(get_gateway)):
    if not await gateway.delete(user.id, note_id):
        raise HTTPException(404, "Note not found")
    return
