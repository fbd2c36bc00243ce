from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from openmd.api import deps
from openmd.models.notes import NoteCreate, NoteOut, NoteUpdate
from openmd.storage.event_log import Event
from openmd.storage.notes_store import Note
from openmd.utils.jwt_auth import get_optional_user

router = APIRouter(prefix="/api/notes", tags=["notes"])


def _note_out(note: Note, url: Optional[str] = None) -> NoteOut:
    return NoteOut(
        id=note.id,
        title=note.title,
        content=note.content,
        metadata=note.metadata,
        createdAt=note.created_at,
        updatedAt=note.updated_at,
        ownerId=note.owner_user_id,
        url=url,
    )


def _note_for_writer(note_id: int, user_id: Optional[str]) -> Note:
    # owned notes are invisible to everyone but the owner (no leak)
    note = deps.notes.get_note(note_id)
    if note is None or (note.owner_user_id and note.owner_user_id != user_id):
        raise HTTPException(status_code=404, detail="Note not found")
    return note


@router.post("", response_model=NoteOut, status_code=201)
def create_note(payload: NoteCreate, request: Request, user_id: Optional[str] = Depends(get_optional_user)) -> NoteOut:
    if not payload.content:
        raise HTTPException(status_code=400, detail="Content is required")

    note = deps.notes.create_note(
        title=payload.title or "Untitled",
        content=payload.content,
        metadata=payload.metadata,
        owner_user_id=user_id,
    )

    deps.event_log.emit(Event(event_type="NOTE_CREATED", user_id=user_id, note_id=note.id))

    return _note_out(note, url=f"{deps.base_url(request)}/note/{note.id}")


@router.get("", response_model=list[NoteOut])
def list_notes() -> list[NoteOut]:
    return [_note_out(n) for n in deps.notes.list_notes()]


@router.get("/{note_id}", response_model=NoteOut)
def get_note(note_id: int) -> NoteOut:
    note = deps.notes.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return _note_out(note)


@router.put("/{note_id}", response_model=NoteOut)
def update_note(note_id: int, payload: NoteUpdate, user_id: Optional[str] = Depends(get_optional_user)) -> NoteOut:
    _note_for_writer(note_id, user_id)

    updated = deps.notes.update_note(
        note_id,
        title=payload.title,
        content=payload.content,
        metadata=payload.metadata,
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="Note not found")

    deps.event_log.emit(Event(event_type="NOTE_UPDATED", user_id=user_id, note_id=note_id))
    return _note_out(updated)


@router.delete("/{note_id}", status_code=204)
def delete_note(note_id: int, user_id: Optional[str] = Depends(get_optional_user)) -> Response:
    _note_for_writer(note_id, user_id)
    if not deps.notes.delete_note(note_id):
        raise HTTPException(status_code=404, detail="Note not found")

    deps.event_log.emit(Event(event_type="NOTE_DELETED", user_id=user_id, note_id=note_id))
    return Response(status_code=204)
