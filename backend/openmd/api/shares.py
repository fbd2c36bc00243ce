from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from openmd.api import deps
from openmd.errors import AuthDenied, ShareNotFound
from openmd.models.shares import ShareCreateIn, ShareCreateOut, ShareMetaOut, ShareUnlockIn
from openmd.storage.event_log import Event
from openmd.storage.sessions_store import UnlockSession
from openmd.utils.jwt_auth import get_optional_user

router = APIRouter(prefix="/api/share", tags=["shares"])


@router.post("", response_model=ShareCreateOut)
def create_share(
    payload: ShareCreateIn,
    request: Request,
    user_id: Optional[str] = Depends(get_optional_user),
) -> ShareCreateOut:
    if payload.noteId is None:
        raise HTTPException(status_code=400, detail="noteId is required")

    # only the owner may share an owned note; same 404 as a missing one
    note = deps.notes.get_note(payload.noteId)
    if note is None or (note.owner_user_id and note.owner_user_id != user_id):
        raise HTTPException(status_code=404, detail="Note not found")

    try:
        s = deps.registry.create(
            note_id=payload.noteId,
            password=payload.password,
            expires_in_hours=payload.expiresInHours,
        )
    except ShareNotFound:
        # deleted between the check and the insert
        raise HTTPException(status_code=404, detail="Note not found")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid share data")

    deps.event_log.emit(Event(
        event_type="SHARE_CREATED",
        user_id=user_id,
        note_id=s.note_id,
        share_id=s.id,
        meta={"has_password": s.has_password, "expires_at": s.expires_at},
    ))

    return ShareCreateOut(
        id=s.id,
        shareCode=s.share_code,
        shareUrl=f"{deps.base_url(request)}/s/{s.share_code}",
    )


@router.get("/{share_code}", response_model=ShareMetaOut)
def get_share(share_code: str) -> ShareMetaOut:
    # metadata only: never counts a view
    try:
        s = deps.registry.find_by_code(share_code)
    except ShareNotFound:
        raise HTTPException(status_code=404, detail="Share not found")

    if s.is_expired():
        raise HTTPException(status_code=410, detail="Share expired")

    return ShareMetaOut(
        id=s.id,
        shareCode=s.share_code,
        hasPassword=s.has_password,
        expiresAt=s.expires_at,
        views=s.views,
        createdAt=s.created_at,
    )


@router.post("/{share_code}/unlock")
def unlock_share(
    share_code: str,
    payload: ShareUnlockIn,
    session: UnlockSession = Depends(deps.get_viewer_session),
) -> JSONResponse:
    try:
        session = deps.resolver.unlock(share_code, payload.password, session)
    except ShareNotFound:
        resp = JSONResponse(status_code=404, content={"detail": "Share not found"})
    except AuthDenied:
        resp = JSONResponse(status_code=401, content={"detail": "Incorrect password"})
    else:
        resp = JSONResponse(content={"success": True})

    # set on every outcome; only a successful unlock has written the session
    deps.attach_session_cookie(resp, session)
    return resp
