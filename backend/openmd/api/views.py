from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from openmd.api import deps
from openmd.sharing.access import ViewOutcome
from openmd.storage.sessions_store import UnlockSession
from openmd.utils.rendering import render_markdown

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))


@router.get("/", include_in_schema=False, response_class=HTMLResponse)
def index(request: Request):
    notes = deps.notes.list_notes()
    return templates.TemplateResponse(
        request,
        "index.html",
        {"note_count": len(notes), "notes": notes[:10]},
    )


@router.get("/note/{note_id}", include_in_schema=False, response_class=HTMLResponse)
def note_page(request: Request, note_id: int):
    note = deps.notes.get_note(note_id)
    if note is None:
        return templates.TemplateResponse(
            request, "share_error.html", {"title": "Note not found", "message": "This note does not exist."},
            status_code=404,
        )
    return templates.TemplateResponse(
        request,
        "note.html",
        {"note": note, "html": render_markdown(note.content), "share": None},
    )


@router.get("/s/{share_code}", include_in_schema=False, response_class=HTMLResponse)
def share_page(request: Request, share_code: str, session: UnlockSession = Depends(deps.get_viewer_session)):
    result = deps.resolver.view(share_code, session)

    if result.outcome is ViewOutcome.RENDER:
        resp = templates.TemplateResponse(
            request,
            "note.html",
            {"note": result.note, "html": render_markdown(result.note.content), "share": result.record},
        )
    elif result.outcome is ViewOutcome.CHALLENGE:
        resp = templates.TemplateResponse(request, "share_password.html", {"share_code": share_code})
    elif result.outcome is ViewOutcome.EXPIRED:
        resp = templates.TemplateResponse(
            request, "share_error.html",
            {"title": "Link expired", "message": "This share link has expired."},
            status_code=410,
        )
    else:
        resp = templates.TemplateResponse(
            request, "share_error.html",
            {"title": "Share not found", "message": "This share link does not exist."},
            status_code=404,
        )

    deps.attach_session_cookie(resp, session)
    return resp
