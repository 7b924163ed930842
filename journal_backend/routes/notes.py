from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from journal_backend import repositories
from journal_backend.auth import require_user_email
from journal_backend.errors import NotFoundError, ValidationError, ok
from journal_backend.schemas import NotePayload

router = APIRouter(prefix="/api/notes")


def _clean(payload: NotePayload) -> tuple[str, str]:
    title, content = payload.title.strip(), payload.content.strip()
    if not title or not content:
        raise ValidationError("Both title and content are required")
    return title, content


@router.get("")
async def list_notes(
    sort: str = Query("newest", pattern="^(newest|oldest|az|za)$"),
    user_email: str = Depends(require_user_email),
):
    notes = await repositories.list_notes(user_email, sort=sort)
    return ok(notes, count=len(notes))


@router.post("")
async def create_note(payload: NotePayload, user_email: str = Depends(require_user_email)):
    title, content = _clean(payload)
    return ok(await repositories.create_note(user_email, title, content))


@router.get("/{note_id}")
async def get_note(note_id: str, user_email: str = Depends(require_user_email)):
    record = await repositories.get_note(user_email, note_id)
    if not record:
        raise NotFoundError("Note not found", {"id": note_id})
    return ok(record)


@router.put("/{note_id}")
async def update_note(note_id: str, payload: NotePayload, user_email: str = Depends(require_user_email)):
    title, content = _clean(payload)
    record = await repositories.update_note(user_email, note_id, title, content)
    if not record:
        raise NotFoundError("Note not found", {"id": note_id})
    return ok(record)


@router.delete("/{note_id}")
async def delete_note(note_id: str, user_email: str = Depends(require_user_email)):
    if not await repositories.delete_note(user_email, note_id):
        raise NotFoundError("Note not found", {"id": note_id})
    return ok({"deleted": note_id})
