from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ai2sql.auth.permissions import check_project, get_current_user, project_viewer
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import Project, User, UserNote
from ai2sql.schemas import NoteIn, NoteOut
from ai2sql.utils.validators import require_text

router = APIRouter()


def get_own_note(note_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> UserNote:
    note = crud.get_note(db, note_id)
    # Notes are private: someone else's note is reported as missing
    if note is None or note.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    check_project(db, user, note.project_id)
    return note


@router.get("/projects/{project_id}/notes", response_model=List[NoteOut])
def list_notes(
    project: Project = Depends(project_viewer),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return crud.list_notes(db, project.id, user.id)


@router.post("/projects/{project_id}/notes", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
def create_note(
    data: NoteIn,
    project: Project = Depends(project_viewer),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    title = require_text(data.title, "Title")
    content = require_text(data.content, "Content")
    return crud.create_note(db, title, content, user_id=user.id, project_id=project.id)


@router.get("/notes/{note_id}", response_model=NoteOut)
def get_note(note: UserNote = Depends(get_own_note)):
    return note


@router.put("/notes/{note_id}", response_model=NoteOut)
def update_note(data: NoteIn, note: UserNote = Depends(get_own_note), db: Session = Depends(get_db)):
    return crud.update_note(db, note, require_text(data.title, "Title"), require_text(data.content, "Content"))


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(note: UserNote = Depends(get_own_note), db: Session = Depends(get_db)):
    crud.delete_note(db, note)
