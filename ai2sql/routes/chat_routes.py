from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import logging

from ai2sql.auth.permissions import get_current_user, project_access, project_viewer
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import Chat, Project, User
from ai2sql.schemas import ChatCreate, ChatOut, ChatRename, MessageCreate, MessageOut
from ai2sql.services import access
from ai2sql.services.sql_generator import generate_sql
from ai2sql.utils.validators import require_text

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_CHAT_NAME = "New chat"


def get_owned_chat(chat_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Chat:
    """A chat the caller owns, or any chat of a project the caller manages."""
    chat = crud.get_chat(db, chat_id)
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    resolved = project_access(db, user, chat.project_id)
    if not resolved.can_view:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this project")
    if chat.user_id != user.id and not access.has_role(resolved, "admin"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This chat belongs to another user")
    return chat


@router.get("/projects/{project_id}/chats", response_model=List[ChatOut])
def list_chats(
    all_chats: bool = Query(False, alias="all"),
    project: Project = Depends(project_viewer),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's chats; project admins may pass ?all=true to see every member's chats."""
    if all_chats:
        if not access.can_manage_project(user, project.id, crud.list_members(db, project_id=project.id)):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only project admins can list all chats")
        return crud.list_chats(db, project.id)
    return crud.list_chats(db, project.id, user_id=user.id)


@router.post("/projects/{project_id}/chats", response_model=ChatOut, status_code=status.HTTP_201_CREATED)
def create_chat(
    data: ChatCreate,
    project: Project = Depends(project_viewer),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    name = (data.name or "").strip() or DEFAULT_CHAT_NAME
    return crud.create_chat(db, name, user_id=user.id, project_id=project.id)


@router.get("/chats/{chat_id}", response_model=ChatOut)
def get_chat(chat: Chat = Depends(get_owned_chat)):
    return chat


@router.patch("/chats/{chat_id}", response_model=ChatOut)
def rename_chat(data: ChatRename, chat: Chat = Depends(get_owned_chat), db: Session = Depends(get_db)):
    return crud.rename_chat(db, chat, require_text(data.name, "Chat name"))


@router.delete("/chats/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_chat(chat: Chat = Depends(get_owned_chat), db: Session = Depends(get_db)):
    crud.delete_chat(db, chat)


@router.post("/chats/{chat_id}/messages", response_model=List[MessageOut], status_code=status.HTTP_201_CREATED)
def send_message(data: MessageCreate, chat: Chat = Depends(get_owned_chat), db: Session = Depends(get_db)):
    """Stores the question and the generated answer; returns both, oldest first."""
    content = require_text(data.content, "Message")
    question = crud.add_message(db, chat, "user", content)
    answer = generate_sql(content)
    reply = crud.add_message(db, chat, "assistant", answer["content"], sql_query=answer["sql_query"])
    return [question, reply]


@router.post("/chats/{chat_id}/regenerate", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def regenerate_response(chat: Chat = Depends(get_owned_chat), db: Session = Depends(get_db)):
    last_question = crud.get_last_user_message(db, chat.id)
    if last_question is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Chat has no question to answer")
    answer = generate_sql(last_question.content)
    return crud.add_message(db, chat, "assistant", answer["content"], sql_query=answer["sql_query"])
