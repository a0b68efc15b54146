from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ai2sql.auth.permissions import get_current_user
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import User
from ai2sql.schemas import SettingsOut, SettingsUpdate
from ai2sql.utils.validators import validate_settings

router = APIRouter()


@router.get("", response_model=SettingsOut)
def read_settings(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud.get_or_create_settings(db, user.id)


@router.patch("", response_model=SettingsOut)
def update_settings(data: SettingsUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    validate_settings(data.rag_examples_count, data.rag_similarity_threshold)
    settings = crud.get_or_create_settings(db, user.id)
    return crud.update_settings(db, settings, **data.model_dump(exclude_none=True))
