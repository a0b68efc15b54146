from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from ai2sql.auth.permissions import require_superuser
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import User
from ai2sql.schemas import AdminStats, MemberOut, RoleUpdate, UserOut
from ai2sql.utils.validators import validate_global_role

# Every route here requires a superuser
router = APIRouter(dependencies=[Depends(require_superuser)])
logger = logging.getLogger(__name__)


def load_user(db: Session, user_id: str) -> User:
    user = crud.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/users", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db)):
    return crud.list_users(db)


@router.patch("/users/{user_id}/role", response_model=UserOut)
def update_user_role(
    user_id: str,
    data: RoleUpdate,
    admin: User = Depends(require_superuser),
    db: Session = Depends(get_db),
):
    role = validate_global_role(data.role)
    if user_id == admin.id and role != "superuser":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot demote yourself")
    user = crud.update_user(db, load_user(db, user_id), role=role)
    logger.info(f"{admin.email} set role of {user.email} to {role}")
    return user


@router.get("/users/{user_id}/memberships", response_model=List[MemberOut])
def user_memberships(user_id: str, db: Session = Depends(get_db)):
    load_user(db, user_id)
    return crud.list_members(db, user_id=user_id)


@router.get("/stats", response_model=AdminStats)
def stats(db: Session = Depends(get_db)):
    return crud.count_rows(db)
