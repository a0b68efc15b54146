# ai2sql/auth/auth_routes.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ai2sql.auth import auth_utils
from ai2sql.auth.permissions import get_current_user
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import User
from ai2sql.schemas import Token, UserCreate, UserOut, UserUpdate
from ai2sql.services.access import is_superuser_email
from ai2sql.utils.validators import require_text, validate_registration

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    email, name = validate_registration(
        user_data.email, user_data.name, user_data.password, user_data.confirm_password
    )
    if crud.get_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    # Allow-listed accounts are bootstrapped as superusers
    role = "superuser" if is_superuser_email(email) else "user"
    user = crud.create_user(db, email, name, user_data.password, role=role)
    logger.info(f"Registered user {user.email} with role {user.role}")
    return user


@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, form_data.username)
    if not user or not auth_utils.verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Failed login for {form_data.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = auth_utils.create_access_token(data={"sub": user.id})
    return {"access_token": token, "token_type": "bearer", "user": UserOut.model_validate(user)}


@router.get("/me", response_model=UserOut)
def read_me(user: User = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=UserOut)
def update_me(data: UserUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    fields = {}
    if data.name is not None:
        fields["name"] = require_text(data.name, "Name")
    if data.avatar is not None:
        fields["avatar"] = data.avatar.strip() or None
    return crud.update_user(db, user, **fields)
