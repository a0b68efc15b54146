# ai2sql/auth/permissions.py
# FastAPI dependencies: current user, and project guards built on the access resolver
import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ai2sql.auth.auth_utils import decode_token, oauth2_scheme
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import Project, User
from ai2sql.services import access

logger = logging.getLogger(__name__)


async def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Dependency function to get the current authenticated user from a JWT token.
    Raises HTTPException if the token is invalid or user not found.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_token(token)
    if payload is None:
        raise credentials_exception
    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    user = crud.get_user(db, user_id)
    if user is None:
        raise credentials_exception
    return user


def require_superuser(user: User = Depends(get_current_user)) -> User:
    if not access.can_manage_users(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Superuser access required")
    return user


def load_project(db: Session, project_id: str) -> Project:
    project = crud.get_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def project_access(db: Session, user: User, project_id: str) -> access.ProjectAccess:
    members = crud.list_members(db, project_id=project_id)
    return access.resolve_access(user, project_id, members)


# minimum project role -> resolver predicate
_ROLE_CHECKS = {
    "viewer": access.can_access_project,
    "editor": access.can_edit_content,
    "admin": access.can_manage_project,
}


def check_project(db: Session, user: User, project_id: str, minimum: str = "viewer") -> Project:
    """
    Loads a project and checks that the user holds at least ``minimum`` on it.
    404 when the project does not exist, 403 when access is missing or too low.
    """
    project = load_project(db, project_id)
    members = crud.list_members(db, project_id=project_id)
    if not access.can_access_project(user, project_id, members):
        logger.warning(f"User {user.email} denied access to project {project_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this project")
    if not _ROLE_CHECKS[minimum](user, project_id, members):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"This action requires the '{minimum}' role on the project",
        )
    return project


def project_viewer(project_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Project:
    return check_project(db, user, project_id, "viewer")


def project_editor(project_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Project:
    return check_project(db, user, project_id, "editor")


def project_manager(project_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Project:
    return check_project(db, user, project_id, "admin")
