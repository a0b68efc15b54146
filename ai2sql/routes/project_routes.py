from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from ai2sql.auth.permissions import (
    get_current_user,
    load_project,
    project_access,
    project_manager,
    project_viewer,
)
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import Project, User
from ai2sql.schemas import (
    MemberCreate,
    MemberOut,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
    RoleUpdate,
    UserOut,
)
from ai2sql.services import access
from ai2sql.utils.validators import validate_project_fields, validate_project_role

router = APIRouter()
logger = logging.getLogger(__name__)


def project_out(project: Project, role) -> ProjectOut:
    return ProjectOut.model_validate(project).model_copy(update={"role": role})


def ensure_unique_name(db: Session, name: str, exclude_id=None):
    if crud.get_project_by_name(db, name, exclude_id=exclude_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A project with this name already exists")


@router.get("", response_model=List[ProjectOut])
def list_projects(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Projects visible to the caller, newest first, with the caller's role on each."""
    members = crud.list_members(db)
    visible = access.accessible_projects(user, crud.list_projects(db), members)
    return [project_out(p, access.resolve_access(user, p.id, members).role) for p in visible]


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(data: ProjectCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not access.can_create_project(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only superusers can create projects")
    name, description = validate_project_fields(data.name, data.description)
    ensure_unique_name(db, name)

    project = crud.create_project(db, name, description, created_by=user.id)
    logger.info(f"Project '{project.name}' created by {user.email}")
    return project_out(project, "admin")


@router.get("/current", response_model=ProjectOut)
def current_project(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The project to open for the caller: last selected if still accessible, else the first accessible one."""
    members = crud.list_members(db)
    project = access.select_default_project(user, crud.list_projects(db), members)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No accessible projects")
    return project_out(project, access.resolve_access(user, project.id, members).role)


@router.post("/{project_id}/select", response_model=ProjectOut)
def select_project(project_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    project = load_project(db, project_id)
    resolved = project_access(db, user, project_id)
    if not resolved.can_view:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this project")
    crud.update_user(db, user, last_project_id=project.id)
    return project_out(project, resolved.role)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project: Project = Depends(project_viewer),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return project_out(project, project_access(db, user, project.id).role)


@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    data: ProjectUpdate,
    project: Project = Depends(project_manager),
    db: Session = Depends(get_db),
):
    name, description = validate_project_fields(
        data.name if data.name is not None else project.name,
        data.description if data.description is not None else project.description,
    )
    ensure_unique_name(db, name, exclude_id=project.id)
    project = crud.update_project(db, project, name=name, description=description)
    return project_out(project, "admin")


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not access.is_superuser(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only superusers can delete projects")
    project = load_project(db, project_id)
    crud.delete_project(db, project)
    logger.info(f"Project {project_id} deleted by {user.email}")


# --- Members ---

@router.get("/{project_id}/members", response_model=List[MemberOut])
def list_members(project: Project = Depends(project_viewer), db: Session = Depends(get_db)):
    return crud.list_members(db, project_id=project.id)


@router.get("/{project_id}/candidates", response_model=List[UserOut])
def list_candidates(project: Project = Depends(project_manager), db: Session = Depends(get_db)):
    """Users who are not yet members of the project."""
    member_ids = {m.user_id for m in crud.list_members(db, project_id=project.id)}
    return [u for u in crud.list_users(db) if u.id not in member_ids]


@router.post("/{project_id}/members", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_member(
    data: MemberCreate,
    project: Project = Depends(project_manager),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    role = validate_project_role(data.role)
    if crud.get_user(db, data.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if crud.get_member(db, project.id, data.user_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already a member of this project")

    member = crud.add_member(db, project.id, data.user_id, role, added_by=user.id)
    logger.info(f"User {data.user_id} added to project {project.id} as {role}")
    return member


def _other_member(db: Session, project: Project, member_user_id: str, user: User):
    if member_user_id == user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own membership")
    member = crud.get_member(db, project.id, member_user_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return member


@router.patch("/{project_id}/members/{member_user_id}", response_model=MemberOut)
def update_member_role(
    member_user_id: str,
    data: RoleUpdate,
    project: Project = Depends(project_manager),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    role = validate_project_role(data.role)
    member = _other_member(db, project, member_user_id, user)
    return crud.update_member_role(db, member, role)


@router.delete("/{project_id}/members/{member_user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    member_user_id: str,
    project: Project = Depends(project_manager),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    member = _other_member(db, project, member_user_id, user)
    crud.remove_member(db, member)
    logger.info(f"User {member_user_id} removed from project {project.id}")
