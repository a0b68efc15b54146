# ai2sql/services/access.py
# Project visibility and role resolution. Pure functions over already-loaded membership records.
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ai2sql.config import SUPERUSER_EMAILS

logger = logging.getLogger(__name__)

GLOBAL_ROLES = ("user", "admin", "superuser")
PROJECT_ROLES = ("viewer", "editor", "admin")

_ROLE_RANK = {role: rank for rank, role in enumerate(PROJECT_ROLES)}


@dataclass(frozen=True)
class ProjectAccess:
    project_id: str
    can_view: bool
    role: Optional[str]
    is_superuser: bool = False


def is_superuser_email(email: Optional[str]) -> bool:
    return (email or "").strip().lower() in SUPERUSER_EMAILS


def is_superuser(user) -> bool:
    """True if the user holds the superuser role or an allow-listed email."""
    if user is None:
        return False
    if getattr(user, "role", None) == "superuser":
        return True
    return is_superuser_email(getattr(user, "email", None))


def get_user_role(project_id: str, user_id: str, members: Iterable) -> Optional[str]:
    """Role stored on the membership for exactly (project_id, user_id), if any."""
    for member in members:
        if member.project_id == project_id and member.user_id == user_id:
            return member.role
    return None


def can_access_project(user, project_id: str, members: Iterable) -> bool:
    if user is None or not getattr(user, "id", None) or not project_id:
        return False
    if is_superuser(user):
        return True
    return get_user_role(project_id, user.id, members) is not None


def resolve_access(user, project_id: str, members: Iterable) -> ProjectAccess:
    """
    Decide visibility and permission level of a user on one project.
    Superusers resolve to the ``admin`` project role.
    """
    if user is None or not project_id:
        return ProjectAccess(project_id=project_id, can_view=False, role=None)
    if is_superuser(user):
        return ProjectAccess(project_id=project_id, can_view=True, role="admin", is_superuser=True)

    role = get_user_role(project_id, user.id, members)
    access = ProjectAccess(project_id=project_id, can_view=role is not None, role=role)
    logger.debug(f"Access check project={project_id} user={user.email} role={role}")
    return access


def has_role(access: ProjectAccess, minimum: str) -> bool:
    """Whether the resolved role is at least ``minimum`` (viewer < editor < admin)."""
    if minimum not in _ROLE_RANK:
        raise ValueError(f"Unknown project role: {minimum}")
    if not access.can_view or access.role not in _ROLE_RANK:
        return False
    return _ROLE_RANK[access.role] >= _ROLE_RANK[minimum]


def accessible_projects(user, projects: Sequence, members: Iterable) -> List:
    """Projects the user may see, in the order given."""
    members = list(members)
    return [p for p in projects if can_access_project(user, p.id, members)]


def can_create_project(user) -> bool:
    return is_superuser(user)


def can_manage_users(user) -> bool:
    return is_superuser(user)


def can_manage_project(user, project_id: str, members: Iterable) -> bool:
    return has_role(resolve_access(user, project_id, members), "admin")


def can_edit_content(user, project_id: str, members: Iterable) -> bool:
    return has_role(resolve_access(user, project_id, members), "editor")


def select_default_project(user, projects: Sequence, members: Iterable):
    """
    Project to open for a user: their last project when it still exists and
    is accessible, otherwise the first accessible project, otherwise None.
    """
    if user is None:
        return None
    members = list(members)

    last_id = getattr(user, "last_project_id", None)
    if last_id:
        for project in projects:
            if project.id == last_id and can_access_project(user, project.id, members):
                logger.info(f"Selected last project {project.name} for user {user.email}")
                return project

    for project in projects:
        if can_access_project(user, project.id, members):
            logger.info(f"Selected first available project {project.name} for user {user.email}")
            return project

    logger.info(f"No accessible projects found for user {user.email}")
    return None
