# ai2sql/utils/validators.py
# Input checks shared by the routers. Each helper returns the cleaned value or raises a 400.
from typing import Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from fastapi import HTTPException, status

from ai2sql.services.access import GLOBAL_ROLES, PROJECT_ROLES

PROJECT_NAME_MIN = 3
PROJECT_NAME_MAX = 100
PROJECT_DESCRIPTION_MAX = 500
PASSWORD_MIN = 6
RAG_EXAMPLES_MIN, RAG_EXAMPLES_MAX = 1, 10


def _bad_request(detail: str):
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def require_text(value: Optional[str], field: str) -> str:
    """Strips the value and rejects it when empty."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise _bad_request(f"{field} is required")
    return cleaned


def validate_project_fields(name: Optional[str], description: Optional[str]) -> Tuple[str, Optional[str]]:
    """Returns the trimmed (name, description); an empty description becomes None."""
    name = (name or "").strip()
    if not name:
        raise _bad_request("Project name is required")
    if len(name) < PROJECT_NAME_MIN:
        raise _bad_request(f"Project name must be at least {PROJECT_NAME_MIN} characters")
    if len(name) > PROJECT_NAME_MAX:
        raise _bad_request(f"Project name must not exceed {PROJECT_NAME_MAX} characters")

    description = (description or "").strip()
    if len(description) > PROJECT_DESCRIPTION_MAX:
        raise _bad_request(f"Project description must not exceed {PROJECT_DESCRIPTION_MAX} characters")
    return name, description or None


def validate_registration(email: str, name: str, password: str, confirm_password: str) -> Tuple[str, str]:
    email = (email or "").strip()
    name = (name or "").strip()
    if not email or not name or not password or not confirm_password:
        raise _bad_request("Please fill in all fields")
    try:
        email = validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        raise _bad_request("Please enter a valid email address")
    if password != confirm_password:
        raise _bad_request("Passwords do not match")
    if len(password) < PASSWORD_MIN:
        raise _bad_request(f"Password must be at least {PASSWORD_MIN} characters")
    return email.lower(), name


def validate_project_role(role: str) -> str:
    if role not in PROJECT_ROLES:
        raise _bad_request(f"Role must be one of: {', '.join(PROJECT_ROLES)}")
    return role


def validate_global_role(role: str) -> str:
    if role not in GLOBAL_ROLES:
        raise _bad_request(f"Role must be one of: {', '.join(GLOBAL_ROLES)}")
    return role


def validate_port(port: int) -> int:
    if port is None or not 1 <= port <= 65535:
        raise _bad_request("Port must be between 1 and 65535")
    return port


def validate_settings(rag_examples_count=None, rag_similarity_threshold=None):
    if rag_examples_count is not None and not RAG_EXAMPLES_MIN <= rag_examples_count <= RAG_EXAMPLES_MAX:
        raise _bad_request(
            f"rag_examples_count must be between {RAG_EXAMPLES_MIN} and {RAG_EXAMPLES_MAX}"
        )
    if rag_similarity_threshold is not None and not 0.0 <= rag_similarity_threshold <= 1.0:
        raise _bad_request("rag_similarity_threshold must be between 0 and 1")
