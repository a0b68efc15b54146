# ai2sql/database/crud.py
# DB logic: users, projects and members, chats, notes, examples, connections, metadata, settings
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ai2sql.auth.auth_utils import hash_password
from ai2sql.database.models import (
    AppSettings,
    Chat,
    DatabaseConnection,
    Message,
    Project,
    ProjectMember,
    SqlExample,
    TableMetadata,
    User,
    UserNote,
)


# --- Users ---

def get_user(db: Session, user_id: str):
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    """Case-insensitive lookup by email."""
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def create_user(db: Session, email: str, name: str, password: str, role: str = "user"):
    """Creates a new user and hashes their password."""
    db_user = User(email=email, name=name, hashed_password=hash_password(password), role=role)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def list_users(db: Session):
    return db.query(User).order_by(User.email).all()


def update_user(db: Session, user: User, **fields):
    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


# --- Projects ---

def list_projects(db: Session) -> List[Project]:
    """All projects, newest first."""
    return db.query(Project).order_by(Project.created_at.desc()).all()


def get_project(db: Session, project_id: str):
    return db.query(Project).filter(Project.id == project_id).first()


def get_project_by_name(db: Session, name: str, exclude_id: Optional[str] = None):
    """Case-insensitive match on the trimmed name."""
    query = db.query(Project).filter(func.lower(func.trim(Project.name)) == name.strip().lower())
    if exclude_id:
        query = query.filter(Project.id != exclude_id)
    return query.first()


def create_project(db: Session, name: str, description: Optional[str], created_by: str):
    """Creates a project and makes its creator an admin member."""
    project = Project(name=name, description=description, created_by=created_by)
    db.add(project)
    db.flush()
    db.add(ProjectMember(project_id=project.id, user_id=created_by, role="admin", added_by=created_by))
    db.commit()
    db.refresh(project)
    return project


def update_project(db: Session, project: Project, **fields):
    for key, value in fields.items():
        setattr(project, key, value)
    project.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project: Project):
    """Deletes a project with everything scoped to it and clears stale last-project pointers."""
    db.query(User).filter(User.last_project_id == project.id).update(
        {User.last_project_id: None}, synchronize_session=False
    )
    db.delete(project)
    db.commit()


# --- Members ---

def list_members(db: Session, project_id: Optional[str] = None, user_id: Optional[str] = None):
    query = db.query(ProjectMember)
    if project_id:
        query = query.filter(ProjectMember.project_id == project_id)
    if user_id:
        query = query.filter(ProjectMember.user_id == user_id)
    return query.order_by(ProjectMember.added_at).all()


def get_member(db: Session, project_id: str, user_id: str):
    return (
        db.query(ProjectMember)
        .filter(ProjectMember.project_id == project_id, ProjectMember.user_id == user_id)
        .first()
    )


def add_member(db: Session, project_id: str, user_id: str, role: str, added_by: str):
    member = ProjectMember(project_id=project_id, user_id=user_id, role=role, added_by=added_by)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def update_member_role(db: Session, member: ProjectMember, role: str):
    member.role = role
    db.commit()
    db.refresh(member)
    return member


def remove_member(db: Session, member: ProjectMember):
    db.delete(member)
    db.commit()


# --- Chats and messages ---

def list_chats(db: Session, project_id: str, user_id: Optional[str] = None):
    """Chats of a project, newest first; restricted to one owner when user_id is given."""
    query = db.query(Chat).filter(Chat.project_id == project_id)
    if user_id:
        query = query.filter(Chat.user_id == user_id)
    return query.order_by(Chat.created_at.desc()).all()


def get_chat(db: Session, chat_id: str):
    return db.query(Chat).filter(Chat.id == chat_id).first()


def create_chat(db: Session, name: str, user_id: str, project_id: str):
    chat = Chat(name=name, user_id=user_id, project_id=project_id)
    db.add(chat)
    db.commit()
    db.refresh(chat)
    return chat


def rename_chat(db: Session, chat: Chat, name: str):
    chat.name = name
    chat.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(chat)
    return chat


def delete_chat(db: Session, chat: Chat):
    db.delete(chat)
    db.commit()


def add_message(db: Session, chat: Chat, role: str, content: str, sql_query: Optional[str] = None):
    message = Message(chat_id=chat.id, role=role, content=content, sql_query=sql_query,
                      timestamp=datetime.utcnow())
    db.add(message)
    chat.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(message)
    return message


def get_last_user_message(db: Session, chat_id: str):
    return (
        db.query(Message)
        .filter(Message.chat_id == chat_id, Message.role == "user")
        .order_by(Message.timestamp.desc())
        .first()
    )


# --- Notes ---

def list_notes(db: Session, project_id: str, user_id: str):
    return (
        db.query(UserNote)
        .filter(UserNote.project_id == project_id, UserNote.user_id == user_id)
        .order_by(UserNote.created_at.desc())
        .all()
    )


def get_note(db: Session, note_id: str):
    return db.query(UserNote).filter(UserNote.id == note_id).first()


def create_note(db: Session, title: str, content: str, user_id: str, project_id: str):
    note = UserNote(title=title, content=content, user_id=user_id, project_id=project_id)
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


def update_note(db: Session, note: UserNote, title: str, content: str):
    note.title = title
    note.content = content
    note.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(note)
    return note


def delete_note(db: Session, note: UserNote):
    db.delete(note)
    db.commit()


# --- SQL examples ---

def list_examples(db: Session, project_id: str):
    return (
        db.query(SqlExample)
        .filter(SqlExample.project_id == project_id)
        .order_by(SqlExample.created_at.desc())
        .all()
    )


def get_example(db: Session, example_id: str):
    return db.query(SqlExample).filter(SqlExample.id == example_id).first()


def create_example(db: Session, natural_language_query: str, sql_query: str, user_id: str, project_id: str):
    example = SqlExample(natural_language_query=natural_language_query, sql_query=sql_query,
                         user_id=user_id, project_id=project_id)
    db.add(example)
    db.commit()
    db.refresh(example)
    return example


def bulk_create_examples(db: Session, pairs: Iterable, user_id: str, project_id: str) -> int:
    count = 0
    for natural_language_query, sql_query in pairs:
        db.add(SqlExample(natural_language_query=natural_language_query, sql_query=sql_query,
                          user_id=user_id, project_id=project_id))
        count += 1
    db.commit()
    return count


def update_example(db: Session, example: SqlExample, natural_language_query: str, sql_query: str):
    example.natural_language_query = natural_language_query
    example.sql_query = sql_query
    db.commit()
    db.refresh(example)
    return example


def delete_example(db: Session, example: SqlExample):
    db.delete(example)
    db.commit()


# --- Database connections ---

def list_connections(db: Session, project_id: str):
    return (
        db.query(DatabaseConnection)
        .filter(DatabaseConnection.project_id == project_id)
        .order_by(DatabaseConnection.name)
        .all()
    )


def get_connection(db: Session, project_id: str, connection_id: str):
    return (
        db.query(DatabaseConnection)
        .filter(DatabaseConnection.project_id == project_id, DatabaseConnection.id == connection_id)
        .first()
    )


def create_connection(db: Session, project: Project, **fields):
    """Creates a connection; the project's first connection becomes its default."""
    connection = DatabaseConnection(project_id=project.id, **fields)
    db.add(connection)
    db.flush()
    if not project.connection_id:
        project.connection_id = connection.id
    db.commit()
    db.refresh(connection)
    return connection


def update_connection(db: Session, connection: DatabaseConnection, **fields):
    for key, value in fields.items():
        setattr(connection, key, value)
    db.commit()
    db.refresh(connection)
    return connection


def delete_connection(db: Session, project: Project, connection: DatabaseConnection):
    if project.connection_id == connection.id:
        project.connection_id = None
    db.delete(connection)
    db.commit()


def set_default_connection(db: Session, project: Project, connection: DatabaseConnection):
    project.connection_id = connection.id
    db.commit()
    db.refresh(project)
    return project


# --- Table metadata ---

def list_table_metadata(db: Session, project_id: str):
    return (
        db.query(TableMetadata)
        .filter(TableMetadata.project_id == project_id)
        .order_by(TableMetadata.schema_name, TableMetadata.table_name)
        .all()
    )


def replace_table_metadata(db: Session, project_id: str, tables: List[dict]):
    db.query(TableMetadata).filter(TableMetadata.project_id == project_id).delete(synchronize_session=False)
    for table in tables:
        db.add(TableMetadata(project_id=project_id, **table))
    db.commit()
    return list_table_metadata(db, project_id)


# --- Settings ---

def get_or_create_settings(db: Session, user_id: str):
    settings = db.query(AppSettings).filter(AppSettings.user_id == user_id).first()
    if settings is None:
        settings = AppSettings(user_id=user_id)
        db.add(settings)
        db.commit()
        db.refresh(settings)
    return settings


def update_settings(db: Session, settings: AppSettings, **fields):
    for key, value in fields.items():
        setattr(settings, key, value)
    db.commit()
    db.refresh(settings)
    return settings


def count_rows(db: Session):
    return {
        "users": db.query(User).count(),
        "projects": db.query(Project).count(),
        "memberships": db.query(ProjectMember).count(),
    }
