# SQLAlchemy models: users, projects, members, chats, notes, examples, connections
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ai2sql.config import (
    DEFAULT_DEBUG_MODE,
    DEFAULT_RAG_EXAMPLES_COUNT,
    DEFAULT_RAG_SIMILARITY_THRESHOLD,
)
from ai2sql.database.db import Base


def new_id():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")  # user | admin | superuser
    last_project_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    memberships = relationship(
        "ProjectMember", back_populates="user", cascade="all, delete-orphan",
        foreign_keys="ProjectMember.user_id",
    )
    settings = relationship("AppSettings", back_populates="user", uselist=False, cascade="all, delete-orphan")


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    connection_id = Column(String(36), nullable=True)  # default connection
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")
    chats = relationship("Chat", back_populates="project", cascade="all, delete-orphan")
    notes = relationship("UserNote", cascade="all, delete-orphan")
    examples = relationship("SqlExample", cascade="all, delete-orphan")
    connections = relationship("DatabaseConnection", back_populates="project", cascade="all, delete-orphan")
    tables = relationship("TableMetadata", cascade="all, delete-orphan")


class ProjectMember(Base):
    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False, default="viewer")  # viewer | editor | admin
    added_at = Column(DateTime, default=datetime.utcnow)
    added_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    project = relationship("Project", back_populates="members")
    user = relationship("User", back_populates="memberships", foreign_keys=[user_id])


class Chat(Base):
    __tablename__ = "chats"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="chats")
    messages = relationship(
        "Message", back_populates="chat", cascade="all, delete-orphan",
        order_by="Message.timestamp",
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=new_id)
    chat_id = Column(String(36), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False)  # user | assistant
    content = Column(Text, nullable=False)
    sql_query = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow)

    chat = relationship("Chat", back_populates="messages")


class DatabaseConnection(Base):
    __tablename__ = "database_connections"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    host = Column(String, nullable=False)
    port = Column(Integer, nullable=False, default=5432)
    username = Column(String, nullable=False)
    password = Column(String, nullable=False, default="")  # stored as entered
    database = Column(String, nullable=False)

    project = relationship("Project", back_populates="connections")


class TableMetadata(Base):
    __tablename__ = "table_metadata"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    schema_name = Column(String, nullable=False, default="public")
    table_name = Column(String, nullable=False)
    columns = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)


class UserNote(Base):
    __tablename__ = "user_notes"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SqlExample(Base):
    __tablename__ = "sql_examples"

    id = Column(String(36), primary_key=True, default=new_id)
    natural_language_query = Column(Text, nullable=False)
    sql_query = Column(Text, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class AppSettings(Base):
    __tablename__ = "app_settings"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    rag_examples_count = Column(Integer, nullable=False, default=DEFAULT_RAG_EXAMPLES_COUNT)
    debug_mode = Column(Boolean, nullable=False, default=DEFAULT_DEBUG_MODE)
    rag_similarity_threshold = Column(Float, nullable=False, default=DEFAULT_RAG_SIMILARITY_THRESHOLD)

    user = relationship("User", back_populates="settings")
