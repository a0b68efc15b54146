# ai2sql/schemas.py
# Request and response bodies for the HTTP API
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- Users / auth ---

class UserCreate(BaseModel):
    email: str
    name: str
    password: str
    confirm_password: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    avatar: Optional[str] = None


class UserOut(ORMModel):
    id: str
    email: str
    name: str
    avatar: Optional[str] = None
    role: str
    last_project_id: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserOut


class RoleUpdate(BaseModel):
    role: str


# --- Projects ---

class ProjectCreate(BaseModel):
    name: str
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ProjectOut(ORMModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    connection_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    role: Optional[str] = None  # caller's effective role


class MemberCreate(BaseModel):
    user_id: str
    role: str = "viewer"


class MemberOut(ORMModel):
    id: str
    project_id: str
    user_id: str
    role: str
    added_at: datetime
    added_by: Optional[str] = None


# --- Chats ---

class ChatCreate(BaseModel):
    name: Optional[str] = None


class ChatRename(BaseModel):
    name: str


class MessageCreate(BaseModel):
    content: str


class MessageOut(ORMModel):
    id: str
    chat_id: str
    role: str
    content: str
    sql_query: Optional[str] = None
    timestamp: datetime


class ChatOut(ORMModel):
    id: str
    name: str
    user_id: str
    project_id: str
    created_at: datetime
    updated_at: datetime
    messages: List[MessageOut] = []


# --- Notes / SQL examples ---

class NoteIn(BaseModel):
    title: str
    content: str


class NoteOut(ORMModel):
    id: str
    title: str
    content: str
    user_id: str
    project_id: str
    created_at: datetime
    updated_at: datetime


class ExampleIn(BaseModel):
    natural_language_query: str
    sql_query: str


class ExampleOut(ORMModel):
    id: str
    natural_language_query: str
    sql_query: str
    user_id: str
    project_id: str
    created_at: datetime


class ExampleSearch(BaseModel):
    query: str


class ExampleMatch(BaseModel):
    example: ExampleOut
    score: float


# --- Connections / metadata ---

class ConnectionIn(BaseModel):
    name: str
    host: str
    port: int = 5432
    username: str
    password: str = ""
    database: str


class ConnectionUpdate(BaseModel):
    name: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None


class ConnectionOut(ORMModel):
    id: str
    project_id: str
    name: str
    host: str
    port: int
    username: str
    password: str
    database: str
    is_default: bool = False


class ConnectionTestResult(BaseModel):
    success: bool
    detail: str


class ColumnMetadata(BaseModel):
    name: str
    type: str
    nullable: bool = True
    is_primary_key: bool = False
    is_foreign_key: bool = False
    description: Optional[str] = None


class TableMetadataIn(BaseModel):
    schema_name: str = "public"
    table_name: str
    columns: List[ColumnMetadata] = []
    description: Optional[str] = None


class TableMetadataOut(ORMModel):
    id: str
    project_id: str
    schema_name: str
    table_name: str
    columns: List[ColumnMetadata]
    description: Optional[str] = None


# --- Settings / admin ---

class SettingsOut(ORMModel):
    rag_examples_count: int
    debug_mode: bool
    rag_similarity_threshold: float


class SettingsUpdate(BaseModel):
    rag_examples_count: Optional[int] = None
    debug_mode: Optional[bool] = None
    rag_similarity_threshold: Optional[float] = None


class AdminStats(BaseModel):
    users: int
    projects: int
    memberships: int
