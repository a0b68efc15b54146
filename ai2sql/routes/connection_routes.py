from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from ai2sql.auth.permissions import project_editor, project_manager, project_viewer
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import DatabaseConnection, Project
from ai2sql.schemas import (
    ConnectionIn,
    ConnectionOut,
    ConnectionTestResult,
    ConnectionUpdate,
    TableMetadataIn,
    TableMetadataOut,
)
from ai2sql.services.connection_tester import check_connection
from ai2sql.utils.validators import require_text, validate_port

router = APIRouter()
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"name": "Name", "host": "Host", "username": "Username", "database": "Database"}


def connection_out(project: Project, connection: DatabaseConnection) -> ConnectionOut:
    out = ConnectionOut.model_validate(connection)
    return out.model_copy(update={"is_default": project.connection_id == connection.id})


def load_connection(db: Session, project: Project, connection_id: str) -> DatabaseConnection:
    connection = crud.get_connection(db, project.id, connection_id)
    if connection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection not found")
    return connection


@router.get("/projects/{project_id}/connections", response_model=List[ConnectionOut])
def list_connections(project: Project = Depends(project_viewer), db: Session = Depends(get_db)):
    return [connection_out(project, c) for c in crud.list_connections(db, project.id)]


@router.post("/projects/{project_id}/connections", response_model=ConnectionOut, status_code=status.HTTP_201_CREATED)
def create_connection(data: ConnectionIn, project: Project = Depends(project_manager), db: Session = Depends(get_db)):
    fields = {key: require_text(getattr(data, key), label) for key, label in REQUIRED_FIELDS.items()}
    fields["port"] = validate_port(data.port)
    fields["password"] = data.password or ""

    connection = crud.create_connection(db, project, **fields)
    logger.info(f"Connection '{connection.name}' added to project {project.id}")
    return connection_out(project, connection)


@router.patch("/projects/{project_id}/connections/{connection_id}", response_model=ConnectionOut)
def update_connection(
    connection_id: str,
    data: ConnectionUpdate,
    project: Project = Depends(project_manager),
    db: Session = Depends(get_db),
):
    connection = load_connection(db, project, connection_id)
    fields = {}
    for key, label in REQUIRED_FIELDS.items():
        value = getattr(data, key)
        if value is not None:
            fields[key] = require_text(value, label)
    if data.port is not None:
        fields["port"] = validate_port(data.port)
    if data.password is not None:
        fields["password"] = data.password
    connection = crud.update_connection(db, connection, **fields)
    return connection_out(project, connection)


@router.delete("/projects/{project_id}/connections/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_connection(connection_id: str, project: Project = Depends(project_manager), db: Session = Depends(get_db)):
    crud.delete_connection(db, project, load_connection(db, project, connection_id))


@router.post("/projects/{project_id}/connections/{connection_id}/select", response_model=ConnectionOut)
def select_connection(connection_id: str, project: Project = Depends(project_manager), db: Session = Depends(get_db)):
    connection = load_connection(db, project, connection_id)
    project = crud.set_default_connection(db, project, connection)
    return connection_out(project, connection)


@router.post("/projects/{project_id}/connections/{connection_id}/test", response_model=ConnectionTestResult)
def test_connection(connection_id: str, project: Project = Depends(project_manager), db: Session = Depends(get_db)):
    return check_connection(load_connection(db, project, connection_id))


# --- Table metadata ---

@router.get("/projects/{project_id}/metadata", response_model=List[TableMetadataOut])
def list_metadata(project: Project = Depends(project_viewer), db: Session = Depends(get_db)):
    return crud.list_table_metadata(db, project.id)


@router.put("/projects/{project_id}/metadata", response_model=List[TableMetadataOut])
def replace_metadata(
    tables: List[TableMetadataIn],
    project: Project = Depends(project_editor),
    db: Session = Depends(get_db),
):
    cleaned = []
    for table in tables:
        item = table.model_dump()
        item["table_name"] = require_text(table.table_name, "Table name")
        item["schema_name"] = require_text(table.schema_name, "Schema name")
        cleaned.append(item)
    return crud.replace_table_metadata(db, project.id, cleaned)
