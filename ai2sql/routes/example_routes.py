from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
import logging

from ai2sql.auth.permissions import check_project, get_current_user, project_editor, project_viewer
from ai2sql.database import crud
from ai2sql.database.db import get_db
from ai2sql.database.models import Project, SqlExample, User
from ai2sql.schemas import ExampleIn, ExampleMatch, ExampleOut, ExampleSearch
from ai2sql.services.example_io import export_examples_csv, export_examples_xlsx, parse_examples_file
from ai2sql.services.example_search import find_similar_examples
from ai2sql.utils.validators import require_text

router = APIRouter()
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_editable_example(example_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> SqlExample:
    example = crud.get_example(db, example_id)
    if example is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Example not found")
    check_project(db, user, example.project_id, "editor")
    return example


@router.get("/projects/{project_id}/examples", response_model=List[ExampleOut])
def list_examples(project: Project = Depends(project_viewer), db: Session = Depends(get_db)):
    return crud.list_examples(db, project.id)


@router.post("/projects/{project_id}/examples", response_model=ExampleOut, status_code=status.HTTP_201_CREATED)
def create_example(
    data: ExampleIn,
    project: Project = Depends(project_editor),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    question = require_text(data.natural_language_query, "Natural language query")
    sql = require_text(data.sql_query, "SQL query")
    return crud.create_example(db, question, sql, user_id=user.id, project_id=project.id)


@router.get("/projects/{project_id}/examples/export")
def export_examples(
    file_format: str = Query("csv", alias="format"),
    project: Project = Depends(project_viewer),
    db: Session = Depends(get_db),
):
    """Download the project's examples as ?format=csv (default) or ?format=xlsx."""
    examples = crud.list_examples(db, project.id)
    if file_format == "xlsx":
        return Response(
            content=export_examples_xlsx(examples),
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="sql_examples.xlsx"'},
        )
    if file_format != "csv":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Export format must be csv or xlsx")
    return Response(
        content=export_examples_csv(examples),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="sql_examples.csv"'},
    )


@router.post("/projects/{project_id}/examples/import")
async def import_examples(
    file: UploadFile = File(...),
    project: Project = Depends(project_editor),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    content = await file.read()
    result = parse_examples_file(content, file.filename or "")
    if "error" in result:
        logger.error(f"Import of {file.filename} failed: {result['error']}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result["error"])

    imported = crud.bulk_create_examples(db, result["pairs"], user_id=user.id, project_id=project.id)
    return {"status": "success", "imported": imported, "skipped": result["skipped"]}


@router.post("/projects/{project_id}/examples/search", response_model=List[ExampleMatch])
def search_examples(
    data: ExampleSearch,
    project: Project = Depends(project_viewer),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Examples closest to the query, limited by the caller's retrieval settings."""
    query = require_text(data.query, "Search query")
    settings = crud.get_or_create_settings(db, user.id)
    matches = find_similar_examples(
        query,
        crud.list_examples(db, project.id),
        threshold=settings.rag_similarity_threshold,
        limit=settings.rag_examples_count,
    )
    if settings.debug_mode:
        logger.info(f"Example search '{query}' in project {project.id}: {len(matches)} match(es)")
    return [{"example": ExampleOut.model_validate(ex), "score": score} for ex, score in matches]


@router.put("/examples/{example_id}", response_model=ExampleOut)
def update_example(data: ExampleIn, example: SqlExample = Depends(get_editable_example), db: Session = Depends(get_db)):
    return crud.update_example(
        db,
        example,
        require_text(data.natural_language_query, "Natural language query"),
        require_text(data.sql_query, "SQL query"),
    )


@router.delete("/examples/{example_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_example(example: SqlExample = Depends(get_editable_example), db: Session = Depends(get_db)):
    crud.delete_example(db, example)
