"""Public endpoints for published projects. No authentication."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.project import PublishedProjectCode, PublishedProjectSummary
from ..services import ProjectService

router = APIRouter(prefix="/api/published", tags=["published"])


@router.get("", response_model=List[PublishedProjectSummary])
def list_published_projects(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Community listing of published projects."""
    return ProjectService(db).list_published(skip, limit)


@router.get("/{project_id}", response_model=PublishedProjectCode)
def get_published_project(project_id: str, db: Session = Depends(get_db)):
    """Current code of a published project. 404 when unpublished or empty."""
    return ProjectService(db).get_published_code(project_id)
