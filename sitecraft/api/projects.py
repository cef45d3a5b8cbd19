"""Project API endpoints.

Endpoints are thin: every state change goes through ProjectService or one
of the two workflows (RevisionService, RollbackService).
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import SessionLocal, get_db
from ..exceptions import SiteCraftException
from ..schemas.project import (
    MessageResponse,
    ProjectCreate,
    ProjectDetail,
    ProjectSummary,
    PublishToggleResponse,
    RevisionRequest,
    SaveCodeRequest,
)
from ..services import ProjectService, RevisionService, RollbackService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _generate_initial_version(user_id: str, project_id: str, prompt: str) -> None:
    """Background task: run the revision workflow with the initial prompt.

    Runs after the create response is sent, on its own session. The client
    polls the project until code appears; failures are already recorded in
    the conversation log and refunded by the workflow.
    """
    db = SessionLocal()
    try:
        RevisionService(db).make_revision(user_id, project_id, prompt)
    except SiteCraftException as e:
        logger.warning(
            "Initial generation failed: %s", e.message,
            extra={"project_id": project_id, "error_code": e.error_code.value},
        )
    finally:
        db.close()


@router.post("", response_model=ProjectDetail, status_code=201)
def create_project(
    body: ProjectCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Create a project from an initial prompt and start generating its first version."""
    service = ProjectService(db)
    project = service.create_project(auth.user_id, body.prompt, body.name)
    background_tasks.add_task(
        _generate_initial_version, auth.user_id, project.id, project.initial_prompt
    )
    return service.get_project_detail(auth.user_id, project.id)


@router.get("", response_model=List[ProjectSummary])
def list_projects(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """List the caller's projects, most recently updated first."""
    return ProjectService(db).list_projects(auth.user_id, skip, limit)


@router.get("/{project_id}", response_model=ProjectDetail)
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Full project state: code, ordered versions, conversation, and timeline."""
    return ProjectService(db).get_project_detail(auth.user_id, project_id)


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Delete a project together with its versions and conversation."""
    ProjectService(db).delete_project(auth.user_id, project_id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{project_id}/revisions", response_model=MessageResponse)
def make_revision(
    project_id: str,
    body: RevisionRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Apply a natural-language change. Blocks until both generation calls finish.

    The response carries no code; fetch the project to see the new version.
    """
    message = RevisionService(db).make_revision(auth.user_id, project_id, body.message)
    return MessageResponse(message=message)


@router.post("/{project_id}/rollback/{version_id}", response_model=MessageResponse)
def rollback_to_version(
    project_id: str,
    version_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Make an earlier (or later) version current again. Free of charge."""
    message = RollbackService(db).rollback(auth.user_id, project_id, version_id)
    return MessageResponse(message=message)


@router.put("/{project_id}/code", response_model=MessageResponse)
def save_project_code(
    project_id: str,
    body: SaveCodeRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Store hand-edited code. Detaches the project from its version pointer."""
    ProjectService(db).save_code(auth.user_id, project_id, body.code)
    return MessageResponse(message="Project saved successfully")


@router.patch("/{project_id}/publish", response_model=PublishToggleResponse)
def toggle_publish(
    project_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Flip the published flag."""
    project = ProjectService(db).toggle_publish(auth.user_id, project_id)
    return PublishToggleResponse(
        id=project.id,
        is_published=project.is_published,
        message="Project published" if project.is_published else "Project unpublished",
    )
