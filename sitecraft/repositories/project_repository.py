"""Project repository for database operations.

Ownership is part of every lookup: a project that belongs to someone else
is indistinguishable from a missing one.
"""

from typing import List

from sqlalchemy.orm import Query

from ..models import Project
from ..exceptions import ProjectNotFoundError
from .base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Repository for project CRUD operations."""

    model_class = Project
    not_found_error = ProjectNotFoundError

    def create(self, user_id: str, name: str, initial_prompt: str) -> Project:
        """Create a project with empty code and no versions."""
        project = Project(
            user_id=user_id,
            name=name,
            initial_prompt=initial_prompt,
            current_code="",
            current_version_index=None,
        )
        self.db.add(project)
        self.db.flush()
        self.db.refresh(project)
        return project

    def _owned_query(self, project_id: str, user_id: str) -> Query:
        return self.db.query(Project).filter(
            Project.id == project_id,
            Project.user_id == user_id,
        )

    def get_owned(self, project_id: str, user_id: str) -> Project:
        """Get a project owned by *user_id*. Raises ProjectNotFoundError otherwise."""
        project = self._owned_query(project_id, user_id).first()
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 50) -> List[Project]:
        """The user's projects, most recently updated first."""
        return (
            self.db.query(Project)
            .filter(Project.user_id == user_id)
            .order_by(Project.updated_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_published(self, skip: int = 0, limit: int = 50) -> List[Project]:
        """Published projects across all users, newest first."""
        return (
            self.db.query(Project)
            .filter(Project.is_published.is_(True))
            .order_by(Project.updated_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def replace_code(self, project_id: str, user_id: str, code: str) -> int:
        """Overwrite current_code and clear the version pointer in one UPDATE.

        Returns the number of rows updated (0 when not found / not owned).
        """
        return self._owned_query(project_id, user_id).update(
            {
                Project.current_code: code,
                Project.current_version_index: None,
            },
            synchronize_session="fetch",
        )

    def delete_owned(self, project_id: str, user_id: str) -> None:
        """Delete a project and, through cascades, its versions and turns."""
        project = self.get_owned(project_id, user_id)
        self.db.delete(project)
        self.db.flush()
