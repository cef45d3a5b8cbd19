"""Version repository for database operations."""

from typing import Optional

from sqlalchemy.orm import Query

from ..models import Project, Version
from ..exceptions import VersionNotFoundError
from .base import BaseRepository


class VersionRepository(BaseRepository[Version]):
    """Insert-only access to code snapshots plus the project pointer update."""

    model_class = Version
    not_found_error = VersionNotFoundError

    def create(self, project_id: str, code: str, description: str) -> Version:
        """Insert a new snapshot."""
        version = Version(project_id=project_id, code=code, description=description)
        self.db.add(version)
        self.db.flush()
        self.db.refresh(version)
        return version

    def get_for_project(self, project_id: str, version_id: str) -> Optional[Version]:
        """Find a version only if it belongs to *project_id*."""
        return self.db.query(Version).filter(
            Version.id == version_id,
            Version.project_id == project_id,
        ).first()

    def ordered_by_time(self, project_id: str) -> Query:
        """Query of the project's versions, oldest first. Lazy and re-iterable."""
        return self.db.query(Version).filter(
            Version.project_id == project_id
        ).order_by(Version.created_at.asc())

    def point_project_at(self, project_id: str, version: Version) -> int:
        """Copy *version*'s code into the project and repoint it, as one UPDATE.

        Returns the number of rows updated.
        """
        return self.db.query(Project).filter(Project.id == project_id).update(
            {
                Project.current_code: version.code,
                Project.current_version_index: version.id,
            },
            synchronize_session="fetch",
        )
