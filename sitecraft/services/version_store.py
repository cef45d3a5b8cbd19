"""Version store — immutable code snapshots and the project's current pointer.

``append`` never moves the pointer; callers decide when a snapshot becomes
current. ``set_current`` writes the pointer and the denormalized code in a
single UPDATE so readers never observe one without the other.
"""

import logging

from sqlalchemy.orm import Query, Session

from ..exceptions import VersionNotFoundError, ProjectNotFoundError
from ..models import Project, Version
from ..repositories import ProjectRepository, VersionRepository

logger = logging.getLogger(__name__)


class VersionStore:

    def __init__(self, db: Session):
        self.db = db
        self.version_repo = VersionRepository(db)
        self.project_repo = ProjectRepository(db)

    def append(self, project_id: str, code: str, description: str, commit: bool = True) -> Version:
        """Store a new snapshot of *code* for the project.

        With ``commit=False`` the snapshot is only flushed, so a following
        ``set_current`` commits both writes together.
        """
        version = self.version_repo.create(project_id, code, description)
        if commit:
            self.db.commit()
        logger.info(
            "Stored version %s", version.id,
            extra={"project_id": project_id, "code_length": len(code)},
        )
        return version

    def set_current(self, project_id: str, version_id: str) -> Project:
        """Make *version_id* the project's current version.

        Raises:
            VersionNotFoundError: the version does not belong to the project.
        """
        version = self.get_for_project(project_id, version_id)
        updated = self.version_repo.point_project_at(project_id, version)
        if updated == 0:
            self.db.rollback()
            raise ProjectNotFoundError(project_id)
        self.db.commit()

        logger.info("Current version is now %s", version_id, extra={"project_id": project_id})
        return self.project_repo.get_by_id(project_id)

    def get_for_project(self, project_id: str, version_id: str) -> Version:
        """The version, only if it belongs to *project_id*."""
        version = self.version_repo.get_for_project(project_id, version_id)
        if version is None:
            raise VersionNotFoundError(version_id)
        return version

    def list_ordered_by_time(self, project_id: str) -> Query:
        """Versions oldest first.

        The returned query is lazy and can be iterated any number of times;
        each iteration reads the current state of the table.
        """
        return self.version_repo.ordered_by_time(project_id)
