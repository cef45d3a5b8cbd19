"""Rollback workflow — point a project back at any of its stored versions.

Free of charge and non-destructive: versions newer than the target stay in
history and can be made current again later. Each call appends a turn even
when the project already points at the target, since the log records
actions rather than states.
"""

import logging

from sqlalchemy.orm import Session

from ..core.project_locks import project_lock
from ..models.conversation import ROLE_ASSISTANT
from ..repositories import ProjectRepository
from . import prompts
from .conversation_log import ConversationLog
from .version_store import VersionStore

logger = logging.getLogger(__name__)


class RollbackService:

    def __init__(self, db: Session):
        self.db = db
        self.projects = ProjectRepository(db)
        self.versions = VersionStore(db)
        self.conversation = ConversationLog(db)

    def rollback(self, user_id: str, project_id: str, version_id: str) -> str:
        """Make *version_id* current for the caller's project.

        Raises:
            ProjectNotFoundError: project missing or not owned by *user_id*.
            VersionNotFoundError: version missing or from another project.
                The project is left untouched.
        """
        with project_lock(project_id):
            self.projects.get_owned(project_id, user_id)
            # Raises VersionNotFoundError before any write when the version
            # belongs to another project.
            self.versions.set_current(project_id, version_id)
            self.conversation.append(project_id, ROLE_ASSISTANT, prompts.MSG_ROLLBACK)

        logger.info(
            "Rolled back to version %s", version_id,
            extra={"project_id": project_id, "user_id": user_id},
        )
        return prompts.RESPONSE_ROLLBACK_OK
