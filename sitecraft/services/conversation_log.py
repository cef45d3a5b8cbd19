"""Conversation log — append-only audit trail of user and assistant turns.

Each append is committed on its own so a client polling the project sees
progress while a revision is still running.
"""

import logging

from sqlalchemy.orm import Session

from ..models.conversation import ConversationTurn, ROLES
from ..repositories import ConversationRepository

logger = logging.getLogger(__name__)


class ConversationLog:

    def __init__(self, db: Session):
        self.db = db
        self.repo = ConversationRepository(db)

    def append(self, project_id: str, role: str, content: str) -> int:
        """Store one turn and return its id. Never deduplicates."""
        if role not in ROLES:
            raise ValueError(f"Unknown conversation role: {role!r}")

        turn = self.repo.create(project_id, role, content)
        self.db.commit()
        logger.debug("Appended %s turn %d", role, turn.id, extra={"project_id": project_id})
        return turn.id

    def list_for_project(self, project_id: str) -> list[ConversationTurn]:
        return self.repo.get_by_project(project_id)
