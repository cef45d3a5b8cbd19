"""Conversation turn repository."""

from typing import List

from ..models import ConversationTurn


class ConversationRepository:
    """Insert and read conversation turns. There is no update or delete."""

    def __init__(self, db):
        self.db = db

    def create(self, project_id: str, role: str, content: str) -> ConversationTurn:
        turn = ConversationTurn(project_id=project_id, role=role, content=content)
        self.db.add(turn)
        self.db.flush()
        return turn

    def get_by_project(self, project_id: str) -> List[ConversationTurn]:
        """Turns in insertion order."""
        return (
            self.db.query(ConversationTurn)
            .filter(ConversationTurn.project_id == project_id)
            .order_by(ConversationTurn.created_at.asc(), ConversationTurn.id.asc())
            .all()
        )
