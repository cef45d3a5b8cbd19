"""Conversation turn model."""

from sqlalchemy import Column, Index, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base
from .project import utcnow

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLES = frozenset({ROLE_USER, ROLE_ASSISTANT})


class ConversationTurn(Base):
    """Append-only chat entry attached to a project.

    The autoincrement id breaks timestamp ties so insertion order is
    preserved even when two turns land in the same microsecond.
    """

    __tablename__ = "conversation_turns"
    __table_args__ = (
        Index("ix_conversation_turns_project_id", "project_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(10), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    project = relationship("Project", back_populates="conversation")
