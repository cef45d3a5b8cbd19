"""Website project model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Index, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base


def utcnow() -> datetime:
    """Application-side timestamp. Keeps microseconds on every backend."""
    return datetime.now(timezone.utc)


class Project(Base):
    """One website-building session owned by a single user.

    ``current_code`` is a denormalized copy of the active version's code.
    ``current_version_index`` names that version, or is NULL when no version
    exists yet or after a manual save decoupled the code from history.
    """

    __tablename__ = "projects"
    __table_args__ = (
        Index("ix_projects_user_id", "user_id"),
        Index("ix_projects_is_published", "is_published"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(50), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    initial_prompt = Column(Text, nullable=False)

    current_code = Column(Text, nullable=False, default="")
    current_version_index = Column(String(36), nullable=True)

    is_published = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User", back_populates="projects")
    versions = relationship(
        "Version",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Version.created_at",
    )
    conversation = relationship(
        "ConversationTurn",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ConversationTurn.id",
    )
