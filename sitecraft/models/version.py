"""Version model."""

import uuid

from sqlalchemy import Column, Index, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base
from .project import utcnow


class Version(Base):
    """Immutable code snapshot. Rows are inserted, never updated."""

    __tablename__ = "versions"
    __table_args__ = (
        Index("ix_versions_project_id", "project_id"),
        Index("ix_versions_created_at", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    code = Column(Text, nullable=False)
    description = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    project = relationship("Project", back_populates="versions")
