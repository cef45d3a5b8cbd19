"""Data access repositories."""

from .base import BaseRepository
from .project_repository import ProjectRepository
from .version_repository import VersionRepository
from .conversation_repository import ConversationRepository

__all__ = [
    "BaseRepository",
    "ProjectRepository",
    "VersionRepository",
    "ConversationRepository",
]
