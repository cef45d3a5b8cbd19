"""Database models."""

from .user import User, CreditTransaction
from .project import Project
from .version import Version
from .conversation import ConversationTurn

__all__ = [
    "User", "CreditTransaction",
    "Project", "Version", "ConversationTurn",
]
