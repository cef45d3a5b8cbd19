"""Business logic services."""

from .credit_ledger import CreditLedger
from .conversation_log import ConversationLog
from .generation_client import GenerationClient, GenerationError, EmptyGenerationError
from .version_store import VersionStore
from .revision_service import RevisionService
from .rollback_service import RollbackService
from .project_service import ProjectService

__all__ = [
    "CreditLedger",
    "ConversationLog",
    "GenerationClient",
    "GenerationError",
    "EmptyGenerationError",
    "VersionStore",
    "RevisionService",
    "RollbackService",
    "ProjectService",
]
