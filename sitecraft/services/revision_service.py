"""Revision workflow — turns one user instruction into a new current version.

States, in order::

    Idle -> CreditCheck -> LoggingRequest -> Enhancing -> LoggingEnhancement
         -> Generating -> Sanitizing -> Persisting -> LoggingSuccess -> Done

with ``Compensating -> LoggingFailure -> Failed`` reachable from any step
after the debit. A shortfall at CreditCheck ends the attempt before any
side effect.

Compensation contract: once credits are debited, the attempt either stores
exactly one Version and logs the success turn, or refunds the debit exactly
once and logs exactly one failure turn. Enhancement is best-effort and falls
back to the raw instruction; code generation is mandatory.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.project_locks import project_lock
from ..exceptions import (
    GenerationFailedError,
    InternalError,
    ValidationError,
)
from ..models.conversation import ROLE_ASSISTANT, ROLE_USER
from ..repositories import ProjectRepository
from . import prompts
from .content_utils import sanitize_generated_code
from .conversation_log import ConversationLog
from .credit_ledger import CreditLedger
from .generation_client import EmptyGenerationError, GenerationClient, GenerationError
from .version_store import VersionStore

logger = logging.getLogger(__name__)

REVISION_REASON = "revision"


class RevisionService:
    """Runs the revision workflow for one request, synchronously."""

    def __init__(self, db: Session, generation_client: Optional[GenerationClient] = None):
        self.db = db
        self.projects = ProjectRepository(db)
        self.ledger = CreditLedger(db)
        self.conversation = ConversationLog(db)
        self.versions = VersionStore(db)
        self.generator = generation_client or GenerationClient()

    def make_revision(self, user_id: str, project_id: str, message: Optional[str]) -> str:
        """Apply *message* to the project's code and make the result current.

        Returns:
            Human-readable acknowledgement. The new code is not returned;
            callers re-fetch the project.

        Raises:
            ValidationError: empty instruction.
            ProjectNotFoundError: project missing or not owned by *user_id*.
            InsufficientCreditsError: balance below the revision cost.
            GenerationFailedError: code generation failed (debit refunded).
            InternalError: any other failure after the debit (debit refunded).
        """
        instruction = message.strip() if isinstance(message, str) else ""
        if not instruction:
            raise ValidationError("Please enter a valid message", field="message")

        with project_lock(project_id):
            project = self.projects.get_owned(project_id, user_id)
            self.db.refresh(project)

            cost = settings.revision_cost
            self.ledger.debit(user_id, cost, REVISION_REASON, project_id=project_id)

            try:
                self.conversation.append(project_id, ROLE_USER, instruction)

                enhanced = self._enhance(instruction)
                self.conversation.append(
                    project_id, ROLE_ASSISTANT, prompts.MSG_ENHANCED.format(prompt=enhanced)
                )
                self.conversation.append(project_id, ROLE_ASSISTANT, prompts.MSG_GENERATING)

                current_code = self.projects.get_by_id(project_id).current_code or ""
                code = self._generate(current_code, enhanced)

                version = self.versions.append(
                    project_id, code, prompts.VERSION_DESCRIPTION, commit=False
                )
                self.versions.set_current(project_id, version.id)
            except Exception as exc:
                self._compensate(user_id, project_id, cost, exc)
                if isinstance(exc, GenerationError):
                    raise GenerationFailedError() from exc
                raise InternalError() from exc

            self.conversation.append(project_id, ROLE_ASSISTANT, prompts.MSG_SUCCESS)

        logger.info(
            "Revision applied",
            extra={"project_id": project_id, "user_id": user_id, "version_id": version.id},
        )
        return prompts.RESPONSE_REVISION_OK

    def _enhance(self, instruction: str) -> str:
        """Best-effort rewrite of the instruction. Never raises."""
        try:
            enhanced = self.generator.complete(
                prompts.ENHANCE_SYSTEM_PROMPT,
                prompts.enhance_user_prompt(instruction),
            )
        except GenerationError as e:
            logger.warning("Prompt enhancement failed, using raw instruction: %s", e)
            return instruction
        return enhanced.strip() or instruction

    def _generate(self, current_code: str, instruction: str) -> str:
        """Mandatory code generation. Raises GenerationError on failure or empty output."""
        raw = self.generator.complete(
            prompts.CODE_SYSTEM_PROMPT,
            prompts.code_user_prompt(current_code, instruction),
        )
        code = sanitize_generated_code(raw)
        if not code:
            raise EmptyGenerationError("Generated output was empty after sanitizing")
        return code

    def _compensate(self, user_id: str, project_id: str, cost: int, exc: Exception) -> None:
        """Refund the debit and log the failure turn, exactly once each."""
        logger.error(
            "Revision failed, refunding %d credits", cost,
            exc_info=exc,
            extra={"project_id": project_id, "user_id": user_id},
        )
        self.db.rollback()
        self.ledger.credit(user_id, cost, REVISION_REASON, project_id=project_id)
        self.conversation.append(project_id, ROLE_ASSISTANT, prompts.MSG_FAILURE)
