"""Project service — project lifecycle outside the revision/rollback workflows.

Creation, the full project fetch (with the chronological timeline merged
at read time), manual save, publishing, and cascade deletion.
"""

import heapq
from datetime import datetime, timezone
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.project_locks import project_lock
from ..exceptions import InsufficientCreditsError, ProjectNotFoundError, ValidationError
from ..models import ConversationTurn, Project, Version
from ..repositories import ProjectRepository
from ..schemas.project import (
    ConversationTurnResponse,
    ProjectDetail,
    ProjectSummary,
    PublishedProjectCode,
    PublishedProjectSummary,
    TimelineEntry,
    VersionResponse,
)
from .content_utils import derive_project_name
from .conversation_log import ConversationLog
from .credit_ledger import CreditLedger
from .version_store import VersionStore

logger = logging.getLogger(__name__)


def _timeline_key(entry: TimelineEntry) -> datetime:
    # SQLite hands back naive UTC; freshly created rows still carry tzinfo.
    ts = entry.created_at
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def merge_timeline(
    turns: Iterable[ConversationTurn],
    versions: Iterable[Version],
    current_version_id: Optional[str] = None,
) -> List[TimelineEntry]:
    """Interleave conversation turns and versions by timestamp.

    Both inputs must already be in ascending time order. The merge is
    stable and puts a turn before a version stamped with the same instant.
    Nothing links a turn to a version; position is purely chronological.
    """
    message_entries = (
        TimelineEntry(kind="message", created_at=t.created_at, role=t.role, content=t.content)
        for t in turns
    )
    version_entries = (
        TimelineEntry(
            kind="version",
            created_at=v.created_at,
            version_id=v.id,
            description=v.description,
            is_current=v.id == current_version_id,
        )
        for v in versions
    )
    return list(heapq.merge(message_entries, version_entries, key=_timeline_key))


class ProjectService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProjectRepository(db)
        self.conversation = ConversationLog(db)
        self.versions = VersionStore(db)
        self.ledger = CreditLedger(db)

    def create_project(self, user_id: str, prompt: Optional[str], name: Optional[str] = None) -> Project:
        """Store a new project with empty code and no versions.

        The first version comes from running the revision workflow with the
        initial prompt; see ``api.projects.create_project``. The balance
        check here only rejects obvious shortfalls early, the debit itself
        happens inside that workflow.
        """
        prompt = prompt.strip() if isinstance(prompt, str) else ""
        if not prompt:
            raise ValidationError("Please enter a prompt describing your website", field="prompt")

        if self.ledger.balance(user_id) < settings.revision_cost:
            raise InsufficientCreditsError(user_id, settings.revision_cost)

        display_name = (name or "").strip() or derive_project_name(prompt)
        project = self.repo.create(user_id, display_name, prompt)
        self.db.commit()
        self.db.refresh(project)

        logger.info("Created project %s", project.id, extra={"user_id": user_id})
        return project

    def get_project_detail(self, user_id: str, project_id: str) -> ProjectDetail:
        """Project plus ordered versions, conversation, and merged timeline."""
        project = self.repo.get_owned(project_id, user_id)
        versions = list(self.versions.list_ordered_by_time(project_id))
        turns = self.conversation.list_for_project(project_id)

        return ProjectDetail(
            id=project.id,
            user_id=project.user_id,
            name=project.name,
            initial_prompt=project.initial_prompt,
            current_code=project.current_code or "",
            current_version_index=project.current_version_index,
            is_published=project.is_published,
            created_at=project.created_at,
            updated_at=project.updated_at,
            versions=[VersionResponse.model_validate(v) for v in versions],
            conversation=[ConversationTurnResponse.model_validate(t) for t in turns],
            timeline=merge_timeline(turns, versions, project.current_version_index),
        )

    def list_projects(self, user_id: str, skip: int = 0, limit: int = 50) -> List[ProjectSummary]:
        return [
            ProjectSummary(
                id=p.id,
                name=p.name,
                initial_prompt=p.initial_prompt,
                current_version_index=p.current_version_index,
                is_published=p.is_published,
                has_code=bool(p.current_code),
                created_at=p.created_at,
                updated_at=p.updated_at,
            )
            for p in self.repo.list_for_user(user_id, skip, limit)
        ]

    def save_code(self, user_id: str, project_id: str, code: Optional[str]) -> None:
        """Overwrite current_code with *code* and detach it from version history.

        Out-of-band: no credits, no version, no conversation turn.
        """
        code = code.strip() if isinstance(code, str) else ""
        if not code:
            raise ValidationError("Code cannot be empty", field="code")

        with project_lock(project_id):
            if self.repo.replace_code(project_id, user_id, code) == 0:
                self.db.rollback()
                raise ProjectNotFoundError(project_id)
            self.db.commit()
        logger.info("Saved code manually", extra={"project_id": project_id, "user_id": user_id})

    def toggle_publish(self, user_id: str, project_id: str) -> Project:
        project = self.repo.get_owned(project_id, user_id)
        project.is_published = not project.is_published
        self.db.commit()
        self.db.refresh(project)
        logger.info(
            "Project %s", "published" if project.is_published else "unpublished",
            extra={"project_id": project_id},
        )
        return project

    def delete_project(self, user_id: str, project_id: str) -> None:
        """Delete the project with all of its versions and conversation turns."""
        with project_lock(project_id):
            self.repo.delete_owned(project_id, user_id)
            self.db.commit()
        logger.info("Deleted project", extra={"project_id": project_id, "user_id": user_id})

    def list_published(self, skip: int = 0, limit: int = 50) -> List[PublishedProjectSummary]:
        return [
            PublishedProjectSummary(
                id=p.id,
                name=p.name,
                owner_name=p.owner.display_name if p.owner else "",
                updated_at=p.updated_at,
            )
            for p in self.repo.list_published(skip, limit)
        ]

    def get_published_code(self, project_id: str) -> PublishedProjectCode:
        """Public view. Unpublished or code-less projects look missing."""
        project = self.repo.get_by_id_optional(project_id)
        if project is None or not project.is_published or not project.current_code:
            raise ProjectNotFoundError(project_id)
        return PublishedProjectCode(id=project.id, code=project.current_code)

