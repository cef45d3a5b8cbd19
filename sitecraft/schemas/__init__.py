"""Pydantic schemas for API validation."""

from .project import (
    ProjectCreate,
    RevisionRequest,
    SaveCodeRequest,
    MessageResponse,
    VersionResponse,
    ConversationTurnResponse,
    TimelineEntry,
    ProjectSummary,
    ProjectDetail,
    PublishedProjectSummary,
    PublishedProjectCode,
    PublishToggleResponse,
    CreditsResponse,
    CreditTransactionResponse,
)

__all__ = [
    "ProjectCreate",
    "RevisionRequest",
    "SaveCodeRequest",
    "MessageResponse",
    "VersionResponse",
    "ConversationTurnResponse",
    "TimelineEntry",
    "ProjectSummary",
    "ProjectDetail",
    "PublishedProjectSummary",
    "PublishedProjectCode",
    "PublishToggleResponse",
    "CreditsResponse",
    "CreditTransactionResponse",
]
