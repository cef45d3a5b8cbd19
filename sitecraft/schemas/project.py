"""Project, version, and conversation schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal, Optional


class ProjectCreate(BaseModel):
    """Schema for starting a project from an initial prompt."""
    prompt: str = Field(..., description="Natural-language description of the website")
    name: Optional[str] = Field(None, description="Display name (derived from the prompt if omitted)")

    model_config = {
        "json_schema_extra": {
            "examples": [{"prompt": "A landing page for a neighbourhood bakery with an order form"}]
        }
    }


class RevisionRequest(BaseModel):
    """Free-text change request. Emptiness is checked by the workflow."""
    message: str = ""


class SaveCodeRequest(BaseModel):
    """Literal code to store as the project's current code."""
    code: str = ""


class MessageResponse(BaseModel):
    message: str


class VersionResponse(BaseModel):
    id: str
    project_id: str
    code: str
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ConversationTurnResponse(BaseModel):
    id: int
    role: str
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TimelineEntry(BaseModel):
    """One row of the chronological chat/version display."""
    kind: Literal["message", "version"]
    created_at: datetime
    role: Optional[str] = None
    content: Optional[str] = None
    version_id: Optional[str] = None
    description: Optional[str] = None
    is_current: bool = False


class ProjectSummary(BaseModel):
    """List-view projection without code or history."""
    id: str
    name: str
    initial_prompt: str
    current_version_index: Optional[str] = None
    is_published: bool
    has_code: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectDetail(BaseModel):
    """Full project state for the editor view."""
    id: str
    user_id: str
    name: str
    initial_prompt: str
    current_code: str
    current_version_index: Optional[str] = None
    is_published: bool
    created_at: datetime
    updated_at: datetime
    versions: List[VersionResponse] = []
    conversation: List[ConversationTurnResponse] = []
    timeline: List[TimelineEntry] = []


class PublishedProjectSummary(BaseModel):
    id: str
    name: str
    owner_name: str
    updated_at: datetime


class PublishedProjectCode(BaseModel):
    id: str
    code: str


class PublishToggleResponse(BaseModel):
    id: str
    is_published: bool
    message: str


class CreditTransactionResponse(BaseModel):
    kind: str
    amount: int
    reason: Optional[str] = None
    project_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CreditsResponse(BaseModel):
    """Balance plus the most recent movements, newest first."""
    user_id: str
    credits: int
    transactions: List[CreditTransactionResponse] = []
