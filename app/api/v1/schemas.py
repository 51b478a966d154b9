import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ComicCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    cover_file_id: str | None = None
    genres: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    estimated_minutes: int | None = Field(default=None, ge=1, le=999)


class ComicRead(BaseModel):
    comic_id: uuid.UUID
    title: str
    description: str
    cover_image: str
    author_id: uuid.UUID | None
    author_name: str
    status: str
    published_revision_id: uuid.UUID | None
    genres: list[str]
    tags: list[str]
    start_page_id: str
    total_pages: int
    total_endings: int
    estimated_minutes: int

    model_config = {"from_attributes": True}


class RevisionSummary(BaseModel):
    revision_id: uuid.UUID
    version: int
    status: str
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    model_config = {"from_attributes": True}


class RevisionRead(RevisionSummary):
    comic_id: uuid.UUID
    reviewed_by: uuid.UUID | None = None
    created_by: uuid.UUID
    payload: dict[str, Any]


class ComicListItem(ComicRead):
    latest_revision: RevisionSummary | None = None


class ComicDraftRead(BaseModel):
    comic: ComicRead
    revision: RevisionRead


class DraftUpdate(BaseModel):
    """The editor sends the whole draft graph; its shape is repaired on save."""

    payload: Any


class DraftCheckRequest(BaseModel):
    payload: Any = None


class ValidationReportRead(BaseModel):
    ok: bool
    errors: list[str]
    warnings: list[str]


class SubmitResponse(BaseModel):
    revision: RevisionRead
    comic_status: str
    warnings: list[str]


class RejectRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=2000)


class ModerationResult(BaseModel):
    revision_id: uuid.UUID
    comic_id: uuid.UUID
    status: str


class PageRead(BaseModel):
    page_id: str
    page_number: int
    title: str | None
    panels: list[dict[str, Any]]
    choices: list[dict[str, Any]]
    is_ending: bool
    ending_type: str | None
    ending_title: str | None

    model_config = {"from_attributes": True}
