"""
Revision lifecycle: statuses, allowed transitions and guarded status writes.

    draft ----------submit--> pending_review --approve--> approved
    rejected -------submit--> pending_review --reject---> rejected

Status writes are conditional updates on the expected source statuses, so
two requests racing on one revision cannot both move it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidStateTransitionError
from app.db.models import ComicRevision


class RevisionStatus(str, Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class ComicStatus(str, Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    REJECTED = "rejected"
    ARCHIVED = "archived"


EDITABLE_STATUSES = frozenset({RevisionStatus.DRAFT.value, RevisionStatus.REJECTED.value})

TRANSITIONS: dict[str, tuple[frozenset[str], RevisionStatus]] = {
    "submit": (EDITABLE_STATUSES, RevisionStatus.PENDING_REVIEW),
    "approve": (frozenset({RevisionStatus.PENDING_REVIEW.value}), RevisionStatus.APPROVED),
    "reject": (frozenset({RevisionStatus.PENDING_REVIEW.value}), RevisionStatus.REJECTED),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_editable(status: str) -> bool:
    return status in EDITABLE_STATUSES


def ensure_transition(status: str, action: str) -> RevisionStatus:
    """Return the target status of ``action`` from ``status`` or raise."""
    sources, target = TRANSITIONS[action]
    if status not in sources:
        raise InvalidStateTransitionError(action, status)
    return target


def apply_transition(db: Session, revision: ComicRevision, action: str, **values: Any) -> None:
    """Move ``revision`` along ``action`` inside the caller's transaction.

    ``values`` are written in the same statement as the new status.
    """
    target = ensure_transition(revision.status, action)
    sources, _ = TRANSITIONS[action]
    result = db.execute(
        update(ComicRevision)
        .where(
            ComicRevision.revision_id == revision.revision_id,
            ComicRevision.status.in_(sources),
        )
        .values(status=target.value, **values)
    )
    if result.rowcount != 1:
        db.refresh(revision)
        raise InvalidStateTransitionError(action, revision.status)
