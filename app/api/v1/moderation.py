import uuid

from fastapi import APIRouter

from app.api.deps import DbSessionDep, ModeratorDep
from app.api.v1.schemas import ModerationResult, RejectRequest, RevisionRead
from app.services.lifecycle import RevisionStatus
from app.services.revisions import Actor, RevisionService


router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.get("/revisions", response_model=list[RevisionRead])
def list_revisions(
    status: str = RevisionStatus.PENDING_REVIEW.value,
    db=DbSessionDep,
    actor: Actor = ModeratorDep,
):
    return RevisionService(db).list_revisions(status)


@router.get("/revisions/{revision_id}", response_model=RevisionRead)
def get_revision(revision_id: uuid.UUID, db=DbSessionDep, actor: Actor = ModeratorDep):
    return RevisionService(db).get_revision(revision_id)


@router.post("/revisions/{revision_id}/approve", response_model=ModerationResult)
def approve_revision(revision_id: uuid.UUID, db=DbSessionDep, actor: Actor = ModeratorDep):
    revision = RevisionService(db).approve(actor, revision_id)
    return ModerationResult(revision_id=revision.revision_id, comic_id=revision.comic_id, status=revision.status)


@router.post("/revisions/{revision_id}/reject", response_model=ModerationResult)
def reject_revision(
    revision_id: uuid.UUID,
    payload: RejectRequest,
    db=DbSessionDep,
    actor: Actor = ModeratorDep,
):
    revision = RevisionService(db).reject(actor, revision_id, payload.reason)
    return ModerationResult(revision_id=revision.revision_id, comic_id=revision.comic_id, status=revision.status)
