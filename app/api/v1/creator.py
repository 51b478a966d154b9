import uuid

from fastapi import APIRouter, Response

from app.api.deps import CreatorDep, DbSessionDep
from app.api.v1.schemas import (
    ComicCreate,
    ComicDraftRead,
    ComicListItem,
    ComicRead,
    DraftCheckRequest,
    DraftUpdate,
    RevisionRead,
    RevisionSummary,
    SubmitResponse,
    ValidationReportRead,
)
from app.graphs.normalize import normalize_payload
from app.services.revisions import Actor, RevisionService


router = APIRouter(prefix="/creator", tags=["creator"])


@router.post("/comics", response_model=ComicDraftRead, status_code=201)
def create_comic(payload: ComicCreate, db=DbSessionDep, actor: Actor = CreatorDep):
    comic, revision = RevisionService(db).create_comic(
        actor,
        title=payload.title,
        description=payload.description,
        cover_file_id=payload.cover_file_id,
        genres=payload.genres,
        tags=payload.tags,
        estimated_minutes=payload.estimated_minutes,
    )
    return ComicDraftRead(
        comic=ComicRead.model_validate(comic),
        revision=RevisionRead.model_validate(revision),
    )


@router.get("/comics", response_model=list[ComicListItem])
def list_comics(db=DbSessionDep, actor: Actor = CreatorDep):
    items: list[ComicListItem] = []
    for comic, latest in RevisionService(db).list_comics(actor):
        item = ComicListItem.model_validate(comic)
        if latest is not None:
            item.latest_revision = RevisionSummary.model_validate(latest)
        items.append(item)
    return items


@router.get("/comics/{comic_id}/draft", response_model=ComicDraftRead)
def get_draft(comic_id: uuid.UUID, db=DbSessionDep, actor: Actor = CreatorDep):
    svc = RevisionService(db)
    comic = svc.get_comic_for(actor, comic_id)
    latest = svc.require_latest_revision(comic.comic_id)
    revision = RevisionRead.model_validate(latest)
    revision.payload = normalize_payload(latest.payload).to_payload()
    return ComicDraftRead(comic=ComicRead.model_validate(comic), revision=revision)


@router.put("/comics/{comic_id}/draft", response_model=RevisionRead)
def save_draft(comic_id: uuid.UUID, payload: DraftUpdate, db=DbSessionDep, actor: Actor = CreatorDep):
    if payload.payload is None:
        raise ValueError("payload is required")
    svc = RevisionService(db)
    comic = svc.get_comic_for(actor, comic_id)
    return svc.save_draft(actor, comic, payload.payload)


@router.post("/comics/{comic_id}/validate", response_model=ValidationReportRead)
def validate_draft(
    comic_id: uuid.UUID,
    payload: DraftCheckRequest | None = None,
    db=DbSessionDep,
    actor: Actor = CreatorDep,
):
    svc = RevisionService(db)
    comic = svc.get_comic_for(actor, comic_id)
    report = svc.check_draft(comic, payload.payload if payload else None)
    return ValidationReportRead(ok=report.ok, errors=report.errors, warnings=report.warnings)


@router.post("/comics/{comic_id}/submit", response_model=SubmitResponse)
def submit_draft(comic_id: uuid.UUID, db=DbSessionDep, actor: Actor = CreatorDep):
    svc = RevisionService(db)
    comic = svc.get_comic_for(actor, comic_id)
    result = svc.submit(actor, comic)
    return SubmitResponse(
        revision=RevisionRead.model_validate(result.revision),
        comic_status=result.comic_status,
        warnings=result.warnings,
    )


@router.delete("/comics/{comic_id}", status_code=204)
def delete_comic(comic_id: uuid.UUID, db=DbSessionDep, actor: Actor = CreatorDep):
    svc = RevisionService(db)
    comic = svc.get_comic_for(actor, comic_id)
    svc.delete_comic(actor, comic)
    return Response(status_code=204)
