import uuid

from fastapi import APIRouter
from sqlalchemy import select

from app.api.deps import DbSessionDep
from app.api.v1.schemas import PageRead
from app.core.exceptions import EntityNotFoundError
from app.db.models import Comic, ComicPage


router = APIRouter(tags=["comics"])


@router.get("/comics/{comic_id}/pages", response_model=list[PageRead])
def list_published_pages(comic_id: uuid.UUID, db=DbSessionDep):
    if db.get(Comic, comic_id) is None:
        raise EntityNotFoundError("Comic", comic_id)
    stmt = select(ComicPage).where(ComicPage.comic_id == comic_id).order_by(ComicPage.page_number.asc())
    return list(db.execute(stmt).scalars().all())
