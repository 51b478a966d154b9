"""
Publication of an approved revision into reader-facing page records.

Everything happens in one transaction: the comic summary is recomputed from
the draft, the previous page set is deleted, one page per scene is derived,
and the revision is marked approved. Any persistence failure rolls all of it
back and leaves the revision pending review.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PublishError
from app.core.metrics import record_published_pages, track_publish
from app.core.request_context import log_context
from app.core.settings import settings
from app.core.telemetry import trace_span
from app.db.models import Comic, ComicPage, ComicRevision, User
from app.db.session import unit_of_work
from app.graphs.model import DraftGraph, SceneNode
from app.graphs.normalize import normalize_payload
from app.services.audit import log_audit_entry
from app.services.lifecycle import ComicStatus, apply_transition, utcnow
from app.services.uploads import resolve_file_urls


logger = logging.getLogger(__name__)

FULL_FRAME_LAYOUT = {"x": 0, "y": 0, "width": 100, "height": 100}
DEFAULT_ENDING_TYPE = "neutral"


def author_display_name(user: User | None) -> str | None:
    if user is None:
        return None
    return user.creator_nick or user.display_name or None


def order_nodes(graph: DraftGraph) -> list[SceneNode]:
    """Scenes by ``order``; ties keep their position in the draft."""
    indexed = sorted(enumerate(graph.nodes), key=lambda item: (item[1].order, item[0]))
    return [node for _, node in indexed]


def build_page_records(
    comic_id: uuid.UUID,
    graph: DraftGraph,
    image_urls: dict[str, str] | None = None,
) -> list[ComicPage]:
    image_urls = image_urls or {}
    pages: list[ComicPage] = []
    for page_number, node in enumerate(order_nodes(graph), start=1):
        image_url = node.image_url or image_urls.get(node.image_file_id or "", "")
        pages.append(
            ComicPage(
                comic_id=comic_id,
                page_id=node.id,
                page_number=page_number,
                title=node.title or None,
                panels=[
                    {
                        "id": f"{node.id}-panel-1",
                        "order": 1,
                        "imageUrl": image_url,
                        "layout": dict(FULL_FRAME_LAYOUT),
                        "dialogues": [],
                    }
                ],
                choices=[
                    {
                        "id": button.id,
                        "choiceId": button.id,
                        "text": button.text,
                        "targetPageId": button.target_node_id,
                        "position": {"x": button.x, "y": button.y, "w": button.w, "h": button.h},
                        "style": "normal",
                    }
                    for button in node.buttons
                ],
                is_ending=node.is_ending,
                ending_type=DEFAULT_ENDING_TYPE if node.is_ending else None,
                ending_title=(node.title or settings.default_ending_title) if node.is_ending else None,
            )
        )
    return pages


class PublishService:
    def __init__(self, db: Session):
        self.db = db

    def publish(self, comic: Comic, revision: ComicRevision, *, reviewer_id: uuid.UUID) -> None:
        graph = normalize_payload(revision.payload)
        with log_context(comic_id=comic.comic_id, revision_id=revision.revision_id):
            with trace_span("comic.publish", comic_id=comic.comic_id, revision_id=revision.revision_id):
                with track_publish():
                    page_count = self._publish(comic, revision, graph, reviewer_id)
            record_published_pages(page_count)
            logger.info(
                "comic_published",
                extra={"pages": page_count, "endings": comic.total_endings, "version": revision.version},
            )

    def _publish(
        self, comic: Comic, revision: ComicRevision, graph: DraftGraph, reviewer_id: uuid.UUID
    ) -> int:
        previous_revision_id = comic.published_revision_id
        try:
            with unit_of_work(self.db):
                self._refresh_summary(comic, revision, graph)

                self.db.execute(delete(ComicPage).where(ComicPage.comic_id == comic.comic_id))
                file_ids = [node.image_file_id for node in graph.nodes if node.image_file_id and not node.image_url]
                pages = build_page_records(comic.comic_id, graph, resolve_file_urls(self.db, file_ids))
                self.db.add_all(pages)
                self.db.flush()

                apply_transition(
                    self.db,
                    revision,
                    "approve",
                    reviewed_at=utcnow(),
                    reviewed_by=reviewer_id,
                    rejection_reason=None,
                )
                log_audit_entry(
                    self.db,
                    entity_type="comic",
                    entity_id=comic.comic_id,
                    action="published",
                    old_value={"published_revision_id": str(previous_revision_id) if previous_revision_id else None},
                    new_value={"published_revision_id": str(revision.revision_id), "pages": len(pages)},
                    actor_id=reviewer_id,
                    commit=False,
                )
        except SQLAlchemyError as exc:
            logger.exception("publish_failed")
            raise PublishError(
                f"publication of revision {revision.revision_id} rolled back: {exc}",
                detail="publication failed; the revision is still pending review",
            ) from exc

        self.db.refresh(revision)
        self.db.refresh(comic)
        return len(pages)

    def _refresh_summary(self, comic: Comic, revision: ComicRevision, graph: DraftGraph) -> None:
        meta = graph.comic_meta
        author = self.db.get(User, comic.author_id) if comic.author_id else None

        comic.title = meta.title or comic.title
        comic.description = meta.description or comic.description
        comic.cover_image = meta.cover_image or comic.cover_image
        comic.genres = list(meta.genres)
        comic.tags = list(meta.tags)
        comic.start_page_id = meta.start_node_id or comic.start_page_id
        comic.estimated_minutes = meta.estimated_minutes or comic.estimated_minutes
        comic.total_pages = len(graph.nodes)
        comic.total_endings = graph.ending_count
        comic.author_name = author_display_name(author) or comic.author_name
        comic.status = ComicStatus.PUBLISHED.value
        comic.published_revision_id = revision.revision_id
