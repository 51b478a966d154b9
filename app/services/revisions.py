"""
Comic drafts and their moderated revisions.

``RevisionService`` owns every write to a comic's revisions: creating the
first draft, saving edits (in place or as a new version), submitting for
review, and the moderator decisions. Approval delegates to
``PublishService`` inside the same transition.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DraftValidationError,
    EntityNotFoundError,
    InvalidStateTransitionError,
    PermissionDeniedError,
    RevisionConflictError,
)
from app.core.metrics import record_transition, record_validation
from app.core.request_context import log_context
from app.core.settings import settings
from app.db.models import Comic, ComicRevision, User
from app.db.session import unit_of_work
from app.graphs.model import DraftGraph, default_graph
from app.graphs.normalize import normalize_payload
from app.graphs.validation import ValidationPolicy, ValidationReport, validate_graph
from app.services.audit import log_audit_entry
from app.services.lifecycle import (
    EDITABLE_STATUSES,
    ComicStatus,
    RevisionStatus,
    apply_transition,
    ensure_transition,
    is_editable,
    utcnow,
)
from app.services.notifications import NotificationService
from app.services.publishing import PublishService, author_display_name
from app.services.uploads import UploadedFileChecker, resolve_cover_image


logger = logging.getLogger(__name__)

_VERSION_WRITE_ATTEMPTS = 3


@dataclass(frozen=True)
class Actor:
    """The acting user as reported by the identity service."""

    user_id: uuid.UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == settings.admin_role

    @property
    def is_moderator(self) -> bool:
        return self.role in settings.moderator_roles


@dataclass
class SubmitResult:
    revision: ComicRevision
    comic_status: str
    warnings: list[str]


class RevisionService:
    def __init__(self, db: Session, notifier: NotificationService | None = None):
        self.db = db
        self.notifier = notifier or NotificationService(db)

    # Lookups

    def get_comic(self, comic_id: uuid.UUID) -> Comic:
        comic = self.db.get(Comic, comic_id)
        if comic is None:
            raise EntityNotFoundError("Comic", comic_id)
        return comic

    def get_comic_for(self, actor: Actor, comic_id: uuid.UUID) -> Comic:
        comic = self.get_comic(comic_id)
        if not actor.is_admin and comic.author_id != actor.user_id:
            raise PermissionDeniedError(
                f"user {actor.user_id} has no access to comic {comic_id}",
                detail="no access to this comic",
            )
        return comic

    def get_revision(self, revision_id: uuid.UUID) -> ComicRevision:
        revision = self.db.get(ComicRevision, revision_id)
        if revision is None:
            raise EntityNotFoundError("Revision", revision_id)
        return revision

    def get_latest_revision(self, comic_id: uuid.UUID) -> ComicRevision | None:
        stmt = (
            select(ComicRevision)
            .where(ComicRevision.comic_id == comic_id)
            .order_by(desc(ComicRevision.version))
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def require_latest_revision(self, comic_id: uuid.UUID) -> ComicRevision:
        latest = self.get_latest_revision(comic_id)
        if latest is None:
            raise EntityNotFoundError("Draft", comic_id)
        return latest

    def list_comics(self, actor: Actor) -> list[tuple[Comic, ComicRevision | None]]:
        stmt = select(Comic).order_by(desc(Comic.created_at))
        if not actor.is_admin:
            stmt = stmt.where(Comic.author_id == actor.user_id)
        comics = list(self.db.execute(stmt).scalars().all())
        return [(comic, self.get_latest_revision(comic.comic_id)) for comic in comics]

    def list_revisions(self, status: str = RevisionStatus.PENDING_REVIEW.value) -> list[ComicRevision]:
        try:
            status = RevisionStatus(status).value
        except ValueError as exc:
            raise ValueError(f"unknown revision status: {status}") from exc
        stmt = (
            select(ComicRevision)
            .where(ComicRevision.status == status)
            .order_by(ComicRevision.submitted_at.asc(), ComicRevision.created_at.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # Creator operations

    def create_comic(
        self,
        actor: Actor,
        *,
        title: str,
        description: str,
        cover_file_id: str | None = None,
        genres: list[str] | None = None,
        tags: list[str] | None = None,
        estimated_minutes: int | None = None,
    ) -> tuple[Comic, ComicRevision]:
        graph = normalize_payload(
            default_graph(
                title,
                description,
                cover_file_id=cover_file_id,
                cover_image=resolve_cover_image(self.db, cover_file_id),
                genres=genres,
                tags=tags,
                estimated_minutes=estimated_minutes,
            )
        )
        meta = graph.comic_meta
        author = self.db.get(User, actor.user_id)

        comic = Comic(
            title=meta.title,
            description=meta.description,
            cover_image=meta.cover_image,
            author_id=actor.user_id,
            author_name=author_display_name(author) or settings.default_author_name,
            genres=list(meta.genres),
            tags=list(meta.tags),
            status=ComicStatus.DRAFT.value,
            start_page_id=meta.start_node_id,
            estimated_minutes=meta.estimated_minutes,
            total_pages=len(graph.nodes),
            total_endings=graph.ending_count,
        )
        with unit_of_work(self.db):
            if author is None:
                self.db.add(User(user_id=actor.user_id, role=actor.role))
                self.db.flush()
            self.db.add(comic)
            self.db.flush()
            revision = ComicRevision(
                comic_id=comic.comic_id,
                version=1,
                status=RevisionStatus.DRAFT.value,
                payload=graph.to_payload(),
                created_by=actor.user_id,
            )
            self.db.add(revision)
            self.db.flush()
            log_audit_entry(
                self.db,
                entity_type="comic",
                entity_id=comic.comic_id,
                action="created",
                new_value={"revision_id": str(revision.revision_id), "version": 1},
                actor_id=actor.user_id,
                commit=False,
            )
        self.db.refresh(comic)
        self.db.refresh(revision)
        logger.info("comic_created", extra={"target_comic": str(comic.comic_id)})
        return comic, revision

    def save_draft(self, actor: Actor, comic: Comic, raw_payload: object) -> ComicRevision:
        """Store an edited draft.

        Editable latest revisions are updated in place. A revision that is
        pending review or approved is left untouched and the edit becomes
        the next version.
        """
        graph = self._prepare_draft(raw_payload)
        payload = graph.to_payload()

        for _ in range(_VERSION_WRITE_ATTEMPTS):
            latest = self.require_latest_revision(comic.comic_id)
            if is_editable(latest.status):
                if self._edit_in_place(latest, payload):
                    return latest
                continue

            revision = ComicRevision(
                comic_id=comic.comic_id,
                version=latest.version + 1,
                status=RevisionStatus.DRAFT.value,
                payload=payload,
                created_by=actor.user_id,
            )
            self.db.add(revision)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                continue
            self.db.refresh(revision)
            with log_context(comic_id=comic.comic_id, revision_id=revision.revision_id):
                logger.info("revision_created", extra={"version": revision.version})
            log_audit_entry(
                self.db,
                entity_type="comic_revision",
                entity_id=revision.revision_id,
                action="created",
                new_value={"version": revision.version, "previous_status": latest.status},
                actor_id=actor.user_id,
            )
            return revision

        raise RevisionConflictError(
            "revision version conflict after retries",
            detail="the draft changed while saving; retry the save",
        )

    def _edit_in_place(self, latest: ComicRevision, payload: dict) -> bool:
        # the status may have moved on since latest was read
        result = self.db.execute(
            update(ComicRevision)
            .where(
                ComicRevision.revision_id == latest.revision_id,
                ComicRevision.status.in_(EDITABLE_STATUSES),
            )
            .values(payload=payload)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            return False
        self.db.commit()
        self.db.refresh(latest)
        return True

    def check_draft(self, comic: Comic, raw_payload: object | None = None) -> ValidationReport:
        """Editor feedback: lenient about unreachable scenes, no external lookups."""
        if raw_payload is None:
            raw_payload = self.require_latest_revision(comic.comic_id).payload
        report = validate_graph(normalize_payload(raw_payload), policy=ValidationPolicy.EDITOR)
        record_validation(ValidationPolicy.EDITOR.value, report.ok)
        return report

    def submit(self, actor: Actor, comic: Comic) -> SubmitResult:
        latest = self.require_latest_revision(comic.comic_id)
        with log_context(comic_id=comic.comic_id, revision_id=latest.revision_id):
            try:
                ensure_transition(latest.status, "submit")
            except InvalidStateTransitionError:
                record_transition("submit", False)
                raise

            graph = normalize_payload(latest.payload)
            report = validate_graph(
                graph,
                policy=ValidationPolicy.SUBMISSION,
                reference_check=UploadedFileChecker(self.db, actor.user_id, is_admin=actor.is_admin),
            )
            record_validation(ValidationPolicy.SUBMISSION.value, report.ok)
            if not report.ok:
                record_transition("submit", False)
                logger.info("revision_submit_rejected", extra={"error_count": len(report.errors)})
                raise DraftValidationError(report.errors, report.warnings)

            previous_status = latest.status
            with unit_of_work(self.db):
                apply_transition(
                    self.db,
                    latest,
                    "submit",
                    payload=graph.to_payload(),
                    submitted_at=utcnow(),
                    reviewed_at=None,
                    reviewed_by=None,
                    rejection_reason=None,
                )
                if comic.status != ComicStatus.PUBLISHED.value:
                    comic.status = ComicStatus.PENDING_REVIEW.value
                log_audit_entry(
                    self.db,
                    entity_type="comic_revision",
                    entity_id=latest.revision_id,
                    action="submitted",
                    old_value={"status": previous_status},
                    new_value={"status": RevisionStatus.PENDING_REVIEW.value},
                    actor_id=actor.user_id,
                    commit=False,
                )
            self.db.refresh(latest)
            self.db.refresh(comic)
            record_transition("submit", True)
            logger.info("revision_submitted", extra={"warning_count": len(report.warnings)})
            return SubmitResult(revision=latest, comic_status=comic.status, warnings=report.warnings)

    def delete_comic(self, actor: Actor, comic: Comic) -> None:
        comic_id = comic.comic_id
        self.db.delete(comic)
        self.db.commit()
        log_audit_entry(self.db, entity_type="comic", entity_id=comic_id, action="deleted", actor_id=actor.user_id)

    # Moderator operations

    def approve(self, actor: Actor, revision_id: uuid.UUID) -> ComicRevision:
        self._require_moderator(actor)
        revision = self.get_revision(revision_id)
        with log_context(comic_id=revision.comic_id, revision_id=revision.revision_id):
            try:
                ensure_transition(revision.status, "approve")
                comic = self.get_comic(revision.comic_id)
                first_publication = comic.published_revision_id is None
                PublishService(self.db).publish(comic, revision, reviewer_id=actor.user_id)
            except Exception:
                record_transition("approve", False)
                raise
            record_transition("approve", True)
            logger.info("revision_approved", extra={"version": revision.version})

            if comic.author_id is not None:
                self.notifier.comic_approved(comic.author_id, comic.comic_id, comic.title)
                if first_publication:
                    self.notifier.new_comic_for_subscribers(
                        comic.author_id, comic.comic_id, comic.title, comic.author_name
                    )
            return revision

    def reject(self, actor: Actor, revision_id: uuid.UUID, reason: str) -> ComicRevision:
        self._require_moderator(actor)
        reason = (reason or "").strip()
        if not reason:
            raise ValueError("a rejection reason is required")

        revision = self.get_revision(revision_id)
        with log_context(comic_id=revision.comic_id, revision_id=revision.revision_id):
            try:
                ensure_transition(revision.status, "reject")
                comic = self.get_comic(revision.comic_id)
                with unit_of_work(self.db):
                    apply_transition(
                        self.db,
                        revision,
                        "reject",
                        reviewed_at=utcnow(),
                        reviewed_by=actor.user_id,
                        rejection_reason=reason,
                    )
                    if comic.status != ComicStatus.PUBLISHED.value:
                        comic.status = ComicStatus.REJECTED.value
                    log_audit_entry(
                        self.db,
                        entity_type="comic_revision",
                        entity_id=revision.revision_id,
                        action="rejected",
                        old_value={"status": RevisionStatus.PENDING_REVIEW.value},
                        new_value={"status": RevisionStatus.REJECTED.value, "reason": reason},
                        actor_id=actor.user_id,
                        commit=False,
                    )
            except Exception:
                record_transition("reject", False)
                raise
            self.db.refresh(revision)
            record_transition("reject", True)
            logger.info("revision_rejected", extra={"version": revision.version})

            if comic.author_id is not None:
                self.notifier.comic_rejected(comic.author_id, comic.comic_id, comic.title, reason)
            return revision

    def _require_moderator(self, actor: Actor) -> None:
        if not actor.is_moderator:
            raise PermissionDeniedError(
                f"user {actor.user_id} with role {actor.role} is not a moderator",
                detail="moderator role required",
            )

    def _prepare_draft(self, raw_payload: object) -> DraftGraph:
        graph = normalize_payload(raw_payload)
        if graph.comic_meta.cover_file_id:
            cover_image = resolve_cover_image(self.db, graph.comic_meta.cover_file_id)
            if cover_image:
                graph.comic_meta.cover_image = cover_image
        return graph
