"""
Fire-and-forget notifications about moderation outcomes.

Notifications are written after the lifecycle transition has committed. A
failed write is rolled back, logged and counted; it never reaches the caller.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.metrics import record_notification_failure
from app.core.settings import settings
from app.db.models import Notification, Subscription


logger = logging.getLogger(__name__)

TYPE_COMIC_APPROVED = "comic_approved"
TYPE_COMIC_REJECTED = "comic_rejected"
TYPE_NEW_COMIC = "new_comic"


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def comic_approved(self, author_id: uuid.UUID, comic_id: uuid.UUID, comic_title: str) -> None:
        self._deliver(
            TYPE_COMIC_APPROVED,
            [author_id],
            title="Comic approved",
            message=f'Your comic "{comic_title}" passed moderation and is published.',
            data={"comic_id": str(comic_id)},
        )

    def comic_rejected(
        self, author_id: uuid.UUID, comic_id: uuid.UUID, comic_title: str, reason: str
    ) -> None:
        self._deliver(
            TYPE_COMIC_REJECTED,
            [author_id],
            title="Comic rejected",
            message=f'Your comic "{comic_title}" was rejected: {reason}',
            data={"comic_id": str(comic_id), "reason": reason},
        )

    def new_comic_for_subscribers(
        self, author_id: uuid.UUID, comic_id: uuid.UUID, comic_title: str, author_name: str
    ) -> None:
        try:
            subscriber_ids = list(
                self.db.execute(select(Subscription.subscriber_id).where(Subscription.creator_id == author_id))
                .scalars()
                .all()
            )
        except SQLAlchemyError:
            self._drop(TYPE_NEW_COMIC, comic_id)
            return
        self._deliver(
            TYPE_NEW_COMIC,
            subscriber_ids,
            title="New comic",
            message=f'{author_name} published "{comic_title}".',
            data={"comic_id": str(comic_id), "author_id": str(author_id)},
        )

    def _deliver(self, kind: str, user_ids: list[uuid.UUID], *, title: str, message: str, data: dict) -> None:
        if not settings.notifications_enabled or not user_ids:
            return
        try:
            for user_id in user_ids:
                self.db.add(Notification(user_id=user_id, type=kind, title=title, message=message, data=data))
            self.db.commit()
        except SQLAlchemyError:
            self._drop(kind, data.get("comic_id"))
            return
        logger.info("notification_sent", extra={"kind": kind, "recipients": len(user_ids)})

    def _drop(self, kind: str, comic_id: object) -> None:
        self.db.rollback()
        record_notification_failure(kind)
        logger.warning("notification_failed", extra={"kind": kind, "target_comic": str(comic_id)}, exc_info=True)
