import uuid
from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationRequiredError, PermissionDeniedError
from app.core.settings import settings
from app.db.session import get_db
from app.services.revisions import Actor


def db_session() -> Generator[Session, None, None]:
    yield from get_db()


def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    """Identity is resolved upstream; the gateway forwards it as headers."""
    if not x_user_id or not x_user_role:
        raise AuthenticationRequiredError("missing identity headers", detail="authentication required")
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError as exc:
        raise AuthenticationRequiredError("malformed user id header", detail="authentication required") from exc
    return Actor(user_id=user_id, role=x_user_role.strip().lower())


def creator_actor(actor: Actor = Depends(current_actor)) -> Actor:
    if actor.role not in settings.creator_roles:
        raise PermissionDeniedError(f"role {actor.role} cannot author comics", detail="creator role required")
    return actor


def moderator_actor(actor: Actor = Depends(current_actor)) -> Actor:
    if not actor.is_moderator:
        raise PermissionDeniedError(f"role {actor.role} cannot moderate", detail="moderator role required")
    return actor


DbSessionDep = Depends(db_session)
CreatorDep = Depends(creator_actor)
ModeratorDep = Depends(moderator_actor)
