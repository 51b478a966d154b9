import contextvars
from contextlib import contextmanager
import uuid

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
comic_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("comic_id", default=None)
revision_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("revision_id", default=None)


def set_request_id(request_id: str) -> contextvars.Token:
    """Store the current request ID in a context variable."""
    return request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    """Reset the request ID context variable to a previous state."""
    request_id_var.reset(token)


def get_request_id() -> str | None:
    """Retrieve the current request ID from the context."""
    return request_id_var.get()


def _normalize_id(value: uuid.UUID | str | None) -> str | None:
    if value is None:
        return None
    return str(value)


def get_comic_id() -> str | None:
    """Retrieve the current comic ID for logging."""
    return comic_id_var.get()


def get_revision_id() -> str | None:
    """Retrieve the current revision ID for logging."""
    return revision_id_var.get()


@contextmanager
def log_context(
    comic_id: uuid.UUID | str | None = None,
    revision_id: uuid.UUID | str | None = None,
):
    """Temporarily scope comic/revision context for structured logs."""
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token]] = []
    if comic_id is not None:
        tokens.append((comic_id_var, comic_id_var.set(_normalize_id(comic_id))))
    if revision_id is not None:
        tokens.append((revision_id_var, revision_id_var.set(_normalize_id(revision_id))))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
