"""
Application-level exception types.

Validation findings are returned as data by the graph validator; these
exceptions cover the operation failures around it (missing entities,
permissions, illegal lifecycle transitions, rejected submissions and
aborted publications).
"""

from __future__ import annotations


class AppError(Exception):
    """Base exception for all application errors."""

    status_code = 400

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        self.detail = detail or message
        super().__init__(message)


class EntityNotFoundError(AppError):
    """Raised when a database entity cannot be found."""

    status_code = 404

    def __init__(self, entity_type: str, entity_id: object) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            detail=f"{entity_type} not found",
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class AuthenticationRequiredError(AppError):
    """Raised when a request carries no usable identity."""

    status_code = 401


class PermissionDeniedError(AppError):
    """Raised when the acting user may not perform the operation."""

    status_code = 403


class InvalidStateTransitionError(AppError):
    """Raised when a revision is asked to move along an edge it does not have."""

    status_code = 409

    def __init__(self, action: str, status: str) -> None:
        super().__init__(
            f"cannot {action} a revision in status {status}",
            detail=f"revision in status '{status}' cannot be {_past_tense(action)}",
        )
        self.action = action
        self.status = status


class RevisionConflictError(AppError):
    """Raised when a draft save keeps losing the race for the next version."""

    status_code = 409


class DraftValidationError(AppError):
    """Raised at the submission gate when the draft graph has structural errors."""

    status_code = 422

    def __init__(self, errors: list[str], warnings: list[str] | None = None) -> None:
        super().__init__(
            f"draft validation failed with {len(errors)} error(s)",
            detail="draft validation failed",
        )
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class PublishError(AppError):
    """Raised when the publish transaction is rolled back."""

    status_code = 500


def _past_tense(action: str) -> str:
    if action.endswith("e"):
        return f"{action}d"
    if action == "submit":
        return "submitted"
    return f"{action}ed"
