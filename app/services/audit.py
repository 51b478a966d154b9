"""Audit logging helper for comic and revision lifecycle events."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.orm import Session

from app.core.request_context import get_request_id
from app.db.models import AuditLog


def log_audit_entry(
    db: Session,
    entity_type: str,
    entity_id: uuid.UUID,
    action: str,
    old_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
    *,
    actor_id: uuid.UUID | None = None,
    commit: bool = True,
) -> AuditLog:
    """Record a lifecycle event.

    With ``commit=False`` the entry joins the caller's open transaction and is
    rolled back together with it.
    """
    entry = AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        request_id=get_request_id(),
        old_value=old_value,
        new_value=new_value,
    )
    db.add(entry)
    if commit:
        db.commit()
        db.refresh(entry)
    return entry
