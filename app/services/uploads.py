"""Lookups against the upload service's file registry."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import UploadedFile
from app.graphs.model import DraftGraph


def _parse_file_id(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def resolve_cover_image(db: Session, cover_file_id: str | None) -> str:
    file_id = _parse_file_id(cover_file_id)
    if file_id is None:
        return ""
    uploaded = db.get(UploadedFile, file_id)
    return uploaded.public_url if uploaded is not None else ""


def resolve_file_urls(db: Session, file_ids: list[str]) -> dict[str, str]:
    parsed = {value: _parse_file_id(value) for value in file_ids}
    wanted = [file_id for file_id in parsed.values() if file_id is not None]
    if not wanted:
        return {}
    rows = db.execute(select(UploadedFile).where(UploadedFile.file_id.in_(wanted))).scalars().all()
    urls = {row.file_id: row.public_url for row in rows}
    return {value: urls[file_id] for value, file_id in parsed.items() if file_id in urls}


class UploadedFileChecker:
    """Reference check for the submission gate.

    Every scene image must exist, be an ``image/*`` upload, and belong to the
    submitting user unless that user is an administrator.
    """

    def __init__(self, db: Session, user_id: uuid.UUID, *, is_admin: bool = False):
        self.db = db
        self.user_id = user_id
        self.is_admin = is_admin

    def __call__(self, graph: DraftGraph) -> list[str]:
        referenced = {node.image_file_id for node in graph.nodes if node.image_file_id}
        if not referenced:
            return []

        parsed = {value: _parse_file_id(value) for value in referenced}
        wanted = [file_id for file_id in parsed.values() if file_id is not None]
        files: dict[uuid.UUID, UploadedFile] = {}
        if wanted:
            rows = self.db.execute(select(UploadedFile).where(UploadedFile.file_id.in_(wanted))).scalars().all()
            files = {row.file_id: row for row in rows}

        errors: list[str] = []
        for node in graph.nodes:
            if not node.image_file_id:
                continue
            file_id = parsed[node.image_file_id]
            uploaded = files.get(file_id) if file_id is not None else None
            if uploaded is None:
                errors.append(f"Node {node.id} references a missing image file.")
                continue
            if not uploaded.mime_type.startswith("image/"):
                errors.append(f"Node {node.id} uses a file that is not an image.")
            if not self.is_admin and uploaded.owner_user_id != self.user_id:
                errors.append(f"Node {node.id} uses a file owned by another user.")
        return errors
