"""Draft payload and identity builders shared across tests."""

import uuid

from app.db.models import UploadedFile
from app.services.revisions import Actor


def headers_for(actor: Actor) -> dict[str, str]:
    return {"X-User-Id": str(actor.user_id), "X-User-Role": actor.role}


def add_upload(db, owner_id: uuid.UUID, *, mime_type: str = "image/png") -> str:
    uploaded = UploadedFile(
        owner_user_id=owner_id,
        mime_type=mime_type,
        public_url=f"https://cdn.example.com/{uuid.uuid4()}.png",
    )
    db.add(uploaded)
    db.commit()
    return str(uploaded.file_id)


def scene(node_id: str, *, buttons=(), is_ending: bool = False, image: str = "https://cdn.example.com/x.png", order=None):
    node = {
        "id": node_id,
        "title": node_id.title(),
        "imageUrl": image,
        "isEnding": is_ending,
        "buttons": [
            {"id": f"{node_id}-{index}", "text": f"Go to {target}", "targetNodeId": target}
            for index, target in enumerate(buttons, start=1)
        ],
    }
    if order is not None:
        node["order"] = order
    return node


def draft(*nodes, start: str = "start", title: str = "Forked Road") -> dict:
    return {
        "schemaVersion": 2,
        "comicMeta": {
            "title": title,
            "description": "Pick a path.",
            "genres": ["fantasy"],
            "tags": ["choices"],
            "startNodeId": start,
            "estimatedMinutes": 7,
        },
        "nodes": list(nodes),
    }


def branching_draft(title: str = "Forked Road") -> dict:
    """start offers a and b; both are endings."""
    return draft(
        scene("start", buttons=("a", "b")),
        scene("a", is_ending=True),
        scene("b", is_ending=True),
        title=title,
    )
