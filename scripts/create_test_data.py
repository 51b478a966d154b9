#!/usr/bin/env python3
"""Create a small branching comic, submit and approve it, and print IDs for manual testing."""

import sys
import uuid

import httpx

BASE_URL = "http://127.0.0.1:8000"

DEMO_GRAPH = {
    "schemaVersion": 2,
    "comicMeta": {
        "title": "Rainy Alley",
        "description": "A detective follows a stranger, or doesn't.",
        "genres": ["mystery"],
        "tags": ["demo"],
        "startNodeId": "alley",
        "estimatedMinutes": 3,
    },
    "nodes": [
        {
            "id": "alley",
            "title": "The alley",
            "imageUrl": "https://placehold.co/1600x900?text=alley",
            "order": 1,
            "buttons": [
                {"id": "follow", "text": "Follow the figure", "targetNodeId": "chase", "x": 8, "y": 80},
                {"id": "leave", "text": "Go home", "targetNodeId": "home", "x": 60, "y": 80},
            ],
        },
        {
            "id": "chase",
            "title": "The chase",
            "imageUrl": "https://placehold.co/1600x900?text=chase",
            "order": 2,
            "isEnding": True,
        },
        {
            "id": "home",
            "title": "Quiet night",
            "imageUrl": "https://placehold.co/1600x900?text=home",
            "order": 3,
            "isEnding": True,
        },
    ],
}


def _check(resp: httpx.Response, what: str) -> dict:
    if resp.status_code >= 300:
        print(f"Failed to {what}: {resp.status_code} {resp.text}", file=sys.stderr)
        sys.exit(1)
    return resp.json()


def main():
    client = httpx.Client(base_url=BASE_URL, timeout=10.0)
    creator = {"X-User-Id": str(uuid.uuid4()), "X-User-Role": "creator"}
    moderator = {"X-User-Id": str(uuid.uuid4()), "X-User-Role": "moderator"}

    created = _check(
        client.post(
            "/v1/creator/comics",
            json={"title": "Rainy Alley", "description": "A detective follows a stranger."},
            headers=creator,
        ),
        "create comic",
    )
    comic_id = created["comic"]["comic_id"]
    print(f"COMIC_ID={comic_id}")

    _check(
        client.put(f"/v1/creator/comics/{comic_id}/draft", json={"payload": DEMO_GRAPH}, headers=creator),
        "save draft",
    )
    submitted = _check(client.post(f"/v1/creator/comics/{comic_id}/submit", headers=creator), "submit draft")
    revision_id = submitted["revision"]["revision_id"]
    print(f"REVISION_ID={revision_id}")

    _check(client.post(f"/v1/moderation/revisions/{revision_id}/approve", headers=moderator), "approve revision")
    pages = _check(client.get(f"/v1/comics/{comic_id}/pages"), "list pages")
    print(f"PAGES={len(pages)}")

    # Export as shell variables
    print("\n# Export for shell (copy-paste):")
    print(f"export COMIC_ID={comic_id}")
    print(f"export REVISION_ID={revision_id}")
    print(f"export CREATOR_ID={creator['X-User-Id']}")


if __name__ == "__main__":
    main()
