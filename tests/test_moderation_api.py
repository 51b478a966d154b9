import pytest

from factories import branching_draft, draft, headers_for, scene


async def _pending_comic(client, creator, payload=None):
    created = (
        await client.post(
            "/v1/creator/comics",
            json={"title": "Forked Road", "description": "Pick a path."},
            headers=headers_for(creator),
        )
    ).json()
    comic_id = created["comic"]["comic_id"]
    await client.put(
        f"/v1/creator/comics/{comic_id}/draft",
        json={"payload": payload or branching_draft()},
        headers=headers_for(creator),
    )
    submitted = (await client.post(f"/v1/creator/comics/{comic_id}/submit", headers=headers_for(creator))).json()
    return comic_id, submitted["revision"]["revision_id"]


@pytest.mark.anyio
async def test_review_queue_and_approval(client, creator, moderator):
    comic_id, revision_id = await _pending_comic(client, creator)

    resp = await client.get("/v1/moderation/revisions", headers=headers_for(moderator))
    assert resp.status_code == 200
    assert [item["revision_id"] for item in resp.json()] == [revision_id]

    resp = await client.get(f"/v1/moderation/revisions/{revision_id}", headers=headers_for(moderator))
    assert resp.status_code == 200
    assert resp.json()["payload"]["comicMeta"]["startNodeId"] == "start"

    resp = await client.post(f"/v1/moderation/revisions/{revision_id}/approve", headers=headers_for(moderator))
    assert resp.status_code == 200
    assert resp.json() == {"revision_id": revision_id, "comic_id": comic_id, "status": "approved"}

    resp = await client.get(f"/v1/comics/{comic_id}/pages")
    assert resp.status_code == 200
    pages = resp.json()
    assert [page["page_id"] for page in pages] == ["start", "a", "b"]
    assert pages[0]["choices"][1]["targetPageId"] == "b"
    assert pages[0]["panels"][0]["layout"] == {"x": 0, "y": 0, "width": 100, "height": 100}
    assert [page["ending_type"] for page in pages] == [None, "neutral", "neutral"]

    resp = await client.post(
        f"/v1/moderation/revisions/{revision_id}/reject",
        json={"reason": "late"},
        headers=headers_for(moderator),
    )
    assert resp.status_code == 409


@pytest.mark.anyio
async def test_rejection(client, creator, moderator):
    comic_id, revision_id = await _pending_comic(client, creator)

    resp = await client.post(
        f"/v1/moderation/revisions/{revision_id}/reject",
        json={"reason": ""},
        headers=headers_for(moderator),
    )
    assert resp.status_code == 422

    resp = await client.post(
        f"/v1/moderation/revisions/{revision_id}/reject",
        json={"reason": "Needs more scenes."},
        headers=headers_for(moderator),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"

    resp = await client.get(f"/v1/creator/comics/{comic_id}/draft", headers=headers_for(creator))
    body = resp.json()
    assert body["comic"]["status"] == "rejected"
    assert body["revision"]["rejection_reason"] == "Needs more scenes."

    resp = await client.get(f"/v1/comics/{comic_id}/pages")
    assert resp.json() == []


@pytest.mark.anyio
async def test_creators_cannot_moderate(client, creator):
    _, revision_id = await _pending_comic(client, creator, draft(scene("start", is_ending=True)))

    resp = await client.get("/v1/moderation/revisions", headers=headers_for(creator))
    assert resp.status_code == 403
    resp = await client.post(f"/v1/moderation/revisions/{revision_id}/approve", headers=headers_for(creator))
    assert resp.status_code == 403


@pytest.mark.anyio
async def test_unknown_status_filter(client, moderator):
    resp = await client.get("/v1/moderation/revisions", params={"status": "bogus"}, headers=headers_for(moderator))
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_pages_of_unknown_comic(client):
    resp = await client.get("/v1/comics/00000000-0000-0000-0000-000000000000/pages")
    assert resp.status_code == 404
