"""News endpoints: publishing, listing, search, premium gating."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

NEWS = {
    "title": "Open Model Beats Benchmarks",
    "summary": "A <b>new</b> open model.",
    "content": "<p>Full story</p><script>alert(1)</script>",
    "type": "tool",
    "tags": ["llm", "open-source"],
    "is_published": True,
}


async def _create(client: AsyncClient, headers: dict, **overrides) -> dict:
    response = await client.post("/api/v1/news", json={**NEWS, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestCreate:
    async def test_create_sets_slug_and_sanitizes(self, client: AsyncClient, admin_headers, admin_user) -> None:
        item = await _create(client, admin_headers)
        assert item["slug"] == "open-model-beats-benchmarks"
        assert item["content"] == "<p>Full story</p>"
        assert item["summary"] == "A <b>new</b> open model."
        assert item["created_by"] == admin_user.id
        assert item["published_at"] is not None
        assert item["view_count"] == 0
        assert item["like_count"] == 0

    async def test_duplicate_title_gets_suffix(self, client: AsyncClient, admin_headers) -> None:
        first = await _create(client, admin_headers)
        second = await _create(client, admin_headers)
        assert first["slug"] == "open-model-beats-benchmarks"
        assert second["slug"] == "open-model-beats-benchmarks-2"

    async def test_draft_has_no_published_at(self, client: AsyncClient, admin_headers) -> None:
        item = await _create(client, admin_headers, is_published=False)
        assert item["published_at"] is None
        assert item["is_published"] is False

    async def test_non_admin_cannot_create(self, client: AsyncClient, pro_headers) -> None:
        response = await client.post("/api/v1/news", json=NEWS, headers=pro_headers)
        assert response.status_code == 403

    async def test_invalid_type_rejected(self, client: AsyncClient, admin_headers) -> None:
        response = await client.post(
            "/api/v1/news", json={**NEWS, "type": "rumour"}, headers=admin_headers
        )
        assert response.status_code == 422


@pytest.mark.asyncio
class TestList:
    async def test_only_published_and_newest_first(self, client: AsyncClient, admin_headers) -> None:
        await _create(client, admin_headers, title="Older")
        await _create(client, admin_headers, title="Draft", is_published=False)
        await _create(client, admin_headers, title="Newer")

        response = await client.get("/api/v1/news")
        assert response.status_code == 200
        titles = [n["title"] for n in response.json()]
        assert titles == ["Newer", "Older"]
        assert "content" not in response.json()[0]

    async def test_filter_by_tag_type_and_limit(self, client: AsyncClient, admin_headers) -> None:
        await _create(client, admin_headers, title="A", tags=["policy"], type="regulation")
        await _create(client, admin_headers, title="B", tags=["llm"])
        await _create(client, admin_headers, title="C", tags=["llm"])

        by_tag = await client.get("/api/v1/news", params={"tag": "llm"})
        assert [n["title"] for n in by_tag.json()] == ["C", "B"]

        by_type = await client.get("/api/v1/news", params={"type": "regulation"})
        assert [n["title"] for n in by_type.json()] == ["A"]

        limited = await client.get("/api/v1/news", params={"limit": 1})
        assert len(limited.json()) == 1

    async def test_search_is_case_insensitive(self, client: AsyncClient, admin_headers) -> None:
        await _create(client, admin_headers, title="Robots in Retail", summary="Stores", content="x")
        await _create(client, admin_headers, title="Other", summary="Nothing", content="about ROBOTS")
        await _create(client, admin_headers, title="Unrelated", summary="n", content="n")

        response = await client.get("/api/v1/news", params={"q": "robots"})
        assert {n["title"] for n in response.json()} == {"Robots in Retail", "Other"}

    async def test_search_treats_wildcards_literally(self, client: AsyncClient, admin_headers) -> None:
        await _create(client, admin_headers, title="Plain")
        response = await client.get("/api/v1/news", params={"q": "%"})
        assert response.json() == []

    async def test_removed_items_hidden(self, client: AsyncClient, admin_headers) -> None:
        item = await _create(client, admin_headers)
        removed = await client.delete(f"/api/v1/news/{item['id']}", headers=admin_headers)
        assert removed.status_code == 200
        assert removed.json()["is_published"] is False

        assert (await client.get("/api/v1/news")).json() == []
        assert (await client.get(f"/api/v1/news/{item['slug']}")).status_code == 404


@pytest.mark.asyncio
class TestDetail:
    async def test_public_detail(self, client: AsyncClient, admin_headers) -> None:
        item = await _create(client, admin_headers)
        response = await client.get(f"/api/v1/news/{item['slug']}")
        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "<p>Full story</p>"
        assert data["locked"] is False

    async def test_premium_locked_for_guest_and_free(self, client: AsyncClient, admin_headers, free_headers) -> None:
        item = await _create(client, admin_headers, is_premium=True)
        for headers in ({}, free_headers):
            response = await client.get(f"/api/v1/news/{item['slug']}", headers=headers)
            assert response.status_code == 200
            assert response.json()["content"] is None
            assert response.json()["locked"] is True

    async def test_premium_open_for_pro_and_admin(self, client: AsyncClient, admin_headers, pro_headers) -> None:
        item = await _create(client, admin_headers, is_premium=True)
        for headers in (pro_headers, admin_headers):
            response = await client.get(f"/api/v1/news/{item['slug']}", headers=headers)
            assert response.json()["content"] == "<p>Full story</p>"
            assert response.json()["locked"] is False

    async def test_draft_visible_to_admin_only(self, client: AsyncClient, admin_headers, pro_headers) -> None:
        item = await _create(client, admin_headers, is_published=False)
        assert (await client.get(f"/api/v1/news/{item['slug']}")).status_code == 404
        assert (await client.get(f"/api/v1/news/{item['slug']}", headers=pro_headers)).status_code == 404
        assert (await client.get(f"/api/v1/news/{item['slug']}", headers=admin_headers)).status_code == 200

    async def test_invalid_token_treated_as_guest(self, client: AsyncClient, admin_headers) -> None:
        item = await _create(client, admin_headers, is_premium=True)
        response = await client.get(
            f"/api/v1/news/{item['slug']}", headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == 200
        assert response.json()["locked"] is True


@pytest.mark.asyncio
class TestUpdate:
    async def test_publish_toggle_sets_and_clears_published_at(self, client: AsyncClient, admin_headers) -> None:
        item = await _create(client, admin_headers, is_published=False)

        published = await client.patch(
            f"/api/v1/news/{item['id']}", json={"is_published": True}, headers=admin_headers
        )
        assert published.json()["published_at"] is not None

        unpublished = await client.patch(
            f"/api/v1/news/{item['id']}", json={"is_published": False}, headers=admin_headers
        )
        assert unpublished.json()["published_at"] is None

    async def test_title_change_keeps_slug(self, client: AsyncClient, admin_headers) -> None:
        item = await _create(client, admin_headers)
        response = await client.patch(
            f"/api/v1/news/{item['id']}",
            json={"title": "Renamed", "content": "<p onclick='x'>new</p>"},
            headers=admin_headers,
        )
        data = response.json()
        assert data["title"] == "Renamed"
        assert data["slug"] == item["slug"]
        assert data["content"] == "<p>new</p>"

    async def test_update_missing_is_404(self, client: AsyncClient, admin_headers) -> None:
        response = await client.patch("/api/v1/news/424242", json={"title": "x"}, headers=admin_headers)
        assert response.status_code == 404

    async def test_admin_get_by_id_and_list_all(self, client: AsyncClient, admin_headers) -> None:
        draft = await _create(client, admin_headers, is_published=False)
        by_id = await client.get(f"/api/v1/news/admin/{draft['id']}", headers=admin_headers)
        assert by_id.status_code == 200
        assert by_id.json()["slug"] == draft["slug"]

        all_items = await client.get("/api/v1/news/admin/all", headers=admin_headers)
        assert [n["id"] for n in all_items.json()] == [draft["id"]]
