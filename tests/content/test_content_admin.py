"""Bulk content operations, stats and the sitemap feed."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from reimaji.content.service import ContentService
from reimaji.db.models import News


async def _news(client: AsyncClient, headers: dict, title: str, **extra) -> dict:
    body = {"title": title, "summary": "s", "content": "c", "type": "tool", "is_published": True}
    response = await client.post("/api/v1/news", json={**body, **extra}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
class TestBulk:
    async def test_bulk_unpublish_reports_missing(self, client: AsyncClient, admin_headers) -> None:
        a = await _news(client, admin_headers, "A")
        b = await _news(client, admin_headers, "B")

        response = await client.post(
            "/api/v1/content/bulk",
            json={"kind": "news", "action": "unpublish", "ids": [a["id"], b["id"], 9999]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["updated"] == [a["id"], b["id"]]
        assert data["missing"] == [9999]
        assert (await client.get("/api/v1/news")).json() == []

    async def test_bulk_publish(self, client: AsyncClient, admin_headers) -> None:
        draft = await _news(client, admin_headers, "Draft", is_published=False)
        await client.post(
            "/api/v1/content/bulk",
            json={"kind": "news", "action": "publish", "ids": [draft["id"]]},
            headers=admin_headers,
        )
        listed = (await client.get("/api/v1/news")).json()
        assert [n["id"] for n in listed] == [draft["id"]]
        assert listed[0]["published_at"] is not None

    async def test_bulk_remove(self, client: AsyncClient, admin_headers) -> None:
        item = await _news(client, admin_headers, "Gone")
        await client.post(
            "/api/v1/content/bulk",
            json={"kind": "news", "action": "remove", "ids": [item["id"]]},
            headers=admin_headers,
        )
        all_items = await client.get("/api/v1/news/admin/all", headers=admin_headers)
        assert all_items.json() == []

    async def test_bulk_requires_admin(self, client: AsyncClient, pro_headers) -> None:
        response = await client.post(
            "/api/v1/content/bulk",
            json={"kind": "news", "action": "publish", "ids": [1]},
            headers=pro_headers,
        )
        assert response.status_code == 403

    async def test_bulk_rejects_empty_ids(self, client: AsyncClient, admin_headers) -> None:
        response = await client.post(
            "/api/v1/content/bulk",
            json={"kind": "news", "action": "publish", "ids": []},
            headers=admin_headers,
        )
        assert response.status_code == 422


@pytest.mark.asyncio
class TestStats:
    async def test_news_stats_top_by_views(self, client: AsyncClient, admin_headers, db_session) -> None:
        quiet = await _news(client, admin_headers, "Quiet")
        busy = await _news(client, admin_headers, "Busy")
        svc = ContentService(db_session, News)
        for _ in range(3):
            await svc.increment_views(busy["slug"])
        await svc.increment_views(quiet["slug"])
        await db_session.commit()

        response = await client.get(
            "/api/v1/news/admin/stats", params={"limit_top": 1}, headers=admin_headers
        )
        data = response.json()
        assert data["top_by_views"] == [{"id": busy["id"], "title": "Busy", "view_count": 3}]

    async def test_increment_views_ignores_drafts(self, client: AsyncClient, admin_headers, db_session) -> None:
        draft = await _news(client, admin_headers, "Hidden", is_published=False)
        assert await ContentService(db_session, News).increment_views(draft["slug"]) is False
        assert await ContentService(db_session, News).increment_views("no-such-slug") is False


@pytest.mark.asyncio
class TestSitemap:
    async def test_sitemap_lists_static_and_published(self, client: AsyncClient, admin_headers) -> None:
        await _news(client, admin_headers, "Visible")
        await _news(client, admin_headers, "Invisible", is_published=False)
        await client.post(
            "/api/v1/research",
            json={
                "title": "Paper",
                "summary": "s",
                "implication": "i",
                "content": "c",
                "is_published": True,
            },
            headers=admin_headers,
        )

        response = await client.get("/api/v1/sitemap")
        assert response.status_code == 200
        urls = [entry["url"] for entry in response.json()["urls"]]
        assert "http://localhost:3000" in urls
        assert "http://localhost:3000/news" in urls
        assert "http://localhost:3000/news/visible" in urls
        assert "http://localhost:3000/research/paper" in urls
        assert "http://localhost:3000/news/invisible" not in urls
