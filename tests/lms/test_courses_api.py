"""Course, module and lesson endpoints; progress over HTTP."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _course(client: AsyncClient, headers: dict, **extra) -> dict:
    body = {"title": "Prompt Engineering", "description": "Learn prompts", "is_published": True}
    response = await client.post("/api/v1/courses", json={**body, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestCourses:
    async def test_create_and_get_by_slug(self, client: AsyncClient, admin_headers) -> None:
        course = await _course(client, admin_headers)
        assert course["slug"] == "prompt-engineering"

        response = await client.get("/api/v1/courses/prompt-engineering")
        assert response.status_code == 200
        assert response.json()["id"] == course["id"]

    async def test_slug_collision_is_409(self, client: AsyncClient, admin_headers) -> None:
        await _course(client, admin_headers)
        response = await client.post(
            "/api/v1/courses",
            json={"title": "Prompt Engineering", "description": "again"},
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Slug already exists"

    async def test_list_excludes_drafts_and_removed(self, client: AsyncClient, admin_headers) -> None:
        live = await _course(client, admin_headers, title="Live")
        await _course(client, admin_headers, title="Draft", is_published=False)
        gone = await _course(client, admin_headers, title="Gone")
        await client.delete(f"/api/v1/courses/{gone['id']}", headers=admin_headers)

        response = await client.get("/api/v1/courses")
        assert [c["id"] for c in response.json()] == [live["id"]]

        everything = await client.get("/api/v1/lms/admin/courses", headers=admin_headers)
        assert {c["title"] for c in everything.json()} == {"Live", "Draft"}

    async def test_draft_course_admin_only(self, client: AsyncClient, admin_headers, free_headers) -> None:
        await _course(client, admin_headers, title="Secret", is_published=False)
        assert (await client.get("/api/v1/courses/secret", headers=free_headers)).status_code == 404
        assert (await client.get("/api/v1/courses/secret", headers=admin_headers)).status_code == 200

    async def test_update_course(self, client: AsyncClient, admin_headers) -> None:
        course = await _course(client, admin_headers, is_published=False)
        response = await client.patch(
            f"/api/v1/courses/{course['id']}",
            json={"description": "Updated", "is_published": True},
            headers=admin_headers,
        )
        assert response.json()["description"] == "Updated"
        assert response.json()["published_at"] is not None


@pytest.mark.asyncio
class TestModulesAndLessons:
    async def test_module_and_lesson_ordering(self, client: AsyncClient, admin_headers, free_headers) -> None:
        course = await _course(client, admin_headers)
        second = await client.post(
            f"/api/v1/courses/{course['id']}/modules", json={"title": "Two", "order": 2}, headers=admin_headers
        )
        first = await client.post(
            f"/api/v1/courses/{course['id']}/modules", json={"title": "One", "order": 1}, headers=admin_headers
        )
        modules = await client.get(f"/api/v1/courses/{course['id']}/modules")
        assert [m["title"] for m in modules.json()] == ["One", "Two"]

        module_id = first.json()["id"]
        for title, order, published in (("B", 2, True), ("A", 1, True), ("Hidden", 3, False)):
            await client.post(
                f"/api/v1/modules/{module_id}/lessons",
                json={"title": title, "order": order, "content": "<p>x</p>", "is_published": published},
                headers=admin_headers,
            )
        public = await client.get(f"/api/v1/modules/{module_id}/lessons", headers=free_headers)
        assert [lesson["title"] for lesson in public.json()] == ["A", "B"]

        admin_view = await client.get(f"/api/v1/modules/{module_id}/lessons", headers=admin_headers)
        assert [lesson["title"] for lesson in admin_view.json()] == ["A", "B", "Hidden"]

        await client.delete(f"/api/v1/modules/{second.json()['id']}", headers=admin_headers)
        modules = await client.get(f"/api/v1/courses/{course['id']}/modules")
        assert [m["title"] for m in modules.json()] == ["One"]

    async def test_lesson_detail_visibility(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][0]
        assert (await client.get(f"/api/v1/lessons/{lesson.id}")).status_code == 200

        await client.patch(f"/api/v1/lessons/{lesson.id}", json={"is_published": False}, headers=admin_headers)
        assert (await client.get(f"/api/v1/lessons/{lesson.id}", headers=free_headers)).status_code == 404
        assert (await client.get(f"/api/v1/lessons/{lesson.id}", headers=admin_headers)).status_code == 200

        await client.delete(f"/api/v1/lessons/{lesson.id}", headers=admin_headers)
        assert (await client.get(f"/api/v1/lessons/{lesson.id}", headers=admin_headers)).status_code == 404

    async def test_lesson_content_sanitized(self, client: AsyncClient, admin_headers, course_tree) -> None:
        module = course_tree["modules"][0]
        response = await client.post(
            f"/api/v1/modules/{module.id}/lessons",
            json={"title": "X", "order": 9, "content": "<p>ok</p><script>x</script>"},
            headers=admin_headers,
        )
        assert response.json()["content"] == "<p>ok</p>"

    async def test_module_for_missing_course_404(self, client: AsyncClient, admin_headers) -> None:
        response = await client.post(
            "/api/v1/courses/9999/modules", json={"title": "X", "order": 1}, headers=admin_headers
        )
        assert response.status_code == 404


@pytest.mark.asyncio
class TestProgressApi:
    async def test_complete_and_progress(self, client: AsyncClient, free_headers, course_tree) -> None:
        course = course_tree["course"]
        lessons = course_tree["lessons"]

        for lesson in lessons[:-1]:
            response = await client.post(
                f"/api/v1/courses/{course.id}/lessons/{lesson.id}/complete", headers=free_headers
            )
            assert response.status_code == 200

        progress = await client.get(f"/api/v1/courses/{course.id}/progress", headers=free_headers)
        assert progress.json() == {"course_id": course.id, "completed": 2, "total": 3, "percent": 67}

        last = await client.post(
            f"/api/v1/courses/{course.id}/lessons/{lessons[-1].id}/complete", headers=free_headers
        )
        assert last.json()["course_completed"] is True
        assert last.json()["badge_earned"] == "course_complete"

        badges = await client.get("/api/v1/users/me/badges", headers=free_headers)
        assert [b["key"] for b in badges.json()] == ["course_complete"]

    async def test_complete_unknown_lesson_404(self, client: AsyncClient, free_headers, course_tree) -> None:
        course = course_tree["course"]
        response = await client.post(
            f"/api/v1/courses/{course.id}/lessons/99999/complete", headers=free_headers
        )
        assert response.status_code == 404

    async def test_progress_unknown_course_404(self, client: AsyncClient, free_headers) -> None:
        response = await client.get("/api/v1/courses/99999/progress", headers=free_headers)
        assert response.status_code == 404

    async def test_course_stats_admin_only(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        course = course_tree["course"]
        lesson = course_tree["lessons"][0]
        await client.post(f"/api/v1/courses/{course.id}/lessons/{lesson.id}/complete", headers=free_headers)

        assert (await client.get("/api/v1/lms/admin/stats", headers=free_headers)).status_code == 403
        response = await client.get("/api/v1/lms/admin/stats", headers=admin_headers)
        assert response.json() == [
            {"course_id": course.id, "title": "Intro to AI", "unique_users": 1, "completions": 1}
        ]


@pytest.mark.asyncio
class TestCourseVisibility:
    async def test_removed_course_hides_its_tree(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        course = course_tree["course"]
        module = course_tree["modules"][0]
        lesson = course_tree["lessons"][0]
        await client.delete(f"/api/v1/courses/{course.id}", headers=admin_headers)

        for headers in (free_headers, admin_headers):
            assert (await client.get(f"/api/v1/courses/{course.id}/modules", headers=headers)).status_code == 404
            assert (await client.get(f"/api/v1/modules/{module.id}/lessons", headers=headers)).status_code == 404
            assert (await client.get(f"/api/v1/lessons/{lesson.id}", headers=headers)).status_code == 404

    async def test_removed_course_cannot_be_completed(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        course = course_tree["course"]
        await client.delete(f"/api/v1/courses/{course.id}", headers=admin_headers)

        for lesson in course_tree["lessons"]:
            response = await client.post(
                f"/api/v1/courses/{course.id}/lessons/{lesson.id}/complete", headers=free_headers
            )
            assert response.status_code == 404

        badges = await client.get("/api/v1/users/me/badges", headers=free_headers)
        assert badges.json() == []

    async def test_draft_course_tree_admin_only(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        course = course_tree["course"]
        module = course_tree["modules"][0]
        await client.patch(f"/api/v1/courses/{course.id}", json={"is_published": False}, headers=admin_headers)

        assert (await client.get(f"/api/v1/courses/{course.id}/modules")).status_code == 404
        assert (await client.get(f"/api/v1/modules/{module.id}/lessons", headers=free_headers)).status_code == 404

        modules = await client.get(f"/api/v1/courses/{course.id}/modules", headers=admin_headers)
        assert [m["title"] for m in modules.json()] == ["Foundations", "Practice"]
        lessons = await client.get(f"/api/v1/modules/{module.id}/lessons", headers=admin_headers)
        assert len(lessons.json()) == 2

    async def test_repeat_completion_reports_finished_course(self, client: AsyncClient, free_headers, course_tree) -> None:
        course = course_tree["course"]
        lessons = course_tree["lessons"]
        for lesson in lessons:
            await client.post(f"/api/v1/courses/{course.id}/lessons/{lesson.id}/complete", headers=free_headers)

        again = await client.post(
            f"/api/v1/courses/{course.id}/lessons/{lessons[0].id}/complete", headers=free_headers
        )
        data = again.json()
        assert data["already_completed"] is True
        assert data["course_completed"] is True
        assert data["badge_earned"] is None
