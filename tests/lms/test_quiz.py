"""Quiz listing, authoring and submission."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from reimaji.db.models import Progress


@pytest.mark.asyncio
class TestListQuizzes:
    async def test_learner_view_hides_answer_key(self, client: AsyncClient, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][0]
        response = await client.get(f"/api/v1/lessons/{lesson.id}/quizzes", headers=free_headers)
        assert response.status_code == 200
        questions = response.json()
        assert [q["question"] for q in questions] == ["Q1", "Q2"]
        for q in questions:
            assert "correct_index" not in q
            assert "explanation" not in q

    async def test_admin_view_includes_key_and_drafts(self, client: AsyncClient, admin_headers, course_tree) -> None:
        lesson = course_tree["lessons"][0]
        response = await client.get(f"/api/v1/lessons/{lesson.id}/quizzes", headers=admin_headers)
        questions = response.json()
        assert [q["question"] for q in questions] == ["Q1", "Q2", "Draft"]
        assert questions[0]["correct_index"] == 0

    async def test_create_requires_admin(self, client: AsyncClient, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][1]
        body = {"question": "New?", "options": ["y", "n"], "correct_index": 0}
        response = await client.post(f"/api/v1/lessons/{lesson.id}/quizzes", json=body, headers=free_headers)
        assert response.status_code == 403

    async def test_create_quiz(self, client: AsyncClient, admin_headers, course_tree) -> None:
        lesson = course_tree["lessons"][1]
        body = {"question": "New?", "options": ["y", "n"], "correct_index": 1, "explanation": "n"}
        response = await client.post(f"/api/v1/lessons/{lesson.id}/quizzes", json=body, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["correct_index"] == 1

    async def test_create_rejects_out_of_range_answer(self, client: AsyncClient, admin_headers, course_tree) -> None:
        lesson = course_tree["lessons"][1]
        body = {"question": "Bad", "options": ["y", "n"], "correct_index": 2}
        response = await client.post(f"/api/v1/lessons/{lesson.id}/quizzes", json=body, headers=admin_headers)
        assert response.status_code == 422


@pytest.mark.asyncio
class TestSubmit:
    async def test_passing_score_records_progress(self, client: AsyncClient, free_user, free_headers, course_tree, db_session) -> None:
        lesson = course_tree["lessons"][0]
        response = await client.post(
            f"/api/v1/lessons/{lesson.id}/quizzes/submit", json={"answers": [0, 1]}, headers=free_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 100
        assert data["passed"] is True
        assert data["progress_recorded"] is True
        assert data["feedback"][0] == {"index": 0, "correct": True, "explanation": "Because a"}

        rows = await db_session.execute(
            select(func.count(Progress.id)).where(Progress.user_id == free_user.id)
        )
        assert rows.scalar() == 1

    async def test_failing_score_records_nothing(self, client: AsyncClient, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][0]
        response = await client.post(
            f"/api/v1/lessons/{lesson.id}/quizzes/submit", json={"answers": [0, 0]}, headers=free_headers
        )
        data = response.json()
        assert data["score"] == 50
        assert data["passed"] is False
        assert data["progress_recorded"] is False

    async def test_repeat_pass_records_once(self, client: AsyncClient, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][0]
        url = f"/api/v1/lessons/{lesson.id}/quizzes/submit"
        first = await client.post(url, json={"answers": [0, 1]}, headers=free_headers)
        second = await client.post(url, json={"answers": [0, 1]}, headers=free_headers)
        assert first.json()["progress_recorded"] is True
        assert second.json()["progress_recorded"] is False
        assert second.json()["passed"] is True

    async def test_lesson_without_questions_fails(self, client: AsyncClient, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][2]
        response = await client.post(
            f"/api/v1/lessons/{lesson.id}/quizzes/submit", json={"answers": []}, headers=free_headers
        )
        assert response.json() == {
            "score": 0,
            "correct": 0,
            "total": 0,
            "passed": False,
            "feedback": [],
            "progress_recorded": False,
        }

    async def test_submit_unknown_lesson_404(self, client: AsyncClient, free_headers) -> None:
        response = await client.post(
            "/api/v1/lessons/99999/quizzes/submit", json={"answers": [0]}, headers=free_headers
        )
        assert response.status_code == 404

    async def test_submit_requires_auth(self, client: AsyncClient, course_tree) -> None:
        lesson = course_tree["lessons"][0]
        response = await client.post(
            f"/api/v1/lessons/{lesson.id}/quizzes/submit", json={"answers": [0, 1]}
        )
        assert response.status_code in (401, 403)


@pytest.mark.asyncio
class TestHiddenLessons:
    async def test_draft_lesson_quizzes_hidden_from_learners(
        self, client: AsyncClient, admin_headers, free_headers, course_tree
    ) -> None:
        lesson = course_tree["lessons"][0]
        await client.patch(f"/api/v1/lessons/{lesson.id}", json={"is_published": False}, headers=admin_headers)

        listing = await client.get(f"/api/v1/lessons/{lesson.id}/quizzes", headers=free_headers)
        assert listing.status_code == 404
        submit = await client.post(
            f"/api/v1/lessons/{lesson.id}/quizzes/submit", json={"answers": [0, 1]}, headers=free_headers
        )
        assert submit.status_code == 404

        admin_view = await client.get(f"/api/v1/lessons/{lesson.id}/quizzes", headers=admin_headers)
        assert admin_view.status_code == 200
        assert len(admin_view.json()) == 3

    async def test_removed_lesson_quizzes_gone(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][0]
        await client.delete(f"/api/v1/lessons/{lesson.id}", headers=admin_headers)

        for headers in (free_headers, admin_headers):
            response = await client.get(f"/api/v1/lessons/{lesson.id}/quizzes", headers=headers)
            assert response.status_code == 404

    async def test_removed_course_quizzes_gone(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        course = course_tree["course"]
        lesson = course_tree["lessons"][0]
        await client.delete(f"/api/v1/courses/{course.id}", headers=admin_headers)

        listing = await client.get(f"/api/v1/lessons/{lesson.id}/quizzes", headers=free_headers)
        assert listing.status_code == 404
        submit = await client.post(
            f"/api/v1/lessons/{lesson.id}/quizzes/submit", json={"answers": [0, 1]}, headers=free_headers
        )
        assert submit.status_code == 404


@pytest.mark.asyncio
class TestPassingCompletesCourse:
    async def test_passing_last_open_lesson_awards_badge_once(
        self, client: AsyncClient, free_headers, course_tree
    ) -> None:
        course = course_tree["course"]
        quiz_lesson, *others = course_tree["lessons"]
        for lesson in others:
            await client.post(f"/api/v1/courses/{course.id}/lessons/{lesson.id}/complete", headers=free_headers)

        url = f"/api/v1/lessons/{quiz_lesson.id}/quizzes/submit"
        first = await client.post(url, json={"answers": [0, 1]}, headers=free_headers)
        assert first.json()["progress_recorded"] is True
        await client.post(url, json={"answers": [0, 1]}, headers=free_headers)

        progress = await client.get(f"/api/v1/courses/{course.id}/progress", headers=free_headers)
        assert progress.json()["percent"] == 100
        badges = await client.get("/api/v1/users/me/badges", headers=free_headers)
        assert [b["key"] for b in badges.json()] == ["course_complete"]

    async def test_score_of_exactly_sixty_passes(
        self, client: AsyncClient, admin_headers, free_headers, course_tree
    ) -> None:
        lesson = course_tree["lessons"][1]
        for n in range(5):
            await client.post(
                f"/api/v1/lessons/{lesson.id}/quizzes",
                json={"question": f"Q{n}", "options": ["right", "wrong"], "correct_index": 0},
                headers=admin_headers,
            )

        url = f"/api/v1/lessons/{lesson.id}/quizzes/submit"
        response = await client.post(url, json={"answers": [0, 0, 0, 1, 1]}, headers=free_headers)
        data = response.json()
        assert data["score"] == 60
        assert data["correct"] == 3
        assert data["passed"] is True
        assert data["progress_recorded"] is True

    async def test_score_of_forty_fails(self, client: AsyncClient, admin_headers, free_headers, course_tree) -> None:
        lesson = course_tree["lessons"][1]
        for n in range(5):
            await client.post(
                f"/api/v1/lessons/{lesson.id}/quizzes",
                json={"question": f"Q{n}", "options": ["right", "wrong"], "correct_index": 0},
                headers=admin_headers,
            )

        response = await client.post(
            f"/api/v1/lessons/{lesson.id}/quizzes/submit", json={"answers": [0, 0, 1, 1, 1]}, headers=free_headers
        )
        assert response.json()["score"] == 40
        assert response.json()["passed"] is False
