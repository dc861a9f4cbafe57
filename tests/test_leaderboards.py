from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.messages import get_messages
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone

from accounts.models import AdminProfile
from attendance_app.models import AttendanceSession
from leaderboard_app import stats
from leaderboard_app.models import ActivenessBoard, InterviewRound, Leaderboard, ModuleScore


def _messages(response):
    return [str(m) for m in get_messages(response.wsgi_request)]


@pytest.fixture
def leaderboard(db):
    board = Leaderboard.objects.create(name="Mock Interviews")
    for name, score in (("Alice", 92), ("Bob", 75), ("Carol", 60), ("Dan", 41)):
        InterviewRound.objects.create(leaderboard=board, student_name=name, score=score)
    return board


@pytest.fixture
def activeness(db):
    board = ActivenessBoard.objects.create(name="Module Activity")
    ModuleScore.objects.create(board=board, student_name="Alice", module_name="SQL", score=Decimal("8.5"))
    ModuleScore.objects.create(board=board, student_name="Alice", module_name="Git", score=Decimal("6.5"))
    ModuleScore.objects.create(board=board, student_name="Bob", module_name="SQL", score=Decimal("9.0"))
    return board


class TestStats:
    def test_ranked_medals(self, leaderboard):
        ranked = stats.ranked(leaderboard.rounds.all())

        assert [r["medal"] for r in ranked] == ["gold", "silver", "bronze", None]
        assert [r["rank"] for r in ranked] == [1, 2, 3, 4]
        assert ranked[0]["row"].student_name == "Alice"

    def test_leaderboard_summary(self, leaderboard):
        summary = stats.leaderboard_summary(leaderboard.rounds.all())

        assert summary == {"average": 67.0, "highest": 92, "total": 4, "students": 4}

    def test_empty_summary(self):
        assert stats.leaderboard_summary([]) == {"average": 0.0, "highest": 0, "total": 0, "students": 0}

    def test_score_band(self):
        assert stats.score_band(80, 80, 60) == "high"
        assert stats.score_band(79, 80, 60) == "medium"
        assert stats.score_band(59, 80, 60) == "low"

    def test_student_totals(self, activeness):
        totals = stats.student_totals(activeness.scores.all())

        assert totals == [
            {"student_name": "Bob", "modules": 1, "average": 9.0},
            {"student_name": "Alice", "modules": 2, "average": 7.5},
        ]


class TestLeaderboardViews:
    def test_list_shows_bands(self, as_viewer, leaderboard):
        response = as_viewer.get(reverse("leaderboardList"))

        bands = [entry["row"].band for entry in response.context["ranked"]]
        assert bands == ["high", "medium", "medium", "low"]
        assert response.context["public_url"].endswith(f"/public/{leaderboard.public_id}/")

    def test_add_round_validates_score(self, as_editor, leaderboard):
        response = as_editor.post(reverse("addRound", args=[leaderboard.id]), {"student_name": "Eve", "score": "150"})

        assert "Score must be a whole number between 0 and 100" in _messages(response)
        assert not leaderboard.rounds.filter(student_name="Eve").exists()

    def test_add_and_update_round(self, as_editor, leaderboard):
        as_editor.post(reverse("addRound", args=[leaderboard.id]), {
            "student_name": "Eve", "score": "88", "round_number": "2", "interview_date": "2024-03-04",
        })
        interview = leaderboard.rounds.get(student_name="Eve")
        assert interview.round_number == 2

        response = as_editor.post(reverse("updateRound", args=[interview.id]), {"student_name": "Eve", "score": "95"})

        interview.refresh_from_db()
        assert interview.score == 95
        assert "Interview round updated successfully!" in _messages(response)

    def test_editor_cannot_delete_board(self, as_editor, leaderboard):
        assert as_editor.post(reverse("deleteLeaderboard", args=[leaderboard.id])).status_code == 403

    def test_admin_deletes_board(self, as_admin, leaderboard):
        as_admin.post(reverse("deleteLeaderboard", args=[leaderboard.id]))

        assert not Leaderboard.objects.exists()
        assert not InterviewRound.objects.exists()

    def test_public_page(self, client, leaderboard):
        response = client.get(reverse("publicLeaderboard", args=[leaderboard.public_id]))

        assert response.status_code == 200
        assert response.context["summary"]["highest"] == 92

    def test_revoked_public_page(self, as_editor, client, leaderboard):
        as_editor.post(reverse("toggleLeaderboardPublic", args=[leaderboard.id]))
        as_editor.logout()

        response = client.get(reverse("publicLeaderboard", args=[leaderboard.public_id]))

        assert response.status_code == 410
        assert b"This leaderboard link has been revoked" in response.content

    def test_expired_public_page(self, client, leaderboard):
        Leaderboard.objects.filter(id=leaderboard.id).update(public_expires_at=timezone.now() - timedelta(days=1))

        response = client.get(reverse("publicLeaderboard", args=[leaderboard.public_id]))

        assert response.status_code == 410

    def test_unknown_public_page(self, client, db):
        response = client.get(reverse("publicLeaderboard", args=["lb-missing"]))

        assert response.status_code == 404
        assert b"Leaderboard link not found" in response.content


class TestActivenessViews:
    @pytest.mark.parametrize("score", ["10.5", "-1", "abc", "nan", "inf"])
    def test_add_score_rejects_out_of_range(self, as_editor, activeness, score):
        response = as_editor.post(reverse("addScore", args=[activeness.id]), {
            "student_name": "Carol", "module_name": "SQL", "score": score,
        })

        assert "Score must be between 0 and 10" in _messages(response)
        assert not activeness.scores.filter(student_name="Carol").exists()

    def test_add_score(self, as_editor, activeness):
        as_editor.post(reverse("addScore", args=[activeness.id]), {
            "student_name": "Carol", "module_name": "Git", "score": "7.25",
        })

        assert activeness.scores.get(student_name="Carol").score == Decimal("7.2")

    def test_list_context(self, as_viewer, activeness):
        response = as_viewer.get(reverse("activenessList"), {"board": str(activeness.id)})

        assert response.context["summary"]["modules"] == 2
        assert response.context["ranked"][0]["row"].band == "high"

    def test_public_page(self, client, activeness):
        response = client.get(reverse("publicActiveness", args=[activeness.public_id]))

        assert response.status_code == 200
        assert response.context["student_totals"][0]["student_name"] == "Bob"


def test_seed_demo_data_is_repeatable(db):
    call_command("seed_demo_data", batches=1, students_per_batch=4, days=3)
    call_command("seed_demo_data", batches=1, students_per_batch=4, days=3)

    assert AdminProfile.objects.get().role == AdminProfile.ROLE_ADMIN
    assert AttendanceSession.objects.count() == 3
    assert Leaderboard.objects.get().rounds.count() == 4
    assert ActivenessBoard.objects.get().scores.count() == 4
