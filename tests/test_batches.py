import csv
import io
from datetime import date, timedelta

import pytest
from django.contrib.messages import get_messages
from django.urls import reverse
from django.utils import timezone

from batch_app.models import Batch, BatchPublicUrl, BatchStudent
from batch_app.stats import batch_attendance_stats, batch_overview, percent


def _messages(response):
    return [str(m) for m in get_messages(response.wsgi_request)]


def test_percent_rounds_half_up():
    assert percent(1, 3) == 33.3
    assert percent(2, 3) == 66.7
    assert percent(1, 8) == 12.5
    assert percent(0, 0) == 0.0


def test_attendance_stats_per_student(batch, march_sessions):
    rows = batch_attendance_stats(batch)

    assert [r["student_name"] for r in rows] == ["Alice", "Bob", "Carol"]
    alice, bob, carol = rows
    assert alice["total_sessions"] == 3
    assert alice["sessions_present"] == 3
    assert alice["attendance_percentage"] == 100.0
    assert bob["sessions_present"] == 1
    assert bob["sessions_absent"] == 2
    assert bob["attendance_percentage"] == 33.3
    assert carol["attendance_percentage"] == 0.0


def test_off_roster_records_are_ignored(batch, march_sessions):
    march_sessions[0].records.create(student_name="Mallory")

    names = [r["student_name"] for r in batch_attendance_stats(batch)]

    assert "Mallory" not in names


def test_overview_average_and_last_session(batch, march_sessions):
    overview = batch_overview(batch)

    assert overview["total_students"] == 3
    assert overview["total_sessions"] == 3
    # (100.0 + 33.3 + 0.0) / 3
    assert overview["average_attendance_percentage"] == 44.43
    assert overview["last_session_date"] == date(2024, 3, 6)


def test_overview_without_sessions(batch):
    overview = batch_overview(batch)

    assert overview["total_sessions"] == 0
    assert overview["average_attendance_percentage"] == 0.0
    assert overview["last_session_date"] is None


def test_add_duplicate_student_is_rejected(as_editor, batch):
    response = as_editor.post(reverse("addStudent", args=[batch.id]), {"student_name": "Alice"})

    assert response.status_code == 302
    assert "Student already exists in this batch" in _messages(response)
    assert BatchStudent.objects.filter(batch=batch, student_name="Alice").count() == 1


def test_same_name_allowed_in_other_batch(as_editor, batch):
    other = Batch.objects.create(name="Cohort B")

    as_editor.post(reverse("addStudent", args=[other.id]), {"student_name": "Alice"})

    assert BatchStudent.objects.filter(student_name="Alice").count() == 2


def test_create_and_toggle_batch(as_editor):
    as_editor.post(reverse("createBatch"), {"name": "Evening", "description": "Late cohort"})
    batch = Batch.objects.get(name="Evening")
    assert batch.is_active

    response = as_editor.post(reverse("toggleBatch", args=[batch.id]))

    batch.refresh_from_db()
    assert not batch.is_active
    assert "Batch deactivated successfully!" in _messages(response)


def test_delete_batch_cascades(as_admin, batch, march_sessions):
    response = as_admin.post(reverse("deleteBatch", args=[batch.id]))

    assert response.status_code == 302
    assert not Batch.objects.exists()
    assert not BatchStudent.objects.exists()


def test_batch_list_renders_roster(as_viewer, batch):
    response = as_viewer.get(reverse("batchList"), {"batch": str(batch.id)})

    assert response.status_code == 200
    assert response.context["batch"] == batch
    assert [s.student_name for s in response.context["students"]] == ["Alice", "Bob", "Carol"]


def test_stats_page_search_and_sort(as_viewer, batch, march_sessions):
    response = as_viewer.get(reverse("batchStats"), {"batch": str(batch.id), "sort": "name", "order": "desc"})

    assert [r["student_name"] for r in response.context["rows"]] == ["Carol", "Bob", "Alice"]
    assert response.context["rows"][0]["bucket"] == "low"

    response = as_viewer.get(reverse("batchStats"), {"batch": str(batch.id), "q": "bo"})

    assert [r["student_name"] for r in response.context["rows"]] == ["Bob"]


def test_stats_page_skips_inactive_batches(as_viewer, batch):
    Batch.objects.filter(id=batch.id).update(is_active=False)

    response = as_viewer.get(reverse("batchStats"))

    assert response.context["batch"] is None


def test_stats_csv_has_preamble(as_viewer, batch, march_sessions):
    response = as_viewer.get(reverse("exportStatsCsv", args=[batch.id]))

    lines = response.content.decode().splitlines()
    assert response["Content-Type"].startswith("text/csv")
    assert lines[:5] == [
        "Batch: Cohort A",
        "Total Students: 3",
        "Total Sessions: 3",
        "Average Attendance: 44.43%",
        "",
    ]
    assert lines[5] == '"Student Name","Email","Total Sessions","Sessions Present","Sessions Absent","Attendance %"'
    assert lines[6] == '"Alice","-","3","3","0","100.0%"'
    assert len(lines) == 9


def test_stats_csv_preamble_is_escaped(as_viewer, batch, march_sessions):
    Batch.objects.filter(id=batch.id).update(name='Cohort "A", evening')

    response = as_viewer.get(reverse("exportStatsCsv", args=[batch.id]))

    text = response.content.decode()
    assert text.splitlines()[0] == '"Batch: Cohort ""A"", evening"'
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == ['Batch: Cohort "A", evening']
    assert rows[4] == []
    assert rows[5][0] == "Student Name"


def test_stats_xlsx_export(as_viewer, batch, march_sessions):
    response = as_viewer.get(reverse("exportStatsXlsx", args=[batch.id]))

    assert response.status_code == 200
    assert response["Content-Disposition"] == 'attachment; filename="Cohort A-attendance-stats.xlsx"'


class TestPublicUrls:
    def test_generated_link_shape(self, batch):
        link = BatchPublicUrl.objects.create(batch=batch)

        assert link.public_id.startswith(f"batch-{str(batch.id)[:8]}-")
        assert link.is_valid
        assert link.status_label == "Active"
        assert timedelta(hours=23) < link.expires_at - timezone.now() <= timedelta(hours=24)

    def test_lifetime_follows_settings(self, settings, batch):
        settings.TRACKBOARD_PUBLIC_LINK_HOURS = 2

        link = BatchPublicUrl.objects.create(batch=batch)

        assert link.expires_at - timezone.now() <= timedelta(hours=2)

    def test_generate_and_revoke(self, as_editor, batch):
        response = as_editor.post(reverse("generatePublicUrl", args=[batch.id]))
        assert "Public URL generated successfully!" in _messages(response)
        link = BatchPublicUrl.objects.get(batch=batch)
        assert batch.active_public_url() == link

        response = as_editor.post(reverse("revokePublicUrl", args=[link.id]))

        link.refresh_from_db()
        assert not link.is_active
        assert link.status_label == "Revoked"
        assert batch.active_public_url() is None
        assert "Public URL revoked successfully!" in _messages(response)

    def test_public_page_served_while_valid(self, client, batch, march_sessions):
        link = BatchPublicUrl.objects.create(batch=batch)

        response = client.get(reverse("publicBatchStats", args=[link.public_id]))

        assert response.status_code == 200
        assert response.context["overview"]["total_sessions"] == 3
        assert response.context["refresh_seconds"] == 60
        link.refresh_from_db()
        assert link.last_accessed_at is not None

    def test_unknown_link_is_not_found(self, client, db):
        response = client.get(reverse("publicBatchStats", args=["batch-nope-1"]))

        assert response.status_code == 404
        assert b"Batch statistics link not found" in response.content

    def test_revoked_link_is_gone(self, client, batch):
        link = BatchPublicUrl.objects.create(batch=batch, is_active=False)

        response = client.get(reverse("publicBatchStats", args=[link.public_id]))

        assert response.status_code == 410
        assert b"This batch statistics link has been revoked" in response.content

    def test_expired_link_is_gone(self, client, batch):
        link = BatchPublicUrl.objects.create(batch=batch, expires_at=timezone.now() - timedelta(minutes=1))

        response = client.get(reverse("publicBatchStats", args=[link.public_id]))

        assert response.status_code == 410
        assert b"This batch statistics link has expired" in response.content

    def test_data_feed(self, client, batch, march_sessions):
        link = BatchPublicUrl.objects.create(batch=batch)

        payload = client.get(reverse("publicBatchStatsData", args=[link.public_id])).json()

        assert payload["overview"]["last_session_date"] == "2024-03-06"
        assert [r["attendance_percentage"] for r in payload["rows"]] == [100.0, 33.3, 0.0]

    def test_data_feed_reports_error_kind(self, client, batch):
        link = BatchPublicUrl.objects.create(batch=batch, is_active=False)

        response = client.get(reverse("publicBatchStatsData", args=[link.public_id]))

        assert response.status_code == 410
        assert response.json() == {"error": "This batch statistics link has been revoked", "kind": "revoked"}

    def test_data_feed_reports_expiry(self, client, batch):
        link = BatchPublicUrl.objects.create(batch=batch, expires_at=timezone.now() - timedelta(minutes=1))

        response = client.get(reverse("publicBatchStatsData", args=[link.public_id]))

        assert response.status_code == 410
        assert response.json()["kind"] == "expired"
        assert response.json()["error"] == "This batch statistics link has expired"

    def test_page_stops_polling_on_link_error(self, client, batch):
        link = BatchPublicUrl.objects.create(batch=batch)

        content = client.get(reverse("publicBatchStats", args=[link.public_id])).content

        assert b"poll:error" in content
        assert b"poll:stop" in content
        assert b"Failed to load batch statistics" in content

    @pytest.mark.parametrize("is_active", [True, False])
    def test_public_csv_follows_link_state(self, client, batch, march_sessions, is_active):
        link = BatchPublicUrl.objects.create(batch=batch, is_active=is_active)

        response = client.get(reverse("publicBatchStatsCsv", args=[link.public_id]))

        assert response.status_code == (200 if is_active else 410)
