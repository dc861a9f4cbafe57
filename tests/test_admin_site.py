from datetime import date

from django.urls import reverse

from attendance_app.models import AttendanceSession
from batch_app.models import Batch, BatchPublicUrl
from leaderboard_app.models import Leaderboard


def _run_action(client, url_name, action, ids):
    return client.post(reverse(url_name), {"action": action, "_selected_action": [str(i) for i in ids]})


def test_deactivate_batches_action(admin_client, batch):
    response = _run_action(admin_client, "admin:batch_app_batch_changelist", "deactivate_batches", [batch.id])

    assert response.status_code == 302
    assert not Batch.objects.get(id=batch.id).is_active


def test_revoke_links_action(admin_client, batch):
    link = BatchPublicUrl.objects.create(batch=batch)

    _run_action(admin_client, "admin:batch_app_batchpublicurl_changelist", "revoke_links", [link.id])

    link.refresh_from_db()
    assert link.status_label == "Revoked"


def test_close_sessions_action(admin_client, batch, make_session):
    session = make_session(batch, date(2024, 3, 4))

    _run_action(admin_client, "admin:attendance_app_attendancesession_changelist", "close_sessions", [session.id])

    assert not AttendanceSession.objects.get(id=session.id).is_active


def test_revoke_public_boards_action(admin_client, db):
    board = Leaderboard.objects.create(name="Mock Interviews")

    _run_action(admin_client, "admin:leaderboard_app_leaderboard_changelist", "revoke_public_links", [board.id])

    board.refresh_from_db()
    assert not board.is_public
