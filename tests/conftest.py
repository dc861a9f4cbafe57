from datetime import date

import pytest
from django.contrib.auth.models import User

from accounts.models import AdminProfile
from attendance_app.models import AttendanceRecord, AttendanceSession
from batch_app.models import Batch, BatchStudent

PASSWORD = "Pass@123"


@pytest.fixture
def make_account(db):
    def _make(email, role=AdminProfile.ROLE_ADMIN):
        user = User.objects.create_user(username=email, email=email, password=PASSWORD)
        AdminProfile.objects.create(user=user, name=email.split("@")[0].title(), role=role)
        return user
    return _make


@pytest.fixture
def admin_account(make_account):
    return make_account("admin@example.com", AdminProfile.ROLE_ADMIN)


@pytest.fixture
def editor_account(make_account):
    return make_account("editor@example.com", AdminProfile.ROLE_EDITOR)


@pytest.fixture
def viewer_account(make_account):
    return make_account("viewer@example.com", AdminProfile.ROLE_VIEWER)


@pytest.fixture
def as_admin(client, admin_account):
    client.force_login(admin_account)
    return client


@pytest.fixture
def as_editor(client, editor_account):
    client.force_login(editor_account)
    return client


@pytest.fixture
def as_viewer(client, viewer_account):
    client.force_login(viewer_account)
    return client


@pytest.fixture
def batch(db):
    batch = Batch.objects.create(name="Cohort A", description="Morning batch")
    for name in ("Alice", "Bob", "Carol"):
        BatchStudent.objects.create(batch=batch, student_name=name)
    return batch


@pytest.fixture
def make_session(db):
    def _make(batch, session_date, present=(), **kwargs):
        session = AttendanceSession.objects.create(batch=batch, session_date=session_date, **kwargs)
        for name in present:
            AttendanceRecord.objects.create(session=session, student_name=name)
        return session
    return _make


@pytest.fixture
def march_sessions(batch, make_session):
    """Three sessions: Alice attends all, Bob one, Carol none."""
    return [
        make_session(batch, date(2024, 3, 4), present=["Alice", "Bob"]),
        make_session(batch, date(2024, 3, 5), present=["Alice"]),
        make_session(batch, date(2024, 3, 6), present=["Alice"]),
    ]
