"""
Batch attendance aggregation
Per-student attendance statistics and the batch-level overview.
A student counts as present for a session when a record with their
roster name exists for it.
"""
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count, Max

from attendance_app.models import AttendanceRecord, AttendanceSession


def percent(part, whole, places=1):
    """100 * part / whole rounded half-up to ``places`` decimals, 0.0 when whole is 0."""
    if not whole:
        return 0.0
    value = Decimal(part) * 100 / Decimal(whole)
    return float(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def batch_attendance_stats(batch):
    """
    One row per roster student:
    student_name, student_email, total_sessions, sessions_present,
    sessions_absent, attendance_percentage (one decimal).
    Ordered by percentage descending, then name.
    """
    total_sessions = AttendanceSession.objects.filter(batch=batch).count()
    present_by_name = dict(
        AttendanceRecord.objects.filter(session__batch=batch)
        .values_list("student_name")
        .annotate(present=Count("session", distinct=True))
    )

    rows = []
    for student in batch.students.order_by("student_name"):
        present = present_by_name.get(student.student_name, 0)
        rows.append(
            {
                "student_name": student.student_name,
                "student_email": student.student_email,
                "total_sessions": total_sessions,
                "sessions_present": present,
                "sessions_absent": max(total_sessions - present, 0),
                "attendance_percentage": percent(present, total_sessions),
            }
        )
    rows.sort(key=lambda row: (-row["attendance_percentage"], row["student_name"].lower()))
    return rows


def batch_overview(batch, student_stats=None):
    """
    Batch summary: batch_name, batch_description, total_students,
    total_sessions, average_attendance_percentage (two decimals),
    last_session_date.
    """
    if student_stats is None:
        student_stats = batch_attendance_stats(batch)
    sessions = AttendanceSession.objects.filter(batch=batch)
    average = 0.0
    if student_stats:
        total = sum(Decimal(str(row["attendance_percentage"])) for row in student_stats)
        average = float((total / len(student_stats)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    return {
        "batch_name": batch.name,
        "batch_description": batch.description,
        "total_students": batch.students.count(),
        "total_sessions": sessions.count(),
        "average_attendance_percentage": average,
        "last_session_date": sessions.aggregate(last=Max("session_date"))["last"],
    }
