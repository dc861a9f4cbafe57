"""
Attendance app views
Session manager, daily dashboard, month calendar and the public
student-facing marking form.
"""
import logging
from datetime import date
from io import BytesIO

import qrcode
from django.conf import settings
from django.contrib import messages
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from accounts.permissions import editor_required, viewer_required
from batch_app.models import Batch
from trackboard_main.sharing import LinkNotFound, render_link_error

from . import reports
from .models import AttendanceRecord, AttendanceSession

logger = logging.getLogger(__name__)

RECENT_SESSIONS_LIMIT = 10
DASHBOARD_SORT_KEYS = {
    reports.SORT_NAME: "name",
    reports.SORT_PERCENTAGE: "percentage",
    reports.SORT_PRESENT: "present_count",
}


def _parse_date(value, default=None):
    try:
        return date.fromisoformat(value) if value else default
    except ValueError:
        return default


def _selected_batch(request, active_only=False):
    """Batch named by ?batch=<id>, falling back to the first (active) batch."""
    batches = Batch.objects.order_by("name")
    if active_only:
        batches = batches.filter(is_active=True)
    batch_id = request.GET.get("batch") or request.POST.get("batch")
    if batch_id:
        try:
            batch = batches.filter(id=batch_id).first()
        except (ValueError, ValidationError):
            batch = None
        if batch:
            return batch
    return batches.first()


def _posted_batch(request):
    """Active batch named by the posted id, or None. No fallback for writes."""
    batch_id = request.POST.get("batch")
    if not batch_id:
        return None
    try:
        return Batch.objects.filter(id=batch_id, is_active=True).first()
    except (ValueError, ValidationError):
        return None


def _attend_url(request, session):
    return request.build_absolute_uri(reverse("attend", args=[session.session_code]))


def _redirect_to_manager(batch):
    url = reverse("sessionManager")
    return redirect(f"{url}?batch={batch.id}") if batch else redirect(url)


def _redirect_to_dashboard(batch):
    url = reverse("dashboard")
    return redirect(f"{url}?batch={batch.id}") if batch else redirect(url)


@viewer_required
@require_GET
def session_manager(request):
    """
    Today's session for the selected batch plus its recent sessions.
    Sessions are listed only for the selected batch.
    """
    batch = _selected_batch(request, active_only=True)
    today = timezone.localdate()
    sessions = []
    today_session = None
    if batch:
        sessions = list(
            AttendanceSession.objects.filter(batch=batch).order_by("-session_date")[:RECENT_SESSIONS_LIMIT]
        )
        today_session = next((s for s in sessions if s.session_date == today), None)

    return render(request, "attendance/session_manager.html", {
        "batches": Batch.objects.filter(is_active=True).order_by("name"),
        "batch": batch,
        "today": today,
        "today_session": today_session,
        "today_session_url": _attend_url(request, today_session) if today_session else "",
        "sessions": [(s, _attend_url(request, s)) for s in sessions],
    })


@editor_required
@require_POST
def create_session(request):
    """
    Create the attendance session for a batch and date (today by default).
    A second session for the same batch and date is rejected.
    """
    batch = _posted_batch(request)
    if not batch:
        messages.error(request, "Please select a batch first")
        return _redirect_to_manager(None)

    session_date = _parse_date(request.POST.get("session_date"), timezone.localdate())
    session_name = (request.POST.get("session_name") or "").strip()

    try:
        with transaction.atomic():
            session = AttendanceSession.objects.create(
                batch=batch,
                session_date=session_date,
                session_name=session_name,
                is_active=True,
                created_by=request.user,
            )
    except IntegrityError:
        messages.error(
            request,
            f"An attendance session for {batch.name} on {session_date:%Y-%m-%d} already exists!",
        )
        return _redirect_to_manager(batch)
    except DatabaseError:
        logger.exception("Failed to create session for batch %s on %s", batch.id, session_date)
        messages.error(request, "Failed to create attendance session")
        return _redirect_to_manager(batch)

    logger.info("Created attendance session %s for batch %s", session.session_code, batch.id)
    messages.success(request, "Attendance session created successfully!")
    return _redirect_to_manager(batch)


@editor_required
@require_POST
def toggle_session(request, session_id):
    """Flip a session between active and inactive."""
    session = AttendanceSession.objects.filter(id=session_id).select_related("batch").first()
    if not session:
        messages.error(request, "Session not found")
        return _redirect_to_manager(None)

    session.is_active = not session.is_active
    try:
        session.save(update_fields=["is_active"])
    except DatabaseError:
        logger.exception("Failed to toggle session %s", session.id)
        messages.error(request, "Failed to update session status")
        return _redirect_to_manager(session.batch)

    state = "activated" if session.is_active else "deactivated"
    logger.info("Session %s %s", session.session_code, state)
    messages.success(request, f"Session {state} successfully!")
    return _redirect_to_manager(session.batch)


@viewer_required
@require_GET
def session_qr(request, session_id):
    """PNG QR code of the session's public marking URL."""
    session = AttendanceSession.objects.filter(id=session_id).first()
    if not session:
        return JsonResponse({"error": "Session not found."}, status=404)

    image = qrcode.make(_attend_url(request, session))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return HttpResponse(buffer.getvalue(), content_type="image/png")


def _dashboard_state(request):
    """Everything the dashboard renders, shared by the page and its JSON feed."""
    batch = _selected_batch(request)
    sessions = list(AttendanceSession.objects.filter(batch=batch).order_by("-session_date")) if batch else []

    selected_date = _parse_date(request.GET.get("date"))
    if selected_date is None:
        today = timezone.localdate()
        selected_date = today if any(s.session_date == today for s in sessions) else None
        if selected_date is None and sessions:
            selected_date = sessions[0].session_date
    session = next((s for s in sessions if s.session_date == selected_date), None)

    query = request.GET.get("q", "")
    sort_by, order = reports.parse_sort(request.GET)
    rows = []
    stats = None
    if session:
        total_present = AttendanceRecord.objects.filter(session=session).count()
        stats = {
            "date": session.session_date,
            "total_present": total_present,
            "attendance_percentage": reports.daily_percentage(total_present),
        }
        rows = reports.session_rows(session)
        rows = reports.filter_rows(rows, query)
        rows = reports.sort_rows(rows, sort_by, order, DASHBOARD_SORT_KEYS)

    return {
        "batch": batch,
        "sessions": sessions,
        "selected_date": selected_date,
        "session": session,
        "stats": stats,
        "rows": rows,
        "query": query,
        "sort_by": sort_by,
        "order": order,
    }


@viewer_required
@require_GET
def dashboard(request):
    """Records for the selected batch and date with search, sort and export."""
    state = _dashboard_state(request)
    state.update({
        "batches": Batch.objects.order_by("name"),
        "sort_links": reports.sort_links(state["sort_by"], state["order"]),
        "refresh_seconds": getattr(settings, "TRACKBOARD_DASHBOARD_REFRESH_SECONDS", 30),
        "data_url": reverse("dashboardData"),
    })
    return render(request, "attendance/dashboard.html", state)


@viewer_required
@require_GET
def dashboard_data(request):
    """JSON feed polled by the dashboard page."""
    state = _dashboard_state(request)
    stats = state["stats"]
    return JsonResponse({
        "batch_id": str(state["batch"].id) if state["batch"] else None,
        "date": state["selected_date"].isoformat() if state["selected_date"] else None,
        "stats": {
            "total_present": stats["total_present"],
            "attendance_percentage": stats["attendance_percentage"],
        } if stats else None,
        "rows": [
            {
                "name": row["name"],
                "status": row["status"],
                "present_count": row["present_count"],
                "percentage": row["percentage"],
                "marked_at": row["marked_at"].isoformat() if row["marked_at"] else None,
            }
            for row in state["rows"]
        ],
    })


@viewer_required
@require_GET
def export_dashboard_csv(request):
    """CSV of exactly the filtered, sorted rows the dashboard shows."""
    state = _dashboard_state(request)
    if not state["session"]:
        messages.error(request, "Select a date with an attendance session first")
        return _redirect_to_dashboard(state["batch"])

    day = state["selected_date"].isoformat()
    rows = [
        [
            day,
            row["name"],
            row["status"],
            row["marked_at"].strftime("%H:%M:%S") if row["marked_at"] else "",
        ]
        for row in state["rows"]
    ]
    return reports.csv_response(
        f"attendance-{state['batch'].name}-{day}",
        ["Date", "Name", "Status", "Time"],
        rows,
    )


@viewer_required
@require_GET
def calendar_view(request):
    """Month grid of present counts for the selected batch."""
    batch = _selected_batch(request)
    today = timezone.localdate()
    try:
        year = int(request.GET.get("year", today.year))
        month = int(request.GET.get("month", today.month))
        if not reports.MIN_YEAR <= year <= reports.MAX_YEAR:
            raise ValueError(f"year {year} outside the calendar range")
        date(year, month, 1)
    except ValueError:
        year, month = today.year, today.month

    days = reports.month_attendance(year, month, batch) if batch else {}
    weeks = [
        [{"date": day, "attendance": days.get(day)} if day else None for day in week]
        for week in reports.calendar_weeks(year, month)
    ]
    prev_year, prev_month = reports.shift_month(year, month, -1)
    next_year, next_month = reports.shift_month(year, month, 1)

    return render(request, "attendance/calendar.html", {
        "batches": Batch.objects.order_by("name"),
        "batch": batch,
        "month_start": date(year, month, 1),
        "weeks": weeks,
        "weekdays": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
        "prev": {"year": prev_year, "month": prev_month},
        "next": {"year": next_year, "month": next_month},
    })


def can_mark_attendance(session):
    """Marking is open only while the session is active and unexpired."""
    return session is not None and session.is_open


def mark_attendance(request, session_code):
    """
    Public marking form. Students pick their name from the batch roster;
    each name may be marked once per session.
    """
    session = (
        AttendanceSession.objects.filter(session_code=session_code)
        .select_related("batch")
        .first()
    )
    if not session:
        return render_link_error(request, LinkNotFound("Attendance", session_code))

    roster = list(session.batch.students.values_list("student_name", flat=True))
    context = {"session": session, "roster": roster, "is_open": can_mark_attendance(session), "marked": None}

    if request.method == "POST":
        student_name = (request.POST.get("student_name") or "").strip()
        if not can_mark_attendance(session):
            messages.error(request, "This attendance session is closed")
        elif student_name not in roster:
            messages.error(request, "Please select your name from the list")
        else:
            try:
                with transaction.atomic():
                    AttendanceRecord.objects.create(session=session, student_name=student_name)
            except IntegrityError:
                messages.error(request, f"Attendance already marked for {student_name}")
            except DatabaseError:
                logger.exception("Failed to mark attendance for session %s", session.id)
                messages.error(request, "Failed to mark attendance")
            else:
                logger.info("Marked %s present for %s", student_name, session.session_code)
                context["marked"] = student_name

    return render(request, "public/mark_attendance.html", context)


@require_GET
def public_session_view(request, public_id):
    """Read-only list of who marked attendance for one session."""
    session = AttendanceSession.objects.filter(public_id=public_id).select_related("batch").first()
    if not session:
        return render_link_error(request, LinkNotFound("Attendance", public_id))

    records = session.records.order_by("marked_at")
    return render(request, "public/session_view.html", {
        "session": session,
        "records": records,
        "total_present": records.count(),
    })
