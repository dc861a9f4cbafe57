"""
Batch app views
Batch and roster management, attendance statistics with exports,
and expiring public statistics links.
"""
import logging

import openpyxl
from django.conf import settings
from django.contrib import messages
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from accounts.permissions import admin_required, editor_required, viewer_required
from attendance_app import reports
from trackboard_main.sharing import PublicLinkError, classify_link, render_link_error

from .models import Batch, BatchPublicUrl, BatchStudent
from .stats import batch_attendance_stats, batch_overview

logger = logging.getLogger(__name__)

STATS_SORT_KEYS = {
    reports.SORT_NAME: "student_name",
    reports.SORT_PERCENTAGE: "attendance_percentage",
    reports.SORT_PRESENT: "sessions_present",
}
STATS_HEADERS = ["Student Name", "Email", "Total Sessions", "Sessions Present", "Sessions Absent", "Attendance %"]
STATS_BUCKET_HIGH = 75


def _get_batch(batch_id, **filters):
    try:
        return Batch.objects.filter(id=batch_id, **filters).first()
    except (ValueError, ValidationError):
        return None


def _redirect_to_batches(batch=None):
    url = reverse("batchList")
    return redirect(f"{url}?batch={batch.id}") if batch else redirect(url)


def _redirect_to_stats(batch=None):
    url = reverse("batchStats")
    return redirect(f"{url}?batch={batch.id}") if batch else redirect(url)


# ---------------------------------------------------------------------------
# Batch and roster management
# ---------------------------------------------------------------------------

@viewer_required
@require_GET
def batch_list(request):
    """All batches, newest first, with the selected batch's roster."""
    batches = list(Batch.objects.order_by("-created_at"))
    selected = None
    batch_id = request.GET.get("batch")
    if batch_id:
        selected = next((b for b in batches if str(b.id) == batch_id), None)
    if selected is None and batches:
        selected = batches[0]

    students = selected.students.order_by("student_name") if selected else []
    return render(request, "batches/batch_list.html", {
        "batches": batches,
        "batch": selected,
        "students": students,
    })


@editor_required
@require_POST
def create_batch(request):
    name = (request.POST.get("name") or "").strip()
    description = (request.POST.get("description") or "").strip()
    if not name:
        messages.error(request, "Please enter a batch name")
        return _redirect_to_batches()

    try:
        batch = Batch.objects.create(
            name=name,
            description=description,
            is_active=True,
            created_by=request.user,
        )
    except DatabaseError:
        logger.exception("Failed to create batch %r", name)
        messages.error(request, "Failed to create batch")
        return _redirect_to_batches()

    logger.info("Batch %s (%s) created by %s", batch.id, batch.name, request.user.username)
    messages.success(request, "Batch created successfully!")
    return _redirect_to_batches(batch)


@editor_required
@require_POST
def toggle_batch(request, batch_id):
    """Soft-deactivate or reactivate a batch."""
    batch = _get_batch(batch_id)
    if not batch:
        messages.error(request, "Batch not found")
        return _redirect_to_batches()

    batch.is_active = not batch.is_active
    try:
        batch.save(update_fields=["is_active", "updated_at"])
    except DatabaseError:
        logger.exception("Failed to toggle batch %s", batch.id)
        messages.error(request, "Failed to update batch status")
        return _redirect_to_batches(batch)

    state = "activated" if batch.is_active else "deactivated"
    messages.success(request, f"Batch {state} successfully!")
    return _redirect_to_batches(batch)


@admin_required
@require_POST
def delete_batch(request, batch_id):
    """Hard delete; students, sessions and public links go with it."""
    batch = _get_batch(batch_id)
    if not batch:
        messages.error(request, "Batch not found")
        return _redirect_to_batches()

    try:
        batch.delete()
    except DatabaseError:
        logger.exception("Failed to delete batch %s", batch_id)
        messages.error(request, "Failed to delete batch")
        return _redirect_to_batches(batch)

    logger.info("Batch %s deleted by %s", batch_id, request.user.username)
    messages.success(request, "Batch deleted successfully!")
    return _redirect_to_batches()


@editor_required
@require_POST
def add_student(request, batch_id):
    batch = _get_batch(batch_id)
    if not batch:
        messages.error(request, "Please select a batch first")
        return _redirect_to_batches()

    student_name = (request.POST.get("student_name") or "").strip()
    student_email = (request.POST.get("student_email") or "").strip()
    if not student_name:
        messages.error(request, "Please enter student name")
        return _redirect_to_batches(batch)

    try:
        with transaction.atomic():
            BatchStudent.objects.create(batch=batch, student_name=student_name, student_email=student_email)
    except IntegrityError:
        messages.error(request, "Student already exists in this batch")
        return _redirect_to_batches(batch)
    except DatabaseError:
        logger.exception("Failed to add %r to batch %s", student_name, batch.id)
        messages.error(request, "Failed to add student")
        return _redirect_to_batches(batch)

    messages.success(request, "Student added successfully!")
    return _redirect_to_batches(batch)


@editor_required
@require_POST
def delete_student(request, student_id):
    student = BatchStudent.objects.filter(id=student_id).select_related("batch").first()
    if not student:
        messages.error(request, "Student not found")
        return _redirect_to_batches()

    batch = student.batch
    try:
        student.delete()
    except DatabaseError:
        logger.exception("Failed to remove student %s", student_id)
        messages.error(request, "Failed to remove student")
        return _redirect_to_batches(batch)

    messages.success(request, "Student removed successfully!")
    return _redirect_to_batches(batch)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def _stats_table(batch, params):
    """Overview plus the searched, sorted per-student rows."""
    student_stats = batch_attendance_stats(batch)
    overview = batch_overview(batch, student_stats)
    query = params.get("q", "")
    sort_by, order = reports.parse_sort(params)
    rows = reports.filter_rows(student_stats, query, name_key="student_name")
    rows = reports.sort_rows(rows, sort_by, order, STATS_SORT_KEYS)
    for row in rows:
        row["bucket"] = reports.attendance_bucket(row["attendance_percentage"], high=STATS_BUCKET_HIGH)
    return {
        "overview": overview,
        "rows": rows,
        "query": query,
        "sort_by": sort_by,
        "order": order,
        "sort_links": reports.sort_links(sort_by, order),
    }


def _stats_csv_rows(rows):
    return [
        [
            row["student_name"],
            row["student_email"] or "-",
            row["total_sessions"],
            row["sessions_present"],
            row["sessions_absent"],
            f"{row['attendance_percentage']}%",
        ]
        for row in rows
    ]


def _stats_preamble(overview):
    return [
        f"Batch: {overview['batch_name']}",
        f"Total Students: {overview['total_students']}",
        f"Total Sessions: {overview['total_sessions']}",
        f"Average Attendance: {overview['average_attendance_percentage']:.2f}%",
    ]


@viewer_required
@require_GET
def batch_stats(request):
    """Per-student statistics and share links for one active batch."""
    batches = list(Batch.objects.filter(is_active=True).order_by("name"))
    batch_id = request.GET.get("batch")
    batch = next((b for b in batches if str(b.id) == batch_id), None) if batch_id else None
    if batch is None and batches:
        batch = batches[0]

    context = {"batches": batches, "batch": batch}
    if batch:
        try:
            context.update(_stats_table(batch, request.GET))
        except DatabaseError:
            logger.exception("Failed to load batch stats for %s", batch.id)
            messages.error(request, "Failed to load batch statistics")
        public_urls = list(batch.public_urls.order_by("-created_at"))
        context.update({
            "public_urls": [(link, _public_stats_url(request, link)) for link in public_urls],
            "active_url": batch.active_public_url(),
        })
        if context["active_url"]:
            context["active_url_href"] = _public_stats_url(request, context["active_url"])
    return render(request, "batches/batch_stats.html", context)


@viewer_required
@require_GET
def export_stats_csv(request, batch_id):
    batch = _get_batch(batch_id)
    if not batch:
        messages.error(request, "Batch not found")
        return _redirect_to_stats()

    table = _stats_table(batch, request.GET)
    return reports.csv_response(
        f"{batch.name}-attendance-stats",
        STATS_HEADERS,
        _stats_csv_rows(table["rows"]),
        preamble=_stats_preamble(table["overview"]),
    )


@viewer_required
@require_GET
def export_stats_xlsx(request, batch_id):
    """Same table as the CSV export, as an Excel workbook."""
    batch = _get_batch(batch_id)
    if not batch:
        messages.error(request, "Batch not found")
        return _redirect_to_stats()

    table = _stats_table(batch, request.GET)
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Attendance"
    for line in _stats_preamble(table["overview"]):
        ws.append([line])
    ws.append([])
    ws.append(STATS_HEADERS)
    for row in table["rows"]:
        ws.append([
            row["student_name"],
            row["student_email"] or "-",
            row["total_sessions"],
            row["sessions_present"],
            row["sessions_absent"],
            row["attendance_percentage"],
        ])

    response = HttpResponse(content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    filename = reports.safe_filename(f"{batch.name}-attendance-stats", fallback=f"batch_{batch.id}")
    response["Content-Disposition"] = f'attachment; filename="{filename}.xlsx"'
    wb.save(response)
    return response


# ---------------------------------------------------------------------------
# Public links
# ---------------------------------------------------------------------------

def _public_stats_url(request, link):
    return request.build_absolute_uri(reverse("publicBatchStats", args=[link.public_id]))


@editor_required
@require_POST
def generate_public_url(request, batch_id):
    """Issue a new 24h statistics link for the batch."""
    batch = _get_batch(batch_id)
    if not batch:
        messages.error(request, "Batch not found")
        return _redirect_to_stats()

    try:
        link = BatchPublicUrl.objects.create(batch=batch, is_active=True)
    except DatabaseError:
        logger.exception("Failed to generate public URL for batch %s", batch.id)
        messages.error(request, "Failed to generate public URL")
        return _redirect_to_stats(batch)

    logger.info("Public URL %s issued for batch %s (expires %s)", link.public_id, batch.id, link.expires_at)
    messages.success(request, "Public URL generated successfully!")
    return _redirect_to_stats(batch)


@editor_required
@require_POST
def revoke_public_url(request, url_id):
    link = BatchPublicUrl.objects.filter(id=url_id).select_related("batch").first()
    if not link:
        messages.error(request, "Public URL not found")
        return _redirect_to_stats()

    try:
        BatchPublicUrl.objects.filter(id=link.id).update(is_active=False)
    except DatabaseError:
        logger.exception("Failed to revoke public URL %s", link.public_id)
        messages.error(request, "Failed to revoke public URL")
        return _redirect_to_stats(link.batch)

    logger.info("Public URL %s revoked by %s", link.public_id, request.user.username)
    messages.success(request, "Public URL revoked successfully!")
    return _redirect_to_stats(link.batch)


def resolve_public_url(public_id, now=None):
    """Return the valid BatchPublicUrl for ``public_id`` or raise PublicLinkError."""
    link = BatchPublicUrl.objects.filter(public_id=public_id).select_related("batch").first()
    return classify_link(link, "Batch statistics", now=now)


def _touch(link):
    BatchPublicUrl.objects.filter(id=link.id).update(last_accessed_at=timezone.now())


@require_GET
def public_batch_stats(request, public_id):
    """Read-only statistics page behind a public link."""
    try:
        link = resolve_public_url(public_id)
    except PublicLinkError as error:
        error.public_id = public_id
        return render_link_error(request, error)

    try:
        context = _stats_table(link.batch, request.GET)
    except DatabaseError:
        logger.exception("Failed to load public batch stats %s", public_id)
        return render(request, "public/link_error.html", {"message": "Failed to load batch statistics"}, status=500)
    _touch(link)

    context.update({
        "link": link,
        "batch": link.batch,
        "refresh_seconds": getattr(settings, "TRACKBOARD_PUBLIC_STATS_REFRESH_SECONDS", 60),
        "data_url": reverse("publicBatchStatsData", args=[public_id]),
    })
    return render(request, "public/batch_stats.html", context)


@require_GET
def public_batch_stats_data(request, public_id):
    """JSON feed polled by the public statistics page."""
    try:
        link = resolve_public_url(public_id)
    except PublicLinkError as error:
        return JsonResponse({"error": error.message, "kind": error.kind}, status=error.status)

    table = _stats_table(link.batch, request.GET)
    _touch(link)
    overview = dict(table["overview"])
    if overview["last_session_date"]:
        overview["last_session_date"] = overview["last_session_date"].isoformat()
    return JsonResponse({"overview": overview, "rows": table["rows"]})


@require_GET
def public_batch_stats_csv(request, public_id):
    try:
        link = resolve_public_url(public_id)
    except PublicLinkError as error:
        error.public_id = public_id
        return render_link_error(request, error)

    table = _stats_table(link.batch, request.GET)
    return reports.csv_response(
        f"{link.batch.name}-attendance-stats",
        STATS_HEADERS,
        _stats_csv_rows(table["rows"]),
        preamble=_stats_preamble(table["overview"]),
    )
